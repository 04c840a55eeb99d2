"""
Token name and symbol generation.

Names are composed from a bounded vocabulary of prefix and suffix words;
symbols from a separate set of head and tail fragments. Symbol uniqueness is
enforced within one generated batch only.
"""

import random
from typing import Optional, Sequence

import structlog

from ..errors import GenerationExhausted
from ..models.deployment import TokenSpec

logger = structlog.get_logger(__name__)

NAME_PREFIXES = (
    "Alpha", "Astro", "Aether", "Blaze", "Cosmic", "Crystal", "Delta",
    "Echo", "Ember", "Flux", "Galactic", "Genesis", "Horizon", "Hyper",
    "Lunar", "Nebula", "Neon", "Nova", "Omega", "Orbit", "Phoenix",
    "Pulsar", "Quantum", "Solar", "Titan", "Vortex", "Zenith",
)

NAME_SUFFIXES = (
    "Coin", "Token", "Cash", "Credit", "Gold", "Shard", "Spark",
    "Chain", "Byte", "Node", "Pulse", "Core", "Dust", "Mint",
)

SYMBOL_HEADS = (
    "AX", "BL", "CR", "DX", "EQ", "FL", "GN", "HY", "JT", "KR", "LN",
    "MX", "NV", "OR", "PX", "QT", "RV", "SX", "TN", "VX", "WZ", "ZN",
)

SYMBOL_TAILS = ("A", "E", "I", "K", "O", "R", "T", "U", "X", "Y", "Z")

DEFAULT_MAX_ATTEMPTS = 64


class NameGenerator:
    """Produces batches of (name, symbol) pairs with distinct symbols."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        prefixes: Sequence[str] = NAME_PREFIXES,
        suffixes: Sequence[str] = NAME_SUFFIXES,
        symbol_heads: Sequence[str] = SYMBOL_HEADS,
        symbol_tails: Sequence[str] = SYMBOL_TAILS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not (prefixes and suffixes and symbol_heads and symbol_tails):
            raise ValueError("name and symbol vocabularies must be non-empty")

        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.prefixes = tuple(prefixes)
        self.suffixes = tuple(suffixes)
        self.symbol_heads = tuple(symbol_heads)
        self.symbol_tails = tuple(symbol_tails)

    @property
    def capacity(self) -> int:
        """Number of distinct symbols the vocabulary can produce."""
        return len({h + t for h in self.symbol_heads for t in self.symbol_tails})

    def generate_batch(self, count: int) -> list[TokenSpec]:
        """
        Generate ``count`` token specs whose symbols are pairwise distinct.

        Args:
            count: Number of specs to produce (must be positive)

        Returns:
            List of TokenSpec of length ``count``

        Raises:
            ValueError: If count is not a positive integer
            GenerationExhausted: If distinct symbols could not be drawn
                within the retry budget
        """
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ValueError(f"count must be a positive integer, got {count!r}")

        if count > self.capacity:
            raise GenerationExhausted(
                f"Vocabulary supports {self.capacity} distinct symbols, {count} requested",
                requested=count,
                produced=0,
            )

        specs: list[TokenSpec] = []
        seen: set[str] = set()

        for _ in range(count):
            for _attempt in range(self.max_attempts):
                symbol = self._draw_symbol()
                if symbol not in seen:
                    break
            else:
                raise GenerationExhausted(
                    f"Could not draw a distinct symbol after {self.max_attempts} attempts",
                    requested=count,
                    produced=len(specs),
                )

            seen.add(symbol)
            specs.append(TokenSpec(name=self._draw_name(), symbol=symbol))

        logger.debug(
            "Generated token batch",
            count=count,
            symbols=[s.symbol for s in specs],
        )
        return specs

    def _draw_name(self) -> str:
        return f"{self.rng.choice(self.prefixes)} {self.rng.choice(self.suffixes)}"

    def _draw_symbol(self) -> str:
        return self.rng.choice(self.symbol_heads) + self.rng.choice(self.symbol_tails)
