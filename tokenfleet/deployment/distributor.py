"""
Post-deployment distribution of minted supply.

Samples recipients uniformly without replacement and sends each a random
whole-token amount. Every transfer stands alone: a failed transfer is
recorded and the next recipient is attempted.
"""

import random
from typing import Optional, Sequence

import structlog

from ..chain.client import ChainClient
from ..errors import DeploymentError
from ..events import EventEmitter
from ..models.deployment import DeployedContract, SigningIdentity, TransferOutcome

logger = structlog.get_logger(__name__)

DEFAULT_AMOUNT_RANGE = (1, 50)


class DistributionUnit:
    """Best-effort token distribution to a random recipient sample."""

    def __init__(
        self,
        client: ChainClient,
        rng: Optional[random.Random] = None,
        amount_range: tuple[int, int] = DEFAULT_AMOUNT_RANGE,
        emitter: Optional[EventEmitter] = None,
    ) -> None:
        low, high = amount_range
        if low < 1 or low > high:
            raise ValueError(f"Invalid amount range {amount_range}")

        self.client = client
        self.rng = rng or random.Random()
        self.amount_range = (low, high)
        self.emitter = emitter or EventEmitter()

    def sample_recipients(self, recipient_pool: Sequence[str], sample_size: int) -> list[str]:
        """Uniform sample without replacement of min(sample_size, pool) recipients."""
        return self.rng.sample(list(recipient_pool), min(sample_size, len(recipient_pool)))

    def draw_amount(self, decimals: int) -> int:
        """Random whole-token amount scaled to base units."""
        return self.rng.randint(*self.amount_range) * 10 ** decimals

    async def distribute(
        self,
        contract: DeployedContract,
        identity: SigningIdentity,
        recipient_pool: Sequence[str],
        sample_size: int,
    ) -> list[TransferOutcome]:
        """
        Transfer random amounts to a random sample of the recipient pool.

        Args:
            contract: Freshly deployed token contract
            identity: Wallet holding the minted supply
            recipient_pool: Addresses to sample from (not consumed)
            sample_size: Requested number of recipients

        Returns:
            One TransferOutcome per sampled recipient, in transfer order
        """
        targets = self.sample_recipients(recipient_pool, sample_size)
        decimals = await self._token_decimals(contract)

        outcomes: list[TransferOutcome] = []
        for recipient in targets:
            amount = self.draw_amount(decimals)
            try:
                confirmation = await self.client.call(
                    contract, identity, "transfer", [recipient, amount]
                )
            except Exception as e:
                logger.warning(
                    "Transfer failed",
                    contract=contract.address,
                    recipient=recipient,
                    error=str(e),
                    error_type=type(e).__name__
                )
                self.emitter.error(
                    f"Error sending to {recipient[:8]}...: {e}",
                    contract=contract.address,
                    recipient=recipient,
                    error_type=type(e).__name__
                )
                outcomes.append(TransferOutcome(
                    recipient=recipient,
                    amount=amount,
                    success=False,
                    error=str(e),
                ))
                continue

            whole = amount // 10 ** decimals
            self.emitter.info(
                f"Sent {whole} tokens to {recipient[:8]}...",
                contract=contract.address,
                recipient=recipient,
                tx_hash=confirmation.tx_hash
            )
            outcomes.append(TransferOutcome(
                recipient=recipient,
                amount=amount,
                success=True,
                tx_hash=confirmation.tx_hash,
            ))

        logger.info(
            "Distribution finished",
            contract=contract.address,
            attempted=len(outcomes),
            succeeded=sum(1 for o in outcomes if o.success)
        )
        return outcomes

    async def _token_decimals(self, contract: DeployedContract) -> int:
        try:
            return await self.client.decimals(contract)
        except DeploymentError as e:
            logger.warning(
                "Could not read token decimals, assuming 18",
                contract=contract.address,
                error=str(e)
            )
            return 18
