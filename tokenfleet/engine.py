"""
Cycle orchestrator.

Drives one full pass over every wallet, coordinating name generation,
deployment, distribution and pacing, and isolating failures so that a bad
slot never stops the rest of the cycle.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence

import structlog

from .config.defaults import AppConfig
from .deployment.deployer import DeploymentUnit
from .deployment.distributor import DistributionUnit
from .errors import GenerationExhausted
from .events import EventEmitter
from .logging.config import get_cycle_logger, log_slot_outcome
from .models.deployment import (
    CompiledArtifact,
    CycleRecord,
    SigningIdentity,
    SlotOutcome,
    SlotStatus,
    TokenSpec,
)
from .naming.generator import NameGenerator
from .utils.time import format_utc

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CyclePolicy:
    """Fixed per-cycle policy values."""
    batch_size: int = 5
    sample_size: int = 7
    pacing_delay_seconds: float = 3.0
    initial_supply: int = 1000 * 10 ** 18

    @classmethod
    def from_config(cls, config: AppConfig) -> "CyclePolicy":
        return cls(
            batch_size=config.deployment.batch_size,
            sample_size=config.distribution.sample_size,
            pacing_delay_seconds=config.deployment.pacing_delay_ms / 1000,
            initial_supply=config.deployment.initial_supply,
        )


class CycleOrchestrator:
    """
    Main coordinator for one deployment cycle.

    Manages the per-cycle pipeline:
    Wallet → Name Batch → Deploy → Distribute → Pace → next slot
    """

    def __init__(
        self,
        name_generator: NameGenerator,
        deployer: DeploymentUnit,
        distributor: DistributionUnit,
        artifact: CompiledArtifact,
        recipient_pool: Sequence[str],
        policy: Optional[CyclePolicy] = None,
        emitter: Optional[EventEmitter] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.name_generator = name_generator
        self.deployer = deployer
        self.distributor = distributor
        self.artifact = artifact
        self.recipient_pool = tuple(recipient_pool)
        self.policy = policy or CyclePolicy()
        self.emitter = emitter or EventEmitter()
        self.sleep = sleep

        self.logger = logger
        self.cycle_logger = get_cycle_logger(__name__)

    async def run_cycle(
        self,
        identities: Sequence[SigningIdentity],
        batch_size_per_identity: Optional[int] = None,
    ) -> CycleRecord:
        """
        Run one pass of deployments and distributions over all identities.

        Args:
            identities: Wallets in processing order
            batch_size_per_identity: Contracts per wallet (defaults to policy)

        Returns:
            CycleRecord with one SlotOutcome per attempted deployment

        Raises:
            ValueError: If an explicit batch size is below 1
        """
        batch_size = self.policy.batch_size if batch_size_per_identity is None else batch_size_per_identity
        if batch_size < 1:
            raise ValueError(f"batch_size_per_identity must be at least 1, got {batch_size}")
        record = CycleRecord(started_at=datetime.now(timezone.utc))

        self.emitter.info(
            f"Deploying {batch_size} contract(s) per wallet at {format_utc(record.started_at)}",
            wallets=len(identities),
            batch_size=batch_size
        )
        self.logger.info(
            "Cycle started",
            wallets=len(identities),
            batch_size=batch_size
        )

        attempts = 0
        for identity in identities:
            self.emitter.info(f"Using wallet: {identity.short_address}", wallet=identity.address)

            try:
                specs = self.name_generator.generate_batch(batch_size)
            except GenerationExhausted as e:
                self.logger.error(
                    "Name generation exhausted, skipping wallet batch",
                    wallet=identity.address,
                    requested=e.requested,
                    produced=e.produced
                )
                self.emitter.error(
                    f"Name generation failed for {identity.short_address}: {e}",
                    wallet=identity.address,
                    error_type=type(e).__name__
                )
                continue

            self.emitter.info(
                f"Generated names: {', '.join(s.name for s in specs)}",
                wallet=identity.address
            )

            for index, spec in enumerate(specs, start=1):
                if attempts:
                    await self.sleep(self.policy.pacing_delay_seconds)
                attempts += 1

                outcome = await self._run_slot(identity, spec, index)
                record.add(outcome)

        record.finished_at = datetime.now(timezone.utc)
        summary = record.summary()

        self.logger.info("Cycle finished", **summary)
        self.emitter.info(
            f"Cycle complete: {record.deployed}/{record.total} deployments successful",
            **summary
        )
        return record

    async def _run_slot(self, identity: SigningIdentity, spec: TokenSpec, index: int) -> SlotOutcome:
        """Deploy then distribute one slot, converting any failure into an outcome."""
        try:
            contract = await self.deployer.deploy_one(
                identity, spec, self.artifact, self.policy.initial_supply
            )
        except Exception as e:
            log_slot_outcome(
                self.cycle_logger,
                wallet=identity.address,
                name=spec.name,
                symbol=spec.symbol,
                succeeded=False,
                context={"error": str(e), "error_type": type(e).__name__}
            )
            self.emitter.error(
                f"Failed to deploy {spec.name}: {e}",
                wallet=identity.address,
                symbol=spec.symbol,
                error_type=type(e).__name__
            )
            return SlotOutcome(
                identity=identity,
                token_spec=spec,
                status=SlotStatus.DEPLOY_FAILED,
                error=str(e),
                error_type=type(e).__name__,
            )

        self.emitter.info(
            f"[{index}] Deployed {spec.name.upper()} ({spec.symbol}) at {contract.address[:8]}...",
            wallet=identity.address,
            contract=contract.address
        )

        try:
            transfers = await self.distributor.distribute(
                contract, identity, self.recipient_pool, self.policy.sample_size
            )
        except Exception as e:
            log_slot_outcome(
                self.cycle_logger,
                wallet=identity.address,
                name=spec.name,
                symbol=spec.symbol,
                succeeded=False,
                context={
                    "contract": contract.address,
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            self.emitter.error(
                f"Distribution for {spec.symbol} aborted: {e}",
                contract=contract.address,
                error_type=type(e).__name__
            )
            return SlotOutcome(
                identity=identity,
                token_spec=spec,
                status=SlotStatus.DISTRIBUTION_FAILED,
                contract=contract,
                error=str(e),
                error_type=type(e).__name__,
            )

        log_slot_outcome(
            self.cycle_logger,
            wallet=identity.address,
            name=spec.name,
            symbol=spec.symbol,
            succeeded=True,
            context={
                "contract": contract.address,
                "transfers": len(transfers),
                "transfers_succeeded": sum(1 for t in transfers if t.success),
            }
        )
        return SlotOutcome(
            identity=identity,
            token_spec=spec,
            status=SlotStatus.DEPLOYED,
            contract=contract,
            transfers=tuple(transfers),
        )
