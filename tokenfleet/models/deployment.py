"""
Deployment data models for wallets, artifacts, contracts and cycle outcomes.

This module defines immutable data structures describing what a cycle works
with (identities, generated token specs, compiled artifacts) and what it
produces (deployed contracts, per-transfer and per-slot outcomes).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True)
class SigningIdentity:
    """A wallet address plus the account object able to sign for it."""

    address: str
    account: Any = field(default=None, repr=False, compare=False)

    @property
    def short_address(self) -> str:
        return f"{self.address[:8]}..."

    @classmethod
    def from_account(cls, account: Any) -> "SigningIdentity":
        """Wrap an ``eth_account`` LocalAccount."""
        return cls(address=account.address, account=account)


@dataclass(frozen=True)
class TokenSpec:
    """Generated token name and ticker symbol for one deployment slot."""

    name: str
    symbol: str


@dataclass(frozen=True)
class CompiledArtifact:
    """Interface description (ABI) and creation bytecode of a contract."""

    abi: list = field(repr=False)
    bytecode: str


@dataclass(frozen=True)
class DeployedContract:
    """Handle on a contract created during the current cycle."""

    address: str
    abi: list = field(repr=False)
    identity: SigningIdentity
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class TransactionConfirmation:
    """Receipt summary for a mined transaction."""

    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True)
class TransferOutcome:
    """Result of one distribution transfer."""

    recipient: str
    amount: int
    success: bool
    tx_hash: Optional[str] = None
    error: Optional[str] = None


class SlotStatus(str, Enum):
    """Final status of a deployment slot."""
    DEPLOYED = "deployed"
    DEPLOY_FAILED = "deploy_failed"
    DISTRIBUTION_FAILED = "distribution_failed"     # Contract exists, transfers aborted


@dataclass(frozen=True)
class SlotOutcome:
    """One (identity, token spec, outcome) entry of a cycle."""

    identity: SigningIdentity
    token_spec: TokenSpec
    status: SlotStatus
    contract: Optional[DeployedContract] = None
    transfers: tuple[TransferOutcome, ...] = ()
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == SlotStatus.DEPLOYED

    @property
    def transfers_succeeded(self) -> int:
        return sum(1 for t in self.transfers if t.success)


@dataclass
class CycleRecord:
    """In-memory record of one pass over all identities. Never persisted."""

    started_at: datetime
    outcomes: list[SlotOutcome] = field(default_factory=list)
    finished_at: Optional[datetime] = None

    def add(self, outcome: SlotOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def deployed(self) -> int:
        """Slots that produced a contract, whatever happened afterwards."""
        return sum(1 for o in self.outcomes if o.contract is not None)

    def outcomes_for(self, address: str) -> list[SlotOutcome]:
        return [o for o in self.outcomes if o.identity.address == address]

    def summary(self) -> dict[str, Any]:
        """Compact status summary suitable for logging and status events."""
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "deployments_total": self.total,
            "slots_succeeded": self.succeeded,
            "slots_failed": self.failed,
            "contracts_deployed": self.deployed,
            "transfers_attempted": sum(len(o.transfers) for o in self.outcomes),
            "transfers_succeeded": sum(o.transfers_succeeded for o in self.outcomes),
        }
