"""
Data models shared across the deployment engine.
"""

from .deployment import (
    CompiledArtifact,
    CycleRecord,
    DeployedContract,
    SigningIdentity,
    SlotOutcome,
    SlotStatus,
    TokenSpec,
    TransactionConfirmation,
    TransferOutcome,
)

__all__ = [
    "CompiledArtifact",
    "CycleRecord",
    "DeployedContract",
    "SigningIdentity",
    "SlotOutcome",
    "SlotStatus",
    "TokenSpec",
    "TransactionConfirmation",
    "TransferOutcome",
]
