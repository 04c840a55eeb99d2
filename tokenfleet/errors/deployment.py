"""
Deployment error classifications for per-slot and per-recipient failures.

These exceptions represent failures scoped to a single unit of work (one
generated batch, one deployment slot, one transfer). They are caught at the
smallest enclosing loop iteration and recorded as outcomes; none of them
is allowed to abort a cycle.
"""

from typing import Optional, Dict, Any


class DeploymentError(Exception):
    """Base class for slot-local failures that are recorded and skipped."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class GenerationExhausted(DeploymentError):
    """Name vocabulary too small to produce a batch of distinct symbols."""

    def __init__(self, message: str, requested: Optional[int] = None,
                 produced: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.requested = requested
        self.produced = produced


class InsufficientFunds(DeploymentError):
    """Wallet balance cannot cover a deployment or was rejected for funds."""

    def __init__(self, message: str, address: Optional[str] = None,
                 balance_wei: Optional[int] = None,
                 required_wei: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.address = address
        self.balance_wei = balance_wei
        self.required_wei = required_wei


class TransactionFailed(DeploymentError):
    """On-chain rejection: revert, out-of-gas or any non-funds refusal."""

    def __init__(self, message: str, reason: Optional[str] = None,
                 tx_hash: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.reason = reason or message
        self.tx_hash = tx_hash


class TransportError(DeploymentError):
    """Network-level failure talking to the node, including wait deadlines."""

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 timed_out: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.endpoint = endpoint
        self.timed_out = timed_out
