"""
Error classification system for the deployment engine.

Slot-local failures (deployment) are recorded and skipped; system failures
abort startup.
"""

from .deployment import (
    DeploymentError,
    GenerationExhausted,
    InsufficientFunds,
    TransactionFailed,
    TransportError,
)
from .system_failures import (
    SystemFailureError,
    CompilationError,
    ConfigurationError,
)

__all__ = [
    # Slot-local failures
    "DeploymentError",
    "GenerationExhausted",
    "InsufficientFunds",
    "TransactionFailed",
    "TransportError",
    # System Failures
    "SystemFailureError",
    "CompilationError",
    "ConfigurationError",
]
