"""
System failure error classifications for unrecoverable errors.

These exceptions represent startup failures that make it impossible to run
any cycle at all. They terminate the process instead of being retried.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for unrecoverable system failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class CompilationError(SystemFailureError):
    """The contract compiler reported error-severity diagnostics."""

    def __init__(self, message: str, diagnostics: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.diagnostics = diagnostics or []


class ConfigurationError(SystemFailureError):
    """Configuration inputs are missing or invalid."""

    def __init__(self, message: str, errors: Optional[list] = None,
                 source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
        self.source = source
