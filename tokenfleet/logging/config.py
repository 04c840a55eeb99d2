"""
Structured logging setup for tokenfleet.

All modules log through structlog. Log records are written to stderr so
that stdout stays free for the event stream consumed by displays.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger, Processor


def _shared_processors(include_timestamp: bool, include_caller: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters={
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ))
    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog and the stdlib root logger once at startup.

    Args:
        level: Minimum level name, e.g. "DEBUG" or "warning"
        format_json: Render one JSON object per line instead of console output
        include_timestamp: Add an ISO-8601 UTC timestamp to every record
        include_caller: Add module name and line number to every record
        stream: Output stream, stderr by default
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    output = stream or sys.stderr
    logging.basicConfig(level=numeric_level, stream=output, format="%(message)s")

    renderer: Processor
    if format_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=_shared_processors(include_timestamp, include_caller) + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def get_cycle_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound to the cycle orchestrator subsystem.

    Every deployment slot and distribution result logged through this
    logger carries the same subsystem tag so a cycle can be followed
    end to end.
    """
    return get_logger(name).bind(
        subsystem="orchestrator",
        audit_trail=True
    )


def get_scheduler_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to the scheduler loop subsystem."""
    return get_logger(name).bind(
        subsystem="scheduler",
        audit_trail=True
    )


def log_slot_outcome(
    logger: FilteringBoundLogger,
    wallet: str,
    name: str,
    symbol: str,
    succeeded: bool,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one deployment slot with standardized format.

    Args:
        logger: Structlog logger instance
        wallet: Address of the deploying wallet
        name: Generated token name
        symbol: Generated token symbol
        succeeded: Whether the deployment succeeded
        context: Additional context data (contract address, error, ...)
    """
    bound_logger = logger.bind(
        wallet=wallet,
        token_name=name,
        token_symbol=symbol,
        slot_result="DEPLOYED" if succeeded else "FAILED",
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if succeeded:
        bound_logger.info("Deployment slot completed")
    else:
        bound_logger.warning("Deployment slot failed")


def log_state_transition(
    logger: FilteringBoundLogger,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a scheduler state transition with standardized format.

    Args:
        logger: Structlog logger instance
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
