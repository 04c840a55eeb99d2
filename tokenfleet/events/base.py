"""Base classes for status and log event emission."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional, Union

import structlog

logger = structlog.get_logger(__name__)


class EventLevel(str, Enum):
    """Severity of a log event."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class LogEvent:
    """A single log line destined for the display layer."""
    level: EventLevel
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "log",
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.value,
            "message": self.message,
            "context": self.context,
        }


@dataclass(frozen=True)
class WalletSummary:
    """Per-wallet line of a status snapshot."""
    address: str
    balance_wei: Optional[int] = None
    deployed: int = 0
    failed: int = 0


@dataclass(frozen=True)
class StatusSnapshot:
    """Periodic status: wallet summaries plus time until the next cycle."""
    wallet_summaries: tuple[WalletSummary, ...]
    next_cycle_eta: Optional[datetime] = None
    countdown: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "status",
            "timestamp": self.timestamp.isoformat(),
            "wallet_summaries": [asdict(w) for w in self.wallet_summaries],
            "next_cycle_eta": self.next_cycle_eta.isoformat() if self.next_cycle_eta else None,
            "countdown": self.countdown,
        }


Event = Union[LogEvent, StatusSnapshot]


class BaseEventSink(ABC):
    """Base class for event sinks consumed by the display layer."""

    def __init__(self, name: str, config: Any = None):
        self.name = name
        self.config = config
        self._published_count = 0
        self._error_count = 0

    @abstractmethod
    def publish(self, event: Event) -> None:
        """
        Hand one event to the sink.

        Implementations must return promptly; the emitter never waits for
        the display layer to consume an event.
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the sink is able to accept events."""
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get publication statistics."""
        return {
            "name": self.name,
            "published_count": self._published_count,
            "error_count": self._error_count,
            "success_rate": (
                self._published_count / (self._published_count + self._error_count)
                if (self._published_count + self._error_count) > 0 else 0.0
            )
        }

    def close(self) -> None:
        """Flush and release any resources held by the sink."""


class EventEmitter:
    """Fire-and-forget fan-out of events to every registered sink."""

    def __init__(self, sinks: Optional[Iterable[BaseEventSink]] = None):
        self.sinks: list[BaseEventSink] = list(sinks or [])

    def add_sink(self, sink: BaseEventSink) -> None:
        self.sinks.append(sink)

    def emit(self, event: Event) -> None:
        """Publish to all sinks; a failing sink is logged and skipped."""
        for sink in self.sinks:
            try:
                sink.publish(event)
                sink._published_count += 1
            except Exception as e:
                sink._error_count += 1
                logger.error(
                    "Event sink failed",
                    sink=sink.name,
                    error=str(e),
                    error_type=type(e).__name__
                )

    def info(self, message: str, **context: Any) -> None:
        self.emit(LogEvent(level=EventLevel.INFO, message=message, context=context))

    def warn(self, message: str, **context: Any) -> None:
        self.emit(LogEvent(level=EventLevel.WARN, message=message, context=context))

    def error(self, message: str, **context: Any) -> None:
        self.emit(LogEvent(level=EventLevel.ERROR, message=message, context=context))

    def status(self, snapshot: StatusSnapshot) -> None:
        self.emit(snapshot)

    def close(self) -> None:
        """Close every sink, logging its delivery stats."""
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error("Event sink close failed", sink=sink.name, error=str(e))
            logger.info("Event sink closed", **sink.get_stats())
