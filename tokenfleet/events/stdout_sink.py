"""Standard output event sink."""

import json
import sys

from .base import BaseEventSink, Event, LogEvent


class StdoutEventSink(BaseEventSink):
    """Standard output event sink implementation."""

    def __init__(self, name: str = "stdout", format: str = "pretty"):
        if format not in ("json", "pretty"):
            raise ValueError(f"Unsupported format: {format}")
        super().__init__(name, config={"format": format})
        self.format = format

    def publish(self, event: Event) -> None:
        stream = sys.stdout
        stream.write(self._format_event(event) + "\n")
        # Terminals need each countdown tick at once; pipes stay block-buffered
        if stream.isatty():
            stream.flush()

    def close(self) -> None:
        sys.stdout.flush()

    def _format_event(self, event: Event) -> str:
        """Format event for stdout output."""
        if self.format == "json":
            return json.dumps(event.to_dict(), default=str)

        if isinstance(event, LogEvent):
            return f"{event.timestamp.isoformat()} | {event.level.value.upper():5} | {event.message}"

        wallets = ", ".join(w.address[:8] + "..." for w in event.wallet_summaries)
        return f"{event.timestamp.isoformat()} | STATUS | wallets: {wallets} | next run: {event.countdown or 'calculating...'}"

    def health_check(self) -> bool:
        """Check if stdout is available."""
        try:
            return sys.stdout.writable()
        except Exception:
            return False
