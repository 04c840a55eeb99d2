"""File-based event sink writing one JSON object per line."""

import json
from pathlib import Path
from typing import IO, Optional

from .base import BaseEventSink, Event

DEFAULT_FLUSH_EVERY = 20


class FileEventSink(BaseEventSink):
    """
    Appends events to a JSONL file.

    The file is opened once, on the first written event, and kept open.
    Lines go into the handle's write buffer and reach the disk every
    ``flush_every`` events or on close(), so publish() does not touch the
    filesystem for each event while it runs inside the event loop.
    """

    def __init__(self, output_path: str, name: str = "file", create_dirs: bool = True,
                 include_status: bool = False, flush_every: int = DEFAULT_FLUSH_EVERY):
        if flush_every < 1:
            raise ValueError("flush_every must be at least 1")
        super().__init__(name, config={"output_path": output_path, "flush_every": flush_every})
        self.output_path = Path(output_path)
        self.include_status = include_status
        self.flush_every = flush_every

        self._handle: Optional[IO[str]] = None
        self._unflushed = 0

        if create_dirs:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def publish(self, event: Event) -> None:
        payload = event.to_dict()
        # Countdown snapshots arrive every second; keep them out of the file by default
        if payload["type"] == "status" and not self.include_status:
            return

        if self._handle is None:
            self._handle = open(self.output_path, "a", encoding="utf-8")

        self._handle.write(json.dumps(payload, default=str) + "\n")
        self._unflushed += 1
        if self._unflushed >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        if self._handle is not None:
            self._handle.flush()
        self._unflushed = 0

    def close(self) -> None:
        if self._handle is not None:
            self.flush()
            self._handle.close()
            self._handle = None

    def health_check(self) -> bool:
        """Check if the output directory is writable."""
        parent = self.output_path.parent
        return parent.exists() and parent.is_dir()
