"""
Event emission module.

Log lines and status snapshots flow from every component to whatever
display layer is attached, through an emitter that never blocks on it.
"""
from .base import (
    BaseEventSink,
    EventEmitter,
    EventLevel,
    LogEvent,
    StatusSnapshot,
    WalletSummary,
)
from .buffered_sink import BufferedEventSink
from .file_sink import FileEventSink
from .stdout_sink import StdoutEventSink

__all__ = [
    "BaseEventSink",
    "BufferedEventSink",
    "EventEmitter",
    "EventLevel",
    "FileEventSink",
    "LogEvent",
    "StatusSnapshot",
    "StdoutEventSink",
    "WalletSummary",
]
