"""Caller-side reducer that assembles a progress stream into a file set."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterable

from contracts import EventType, FileSet, StreamEvent

logger = logging.getLogger(__name__)


@dataclass
class FileUpdate:
    path: str
    kind: str  # "created" | "edited"
    timestamp: float


@dataclass
class StreamState:
    is_streaming: bool = False
    status: str = ""
    message: str = ""
    files: FileSet = field(default_factory=dict)
    file_updates: list[FileUpdate] = field(default_factory=list)
    tool_calls: list[str] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    error: str | None = None
    turns: int = 0
    cancelled: bool = False
    result: dict[str, Any] | None = None


class StreamConsumer:
    """Folds StreamEvents into a StreamState.

    Every invocation starts from an empty file set: ``begin`` runs before the
    first frame of a new stream, whatever the previous stream produced.
    """

    def __init__(self, initial_files: FileSet | None = None):
        self.state = StreamState(files=dict(initial_files or {}))

    def begin(self) -> None:
        self.state = StreamState(is_streaming=True, status="Starting...")

    def reset(self, files: FileSet | None = None) -> None:
        self.state = StreamState(files=dict(files or {}))

    def update_file(self, path: str, content: str) -> None:
        self.state.files[path] = content
        self.state.file_updates.append(FileUpdate(path, "edited", time.time()))

    async def consume(self, stream: AsyncIterable[StreamEvent]) -> StreamState:
        self.begin()
        try:
            async for event in stream:
                self.apply(event)
        finally:
            self.state.is_streaming = False
        return self.state

    def apply(self, event: StreamEvent) -> None:
        data = event.data
        state = self.state

        match event.type:
            case EventType.STATUS:
                state.status = data.get("status", state.status)
                state.turns = data.get("turns", state.turns)
                if data.get("stage") == "cancelled":
                    state.cancelled = True
            case EventType.FILE_CREATED:
                state.files[data["path"]] = data.get("content") or ""
                state.file_updates.append(FileUpdate(data["path"], "created", time.time()))
            case EventType.FILE_EDITED:
                if data.get("content"):
                    state.files[data["path"]] = data["content"]
                state.file_updates.append(FileUpdate(data["path"], "edited", time.time()))
            case EventType.TOOL_CALL:
                state.tool_calls.append(data.get("name", ""))
            case EventType.INSTALL_PACKAGES:
                for package in data.get("packages", []):
                    if package not in state.packages:
                        state.packages.append(package)
            case EventType.MESSAGE:
                state.message = data.get("text", "")
            case EventType.ERROR:
                state.error = data.get("message", "Unknown error")
                state.is_streaming = False
            case EventType.DONE:
                state.is_streaming = False
                state.cancelled = state.cancelled or bool(data.get("cancelled"))
                state.status = "Cancelled" if state.cancelled else "Complete"
                state.result = data.get("result")
            case _:
                logger.warning(f"[consumer] ignoring unknown event type {event.type!r}")
