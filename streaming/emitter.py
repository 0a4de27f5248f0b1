"""Producer-side helper that turns stage progress and file diffs into stream frames."""

import logging

from contracts import EventType, FileSet, PipelineStage, SendEvent, StreamEvent
from streaming import events

logger = logging.getLogger(__name__)


class StageEmitter:
    """Emits stage statuses and file differences for one invocation.

    A path counts as *created* when neither the caller's seed nor an earlier
    frame of this stream carried it. Content already sent on this stream is
    not sent again.
    """

    def __init__(self, send: SendEvent, seed_files: FileSet | None = None):
        self._send = send
        self._seed_paths = set(seed_files or {})
        self._emitted: FileSet = {}

    @property
    def emitted(self) -> FileSet:
        return dict(self._emitted)

    async def status(self, stage: PipelineStage, details: str) -> None:
        await self._send(events.status(f"{stage.value}: {details}", stage=stage.value))

    async def message(self, text: str) -> None:
        await self._send(events.message(text))

    async def files(self, files: FileSet) -> int:
        """Emit every path whose content differs from what this stream already carried."""
        sent = 0
        for path, content in files.items():
            if self._emitted.get(path) == content:
                continue
            created = path not in self._seed_paths and path not in self._emitted
            self._emitted[path] = content
            await self._send(events.file_event(path, content, created))
            sent += 1
        return sent

    async def forward(self, event: StreamEvent) -> None:
        """Relay a frame produced by a generation handler.

        Terminal frames belong to the caller boundary and are dropped here.
        """
        if event.is_terminal:
            logger.warning(f"[emitter] dropping handler-sent {event.type.value!r} frame")
            return

        if event.type in (EventType.FILE_CREATED, EventType.FILE_EDITED):
            content = event.data.get("content")
            if isinstance(content, str):
                await self.files({event.data["path"]: content})
                return

        await self._send(event)
