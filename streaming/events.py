"""Progress-event protocol: frame constructors and the bounded channel that carries them."""

import asyncio
import logging
from typing import Any, AsyncIterator

from contracts import EventType, StreamClosedError, StreamEvent
from scaling.config import EVENT_CHANNEL_SIZE

logger = logging.getLogger(__name__)


def status(text: str, **extra: Any) -> StreamEvent:
    return StreamEvent(type=EventType.STATUS, data={"status": text, **extra})


def file_event(path: str, content: str, created: bool) -> StreamEvent:
    return StreamEvent(
        type=EventType.FILE_CREATED if created else EventType.FILE_EDITED,
        data={"path": path, "content": content, "size": len(content)},
    )


def message(text: str) -> StreamEvent:
    return StreamEvent(type=EventType.MESSAGE, data={"text": text})


def tool_call(name: str, args: dict[str, Any] | None = None) -> StreamEvent:
    return StreamEvent(type=EventType.TOOL_CALL, data={"name": name, "args": args or {}})


def install_packages(packages: list[str]) -> StreamEvent:
    return StreamEvent(type=EventType.INSTALL_PACKAGES, data={"packages": list(packages)})


def error(text: str) -> StreamEvent:
    return StreamEvent(type=EventType.ERROR, data={"message": text})


def done(**data: Any) -> StreamEvent:
    return StreamEvent(type=EventType.DONE, data=data)


class EventChannel:
    """Ordered, bounded queue of StreamEvents closed by exactly one terminal frame."""

    def __init__(self, maxsize: int = EVENT_CHANNEL_SIZE):
        self._queue: asyncio.Queue[StreamEvent] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, event: StreamEvent) -> None:
        if self._closed:
            raise StreamClosedError(f"stream already terminated; dropped {event.type.value!r} frame")
        if event.is_terminal:
            self._closed = True
        await self._queue.put(event)

    async def __aiter__(self) -> AsyncIterator[StreamEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if event.is_terminal:
                return
