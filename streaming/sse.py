"""Server-Sent Events binding for the progress stream."""

import logging
from typing import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from contracts import StreamEvent

logger = logging.getLogger(__name__)

SSE_MEDIA_TYPE = "text/event-stream"
SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def encode_sse(event: StreamEvent) -> str:
    return f"data: {event.model_dump_json()}\n\n"


async def iter_sse(stream: AsyncIterable[StreamEvent]) -> AsyncIterator[str]:
    async for event in stream:
        yield encode_sse(event)


class SSEDecoder:
    """Incremental decoder: feed raw text chunks, get whole frames back."""

    def __init__(self):
        self._buffer = ""

    def feed(self, chunk: str) -> list[StreamEvent]:
        self._buffer += chunk
        *frames, self._buffer = self._buffer.split("\n\n")
        decoded: list[StreamEvent] = []
        for frame in frames:
            if not frame.startswith("data: "):
                continue
            try:
                decoded.append(StreamEvent.model_validate_json(frame[len("data: "):]))
            except ValidationError as exc:
                logger.warning(f"[sse] failed to parse frame: {exc}")
        return decoded
