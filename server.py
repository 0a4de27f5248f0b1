"""HTTP adapter: binds the generation stream to Server-Sent Events."""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

from dotenv import load_dotenv

load_dotenv()

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import StreamingResponse
from prometheus_client import make_asgi_app

from agents.handlers import LLMGenerationHandlers
from agents.inference import ChatInferenceService
from contracts import BuildRequest, GenerationHandlers, InferenceService, WireModel
from pipeline import stream_builder
from scaling.model_selector import get_model
from scaling.session_registry import GenerationRegistry
from streaming.sse import SSE_HEADERS, SSE_MEDIA_TYPE, iter_sse

logger = logging.getLogger(__name__)

InferenceFactory = Callable[[str, str], InferenceService]
HandlersFactory = Callable[[InferenceService], GenerationHandlers]


class StreamRequest(BuildRequest):
    session_id: str = "anonymous"


class CancelRequest(WireModel):
    session_id: str
    job_id: str | None = None


def _default_inference(job_id: str, session_id: str) -> InferenceService:
    return ChatInferenceService(job_id=job_id, user_id=session_id)


def _default_handlers(inference: InferenceService) -> GenerationHandlers:
    return LLMGenerationHandlers(inference, get_model("pipeline"))


router = APIRouter(prefix="/api/builder", tags=["builder"])


@router.post("/stream")
async def stream_build(body: StreamRequest, request: Request) -> StreamingResponse:
    state = request.app.state
    job_id = str(uuid.uuid4())[:8]
    entry = await state.registry.register(body.session_id, job_id)
    inference = state.inference_factory(job_id, body.session_id)
    handlers = state.handlers_factory(inference)

    async def event_stream() -> AsyncIterator[str]:
        try:
            frames = stream_builder(body, inference, handlers, abort=entry.abort, job_id=job_id)
            async for frame in iter_sse(frames):
                yield frame
        finally:
            await state.registry.complete(body.session_id, job_id)

    logger.info(f"[server] {body.session_id}/{job_id} streaming ({body.strategy.value})")
    return StreamingResponse(
        event_stream(),
        media_type=SSE_MEDIA_TYPE,
        headers={**SSE_HEADERS, "X-Job-Id": job_id},
    )


@router.post("/cancel")
async def cancel_build(body: CancelRequest, request: Request) -> dict:
    cancelled = await request.app.state.registry.cancel(body.session_id, body.job_id)
    return {"cancelled": cancelled}


def create_app(
    inference_factory: InferenceFactory = _default_inference,
    handlers_factory: HandlersFactory = _default_handlers,
    registry: GenerationRegistry | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.registry.close()

    app = FastAPI(title="Brand Site Builder", lifespan=lifespan)
    app.state.inference_factory = inference_factory
    app.state.handlers_factory = handlers_factory
    app.state.registry = registry or GenerationRegistry()
    app.include_router(router)
    app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    async def health() -> dict:
        active = await app.state.registry.active()
        return {"status": "ok", "activeGenerations": len(active)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
