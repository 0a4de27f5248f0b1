"""Caller boundary: runs the stage graph and turns its outcome into stream frames."""

import asyncio
import contextlib
import functools
import logging
import time
import uuid
from typing import AsyncIterator

from contracts import (
    BuildRequest,
    FallbackPath,
    GenerationCancelled,
    GenerationHandlers,
    GenerationResult,
    InferenceService,
    PipelineStage,
    SendEvent,
    StreamEvent,
)
from graph import build_graph
from observability.metrics import (
    ACTIVE_GENERATIONS,
    FALLBACKS,
    GENERATION_DURATION,
    GENERATIONS,
)
from scaling.model_selector import get_model
from security.guardrails import sanitize_input
from state import PipelineContext, PipelineState
from streaming import events
from streaming.emitter import StageEmitter
from streaming.events import EventChannel

logger = logging.getLogger(__name__)

RECURSION_LIMIT = 25


@functools.lru_cache(maxsize=1)
def compiled_graph():
    return build_graph()


def _initial_state(request: BuildRequest, job_id: str) -> PipelineState:
    return {
        "job_id": job_id,
        "message": sanitize_input(request.message),
        "brand_context": request.brand_context,
        "current_files": dict(request.current_files),
        "strategy": request.strategy,
        "quality": request.quality,
        "template_id": request.template_id,
        "started_at": time.monotonic(),
        "master_plan": None,
        "design_doc": None,
        "design_tokens": None,
        "is_valid": False,
        "issues": [],
        "repair_attempts": 0,
        "candidate_files": {},
        "candidate_message": "",
    }


async def run_builder_pipeline(
    request: BuildRequest,
    inference: InferenceService,
    handlers: GenerationHandlers,
    send: SendEvent,
    *,
    abort: asyncio.Event | None = None,
    model: str | None = None,
    job_id: str | None = None,
) -> GenerationResult:
    """Run one generation to completion and return its result.

    Raises GenerationCancelled as soon as *abort* is set; the in-flight stage
    is cancelled and no further stage starts.
    """
    job_id = job_id or str(uuid.uuid4())[:8]
    ctx = PipelineContext(
        inference=inference,
        handlers=handlers,
        emitter=StageEmitter(send, request.current_files),
        model=model or get_model("pipeline"),
        abort=abort or asyncio.Event(),
    )
    config = {"recursion_limit": RECURSION_LIMIT, "configurable": {"pipeline": ctx}}

    strategy = request.strategy.value
    start = time.time()
    ACTIVE_GENERATIONS.inc()
    run = asyncio.ensure_future(compiled_graph().ainvoke(_initial_state(request, job_id), config))
    aborted = asyncio.ensure_future(ctx.abort.wait())
    try:
        await asyncio.wait({run, aborted}, return_when=asyncio.FIRST_COMPLETED)
        if not run.done():
            run.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await run
            raise GenerationCancelled(f"generation {job_id} aborted by caller")

        final_state = run.result()
    except GenerationCancelled:
        GENERATIONS.labels(strategy=strategy, outcome="cancelled").inc()
        raise
    except Exception:
        GENERATIONS.labels(strategy=strategy, outcome="failed").inc()
        raise
    finally:
        aborted.cancel()
        if not run.done():
            run.cancel()
        ACTIVE_GENERATIONS.dec()
        GENERATION_DURATION.observe(time.time() - start)

    result: GenerationResult = final_state["generation"]
    GENERATIONS.labels(strategy=strategy, outcome="completed").inc()
    if result.fallback_path != FallbackPath.NONE:
        FALLBACKS.labels(path=result.fallback_path.value).inc()
    return result


async def stream_builder(
    request: BuildRequest,
    inference: InferenceService,
    handlers: GenerationHandlers,
    *,
    abort: asyncio.Event | None = None,
    model: str | None = None,
    job_id: str | None = None,
) -> AsyncIterator[StreamEvent]:
    """Yield the ordered frames of one generation, closed by exactly one terminal frame.

    Failures surface as a single ``error`` frame; files already streamed stay.
    """
    channel = EventChannel()
    job_id = job_id or str(uuid.uuid4())[:8]

    async def produce() -> None:
        try:
            await channel.send(events.status("Starting generation..."))
            result = await run_builder_pipeline(
                request, inference, handlers, channel.send,
                abort=abort, model=model, job_id=job_id,
            )
            await channel.send(events.done(
                success=True,
                job_id=job_id,
                result=result.model_dump(mode="json", by_alias=True),
            ))
        except GenerationCancelled:
            logger.info(f"[pipeline] {job_id} cancelled")
            await channel.send(events.status(
                f"{PipelineStage.CANCELLED.value}: Generation cancelled.",
                stage=PipelineStage.CANCELLED.value,
            ))
            await channel.send(events.done(success=False, cancelled=True, job_id=job_id))
        except Exception as e:
            logger.exception(f"[pipeline] {job_id} failed: {e}")
            if not channel.closed:
                await channel.send(events.error(f"Generation failed: {e}"))

    producer = asyncio.create_task(produce())
    try:
        async for event in channel:
            yield event
        await producer
    finally:
        if not producer.done():
            producer.cancel()
