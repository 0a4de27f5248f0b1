"""Orchestrator: deterministic routing between pipeline stages."""

import logging
import time

from langchain_core.runnables import RunnableConfig

from contracts import FallbackPath, GenerationStrategy, ParseStage, PipelineStage
from observability.metrics import AGENT_CALLS
from scaling.config import MAX_REPAIR_ATTEMPTS
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)


def route_entry(state: PipelineState) -> str:
    """First stage for the requested strategy."""
    match GenerationStrategy(state["strategy"]):
        case GenerationStrategy.TEMPLATE_FILL:
            return "template_fill"
        case GenerationStrategy.PLAN_DRIVEN:
            return PipelineStage.PLANNING.value
        case GenerationStrategy.FAST_JSON:
            return PipelineStage.CODING.value
        case other:
            raise ValueError(f"Unknown generation strategy: {other!r}")


def route_after_validation(state: PipelineState) -> str:
    if state.get("is_valid"):
        return PipelineStage.FINALIZING.value
    if state.get("repair_attempts", 0) < MAX_REPAIR_ATTEMPTS:
        return PipelineStage.REPAIRING.value
    return PipelineStage.AGENTIC_FALLBACK.value


def route_after_revalidation(state: PipelineState) -> str:
    """A candidate that fails revalidation never gets a third check."""
    if state.get("is_valid"):
        return PipelineStage.FINALIZING.value
    return PipelineStage.AGENTIC_FALLBACK.value


async def run_agentic_fallback(state: PipelineState, config: RunnableConfig) -> PipelineState:
    """Discard the invalid candidate and accept a fresh agentic generation as-is."""
    ctx = pipeline_context(config)
    AGENT_CALLS.labels(agent="agentic_fallback").inc()
    await ctx.emitter.status(
        PipelineStage.AGENTIC_FALLBACK, "Repairer was insufficient. Falling back to agentic..."
    )

    fallback = await ctx.handlers.run_agentic(
        state["message"], state["brand_context"], {}, ctx.emitter.forward, state["quality"]
    )
    await ctx.emitter.files(fallback.files)
    generation = fallback.model_copy(update={
        "fallback_path": FallbackPath.REPAIRER_FALLBACK,
        "parse_stage": ParseStage.REPAIRER_FALLBACK,
    })
    return {**state, "generation": generation, "stage": PipelineStage.AGENTIC_FALLBACK.value}


async def run_finalizer(state: PipelineState, config: RunnableConfig) -> PipelineState:
    """Attach run artifacts and timing to the accepted generation."""
    ctx = pipeline_context(config)
    strategy = GenerationStrategy(state["strategy"])
    duration_ms = int((time.monotonic() - state["started_at"]) * 1000)

    generation = state["generation"]
    artifacts = generation.artifacts.model_copy(update={
        "master_plan": state.get("master_plan"),
        "design_doc": state.get("design_doc"),
        "design_tokens": state.get("design_tokens"),
        "repair_attempts": state.get("repair_attempts", 0),
        "strategy_used": strategy,
        "duration_ms": duration_ms,
    })
    generation = generation.model_copy(update={
        "artifacts": artifacts,
        "generation_duration_ms": duration_ms,
    })

    details = (
        "Template generation complete."
        if strategy == GenerationStrategy.TEMPLATE_FILL
        else "Generation complete."
    )
    await ctx.emitter.status(PipelineStage.FINALIZING, details)
    logger.info(
        f"[orchestrator] {state.get('job_id', '')} finished in {duration_ms}ms "
        f"(fallback={generation.fallback_path.value}, repairs={artifacts.repair_attempts})"
    )
    return {**state, "generation": generation, "stage": PipelineStage.FINALIZING.value}
