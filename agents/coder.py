"""Coder agent: delegates code synthesis to the injected generation handlers."""

import logging

from langchain_core.runnables import RunnableConfig

from contracts import (
    CoderError,
    DesignTokens,
    FallbackPath,
    GenerationResult,
    MasterPlan,
    ParseStage,
    PipelineStage,
)
from observability.metrics import AGENT_CALLS, AGENT_ERRORS
from prompts.coder_prompt import PLAN_DRIVEN_REQUIREMENTS
from state import PipelineContext, PipelineState, pipeline_context

logger = logging.getLogger(__name__)


def build_plan_driven_prompt(
    message: str,
    master_plan: MasterPlan | None = None,
    design_doc: str | None = None,
    design_tokens: DesignTokens | None = None,
) -> str:
    """Embed the plan JSON and design brief verbatim ahead of the fixed requirements."""
    sections = [message]

    if master_plan:
        sections += [
            "MASTER PLAN (strictly follow this architecture and acceptance criteria):",
            master_plan.model_dump_json(by_alias=True, indent=2),
        ]

    if design_doc and design_tokens:
        sections += [
            "DESIGN SPEC (enforce these tokens and style constraints):",
            design_doc,
            f"Design tokens: {design_tokens.model_dump_json(by_alias=True, indent=2)}",
        ]

    sections.append(PLAN_DRIVEN_REQUIREMENTS)
    return "\n\n".join(sections)


def coder_prompt(state: PipelineState) -> str:
    plan = state.get("master_plan")
    design_doc = state.get("design_doc")
    if not plan and not design_doc:
        return state["message"]
    return build_plan_driven_prompt(
        state["message"], plan, design_doc, state.get("design_tokens")
    )


async def _run_fast(ctx: PipelineContext, state: PipelineState, prompt: str) -> GenerationResult:
    generation = await ctx.handlers.run_fast(
        prompt,
        state["brand_context"],
        state.get("current_files", {}),
        ctx.emitter.forward,
        state["quality"],
    )
    if not generation.files:
        raise CoderError("fast handler returned no files")
    return generation


async def run_coder(state: PipelineState, config: RunnableConfig) -> PipelineState:
    ctx = pipeline_context(config)
    AGENT_CALLS.labels(agent="coder").inc()
    await ctx.emitter.status(PipelineStage.CODING, "Generating code...")

    prompt = coder_prompt(state)
    try:
        generation = await _run_fast(ctx, state, prompt)
    except Exception as e:
        AGENT_ERRORS.labels(agent="coder").inc()
        logger.warning(f"[coder] fast generation failed, falling back to agentic: {e!r}")
        await ctx.emitter.status(
            PipelineStage.AGENTIC_FALLBACK, "Fast generation failed. Falling back to agentic..."
        )
        # Fresh seed: the fast attempt's partial output must not merge in
        fallback = await ctx.handlers.run_agentic(
            prompt, state["brand_context"], {}, ctx.emitter.forward, state["quality"]
        )
        generation = fallback.model_copy(update={
            "fallback_path": FallbackPath.AGENTIC_FALLBACK,
            "parse_stage": ParseStage.AGENTIC_FALLBACK,
        })

    await ctx.emitter.files(generation.files)
    return {**state, "generation": generation, "stage": PipelineStage.CODING.value}
