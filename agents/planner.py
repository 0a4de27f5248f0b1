"""Planner agent: turns the request and brand into a Master Plan."""

import json
import logging

from langchain_core.runnables import RunnableConfig

from agents.inference import generate_for_stage
from contracts import (
    BrandContext,
    ComponentPlanEntry,
    GenerationQuality,
    InferenceService,
    MasterPlan,
    PipelineStage,
)
from observability.metrics import AGENT_CALLS, AGENT_ERRORS
from prompts.planner_prompt import PLANNER_HUMAN, PLANNER_SYSTEM
from security.guardrails import validate_output
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)

FALLBACK_SECTIONS = ["navbar", "hero", "stats", "features", "social-proof", "cta", "footer"]

FALLBACK_COMPONENT_PLAN = [
    ComponentPlanEntry(file="src/components/Navbar.tsx", role="navigation and branding"),
    ComponentPlanEntry(file="src/components/Hero.tsx", role="primary value proposition"),
    ComponentPlanEntry(file="src/components/StatsBar.tsx", role="3-4 headline metrics"),
    ComponentPlanEntry(file="src/components/Features.tsx", role="core feature grid with lucide-react icons"),
    ComponentPlanEntry(file="src/components/CTA.tsx", role="conversion section"),
    ComponentPlanEntry(file="src/components/Footer.tsx", role="secondary navigation and legal"),
]


def build_fallback_plan(message: str, brand: BrandContext) -> MasterPlan:
    palette = brand.color_palette.model_dump(by_alias=True)
    return MasterPlan(
        objective=f"Build a production-ready marketing site for {brand.name}",
        user_prompt=message,
        sections=list(FALLBACK_SECTIONS),
        component_plan=list(FALLBACK_COMPONENT_PLAN),
        implementation_notes=[
            f"Use brand palette from BrandContext: {json.dumps(palette)}",
            "Use semantic HTML and responsive layout.",
            "Keep generated code split into reusable components.",
        ],
        acceptance_criteria=[
            "All core files are generated.",
            "Brand colors are present in src/styles.css.",
            "Main CTA and copy align with provided prompt intent.",
        ],
    )


def build_planner_prompt(message: str, brand: BrandContext) -> str:
    human = PLANNER_HUMAN.format(
        brand_name=brand.name,
        tagline=brand.tagline,
        target_audience=brand.target_audience or "general users",
        user_request=message,
    )
    return f"{PLANNER_SYSTEM}\n{human}"


async def generate_master_plan(
    inference: InferenceService,
    model: str,
    message: str,
    brand: BrandContext,
    quality: GenerationQuality,
) -> MasterPlan:
    """Ask the model for a plan; fall back to a deterministic one on any failure.

    Never raises for inference or decode problems.
    """
    AGENT_CALLS.labels(agent="planner").inc()

    try:
        raw = await generate_for_stage(
            inference, model, build_planner_prompt(message, brand), "planner", quality
        )
    except Exception as e:
        AGENT_ERRORS.labels(agent="planner").inc()
        logger.warning(f"[planner] generation failed, using fallback plan: {e!r}")
        return build_fallback_plan(message, brand)

    valid, parsed = validate_output("planner", raw)
    if not valid:
        AGENT_ERRORS.labels(agent="planner").inc()
        logger.warning(f"[planner] unusable plan, using fallback: {parsed}")
        return build_fallback_plan(message, brand)

    plan = MasterPlan.model_validate(parsed.model_dump())
    updates: dict = {}
    if not plan.component_plan:
        updates["component_plan"] = list(FALLBACK_COMPONENT_PLAN)
    if plan.user_prompt is None:
        updates["user_prompt"] = message
    return plan.model_copy(update=updates) if updates else plan


async def run_planner(state: PipelineState, config: RunnableConfig) -> PipelineState:
    ctx = pipeline_context(config)
    await ctx.emitter.status(PipelineStage.PLANNING, "Creating master implementation plan...")

    plan = await generate_master_plan(
        ctx.inference, ctx.model, state["message"], state["brand_context"], state["quality"]
    )
    logger.info(f"[planner] {len(plan.sections)} sections, {len(plan.component_plan)} components")
    return {**state, "master_plan": plan, "stage": PipelineStage.PLANNING.value}
