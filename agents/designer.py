"""Designer agent: derives design tokens and a design brief from the plan."""

import logging

from langchain_core.runnables import RunnableConfig

from agents.inference import generate_for_stage
from contracts import (
    BrandContext,
    DesignerOutput,
    DesignTokens,
    GenerationQuality,
    InferenceService,
    MasterPlan,
    PipelineStage,
)
from observability.metrics import AGENT_CALLS, AGENT_ERRORS
from prompts.designer_prompt import DESIGNER_HUMAN, DESIGNER_SYSTEM
from scaling.config import DEFAULT_FONTS, MAX_DESIGN_FONTS
from security.guardrails import validate_output
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)


def unique_strings(values: list[str]) -> list[str]:
    """Trimmed, non-empty values in first-seen order, compared case-insensitively."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = value.strip()
        if not cleaned or cleaned.lower() in seen:
            continue
        seen.add(cleaned.lower())
        result.append(cleaned)
    return result


def build_fallback_design_doc(message: str, brand: BrandContext) -> str:
    return "\n".join([
        f"Design direction for {brand.name}: premium and conversion-focused landing page.",
        f"Prompt intent: {message}",
        "Use strong visual hierarchy: bold hero, feature grid, clear call-to-action.",
        "Use smooth motion and subtle hover effects while preserving accessibility.",
        "Ensure mobile-first layout and semantic sectioning.",
    ])


def merge_design_tokens(
    brand: BrandContext, colors: list[str], fonts: list[str]
) -> DesignTokens:
    # Palette values lead, verbatim
    palette = brand.color_palette.as_list()
    known = {c.strip().lower() for c in palette}
    merged_colors = palette + [c for c in unique_strings(colors) if c.lower() not in known]
    merged_fonts = unique_strings(fonts) or list(DEFAULT_FONTS)
    return DesignTokens(colors=merged_colors, fonts=merged_fonts[:MAX_DESIGN_FONTS])


def build_designer_prompt(message: str, brand: BrandContext, plan: MasterPlan | None) -> str:
    human = DESIGNER_HUMAN.format(
        user_request=message,
        brand_context=brand.model_dump_json(by_alias=True),
        master_plan=plan.model_dump_json(by_alias=True) if plan else "{}",
        required_colors=", ".join(unique_strings(brand.color_palette.as_list())),
    )
    return f"{DESIGNER_SYSTEM}\n{human}"


async def generate_design(
    inference: InferenceService,
    model: str,
    message: str,
    brand: BrandContext,
    plan: MasterPlan | None,
    quality: GenerationQuality,
) -> DesignerOutput:
    AGENT_CALLS.labels(agent="designer").inc()

    design_doc = ""
    colors: list[str] = []
    fonts: list[str] = []

    try:
        raw = await generate_for_stage(
            inference, model, build_designer_prompt(message, brand, plan), "designer", quality
        )
        valid, parsed = validate_output("designer", raw)
        if valid:
            design_doc = parsed.design_doc
            colors = parsed.design_tokens_colors
            fonts = parsed.design_tokens_fonts
        else:
            AGENT_ERRORS.labels(agent="designer").inc()
            logger.warning(f"[designer] unusable design spec, using fallback: {parsed}")
    except Exception as e:
        AGENT_ERRORS.labels(agent="designer").inc()
        logger.warning(f"[designer] generation failed, using fallback design spec: {e!r}")

    return DesignerOutput(
        design_doc=design_doc or build_fallback_design_doc(message, brand),
        design_tokens=merge_design_tokens(brand, colors, fonts),
    )


async def run_designer(state: PipelineState, config: RunnableConfig) -> PipelineState:
    ctx = pipeline_context(config)
    await ctx.emitter.status(PipelineStage.DESIGNING, "Extracting design tokens and style spec...")

    design = await generate_design(
        ctx.inference,
        ctx.model,
        state["message"],
        state["brand_context"],
        state.get("master_plan"),
        state["quality"],
    )
    return {
        **state,
        "design_doc": design.design_doc,
        "design_tokens": design.design_tokens,
        "stage": PipelineStage.DESIGNING.value,
    }
