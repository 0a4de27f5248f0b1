"""Template Fill agent: model-written copy poured into a fixed site scaffold."""

import datetime
import logging
from dataclasses import dataclass

from langchain_core.runnables import RunnableConfig

from agents.inference import generate_for_stage
from contracts import (
    BrandContext,
    DesignTokens,
    FileSet,
    GenerationArtifacts,
    GenerationQuality,
    GenerationResult,
    GenerationStrategy,
    InferenceService,
    ParseStage,
    PipelineStage,
    WireModel,
)
from observability.metrics import AGENT_CALLS, AGENT_ERRORS
from prompts.template_prompt import TEMPLATE_HUMAN, TEMPLATE_SYSTEM
from scaling.config import DEFAULT_FONTS, DEFAULT_TEMPLATE_ID
from security.guardrails import validate_output
from security.schemas import (
    AboutContent,
    ContactContent,
    FaqItem,
    FooterContent,
    HeroContent,
    ServiceItem,
    TemplateSections,
)
from state import PipelineState, pipeline_context
from tools.site_template import build_template_files

logger = logging.getLogger(__name__)


@dataclass
class TemplateFillOutput:
    files: FileSet
    message: str
    design_tokens: DesignTokens


def fallback_sections(brand: BrandContext, year: int | None = None) -> TemplateSections:
    """Static, brand-derived copy used when the model's content is unusable."""
    name = brand.name or "Your Brand"
    tagline = brand.tagline or "A better way to grow your business."
    audience = brand.target_audience or "modern teams"
    category = brand.category_name or "services"
    year = year or datetime.date.today().year

    return TemplateSections(
        hero=HeroContent(
            title=f"{name} helps {audience} move faster",
            subtitle=tagline,
            primary_cta="Book a Demo",
            secondary_cta="See How It Works",
        ),
        services=[
            ServiceItem(
                title=f"Strategy for {category}",
                description=f"We map your goals to a measurable {category} roadmap.",
            ),
            ServiceItem(
                title="Execution and Delivery",
                description="From kickoff to launch, we deliver reliable outcomes with clear milestones.",
            ),
            ServiceItem(
                title="Optimization",
                description="Continuous improvements based on feedback, analytics, and market signals.",
            ),
        ],
        about=AboutContent(
            title=f"Why teams choose {name}",
            body=(
                f"{name} combines practical strategy, modern design, and speed. We partner "
                "closely with clients to ship outcomes they can measure."
            ),
        ),
        contact=ContactContent(
            title="Contact Us",
            email="hello@example.com",
            phone="+1 (555) 123-4567",
            address="San Francisco, CA",
        ),
        faq=[
            FaqItem(
                question="How quickly can we launch?",
                answer="Most projects launch in 2-6 weeks depending on scope and content readiness.",
            ),
            FaqItem(
                question="Do you support revisions?",
                answer="Yes. We work in iterative cycles with review checkpoints for each milestone.",
            ),
            FaqItem(
                question="Can this scale with growth?",
                answer="Yes. The architecture is modular so you can expand features over time.",
            ),
        ],
        footer=FooterContent(
            copyright=f"{year} {name}. All rights reserved.",
            links=["Privacy", "Terms", "Contact"],
        ),
    )


def _backfill(value: WireModel, default: WireModel) -> WireModel:
    blanks = {
        field: getattr(default, field)
        for field, current in value
        if isinstance(current, str) and not current.strip()
    }
    return value.model_copy(update=blanks) if blanks else value


def backfill_sections(sections: TemplateSections, fallback: TemplateSections) -> TemplateSections:
    """Replace every blank content field with its static counterpart."""
    services = [
        _backfill(item, fallback.services[i % len(fallback.services)])
        for i, item in enumerate(sections.services)
    ]
    faq = [
        _backfill(item, fallback.faq[i % len(fallback.faq)])
        for i, item in enumerate(sections.faq)
    ]
    footer = _backfill(sections.footer, fallback.footer)
    links = [link for link in footer.links if link.strip()]
    footer = footer.model_copy(update={"links": links or list(fallback.footer.links)})

    return sections.model_copy(update={
        "hero": _backfill(sections.hero, fallback.hero),
        "services": services,
        "about": _backfill(sections.about, fallback.about),
        "contact": _backfill(sections.contact, fallback.contact),
        "faq": faq,
        "footer": footer,
    })


async def generate_sections(
    inference: InferenceService,
    model: str,
    message: str,
    brand: BrandContext,
    quality: GenerationQuality,
    template_id: str,
) -> TemplateSections:
    AGENT_CALLS.labels(agent="template_fill").inc()
    fallback = fallback_sections(brand)
    prompt = TEMPLATE_SYSTEM + "\n" + TEMPLATE_HUMAN.format(
        brand_context=brand.model_dump_json(by_alias=True),
        user_request=message,
        template_id=template_id,
    )

    try:
        raw = await generate_for_stage(inference, model, prompt, "template_fill", quality)
    except Exception as e:
        AGENT_ERRORS.labels(agent="template_fill").inc()
        logger.warning(f"[template_fill] content generation failed, using fallback sections: {e!r}")
        return fallback

    valid, parsed = validate_output("template_fill", raw)
    if not valid:
        AGENT_ERRORS.labels(agent="template_fill").inc()
        logger.warning(f"[template_fill] unusable content, using fallback sections: {parsed}")
        return fallback
    return backfill_sections(parsed, fallback)


async def run_template(
    inference: InferenceService,
    model: str,
    message: str,
    brand: BrandContext,
    quality: GenerationQuality,
    template_id: str | None = None,
) -> TemplateFillOutput:
    template_id = template_id or DEFAULT_TEMPLATE_ID
    sections = await generate_sections(inference, model, message, brand, quality, template_id)
    return TemplateFillOutput(
        files=build_template_files(brand, sections),
        message=f"Created a deterministic {template_id} template with generated content blocks.",
        design_tokens=DesignTokens(
            colors=brand.color_palette.as_list(), fonts=list(DEFAULT_FONTS)
        ),
    )


async def run_template_fill(state: PipelineState, config: RunnableConfig) -> PipelineState:
    ctx = pipeline_context(config)
    template_id = state.get("template_id") or DEFAULT_TEMPLATE_ID

    await ctx.emitter.status(PipelineStage.PLANNING, "Preparing deterministic template flow...")
    await ctx.emitter.status(PipelineStage.DESIGNING, f"Building {template_id} content...")
    output = await run_template(
        ctx.inference,
        ctx.model,
        state["message"],
        state["brand_context"],
        state["quality"],
        template_id,
    )

    await ctx.emitter.status(PipelineStage.CODING, "Composing template files...")
    await ctx.emitter.files(output.files)
    await ctx.emitter.message(output.message)

    generation = GenerationResult(
        files=output.files,
        message=output.message,
        artifacts=GenerationArtifacts(
            design_tokens=output.design_tokens,
            strategy_used=GenerationStrategy.TEMPLATE_FILL,
        ),
        parse_stage=ParseStage.TOOL_CALLING,
    )
    return {
        **state,
        "generation": generation,
        "design_tokens": output.design_tokens,
        "stage": PipelineStage.CODING.value,
    }
