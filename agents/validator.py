"""Semantic validator: structural and brand checks on a generated file set."""

import logging

from langchain_core.runnables import RunnableConfig

from contracts import (
    BrandContext,
    DesignTokens,
    FallbackPath,
    FileSet,
    ParseStage,
    PipelineStage,
    SemanticValidationResult,
)
from observability.metrics import AGENT_CALLS
from scaling.config import (
    ICON_LIBRARY,
    LANDMARK_MARKER,
    REQUIRED_CSS_VARIABLES,
    REQUIRED_FILES,
    ROOT_FILE,
    SOCIAL_PROOF_KEYWORDS,
    STYLESHEET_FILE,
    VALIDATOR_MISSING_COLOR_TOLERANCE,
)
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)


def _normalized_content(files: FileSet) -> str:
    return "\n".join(files.values()).lower()


def _contains_color(content: str, color: str) -> bool:
    normalized = color.strip().lower()
    return not normalized or normalized in content


def validate_semantic_output(
    files: FileSet,
    brand: BrandContext,
    design_tokens: DesignTokens | None = None,
    *,
    missing_color_tolerance: int = VALIDATOR_MISSING_COLOR_TOLERANCE,
) -> SemanticValidationResult:
    """Run the six checks in order and collect every issue found.

    Pure: no I/O, no inference calls.
    """
    issues: list[str] = []

    for path in REQUIRED_FILES:
        if not files.get(path):
            issues.append(f"Missing required file: {path}")

    content = _normalized_content(files)
    colors = [c for c in brand.color_palette.as_list() if c]
    if design_tokens:
        colors += [c for c in design_tokens.colors if c]
    missing_colors = [c for c in colors if not _contains_color(content, c)]
    if len(missing_colors) > missing_color_tolerance:
        issues.append(
            f"Missing brand/design color values in output: {', '.join(missing_colors[:5])}"
        )

    styles = files.get(STYLESHEET_FILE, "")
    missing_vars = [var for var in REQUIRED_CSS_VARIABLES if var not in styles]
    if missing_vars:
        issues.append(
            f"Missing required CSS variables in {STYLESHEET_FILE}: {', '.join(missing_vars)}"
        )

    if LANDMARK_MARKER not in files.get(ROOT_FILE, ""):
        issues.append(f"{ROOT_FILE} should include a <main> landmark for semantic structure.")

    if not any(ICON_LIBRARY in source for source in files.values()):
        issues.append(
            "No lucide-react icon imports found. Feature cards MUST use lucide-react icons, "
            "not empty placeholder circles."
        )

    if not any(keyword in content for keyword in SOCIAL_PROOF_KEYWORDS):
        issues.append(
            "Missing stats/social-proof section. Add a section with 3-4 impressive metrics "
            "(e.g., users, uptime, countries)."
        )

    return SemanticValidationResult(is_valid=not issues, issues=issues)


async def run_validator(state: PipelineState, config: RunnableConfig) -> PipelineState:
    """Validate the coder's output."""
    ctx = pipeline_context(config)
    AGENT_CALLS.labels(agent="validator").inc()
    await ctx.emitter.status(PipelineStage.VALIDATING, "Checking generated files...")

    check = validate_semantic_output(
        state["generation"].files,
        state["brand_context"],
        state.get("design_tokens"),
        missing_color_tolerance=ctx.missing_color_tolerance,
    )
    if not check.is_valid:
        logger.info(f"[validator] {len(check.issues)} issue(s): {check.issues}")
    return {
        **state,
        "is_valid": check.is_valid,
        "issues": check.issues,
        "stage": PipelineStage.VALIDATING.value,
    }


async def run_revalidator(state: PipelineState, config: RunnableConfig) -> PipelineState:
    """Validate the repair candidate and adopt it when it passes."""
    ctx = pipeline_context(config)
    AGENT_CALLS.labels(agent="validator").inc()
    await ctx.emitter.status(PipelineStage.REVALIDATING, "Checking repaired files...")

    candidate = state.get("candidate_files", {})
    check = validate_semantic_output(
        candidate,
        state["brand_context"],
        state.get("design_tokens"),
        missing_color_tolerance=ctx.missing_color_tolerance,
    )
    if not check.is_valid:
        logger.info(f"[validator] repair candidate still invalid: {check.issues}")
        return {
            **state,
            "is_valid": False,
            "issues": check.issues,
            "stage": PipelineStage.REVALIDATING.value,
        }

    message = state.get("candidate_message", "")
    await ctx.emitter.files(candidate)
    await ctx.emitter.message(message)
    generation = state["generation"].model_copy(update={
        "files": candidate,
        "message": message,
        "fallback_path": FallbackPath.NONE,
        "parse_stage": ParseStage.REPAIRED,
    })
    return {
        **state,
        "generation": generation,
        "is_valid": True,
        "issues": [],
        "stage": PipelineStage.REVALIDATING.value,
    }
