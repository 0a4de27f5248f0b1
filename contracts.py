"""Data contracts shared by every pipeline stage."""

from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Enums ────────────────────────────────────────────────────────────────────


class GenerationQuality(str, Enum):
    SPEED = "speed"
    BALANCED = "balanced"
    HIGH = "high"


class GenerationStrategy(str, Enum):
    FAST_JSON = "fast_json"
    PLAN_DRIVEN = "plan_driven"
    TEMPLATE_FILL = "template_fill"


class InferenceDepth(str, Enum):
    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"


class PipelineStage(str, Enum):
    PLANNING = "planning"
    DESIGNING = "designing"
    CODING = "coding"
    VALIDATING = "validating"
    REPAIRING = "repairing"
    REVALIDATING = "revalidating"
    AGENTIC_FALLBACK = "agentic_fallback"
    FINALIZING = "finalizing"
    CANCELLED = "cancelled"


class FallbackPath(str, Enum):
    NONE = "none"
    AGENTIC_FALLBACK = "agentic_fallback"
    REPAIRER_FALLBACK = "repairer_fallback"


class ParseStage(str, Enum):
    DIRECT = "direct"
    REPAIRED = "repaired"
    AGENTIC_FALLBACK = "agentic_fallback"
    REPAIRER_FALLBACK = "repairer_fallback"
    TOOL_CALLING = "tool_calling"


# ── Brand context ────────────────────────────────────────────────────────────


class ColorPalette(WireModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    secondary: str
    accent: str
    background: str
    text: str

    def as_list(self) -> list[str]:
        """Palette values in role order."""
        return [self.primary, self.secondary, self.accent, self.background, self.text]


class CategoryInsight(WireModel):
    model_config = ConfigDict(frozen=True)

    primary: str = ""
    target_audience: str = ""
    keywords: list[str] = Field(default_factory=list)


class ValidationInsights(WireModel):
    model_config = ConfigDict(frozen=True)

    category: CategoryInsight | None = None
    pain_points: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)


class BrandContext(WireModel):
    """Caller-supplied identity and style bundle. Read-only inside the pipeline."""

    model_config = ConfigDict(frozen=True)

    name: str
    tagline: str = ""
    logo: str | None = None
    color_palette: ColorPalette
    validation: ValidationInsights = Field(default_factory=ValidationInsights)

    @property
    def target_audience(self) -> str:
        if self.validation.category and self.validation.category.target_audience:
            return self.validation.category.target_audience
        return ""

    @property
    def category_name(self) -> str:
        if self.validation.category and self.validation.category.primary:
            return self.validation.category.primary
        return ""


# ── Stage outputs ────────────────────────────────────────────────────────────


class ComponentPlanEntry(WireModel):
    file: str
    role: str


class MasterPlan(WireModel):
    objective: str
    sections: list[str]
    component_plan: list[ComponentPlanEntry] = Field(default_factory=list)
    implementation_notes: list[str] = Field(default_factory=list)
    acceptance_criteria: list[str] = Field(default_factory=list)
    user_prompt: str | None = None


class DesignTokens(WireModel):
    colors: list[str] = Field(default_factory=list)
    fonts: list[str] = Field(default_factory=list)


class DesignerOutput(WireModel):
    design_doc: str
    design_tokens: DesignTokens


FileSet = dict[str, str]


class GenerationArtifacts(WireModel):
    master_plan: MasterPlan | None = None
    design_doc: str | None = None
    design_tokens: DesignTokens | None = None
    repair_attempts: int = 0
    strategy_used: GenerationStrategy = GenerationStrategy.FAST_JSON
    duration_ms: int | None = None


class GenerationResult(WireModel):
    files: FileSet = Field(default_factory=dict)
    message: str = ""
    artifacts: GenerationArtifacts = Field(default_factory=GenerationArtifacts)
    fallback_path: FallbackPath = FallbackPath.NONE
    parse_stage: ParseStage = ParseStage.DIRECT
    generation_duration_ms: int | None = None
    finish_reason: str | None = None


class SemanticValidationResult(WireModel):
    is_valid: bool
    issues: list[str] = Field(default_factory=list)


class RepairCandidate(WireModel):
    files: FileSet
    message: str
    local: bool = False


# ── Requests & capabilities ──────────────────────────────────────────────────


class BuildRequest(WireModel):
    message: str
    brand_context: BrandContext
    current_files: FileSet = Field(default_factory=dict)
    strategy: GenerationStrategy = GenerationStrategy.FAST_JSON
    quality: GenerationQuality = GenerationQuality.BALANCED
    template_id: str | None = None

    @field_validator("message")
    @classmethod
    def _message_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message is required")
        return value


class InferenceOptions(WireModel):
    response_format: str = "json"
    inference_depth: InferenceDepth = InferenceDepth.LOW
    temperature: float = 0.3
    max_output_tokens: int = 4096
    stage: str = ""


class InferenceService(Protocol):
    """The generative backend consumed by planner, designer, template and repairer."""

    async def generate_content(self, model: str, prompt: str, options: InferenceOptions) -> str:
        ...


class EventType(str, Enum):
    STATUS = "status"
    FILE_CREATED = "file_created"
    FILE_EDITED = "file_edited"
    TOOL_CALL = "tool_call"
    MESSAGE = "message"
    ERROR = "error"
    DONE = "done"
    INSTALL_PACKAGES = "install_packages"


TERMINAL_EVENTS = frozenset({EventType.DONE, EventType.ERROR})


class StreamEvent(BaseModel):
    """One frame of the progress stream: ``{type, data}``."""

    type: EventType
    data: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS


SendEvent = Callable[[StreamEvent], Awaitable[None]]


class GenerationHandlers(Protocol):
    """Two interchangeable code-synthesis strategies injected by the caller."""

    async def run_fast(
        self,
        message: str,
        brand_context: BrandContext,
        current_files: FileSet,
        send: SendEvent,
        quality: GenerationQuality,
    ) -> GenerationResult:
        ...

    async def run_agentic(
        self,
        message: str,
        brand_context: BrandContext,
        current_files: FileSet,
        send: SendEvent,
        quality: GenerationQuality,
    ) -> GenerationResult:
        ...


# ── Errors ───────────────────────────────────────────────────────────────────


class PipelineError(Exception):
    """Base class for generation pipeline failures."""


class GenerationCancelled(PipelineError):
    """The caller's abort signal fired."""


class CoderError(PipelineError):
    """A generation handler produced no usable file set."""


class StreamClosedError(PipelineError):
    """An event was sent after the terminal frame."""
