"""Shared pipeline state flowing through the LangGraph graph."""

import asyncio
from dataclasses import dataclass, field
from typing import TypedDict

from contracts import (
    BrandContext,
    DesignTokens,
    FileSet,
    GenerationHandlers,
    GenerationQuality,
    GenerationResult,
    GenerationStrategy,
    InferenceService,
    MasterPlan,
)
from scaling.config import VALIDATOR_MISSING_COLOR_TOLERANCE
from streaming.emitter import StageEmitter


class PipelineState(TypedDict, total=False):
    # Invocation identity
    job_id: str
    message: str
    brand_context: BrandContext
    current_files: FileSet  # caller's seed, never mutated
    strategy: GenerationStrategy
    quality: GenerationQuality
    template_id: str | None
    started_at: float  # time.monotonic()
    # Planner / Designer outputs
    master_plan: MasterPlan | None
    design_doc: str | None
    design_tokens: DesignTokens | None
    # Coder output (the current accepted generation)
    generation: GenerationResult
    # Validator outputs
    is_valid: bool
    issues: list[str]
    # Repair cascade
    repair_attempts: int
    candidate_files: FileSet
    candidate_message: str
    stage: str  # last node that ran


@dataclass
class PipelineContext:
    """Per-invocation collaborators handed to every node through the run config."""

    inference: InferenceService
    handlers: GenerationHandlers
    emitter: StageEmitter
    model: str
    abort: asyncio.Event = field(default_factory=asyncio.Event)
    missing_color_tolerance: int = VALIDATOR_MISSING_COLOR_TOLERANCE


def pipeline_context(config) -> PipelineContext:
    """The PipelineContext a graph node was invoked with."""
    return config["configurable"]["pipeline"]
