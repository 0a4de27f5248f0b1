"""Centralized configuration for quality tiers, timeouts, model chain and validation."""

import os
from dataclasses import dataclass

from contracts import GenerationQuality, InferenceDepth


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "")
    values = [item.strip() for item in raw.split(",") if item.strip()]
    return values or default


# ── Quality tiers ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class QualityProfile:
    inference_depth: InferenceDepth
    stage_tokens: int  # planner, designer and template content
    repair_tokens: int  # repairer and coder, which return whole files


QUALITY_PROFILES: dict[GenerationQuality, QualityProfile] = {
    GenerationQuality.SPEED: QualityProfile(InferenceDepth.MINIMAL, 2_048, 16_384),
    GenerationQuality.BALANCED: QualityProfile(InferenceDepth.LOW, 4_096, 24_576),
    GenerationQuality.HIGH: QualityProfile(InferenceDepth.MEDIUM, 8_192, 32_768),
}

# Sampling temperature per stage
STAGE_TEMPERATURES: dict[str, float] = {
    "planner": 0.3,
    "designer": 0.4,
    "template_fill": 0.7,
    "repairer": 0.2,
    "coder": 0.2,
}


def quality_profile(quality: GenerationQuality) -> QualityProfile:
    return QUALITY_PROFILES[GenerationQuality(quality)]


# ── Timeouts (seconds) ───────────────────────────────────────────────────────

STAGE_TIMEOUTS: dict[str, float] = {
    "planner": float(os.getenv("PLANNER_TIMEOUT_SECONDS", "120")),
    "designer": float(os.getenv("DESIGNER_TIMEOUT_SECONDS", "120")),
    "template_fill": float(os.getenv("TEMPLATE_TIMEOUT_SECONDS", "120")),
    "repairer": float(os.getenv("REPAIRER_TIMEOUT_SECONDS", "300")),
}

# Per-request HTTP timeout handed to the chat client
INFERENCE_REQUEST_TIMEOUT: float = float(os.getenv("INFERENCE_REQUEST_TIMEOUT_SECONDS", "300"))

# ── Models ───────────────────────────────────────────────────────────────────

# Fallback model chain, tried in order on API errors
MODEL_CHAIN: list[str] = _env_list("MODEL_CHAIN", ["gpt-4o-mini", "gpt-4o", "gpt-3.5-turbo"])

# Attempts across the chain for a single inference call
INFERENCE_MAX_ATTEMPTS: int = int(os.getenv("INFERENCE_MAX_ATTEMPTS", "2"))

# Model families that accept a reasoning-effort setting
REASONING_MODEL_PREFIXES: tuple[str, ...] = ("o1", "o3", "o4", "gpt-5")

# Model pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
}

# ── Pipeline policy ──────────────────────────────────────────────────────────

# Remote repair passes per generation before the agentic fallback
MAX_REPAIR_ATTEMPTS: int = 1

# Brand/design colours allowed to be absent before validation fails
VALIDATOR_MISSING_COLOR_TOLERANCE: int = int(os.getenv("VALIDATOR_MISSING_COLOR_TOLERANCE", "2"))

ENTRY_FILE = "src/index.tsx"
ROOT_FILE = "src/App.tsx"
STYLESHEET_FILE = "src/styles.css"
REQUIRED_FILES: tuple[str, ...] = (ROOT_FILE, ENTRY_FILE, STYLESHEET_FILE)

REQUIRED_CSS_VARIABLES: tuple[str, ...] = (
    "--color-primary",
    "--color-secondary",
    "--color-accent",
    "--color-background",
    "--color-text",
)

LANDMARK_MARKER = "<main"
ICON_LIBRARY = "lucide-react"
SOCIAL_PROOF_KEYWORDS: tuple[str, ...] = ("stats", "social-proof", "metric")

DEFAULT_FONTS: tuple[str, ...] = ("Manrope", "Space Grotesk")
MAX_DESIGN_FONTS: int = 4

DEFAULT_TEMPLATE_ID = "business-default"

# Bounded event channel between pipeline and caller
EVENT_CHANNEL_SIZE: int = int(os.getenv("EVENT_CHANNEL_SIZE", "256"))

# Seconds a finished generation stays in the session registry
REGISTRY_EVICTION_SECONDS: float = float(os.getenv("REGISTRY_EVICTION_SECONDS", "300"))

# Turn cap for the tool-calling handler
AGENTIC_MAX_TURNS: int = int(os.getenv("AGENTIC_MAX_TURNS", "8"))


def calculate_cost(
    model: str, input_tokens: int, output_tokens: int
) -> float:
    """Return estimated cost in USD for a single LLM call."""
    pricing = MODEL_PRICING.get(model, {"input": 0.0, "output": 0.0})
    cost = (input_tokens * pricing["input"] + output_tokens * pricing["output"]) / 1_000_000
    return round(cost, 6)
