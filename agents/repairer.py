"""Repairer agent: one remote repair pass, else a deterministic local patch."""

import json
import logging

from langchain_core.runnables import RunnableConfig

from agents.inference import generate_for_stage
from contracts import (
    BrandContext,
    FileSet,
    GenerationQuality,
    InferenceService,
    PipelineStage,
    RepairCandidate,
)
from observability.metrics import AGENT_CALLS, AGENT_ERRORS, REPAIR_ATTEMPTS
from prompts.repairer_prompt import REPAIRER_HUMAN, REPAIRER_SYSTEM
from scaling.config import ENTRY_FILE, ROOT_FILE, STYLESHEET_FILE
from security.guardrails import is_safe_relative_path, validate_output
from state import PipelineState, pipeline_context

logger = logging.getLogger(__name__)

LOCAL_REPAIR_MESSAGE = "Applied local semantic repair fallback."

MINIMAL_ROOT = """\
export default function App() {
  return (
    <main>
      <h1>Landing Page</h1>
    </main>
  );
}
"""

MINIMAL_ENTRY = """\
import React from "react";
import ReactDOM from "react-dom/client";
import App from "./App";
import "./styles.css";

ReactDOM.createRoot(document.getElementById("root")!).render(
  <React.StrictMode>
    <App />
  </React.StrictMode>
);
"""


def css_variables_block(brand: BrandContext) -> str:
    palette = brand.color_palette
    return (
        ":root {\n"
        f"  --color-primary: {palette.primary};\n"
        f"  --color-secondary: {palette.secondary};\n"
        f"  --color-accent: {palette.accent};\n"
        f"  --color-background: {palette.background};\n"
        f"  --color-text: {palette.text};\n"
        "}\n"
    )


def apply_local_repair(files: FileSet, brand: BrandContext) -> RepairCandidate:
    """Patch the structural gaps without any inference call. Always succeeds."""
    updated = dict(files)
    block = css_variables_block(brand)

    styles = updated.get(STYLESHEET_FILE)
    if not styles:
        updated[STYLESHEET_FILE] = (
            f"{block}body {{ margin: 0; font-family: 'Inter', sans-serif; "
            "background: var(--color-background); color: var(--color-text); }\n"
        )
    elif "--color-primary" not in styles:
        updated[STYLESHEET_FILE] = f"{block}{styles}"

    if not updated.get(ROOT_FILE):
        updated[ROOT_FILE] = MINIMAL_ROOT
    if not updated.get(ENTRY_FILE):
        updated[ENTRY_FILE] = MINIMAL_ENTRY

    return RepairCandidate(files=updated, message=LOCAL_REPAIR_MESSAGE, local=True)


def build_repairer_prompt(
    message: str, brand: BrandContext, files: FileSet, issues: list[str]
) -> str:
    human = REPAIRER_HUMAN.format(
        user_request=message,
        brand_context=brand.model_dump_json(by_alias=True),
        issues=json.dumps(issues),
        files=json.dumps(files),
    )
    return f"{REPAIRER_SYSTEM}\n{human}"


async def run_repair(
    inference: InferenceService,
    model: str,
    message: str,
    brand: BrandContext,
    files: FileSet,
    issues: list[str],
    quality: GenerationQuality,
) -> RepairCandidate:
    """Return a repair candidate overlaid on *files*; never raises for inference failures."""
    AGENT_CALLS.labels(agent="repairer").inc()

    try:
        raw = await generate_for_stage(
            inference, model, build_repairer_prompt(message, brand, files, issues), "repairer", quality
        )
    except Exception as e:
        AGENT_ERRORS.labels(agent="repairer").inc()
        logger.warning(f"[repairer] generation failed, applying local repair fallback: {e!r}")
        return apply_local_repair(files, brand)

    valid, parsed = validate_output("repairer", raw)
    if not valid:
        AGENT_ERRORS.labels(agent="repairer").inc()
        logger.warning(f"[repairer] unusable candidate, applying local repair fallback: {parsed}")
        return apply_local_repair(files, brand)

    repaired = {path: content for path, content in parsed.files.items() if is_safe_relative_path(path)}
    rejected = len(parsed.files) - len(repaired)
    if rejected:
        logger.warning(f"[repairer] dropped {rejected} file(s) with unsafe paths")
    if not repaired:
        AGENT_ERRORS.labels(agent="repairer").inc()
        return apply_local_repair(files, brand)

    return RepairCandidate(files={**files, **repaired}, message=parsed.message)


async def run_repairer(state: PipelineState, config: RunnableConfig) -> PipelineState:
    ctx = pipeline_context(config)
    await ctx.emitter.status(
        PipelineStage.REPAIRING, "Detected semantic inconsistencies. Running repair pass..."
    )

    candidate = await run_repair(
        ctx.inference,
        ctx.model,
        state["message"],
        state["brand_context"],
        state["generation"].files,
        state.get("issues", []),
        state["quality"],
    )
    REPAIR_ATTEMPTS.labels(outcome="local" if candidate.local else "remote").inc()
    return {
        **state,
        "repair_attempts": state.get("repair_attempts", 0) + 1,
        "candidate_files": candidate.files,
        "candidate_message": candidate.message,
        "stage": PipelineStage.REPAIRING.value,
    }
