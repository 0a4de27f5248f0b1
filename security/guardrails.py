"""Security guardrails around the generation pipeline."""

import logging
import os
import re
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ValidationError

from contracts import FileSet
from security.schemas import (
    DesignerOutputSchema,
    PlannerOutput,
    RepairOutput,
    TemplateSections,
)
from tools.json_extract import parse_json_object

logger = logging.getLogger(__name__)

# ── Layer 1: Input sanitization ──────────────────────────────────────────────

_INJECTION_PATTERNS = [
    re.compile(r"(ignore|disregard)\s+(all\s+)?(previous|prior|above)\s+instructions", re.IGNORECASE),
    re.compile(r"^\s*system\s*:", re.IGNORECASE | re.MULTILINE),
    re.compile(r"<\|(im_start|im_end|endoftext)\|>", re.IGNORECASE),
    re.compile(r"```\s*system", re.IGNORECASE),
]


def sanitize_input(text: str) -> str:
    """Redact prompt-injection markers from a build request before it reaches any prompt."""
    redactions = 0
    for pattern in _INJECTION_PATTERNS:
        text, count = pattern.subn("[REDACTED]", text)
        redactions += count
    if redactions:
        logger.warning(f"[guardrails] redacted {redactions} injection marker(s) from request")
    return text


# ── Layer 2: Output validation ───────────────────────────────────────────────

_SCHEMA_MAP: dict[str, type[BaseModel]] = {
    "planner": PlannerOutput,
    "designer": DesignerOutputSchema,
    "repairer": RepairOutput,
    "template_fill": TemplateSections,
}


def validate_output(agent_name: str, raw_text: str) -> tuple[bool, object | str]:
    """Extract the JSON object in *raw_text* and check it against *agent_name*'s schema.

    Returns (True, parsed_model) on success, (False, error_string) on failure.
    """
    schema = _SCHEMA_MAP.get(agent_name)
    if schema is None:
        raise KeyError(f"No output schema registered for {agent_name!r}")

    payload = parse_json_object(raw_text)
    if payload is None:
        return False, "response did not contain a JSON object"

    try:
        return True, schema.model_validate(payload)
    except ValidationError as exc:
        return False, str(exc)


# ── Layer 3: Tool allowlist ──────────────────────────────────────────────────

_ALLOWED_TOOLS = {"create_file", "edit_file", "read_file", "list_files", "install_packages"}


def check_tool_allowlist(tool_name: str) -> bool:
    """Return True if the tool is permitted."""
    return tool_name in _ALLOWED_TOOLS


# ── Layer 4: Path sandboxing ────────────────────────────────────────────────


def is_safe_relative_path(filepath: str) -> bool:
    """True for a relative POSIX path that stays inside the project root."""
    if not filepath or "\\" in filepath or "\x00" in filepath:
        return False
    path = PurePosixPath(filepath)
    return not path.is_absolute() and ".." not in path.parts


def sandbox_file_path(root: Path, filepath: str) -> Path:
    """Resolve *filepath* under *root* and assert it does not escape it.

    Raises ValueError on path-traversal attempts.
    """
    base = root.resolve()
    resolved = (base / filepath).resolve()
    if not resolved.is_relative_to(base):
        raise ValueError(
            f"Path traversal blocked: {filepath!r} resolves outside {base}"
        )
    return resolved


# ── Layer 5: Human-review gate ───────────────────────────────────────────────

# Patterns that should never ship in a static marketing site
_RISKY_PATTERNS: dict[str, re.Pattern] = {
    "eval": re.compile(r"\beval\s*\("),
    "Function constructor": re.compile(r"\bnew\s+Function\s*\("),
    "raw HTML injection": re.compile(r"dangerouslySetInnerHTML|\.innerHTML\s*="),
    "node process access": re.compile(r"\b(child_process|process\.env)\b"),
    "document.write": re.compile(r"document\.write\s*\("),
}


def human_review_gate(files: FileSet) -> list[str]:
    """One warning per (file, risky pattern) pair found in *files*."""
    return [
        f"[security] {path}: {label} found"
        for path, source in files.items()
        for label, pattern in _RISKY_PATTERNS.items()
        if pattern.search(source)
    ]


def require_human_review() -> bool:
    """REQUIRE_HUMAN_REVIEW=true pauses the CLI before writing flagged files."""
    return os.getenv("REQUIRE_HUMAN_REVIEW", "").lower() == "true"
