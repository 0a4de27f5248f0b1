"""Default LLM-backed generation handlers: single-shot JSON and tool-calling."""

import json
import logging
from typing import Any

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage, ToolMessage
from pydantic import BaseModel, Field

from agents.inference import ChatInferenceService, stage_options
from contracts import (
    BrandContext,
    CoderError,
    FileSet,
    GenerationQuality,
    GenerationResult,
    ParseStage,
    SendEvent,
)
from observability.langfuse_tracer import traced_call
from prompts.coder_prompt import AGENTIC_SYSTEM, FAST_HUMAN, FAST_SYSTEM
from scaling.config import AGENTIC_MAX_TURNS
from security.guardrails import check_tool_allowlist, is_safe_relative_path
from streaming import events
from tools.json_extract import parse_json_object

logger = logging.getLogger(__name__)


# ── Tool schemas ─────────────────────────────────────────────────────────────


class CreateFileArgs(BaseModel):
    path: str = Field(description="Project-relative path, e.g. src/components/Hero.tsx")
    content: str = Field(description="Full file content")


class EditFileArgs(BaseModel):
    path: str = Field(description="Path of the file to edit")
    old_string: str = Field(description="Exact text to find")
    new_string: str = Field(description="Replacement text")


class ReadFileArgs(BaseModel):
    path: str = Field(description="Path of the file to read")


class ListFilesArgs(BaseModel):
    pass


class InstallPackagesArgs(BaseModel):
    packages: list[str] = Field(description="npm package names")


_TOOLS: dict[str, tuple[type[BaseModel], str]] = {
    "create_file": (CreateFileArgs, "Create or overwrite a file with full content."),
    "edit_file": (EditFileArgs, "Replace one exact occurrence of text in an existing file."),
    "read_file": (ReadFileArgs, "Read the current contents of a file."),
    "list_files": (ListFilesArgs, "List every file in the project."),
    "install_packages": (InstallPackagesArgs, "Request npm packages beyond react and react-dom."),
}

TOOL_SCHEMAS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": schema.model_json_schema(),
        },
    }
    for name, (schema, description) in _TOOLS.items()
]


class ProjectWorkspace:
    """In-memory file tree the tool-calling loop edits."""

    def __init__(self, files: FileSet, send: SendEvent):
        self.files: FileSet = dict(files)
        self.packages: list[str] = []
        self._send = send

    async def execute(self, name: str, args: dict[str, Any]) -> str:
        """Run one tool call and return the text handed back to the model."""
        if not check_tool_allowlist(name) or name not in _TOOLS:
            return f"Error: unknown tool {name!r}"

        schema, _ = _TOOLS[name]
        try:
            parsed = schema.model_validate(args)
        except ValueError as e:
            return f"Error: invalid arguments for {name}: {e}"

        path = getattr(parsed, "path", None)
        if path is not None and not is_safe_relative_path(path):
            return f"Error: path {path!r} is outside the project"

        match name:
            case "create_file":
                created = parsed.path not in self.files
                self.files[parsed.path] = parsed.content
                await self._send(events.file_event(parsed.path, parsed.content, created))
                return f"{'Created' if created else 'Overwrote'} {parsed.path}"
            case "edit_file":
                current = self.files.get(parsed.path)
                if current is None:
                    return f"Error: {parsed.path} does not exist"
                if parsed.old_string not in current:
                    return f"Error: text to replace not found in {parsed.path}"
                updated = current.replace(parsed.old_string, parsed.new_string, 1)
                self.files[parsed.path] = updated
                await self._send(events.file_event(parsed.path, updated, created=False))
                return f"Edited {parsed.path}"
            case "read_file":
                return self.files.get(parsed.path, f"Error: {parsed.path} does not exist")
            case "list_files":
                return "\n".join(sorted(self.files)) or "(no files)"
            case "install_packages":
                new = [p for p in parsed.packages if p and p not in self.packages]
                self.packages.extend(new)
                if new:
                    await self._send(events.install_packages(new))
                return f"Queued packages: {', '.join(new) or 'none'}"
            case _:
                raise ValueError(f"Unhandled tool {name!r}")


def _brand_brief(brand: BrandContext) -> str:
    palette = brand.color_palette
    return "\n".join([
        f"Brand: {brand.name}",
        f"Tagline: {brand.tagline}",
        f"Category: {brand.category_name or 'startup'}",
        f"Target audience: {brand.target_audience or 'general users'}",
        f"Colors (use these exact hex values): primary {palette.primary}, secondary "
        f"{palette.secondary}, accent {palette.accent}, background {palette.background}, "
        f"text {palette.text}",
    ])


def _text(message: BaseMessage) -> str:
    return message.content if isinstance(message.content, str) else str(message.content)


class LLMGenerationHandlers:
    """GenerationHandlers implementation over ChatOpenAI."""

    def __init__(self, inference: ChatInferenceService, model: str):
        self.inference = inference
        self.model = model

    async def run_fast(
        self,
        message: str,
        brand_context: BrandContext,
        current_files: FileSet,
        send: SendEvent,
        quality: GenerationQuality,
    ) -> GenerationResult:
        await send(events.status("Writing files in a single pass..."))
        human = FAST_HUMAN.format(
            user_request=message,
            brand_name=brand_context.name,
            tagline=brand_context.tagline,
            palette=brand_context.color_palette.model_dump_json(),
            target_audience=brand_context.target_audience or "general users",
            current_files=json.dumps(current_files) if current_files else "(none)",
        )
        raw = await self.inference.generate_content(
            self.model, f"{FAST_SYSTEM}\n{human}", stage_options("coder", quality)
        )

        payload = parse_json_object(raw)
        if payload is None or not isinstance(payload.get("files"), dict):
            raise CoderError("fast handler response had no files object")

        files = {
            path: content
            for path, content in payload["files"].items()
            if isinstance(content, str) and is_safe_relative_path(path)
        }
        if not files:
            raise CoderError("fast handler returned no usable files")

        summary = payload.get("message")
        return GenerationResult(
            files={**current_files, **files},
            message=summary if isinstance(summary, str) and summary else "Generated project files.",
            parse_stage=ParseStage.DIRECT,
            finish_reason="stop",
        )

    async def run_agentic(
        self,
        message: str,
        brand_context: BrandContext,
        current_files: FileSet,
        send: SendEvent,
        quality: GenerationQuality,
    ) -> GenerationResult:
        workspace = ProjectWorkspace(current_files, send)
        options = stage_options("coder", quality).model_copy(update={"response_format": "text"})
        messages: list[BaseMessage] = [
            SystemMessage(content=f"{AGENTIC_SYSTEM}\n{_brand_brief(brand_context)}"),
            HumanMessage(content=message),
        ]

        summary = ""
        finish_reason = "max_turns"
        for turn in range(1, AGENTIC_MAX_TURNS + 1):
            await send(events.status(f"Agentic turn {turn}/{AGENTIC_MAX_TURNS}", turns=turn))
            response = await traced_call(
                lambda name: ChatInferenceService.build_llm(name, options).bind_tools(TOOL_SCHEMAS),
                messages,
                agent_name="agentic_coder",
                model=self.model,
                job_id=self.inference.job_id,
                user_id=self.inference.user_id,
            )
            messages.append(response)

            if not response.tool_calls:
                summary = _text(response)
                finish_reason = "stop"
                break

            for call in response.tool_calls:
                await send(events.tool_call(call["name"], call["args"]))
                result = await workspace.execute(call["name"], call["args"])
                messages.append(ToolMessage(content=result, tool_call_id=call["id"]))

        if not workspace.files:
            raise CoderError("agentic handler produced no files")
        if finish_reason == "max_turns":
            logger.warning(f"[handlers] agentic loop hit the {AGENTIC_MAX_TURNS}-turn cap")

        return GenerationResult(
            files=workspace.files,
            message=summary or f"Built {len(workspace.files)} files.",
            parse_stage=ParseStage.TOOL_CALLING,
            finish_reason=finish_reason,
        )
