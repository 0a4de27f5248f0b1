import asyncio

import pytest

from contracts import (
    BrandContext,
    BuildRequest,
    FileSet,
    GenerationResult,
    InferenceOptions,
    StreamEvent,
)
from streaming import events

BRAND_PAYLOAD = {
    "name": "Northwind Analytics",
    "tagline": "Decisions backed by data, not guesses.",
    "colorPalette": {
        "primary": "#2563EB",
        "secondary": "#1E40AF",
        "accent": "#F59E0B",
        "background": "#FFFFFF",
        "text": "#0F172A",
    },
    "validation": {
        "category": {
            "primary": "analytics",
            "targetAudience": "operations leaders",
            "keywords": ["dashboards"],
        },
    },
}


@pytest.fixture
def brand() -> BrandContext:
    return BrandContext.model_validate(BRAND_PAYLOAD)


def valid_files(brand: BrandContext) -> FileSet:
    """Smallest file set that passes every semantic check."""
    p = brand.color_palette
    return {
        "src/index.tsx": 'import App from "./App";\nimport "./styles.css";\n',
        "src/App.tsx": (
            'import { Zap } from "lucide-react";\n'
            "export default function App() {\n"
            '  return <main><section id="stats"><Zap /></section></main>;\n'
            "}\n"
        ),
        "src/styles.css": (
            ":root {\n"
            f"  --color-primary: {p.primary};\n"
            f"  --color-secondary: {p.secondary};\n"
            f"  --color-accent: {p.accent};\n"
            f"  --color-background: {p.background};\n"
            f"  --color-text: {p.text};\n"
            "}\n"
        ),
    }


class FakeInference:
    """Scripted inference service. Stages without a scripted reply behave as an outage."""

    def __init__(self, responses: dict[str, str | Exception] | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[str, str, InferenceOptions]] = []

    async def generate_content(self, model: str, prompt: str, options: InferenceOptions) -> str:
        self.calls.append((options.stage, prompt, options))
        reply = self.responses.get(options.stage, ConnectionError("inference service unavailable"))
        if isinstance(reply, Exception):
            raise reply
        return reply

    def calls_for(self, stage: str) -> list[tuple[str, str, InferenceOptions]]:
        return [call for call in self.calls if call[0] == stage]


class FakeHandlers:
    """Scripted generation handlers that record how they were called."""

    def __init__(
        self,
        fast_files: FileSet | None = None,
        fast_error: Exception | None = None,
        agentic_files: FileSet | None = None,
        stream_fast_files: bool = False,
    ):
        self.fast_files = fast_files or {}
        self.fast_error = fast_error
        self.agentic_files = agentic_files or {}
        self.stream_fast_files = stream_fast_files
        self.fast_calls: list[dict] = []
        self.agentic_calls: list[dict] = []

    async def run_fast(self, message, brand_context, current_files, send, quality):
        self.fast_calls.append({"message": message, "current_files": dict(current_files)})
        if self.fast_error is not None:
            raise self.fast_error
        if self.stream_fast_files:
            for path, content in self.fast_files.items():
                await send(events.file_event(path, content, created=True))
        return GenerationResult(files=dict(self.fast_files), message="fast build")

    async def run_agentic(self, message, brand_context, current_files, send, quality):
        self.agentic_calls.append({"message": message, "current_files": dict(current_files)})
        await send(events.tool_call("create_file", {"path": "src/App.tsx"}))
        return GenerationResult(files=dict(self.agentic_files), message="agentic build")


class Recorder:
    def __init__(self):
        self.events: list[StreamEvent] = []

    async def __call__(self, event: StreamEvent) -> None:
        self.events.append(event)

    def of_type(self, kind: str) -> list[StreamEvent]:
        return [e for e in self.events if e.type.value == kind]

    def stages(self) -> list[str]:
        return [e.data["stage"] for e in self.events if "stage" in e.data]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


def make_request(brand: BrandContext, **overrides) -> BuildRequest:
    return BuildRequest(message="Build a landing page for our analytics product", brand_context=brand, **overrides)


async def collect(stream) -> list[StreamEvent]:
    return [event async for event in stream]


async def wait_for_flag(flag: asyncio.Event, timeout: float = 5) -> None:
    await asyncio.wait_for(flag.wait(), timeout)
