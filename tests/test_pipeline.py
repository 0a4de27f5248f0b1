import asyncio

from contracts import (
    EventType,
    FallbackPath,
    GenerationQuality,
    GenerationResult,
    GenerationStrategy,
    InferenceDepth,
    ParseStage,
)
from pipeline import run_builder_pipeline, stream_builder
from streaming import events
from tools.site_template import TEMPLATE_PATHS
from conftest import FakeHandlers, FakeInference, collect, make_request, valid_files


def _without_css_variables(brand):
    files = valid_files(brand)
    p = brand.color_palette
    files["src/styles.css"] = (
        f"body {{ color: {p.text}; background: {p.background}; }}\n"
        f".a {{ color: {p.primary}; }} .b {{ color: {p.secondary}; }} .c {{ color: {p.accent}; }}\n"
    )
    return files


def _without_icons(brand):
    files = valid_files(brand)
    files["src/App.tsx"] = 'export default function App() { return <main id="stats" />; }\n'
    return files


async def test_valid_fast_generation_skips_repair(brand, recorder):
    handlers = FakeHandlers(fast_files=valid_files(brand))
    inference = FakeInference()

    result = await run_builder_pipeline(make_request(brand), inference, handlers, recorder)

    assert result.files == valid_files(brand)
    assert result.fallback_path == FallbackPath.NONE
    assert result.parse_stage == ParseStage.DIRECT
    assert result.artifacts.repair_attempts == 0
    assert result.artifacts.strategy_used == GenerationStrategy.FAST_JSON
    assert result.generation_duration_ms is not None
    assert recorder.stages() == ["coding", "validating", "finalizing"]
    assert inference.calls == []
    assert handlers.agentic_calls == []
    assert len(recorder.of_type("file_created")) == 3


async def test_single_repair_pass_that_validates_is_accepted(brand, recorder):
    handlers = FakeHandlers(fast_files=_without_css_variables(brand))
    inference = FakeInference()

    result = await run_builder_pipeline(make_request(brand), inference, handlers, recorder)

    assert result.parse_stage == ParseStage.REPAIRED
    assert result.fallback_path == FallbackPath.NONE
    assert result.artifacts.repair_attempts == 1
    assert result.message == "Applied local semantic repair fallback."
    assert result.files["src/styles.css"].startswith(":root {")
    assert recorder.stages() == ["coding", "validating", "repairing", "revalidating", "finalizing"]
    assert [e.data["path"] for e in recorder.of_type("file_edited")] == ["src/styles.css"]
    assert handlers.agentic_calls == []


async def test_failed_repair_routes_to_agentic_with_empty_seed(brand, recorder):
    agentic = valid_files(brand)
    agentic["src/components/Stats.tsx"] = "export const Stats = () => null;"
    handlers = FakeHandlers(fast_files=_without_icons(brand), agentic_files=agentic)
    inference = FakeInference()
    request = make_request(brand, current_files={"src/old.tsx": "legacy"})

    result = await run_builder_pipeline(request, inference, handlers, recorder)

    assert len(inference.calls_for("repairer")) == 1
    assert recorder.stages().count("validating") == 1
    assert recorder.stages().count("revalidating") == 1
    assert handlers.agentic_calls == [{"message": request.message, "current_files": {}}]
    assert result.files == agentic
    assert result.fallback_path == FallbackPath.REPAIRER_FALLBACK
    assert result.parse_stage == ParseStage.REPAIRER_FALLBACK
    assert result.artifacts.repair_attempts == 1
    assert recorder.stages()[-2:] == ["agentic_fallback", "finalizing"]


async def test_agentic_result_is_accepted_even_when_invalid(brand, recorder):
    handlers = FakeHandlers(fast_files=_without_icons(brand), agentic_files={"src/App.tsx": "<div />"})

    result = await run_builder_pipeline(make_request(brand), FakeInference(), handlers, recorder)

    assert result.files == {"src/App.tsx": "<div />"}
    assert result.fallback_path == FallbackPath.REPAIRER_FALLBACK


async def test_fast_handler_failure_falls_back_to_agentic(brand, recorder):
    handlers = FakeHandlers(fast_error=RuntimeError("model returned prose"), agentic_files=valid_files(brand))
    request = make_request(brand, current_files={"src/App.tsx": "old"})

    result = await run_builder_pipeline(request, FakeInference(), handlers, recorder)

    assert handlers.agentic_calls[0]["current_files"] == {}
    assert result.fallback_path == FallbackPath.AGENTIC_FALLBACK
    assert result.parse_stage == ParseStage.AGENTIC_FALLBACK
    assert result.files == valid_files(brand)
    assert "agentic_fallback" in recorder.stages()
    assert recorder.of_type("tool_call")


async def test_empty_fast_result_counts_as_coder_failure(brand, recorder):
    handlers = FakeHandlers(fast_files={}, agentic_files=valid_files(brand))

    result = await run_builder_pipeline(make_request(brand), FakeInference(), handlers, recorder)

    assert len(handlers.agentic_calls) == 1
    assert result.fallback_path == FallbackPath.AGENTIC_FALLBACK


async def test_plan_driven_survives_inference_outage(brand, recorder):
    handlers = FakeHandlers(fast_files=valid_files(brand))
    request = make_request(brand, strategy=GenerationStrategy.PLAN_DRIVEN)

    result = await run_builder_pipeline(request, FakeInference(), handlers, recorder)

    plan = result.artifacts.master_plan
    assert plan is not None and plan.objective and plan.sections and plan.component_plan
    assert result.artifacts.design_doc
    assert result.artifacts.design_tokens.colors[:5] == brand.color_palette.as_list()
    assert recorder.stages() == ["planning", "designing", "coding", "validating", "finalizing"]
    prompt = handlers.fast_calls[0]["message"]
    assert prompt.startswith(request.message)
    assert "MASTER PLAN" in prompt and "DESIGN SPEC" in prompt


async def test_fast_json_passes_raw_message(brand, recorder):
    handlers = FakeHandlers(fast_files=valid_files(brand))
    request = make_request(brand)

    await run_builder_pipeline(request, FakeInference(), handlers, recorder)

    assert handlers.fast_calls[0]["message"] == request.message


async def test_quality_only_changes_budgets_and_depth(brand, recorder):
    budgets = {}
    for quality in (GenerationQuality.SPEED, GenerationQuality.HIGH):
        inference = FakeInference()
        handlers = FakeHandlers(fast_files=valid_files(brand))
        request = make_request(brand, strategy=GenerationStrategy.PLAN_DRIVEN, quality=quality)

        result = await run_builder_pipeline(request, inference, handlers, recorder)

        assert result.fallback_path == FallbackPath.NONE
        [(_, _, options)] = inference.calls_for("planner")
        budgets[quality] = (options.max_output_tokens, options.inference_depth)

    assert budgets[GenerationQuality.SPEED] == (2048, InferenceDepth.MINIMAL)
    assert budgets[GenerationQuality.HIGH] == (8192, InferenceDepth.MEDIUM)


async def test_template_fill_is_never_validated_or_repaired(brand, recorder):
    handlers = FakeHandlers()
    request = make_request(brand, strategy=GenerationStrategy.TEMPLATE_FILL)

    result = await run_builder_pipeline(request, FakeInference(), handlers, recorder)

    assert tuple(result.files) == TEMPLATE_PATHS
    assert result.parse_stage == ParseStage.TOOL_CALLING
    assert result.artifacts.strategy_used == GenerationStrategy.TEMPLATE_FILL
    assert result.artifacts.design_tokens.fonts == ["Manrope", "Space Grotesk"]
    assert recorder.stages() == ["planning", "designing", "coding", "finalizing"]
    assert handlers.fast_calls == [] and handlers.agentic_calls == []
    assert recorder.of_type("message")[0].data["text"].startswith("Created a deterministic")


async def test_seed_paths_are_reported_as_edits(brand, recorder):
    handlers = FakeHandlers(fast_files=valid_files(brand))
    request = make_request(brand, current_files={"src/App.tsx": "old app"})

    await run_builder_pipeline(request, FakeInference(), handlers, recorder)

    assert [e.data["path"] for e in recorder.of_type("file_edited")] == ["src/App.tsx"]
    assert {e.data["path"] for e in recorder.of_type("file_created")} == {"src/index.tsx", "src/styles.css"}


async def test_handler_streamed_files_are_not_sent_twice(brand, recorder):
    handlers = FakeHandlers(fast_files=valid_files(brand), stream_fast_files=True)

    await run_builder_pipeline(make_request(brand), FakeInference(), handlers, recorder)

    paths = [e.data["path"] for e in recorder.events if e.type in (EventType.FILE_CREATED, EventType.FILE_EDITED)]
    assert sorted(paths) == sorted(valid_files(brand))


# ── Caller boundary ──────────────────────────────────────────────────────────


async def test_stream_closes_with_one_done_frame(brand):
    handlers = FakeHandlers(fast_files=valid_files(brand))

    frames = await collect(stream_builder(make_request(brand), FakeInference(), handlers))

    assert frames[0].type == EventType.STATUS
    assert frames[0].data["status"] == "Starting generation..."
    assert [f.type for f in frames].count(EventType.DONE) == 1
    assert frames[-1].type == EventType.DONE
    assert frames[-1].data["success"] is True
    result = GenerationResult.model_validate(frames[-1].data["result"])
    assert result.files == valid_files(brand)
    assert "generationDurationMs" in frames[-1].data["result"]


async def test_unhandled_failure_becomes_a_single_error_frame(brand):
    class BrokenHandlers(FakeHandlers):
        async def run_agentic(self, message, brand_context, current_files, send, quality):
            raise RuntimeError("sandbox unavailable")

    handlers = BrokenHandlers(fast_error=RuntimeError("bad json"))

    frames = await collect(stream_builder(make_request(brand), FakeInference(), handlers))

    terminal = [f for f in frames if f.is_terminal]
    assert terminal == [frames[-1]]
    assert frames[-1].type == EventType.ERROR
    assert "sandbox unavailable" in frames[-1].data["message"]


class BlockingHandlers(FakeHandlers):
    def __init__(self):
        super().__init__()
        self.started = asyncio.Event()
        self.interrupted = False

    async def run_fast(self, message, brand_context, current_files, send, quality):
        await send(events.file_event("src/partial.tsx", "partial", created=True))
        self.started.set()
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.interrupted = True
            raise


async def test_abort_cancels_in_flight_stage(brand):
    handlers = BlockingHandlers()
    abort = asyncio.Event()

    consumer = asyncio.create_task(
        collect(stream_builder(make_request(brand), FakeInference(), handlers, abort=abort))
    )
    await asyncio.wait_for(handlers.started.wait(), 5)
    abort.set()
    frames = await asyncio.wait_for(consumer, 5)

    assert handlers.interrupted
    assert any(f.type == EventType.FILE_CREATED for f in frames)
    assert frames[-2].type == EventType.STATUS
    assert frames[-2].data["stage"] == "cancelled"
    assert frames[-1].type == EventType.DONE
    assert frames[-1].data == {"success": False, "cancelled": True, "job_id": frames[-1].data["job_id"]}
    assert handlers.agentic_calls == []


async def test_abort_before_start_runs_no_stage(brand):
    handlers = FakeHandlers(fast_files=valid_files(brand))
    abort = asyncio.Event()
    abort.set()

    frames = await collect(stream_builder(make_request(brand), FakeInference(), handlers, abort=abort))

    assert handlers.fast_calls == []
    assert frames[-1].data["cancelled"] is True
