"""Entry point for the brand site builder."""

import argparse
import asyncio
import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from agents.handlers import LLMGenerationHandlers
from agents.inference import ChatInferenceService
from contracts import (
    BrandContext,
    BuildRequest,
    EventType,
    GenerationQuality,
    GenerationResult,
    GenerationStrategy,
    StreamEvent,
)
from observability.metrics import start_metrics_server
from persistence.job_store import create_job, list_jobs, update_job
from pipeline import stream_builder
from scaling.model_selector import get_model
from streaming.consumer import StreamConsumer
from tools.file_writer import OUTPUT_DIR, write_files

DEFAULT_REQUEST = "Build a landing page that converts visitors into demo requests"

DEFAULT_BRAND = {
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
            "keywords": ["dashboards", "forecasting"],
        },
    },
}


def _load_brand(path: str | None) -> BrandContext:
    if path is None:
        return BrandContext.model_validate(DEFAULT_BRAND)
    return BrandContext.model_validate_json(Path(path).read_text())


def _print_event(event: StreamEvent) -> None:
    data = event.data
    match event.type:
        case EventType.STATUS:
            print(f"  … {data.get('status', '')}")
        case EventType.FILE_CREATED | EventType.FILE_EDITED:
            verb = "+" if event.type == EventType.FILE_CREATED else "~"
            print(f"  {verb} {data['path']} ({data.get('size', 0):,} chars)")
        case EventType.TOOL_CALL:
            print(f"  > {data.get('name')}")
        case EventType.INSTALL_PACKAGES:
            print(f"  npm: {', '.join(data.get('packages', []))}")
        case EventType.MESSAGE:
            print(f"\n  {data.get('text', '')}\n")
        case EventType.ERROR:
            print(f"  ERROR: {data.get('message')}")
        case EventType.DONE:
            pass


def _print_job_history(session_id: str | None = None) -> None:
    """Print recent job history as a table."""
    jobs = list_jobs(session_id=session_id)
    if not jobs:
        print("No jobs found.")
        return

    print(f"\n{'='*96}")
    print(
        f"  {'Job ID':<10} {'Strategy':<14} {'Quality':<9} {'Status':<10} "
        f"{'Files':>6} {'Repairs':>8} {'Fallback':<18} {'Created':<16}"
    )
    print(f"  {'-'*92}")
    for job in jobs:
        created = job.created_at.strftime("%Y-%m-%d %H:%M") if job.created_at else "—"
        print(
            f"  {job.id:<10} {job.strategy:<14} {job.quality:<9} {job.status:<10} "
            f"{job.file_count:>6} {job.repair_attempts:>8} {job.fallback_path or '—':<18} {created:<16}"
        )
    print(f"{'='*96}")
    print(f"  {len(jobs)} job(s) shown\n")


async def run_interactive(request: BuildRequest, session_id: str, output_dir: Path) -> int:
    """Run one generation, printing progress as it streams."""
    job_id = str(uuid.uuid4())[:8]
    model = get_model("pipeline")

    print(f"\n{'='*60}")
    print("Brand Site Builder")
    print(f"{'='*60}")
    print(f"Request:  {request.message}")
    print(f"Brand:    {request.brand_context.name}")
    print(f"Strategy: {request.strategy.value}  |  Quality: {request.quality.value}")
    print(f"Job ID:   {job_id}  |  Model: {model}\n")

    create_job(job_id, request, session_id=session_id)

    inference = ChatInferenceService(job_id=job_id, user_id=session_id)
    handlers = LLMGenerationHandlers(inference, model)
    consumer = StreamConsumer()
    consumer.begin()
    async for event in stream_builder(request, inference, handlers, model=model, job_id=job_id):
        consumer.apply(event)
        _print_event(event)
    state = consumer.state

    if state.error:
        update_job(job_id, status="failed", error=state.error)
        print(f"\nGeneration failed: {state.error}")
        return 1
    if state.cancelled or state.result is None:
        update_job(job_id, status="cancelled")
        print("\nGeneration cancelled.")
        return 1

    result = GenerationResult.model_validate(state.result)
    update_job(job_id, result)

    print(f"\n{'='*60}")
    print(f"Completed in {(result.generation_duration_ms or 0) / 1000:.1f}s")
    print(f"Files:          {len(result.files)}")
    print(f"Repairs:        {result.artifacts.repair_attempts}")
    print(f"Fallback path:  {result.fallback_path.value}")
    print(f"Parse stage:    {result.parse_stage.value}")
    if state.packages:
        print(f"Packages:       {', '.join(state.packages)}")
    print(f"{'='*60}\n")

    write_files(result, output_dir)
    return 0


def main():
    parser = argparse.ArgumentParser(description="Brand Site Builder")
    parser.add_argument("request", nargs="*", default=[], help="What to build")
    parser.add_argument("--brand", help="Path to a brand context JSON file")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in GenerationStrategy],
        default=GenerationStrategy.FAST_JSON.value,
    )
    parser.add_argument(
        "--quality",
        choices=[q.value for q in GenerationQuality],
        default=GenerationQuality.BALANCED.value,
    )
    parser.add_argument("--template-id", default=None, help="Template for the template_fill strategy")
    parser.add_argument("--session-id", default="anonymous", help="Session the job is recorded under")
    parser.add_argument("--output", default=str(OUTPUT_DIR), help="Directory to write files into")
    parser.add_argument("--list-jobs", action="store_true", help="List recent job history")
    parser.add_argument(
        "--metrics-port", type=int, default=int(os.getenv("METRICS_PORT", "9090"))
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_jobs:
        _print_job_history(session_id=args.session_id if args.session_id != "anonymous" else None)
        return

    # Start Prometheus metrics server
    start_metrics_server(args.metrics_port)

    request = BuildRequest(
        message=" ".join(args.request) if args.request else DEFAULT_REQUEST,
        brand_context=_load_brand(args.brand),
        strategy=GenerationStrategy(args.strategy),
        quality=GenerationQuality(args.quality),
        template_id=args.template_id,
    )
    raise SystemExit(asyncio.run(run_interactive(request, args.session_id, Path(args.output))))


if __name__ == "__main__":
    main()
