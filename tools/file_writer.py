"""Writes a generated file set to the output/ directory."""

from pathlib import Path

from contracts import GenerationResult
from security.guardrails import human_review_gate, require_human_review, sandbox_file_path

OUTPUT_DIR = Path(__file__).parent.parent / "output"


def write_files(result: GenerationResult, output_dir: Path = OUTPUT_DIR) -> list[Path]:
    """Write every generated file under *output_dir* and return the written paths.

    Paths escaping *output_dir* raise ValueError before anything is written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    # Security: scan for risky patterns before writing
    warnings = human_review_gate(result.files)
    if warnings:
        for w in warnings:
            print(w)
        if require_human_review():
            print("\n[security] REQUIRE_HUMAN_REVIEW=true — pausing before write.")
            print(f"  {len(warnings)} warning(s) found. Review above, then press Enter to continue.")
            input("  Press Enter to proceed or Ctrl+C to abort: ")

    targets = {path: sandbox_file_path(output_dir, path) for path in result.files}

    written: list[Path] = []
    for path, dest in targets.items():
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(result.files[path])
        written.append(dest)

    print(f"\n[file_writer] {len(written)} file(s) written to {output_dir.resolve()}")
    if warnings:
        print(f"  Security warnings: {len(warnings)}")
    return written
