# podpicker/cli/youtube.py
"""
CLI entrypoint for YouTube transcript extraction.

Thin adapter, no business logic.
Responsibilities:
- Load .env and build PipelineConfig from the environment
- Invoke get_transcript / check_transcript_availability
- Print or write the wire JSON
- Map failures to exit codes (2 invalid input, 1 everything else)

Structured JSON logs come from the core pipeline.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError

from podpicker.transcripts.assembler import check_transcript_availability, get_transcript
from podpicker.transcripts.config import PipelineConfig
from podpicker.transcripts.errors import InvalidInput, NoTranscriptAvailable


app = typer.Typer(
    name="podpicker",
    help="Podpicker: YouTube transcript extraction",
    no_args_is_help=True,
)


def _load_config() -> PipelineConfig:
    load_dotenv()
    try:
        return PipelineConfig.from_env()
    except ValidationError as exc:
        typer.echo(typer.style("✗ Invalid configuration", fg=typer.colors.RED, bold=True), err=True)
        typer.echo(str(exc), err=True)
        sys.exit(1)


@app.command()
def transcript(
    url: str = typer.Argument(..., help="YouTube URL or 11-character video ID"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="Write the transcript JSON to this file"),
) -> None:
    """
    Fetch a transcript and print it as JSON.
    """
    config = _load_config()

    try:
        result = get_transcript(url, config)
    except InvalidInput as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        sys.exit(2)
    except NoTranscriptAvailable as exc:
        typer.echo(typer.style("✗ No transcript available", fg=typer.colors.RED, bold=True), err=True)
        for failure in exc.failures:
            typer.echo(f"  {failure.source_strategy}: {failure.kind.value} ({failure.message})", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        typer.echo("\nInterrupted by user.", err=True)
        sys.exit(1)
    except Exception as exc:  # pylint: disable=broad-except
        typer.echo(typer.style("✗ Extraction failed", fg=typer.colors.RED, bold=True), err=True)
        typer.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    payload = json.dumps(result.to_wire(), ensure_ascii=False, indent=2)
    if out is None:
        typer.echo(payload)
        return

    output_path = Path(out).expanduser()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")
    typer.echo(
        typer.style(f"✓ {len(result.segments)} segments written to {output_path}", fg=typer.colors.GREEN),
        err=True,
    )


@app.command()
def check(
    url: str = typer.Argument(..., help="YouTube URL or 11-character video ID"),
) -> None:
    """
    Report whether any strategy can produce a transcript.
    """
    config = _load_config()

    try:
        has_transcript, message, count = check_transcript_availability(url, config)
    except InvalidInput as exc:
        typer.echo(f"Invalid input: {exc}", err=True)
        sys.exit(2)
    except Exception as exc:  # pylint: disable=broad-except
        typer.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    typer.echo(json.dumps({"hasTranscript": has_transcript, "message": message, "transcriptCount": count}))
    if not has_transcript:
        sys.exit(1)


if __name__ == "__main__":
    app()
