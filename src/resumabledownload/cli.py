"""CLI implementation for resumabledownload."""

import asyncio
import json
import logging
import re
import sys
from pathlib import Path
from typing import Optional

import typer

from . import open_stepper, open_stepper_async
from .core.cursor import CHUNK_SIZE
from .core.model import ResumableDownloadError, StepReport
from .core.util import report_asdict
from .io import close_global_client, DEFAULT_TIMEOUT

app = typer.Typer(add_completion=False, help="Walk a remote file with HTTP range requests.")

DEFAULT_STEPS = "start,next,next,prev,prev"
_SIMPLE_STEPS = ("start", "next", "prev")
_RESUME_STEP = re.compile(r"^resume:(-?\d+)-(-?\d+)$")

Step = tuple[str, tuple[int, ...]]


def parse_steps(text: str) -> list[Step]:
    """Parse ``start,next,prev,resume:S-E`` into (operation, args) pairs."""
    steps: list[Step] = []
    for token in (t.strip() for t in text.split(",")):
        if not token:
            continue
        if token in _SIMPLE_STEPS:
            steps.append((token, ()))
            continue
        match = _RESUME_STEP.match(token)
        if match is None:
            raise typer.BadParameter(f"Unknown step {token!r}", param_hint="--steps")
        # negative bounds pass through; the stepper rejects them
        steps.append(("resume", (int(match.group(1)), int(match.group(2)))))
    return steps


def _label(step: Step) -> str:
    name, args = step
    return f"{name}:{args[0]}-{args[1]}" if args else name


def _success(label: str, stepper) -> StepReport:
    response = stepper.current()
    body = response.content if response is not None else b""
    data = {
        "range": stepper.range_header,
        "status": response.status_code if response is not None else None,
        "content_range": response.headers.get("Content-Range") if response is not None else None,
        "last": stepper.is_last_partial_request(),
    }
    return StepReport(step=label, success=True, data=data, error=None, bytes_fetched=len(body))


def _failure(label: str, error: Exception) -> StepReport:
    return StepReport(step=label, success=False, data=None, error=str(error), bytes_fetched=0)


def run_steps(stepper, steps: list[Step]) -> list[StepReport]:
    """Drive a DownloadStepper through ``steps``, reading each response once."""
    reports = []
    for step in steps:
        name, args = step
        try:
            getattr(stepper, name)(*args)
        except ResumableDownloadError as e:
            reports.append(_failure(_label(step), e))
            continue
        reports.append(_success(_label(step), stepper))
    return reports


async def run_steps_async(stepper, steps: list[Step]) -> list[StepReport]:
    """Drive an AsyncDownloadStepper through ``steps``."""
    reports = []
    for step in steps:
        name, args = step
        try:
            await getattr(stepper, name)(*args)
        except ResumableDownloadError as e:
            reports.append(_failure(_label(step), e))
            continue
        reports.append(_success(_label(step), stepper))
    return reports


def _walk_sync(url: str, chunk_size: int, timeout: float, steps: list[Step]) -> Optional[list[StepReport]]:
    stepper = open_stepper(url, chunk_size=chunk_size, timeout=timeout)
    if not stepper.server_supports_partial_requests():
        return None
    return run_steps(stepper, steps)


async def _walk_async(url: str, chunk_size: int, timeout: float, steps: list[Step]) -> Optional[list[StepReport]]:
    try:
        stepper = await open_stepper_async(url, chunk_size=chunk_size, timeout=timeout)
        if not await stepper.server_supports_partial_requests():
            return None
        return await run_steps_async(stepper, steps)
    finally:
        await close_global_client()


@app.command()
def main(
    url: str = typer.Argument(..., help="URL of the resource to walk"),
    chunk_size: int = typer.Option(CHUNK_SIZE, "--chunk-size", min=1, help="Bytes requested per step"),
    steps: str = typer.Option(DEFAULT_STEPS, "--steps", help="Comma-separated steps: start, next, prev, resume:S-E"),
    timeout: float = typer.Option(DEFAULT_TIMEOUT, "--timeout", min=0.0, help="Per-request timeout in seconds"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    use_async: bool = typer.Option(False, "--async", help="Use the asyncio transport"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log every request at debug level"),
):
    """Probe URL for range support, then run the requested steps and report each response."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sel_fields = set(fields.split(",")) if fields else None
    plan = parse_steps(steps)
    if not plan:
        typer.echo("No steps given.", err=True)
        raise typer.Exit(code=1)

    try:
        if use_async:
            reports = asyncio.run(_walk_async(url, chunk_size, timeout, plan))
        else:
            reports = _walk_sync(url, chunk_size, timeout, plan)
    except (ResumableDownloadError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if reports is None:
        typer.echo(f"Server doesn't support partial requests for {url}", err=True)
        raise typer.Exit(code=1)

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        if len(reports) == 1 and not jsonl:
            json.dump(report_asdict(reports[0], fields=sel_fields), sink, indent=2)
            sink.write("\n")
        else:
            for rep in reports:
                sink.write(json.dumps(report_asdict(rep, fields=sel_fields)))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in reports):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
