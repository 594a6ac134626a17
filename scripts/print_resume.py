#!/usr/bin/env python3
"""
Resume Printing CLI

Prints resume JSON documents to PDF or JPEG preview through the remote
rendering engine configured in .env.

Commands:
    print    - Print a resume to PDF (A4, Letter, or continuous web output)
    preview  - Capture a JPEG preview of a resume
    version  - Show the rendering engine version (health check)

Examples:\n

    print_resume.py print data/resume.json                    # Continuous web PDF

    print_resume.py print data/resume.json --format A4        # Printable A4 PDF

    print_resume.py preview data/resume.json                  # JPEG preview

    print_resume.py version                                   # Engine health check
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from resume_printer.contexts.printing.config import PrinterConfig
from resume_printer.contexts.printing.exceptions import (
    ConfigurationError,
    InvalidResumeRequestError,
    PrinterError,
    ResumePrinterError,
)
from resume_printer.contexts.printing.logger import setup_printing_logger
from resume_printer.contexts.printing.printer import ResumePrinter
from resume_printer.contexts.printing.request import RenderRequest
from resume_printer.contexts.storage.publisher import LocalArtifactPublisher
from resume_printer.utils.pdf_processing import page_count
from resume_printer.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
ARTIFACTS_PATH = Path(os.getenv("ARTIFACTS_PATH", "outs/artifacts"))
ARTIFACTS_BASE_URL = os.getenv("ARTIFACTS_BASE_URL", ARTIFACTS_PATH.resolve().as_uri())


app = typer.Typer(
    help="Print resumes to PDF and JPEG previews through a remote Chromium instance",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def build_printer(kind: str, verbose: bool) -> ResumePrinter:
    """Load configuration, set up logging and build a printer with a local artifact store."""
    try:
        config = PrinterConfig.from_env()
    except ConfigurationError as e:
        typer.secho(f"Configuration error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    setup_printing_logger(LOGS_PATH / f"{kind}_{now()}", config=config, verbose=verbose)
    publisher = LocalArtifactPublisher(ARTIFACTS_PATH, ARTIFACTS_BASE_URL)
    return ResumePrinter(config, publisher)


def load_request(resume_file: Path) -> RenderRequest:
    """Read a resume JSON file ({id, userId, title, data})."""
    try:
        return RenderRequest.from_dict(json.loads(resume_file.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, InvalidResumeRequestError) as e:
        typer.secho(f"Invalid resume file {resume_file}: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def local_path(url: str) -> Optional[Path]:
    """Path of a published object when it lives in the local artifact directory."""
    prefix = ARTIFACTS_BASE_URL.rstrip("/") + "/"
    if url.startswith(prefix):
        return ARTIFACTS_PATH / url[len(prefix):]
    return None


@app.command("print")
def print_command(
    resume_file: Annotated[
        Path,
        typer.Argument(help="Resume JSON file", exists=True, dir_okay=False),
    ],
    format: Annotated[
        Optional[str],
        typer.Option(
            "--format",
            "-f",
            help="Page format (A4 or Letter). Omit for continuous web output",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output on the console"),
    ] = False,
):
    """
    Print a resume to PDF and publish it to the local artifact store.

    Examples:\n

        $ print_resume.py print data/resume.json --format Letter
    """
    request = load_request(resume_file)
    printer = build_printer("print", verbose)

    typer.secho(f"\nPrinting: {request.title} (#{request.id})", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Format: {format or 'web'}")
    typer.echo(f"Pages: {request.page_count}")
    typer.echo("")

    try:
        url = asyncio.run(printer.print_resume(request, format))
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except ResumePrinterError as e:
        typer.secho(f"✗ Printing failed [{e.code}]", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {e.message}\n", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho("✓ Printing succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  URL: {url}")
    path = local_path(url)
    if path is not None and path.exists():
        typer.echo(f"  PDF pages: {page_count(path)}")
    typer.echo("")


@app.command("preview")
def preview_command(
    resume_file: Annotated[
        Path,
        typer.Argument(help="Resume JSON file", exists=True, dir_okay=False),
    ],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output on the console"),
    ] = False,
):
    """Capture a JPEG preview of a resume and publish it to the local artifact store."""
    request = load_request(resume_file)
    printer = build_printer("preview", verbose)

    typer.secho(f"\nPreviewing: {request.title} (#{request.id})", fg=typer.colors.BLUE, bold=True)

    try:
        url = asyncio.run(printer.print_preview(request))
    except ResumePrinterError as e:
        typer.secho(f"✗ Preview failed [{e.code}]", fg=typer.colors.RED, bold=True)
        typer.secho(f"  {e.message}\n", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho("✓ Preview captured", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  URL: {url}\n")


@app.command("version")
def version_command():
    """Connect to the rendering engine and print its version."""
    printer = build_printer("version", verbose=False)

    try:
        version = asyncio.run(printer.get_version())
    except PrinterError as e:
        typer.secho(f"✗ Rendering engine unavailable [{e.code}]: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(version)


if __name__ == "__main__":
    app()
