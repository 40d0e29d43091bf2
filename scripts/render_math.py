#!/usr/bin/env python3
"""
Math Rendering CLI

Scans text for math delimiters and renders math in HTML documents to MathML.

Commands:
    scan   - Print the plain-text and math segments found in a text or file
    render - Render every math expression in an HTML file

Examples:
    # Inspect how a string is split
    python scripts/render_math.py scan 'Let $x^2$ be (3) or (\\alpha)'

    # Scan a text file without heuristic brackets
    python scripts/render_math.py scan --file notes.txt --no-heuristic

    # Render an HTML page
    python scripts/render_math.py render page.html -o page.rendered.html

    # Render with a config override
    python scripts/render_math.py render page.html -s normalizer.paired_delimiters=bare
"""

import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from mathscan.contexts.document import MathProcessor
from mathscan.contexts.document.logger import setup_document_logger
from mathscan.contexts.scanning import Math, MathHeuristic, find_math_segments
from mathscan.contexts.scanning.logger import setup_scanning_logger
from mathscan.utils.config import ConfigError, load_config

load_dotenv()
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", "."))

app = typer.Typer(
    help="Scan text for math delimiters and render math in HTML",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def display_path(path: Path) -> str:
    """Return path relative to PROJECT_ROOT for cleaner display."""
    try:
        return str(path.resolve().relative_to(PROJECT_ROOT.resolve()))
    except ValueError:
        return str(path)


def _load_config_or_exit(config_path: Optional[Path], overrides: Optional[List[str]]):
    try:
        return load_config(config_path=config_path, overrides=overrides)
    except (ConfigError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


@app.command("scan")
def scan_command(
    text: Annotated[
        Optional[str],
        typer.Argument(help="Text to scan (omit when using --file)"),
    ] = None,
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Read the text to scan from a file"),
    ] = None,
    no_heuristic: Annotated[
        bool,
        typer.Option("--no-heuristic", help="Do not treat bare [...] / (...) as math"),
    ] = False,
    log: Annotated[
        bool,
        typer.Option("--log", help="Write a scan log under LOGS_PATH"),
    ] = False,
):
    """
    Print the segments found in a piece of text.

    Examples:\n

        $ render_math.py scan 'Area is $\\pi r^2$'

        $ render_math.py scan --file notes.txt
    """
    if file is not None:
        if not file.exists():
            typer.secho(f"Error: File not found: {file}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        text = file.read_text(encoding="utf-8")
    elif text is None:
        typer.secho("Error: Provide TEXT or --file\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(None, None)
    if log:
        log_file = setup_scanning_logger()
        typer.echo(f"Log: {display_path(log_file)}")

    heuristic_brackets = config.scanner.heuristic_brackets and not no_heuristic
    segments = find_math_segments(
        text, MathHeuristic.from_config(config.heuristic), heuristic_brackets
    )

    math_count = 0
    for segment in segments:
        if isinstance(segment, Math):
            math_count += 1
            mode = "display" if segment.display else "inline"
            typer.secho(f"[{mode:<7}] {segment.kind.value}: ", fg=typer.colors.GREEN, nl=False)
            typer.echo(repr(segment.content))
        else:
            typer.secho(f"[text   ] {segment.text!r}", fg=typer.colors.BRIGHT_BLACK)

    typer.echo("")
    typer.secho(f"Summary: {len(segments)} segments, {math_count} math", fg=typer.colors.BLUE)


@app.command("render")
def render_command(
    input_path: Annotated[
        Path,
        typer.Argument(help="HTML file to render"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file (default: <input>.rendered.html)"),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML config merged over the defaults"),
    ] = None,
    overrides: Annotated[
        Optional[List[str]],
        typer.Option("--set", "-s", help="Config override, e.g. scanner.heuristic_brackets=false"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log per-node pipeline traces"),
    ] = False,
):
    """
    Render every math expression in an HTML file to MathML.

    Expressions that cannot be rendered are kept verbatim (with their
    delimiters) inside a math-error span.

    Examples:\n

        $ render_math.py render page.html

        $ render_math.py render page.html -o out.html --set normalizer.paired_delimiters=pseudo
    """
    if not input_path.exists():
        typer.secho(f"Error: File not found: {input_path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path, overrides)
    if output is None:
        output = input_path.with_suffix(".rendered.html")

    typer.secho(f"\nRendering: {display_path(input_path)}\n", fg=typer.colors.BLUE, bold=True)
    log_file = setup_document_logger(
        input_path=input_path, console_level="DEBUG" if debug else "INFO"
    )

    processor = MathProcessor.from_html(input_path.read_text(encoding="utf-8"), config=config)
    processor.toggle_debug(debug)
    if not processor.initialize():
        typer.secho("✗ Renderer failed to initialize", fg=typer.colors.RED, bold=True)
        typer.echo(f"  Log: {display_path(log_file)}\n")
        raise typer.Exit(code=1)

    processor.run_until_idle()
    output.write_text(processor.document.to_html(), encoding="utf-8")

    document = processor.document
    containers = document.soup.find_all(class_=config.document.container_class)
    failed = [tag for tag in containers if config.document.error_class in tag.get("class", [])]

    if failed:
        typer.secho(
            f"✓ Rendered {len(containers) - len(failed)} expressions, {len(failed)} kept raw",
            fg=typer.colors.YELLOW,
            bold=True,
        )
    else:
        typer.secho(f"✓ Rendered {len(containers)} expressions", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Output: {display_path(output)}")
    typer.echo(f"  Log: {display_path(log_file)}")
    typer.echo("")


if __name__ == "__main__":
    app()
