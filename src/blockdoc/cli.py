# src/blockdoc/cli.py
"""
blockdoc Command Line Interface (CLI).

Terminal front-end built with `typer` and `rich`.

Features
--------
- **render**: Turn a block-document JSON file into sanitized HTML (fragment or
  standalone page), optionally with run controls for JavaScript blocks.
- **run**: Evaluate a JavaScript file in the sandbox and show the captured
  console output and return value.
- **inspect**: Tabulate a document's blocks and whether each one renders.

Usage
-----
    $ blockdoc render article.json --page -o article.html
    $ blockdoc run snippet.js
    $ blockdoc inspect article.json
"""

from __future__ import annotations

import json
import traceback
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from blockdoc.core.contracts.document import BlockDocument, parse_document
from blockdoc.execution.sandbox import JavaScriptSandbox
from blockdoc.execution.sink import EvaluationResult
from blockdoc.render.converter import convert_blocks
from blockdoc.render.pipeline import render_article, render_page

load_dotenv()

app = typer.Typer(
    help="blockdoc: render block-structured articles to safe HTML.",
    rich_markup_mode="markdown",
)
console = Console()

_CHANNEL_STYLES = {"log": "white", "info": "cyan", "warning": "yellow", "error": "bold red"}

ExistingFile = Annotated[
    Path,
    typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True),
]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _read_json(path: Path) -> Any:
    """Load JSON from `path`, exiting with code 1 on unreadable input."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        console.print(f"[bold red]❌ Could not read {path}:[/bold red] {e}")
        raise typer.Exit(code=1) from e


def _print_result(result: EvaluationResult) -> None:
    """Show captured console entries and the return value."""
    if result.entries:
        console.rule("[bold]Console Output[/bold]")
        for entry in result.entries:
            style = _CHANNEL_STYLES.get(entry.channel, "white")
            console.print(f"[{style}]{entry.channel:>7}[/{style}] {escape(entry.content)}", highlight=False)
    if result.value is not None:
        console.print(Panel(Text(result.value), title="Return Value", border_style="green"))
    console.print(f"[dim]took {result.duration_ms:.1f} ms[/dim]")


def _summarise(document: BlockDocument) -> Table:
    table = Table(title="Blocks", show_lines=False)
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Executable")
    table.add_column("Rendered")
    for index, (block, markup) in enumerate(convert_blocks(document)):
        rendered = "[green]yes[/green]" if markup else "[red]skipped[/red]"
        table.add_row(str(index), escape(block.type), "yes" if block.is_executable else "", rendered)
    return table


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def render(
    file: ExistingFile,
    run_code: Annotated[
        bool,
        typer.Option("--run-code/--no-run-code", help="Attach run controls to JavaScript blocks."),
    ] = False,
    page: Annotated[
        bool,
        typer.Option("--page/--fragment", help="Emit a standalone page or just the markup."),
    ] = False,
    max_width: Annotated[
        str | None,
        typer.Option("--max-width", "-w", help="CSS max-width of the article container."),
    ] = None,
    title: Annotated[str, typer.Option("--title", "-t", help="Page title (with --page).")] = "Article",
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write HTML here instead of printing it."),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show full error tracebacks.")
    ] = False,
) -> None:
    """Render a block-document JSON file to HTML."""
    content = _read_json(file)
    try:
        if page:
            html = render_page(content, title=title, run_code=run_code, max_width=max_width)
        else:
            article = render_article(content, run_code=run_code, max_width=max_width)
            html = article.surface_html() if run_code else article.html
    except Exception as e:
        console.print(f"[bold red]❌ Render Error:[/bold red] {e}")
        if verbose:
            traceback.print_exc()
        raise typer.Exit(code=1) from e

    if output is None:
        typer.echo(html)
        return
    try:
        output.write_text(html, encoding="utf-8")
    except OSError as e:
        console.print(f"[bold red]⚠️ Failed to save to {output}: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print(
        Panel(f"Saved to: [link=file://{output}]{output}[/link]", title="Rendered", border_style="green")
    )


@app.command()  # type: ignore[misc]
def run(
    file: ExistingFile,
    timeout_ms: Annotated[
        int | None,
        typer.Option("--timeout-ms", min=1, help="Override the evaluation time budget."),
    ] = None,
) -> None:
    """Evaluate a JavaScript file in the sandbox and show its captured output."""
    try:
        source = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        console.print(f"[bold red]❌ Could not read {file}:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    with console.status("[cyan]Evaluating...[/cyan]"):
        result = JavaScriptSandbox(timeout_ms=timeout_ms).evaluate(source)

    _print_result(result)
    if result.failed:
        console.print("[bold red]❌ Evaluation failed[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]✅ Complete![/bold green]")


@app.command()  # type: ignore[misc]
def inspect(file: ExistingFile) -> None:
    """List the blocks of a document and whether each one renders."""
    document = parse_document(_read_json(file))
    if document is None:
        console.print("[yellow]No content:[/yellow] the file is not a block document.")
        raise typer.Exit(code=1)
    console.print(_summarise(document))
    if document.version:
        console.print(f"[dim]format version {document.version}[/dim]")


if __name__ == "__main__":
    app()
