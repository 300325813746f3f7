"""
Command-line interface for the LC-3 toolchain.

This module provides the ``fmt`` and ``lint`` commands. Both accept files or
directories, resolve their style from ``lc3-format.toml`` / ``lc3-lint.toml``
(or an explicit ``--config-path``), process every file independently and exit
with status 1 when any file fails.
"""

import json
import logging
from typing import Optional, Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from .. import __version__
from ..core.aggregator import FileStatus, ResultAggregator
from ..core.config import load_format_style, load_lint_style
from ..core.diagnostics import Diagnostic, Severity
from ..core.formatter import FormatResult, Formatter
from ..core.linter import Linter, LintResult
from ..core.scanner import SourceScanner

# Initialize Rich console for output
console = Console()

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        console.print("[dim]Verbose mode enabled[/dim]")


def _config_start(paths: Sequence[str]) -> Optional[str]:
    """Directory from which configuration discovery starts."""
    return paths[0] if paths else None


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def main(verbose):
    """LC-3 toolchain - formatter and linter for LC-3 assembly."""
    _set_verbose(verbose)


@main.command()
@click.argument('paths', nargs=-1, type=click.Path(exists=True))
@click.option('--check', is_flag=True, help='Report files that would change instead of rewriting them')
@click.option('--config-path', type=click.Path(), help='Configuration file, or directory to search from')
@click.option('--print-config', is_flag=True, help='Print the resolved formatting style and exit')
@click.option('--recursive/--no-recursive', default=True, help='Search directories recursively')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def fmt(ctx, paths, check, config_path, print_config, recursive, verbose):
    """Format LC-3 assembly files."""
    _set_verbose(verbose)
    style = load_format_style(config_path, start=_config_start(paths))

    if print_config:
        console.print(Syntax(style.to_toml(), "toml"))
        return

    files = SourceScanner().find_sources(paths, recursive=recursive)
    if not files:
        console.print("[yellow]No assembly files to format[/yellow]")
        return

    formatter = Formatter(style)
    aggregator = ResultAggregator()

    for filepath in files:
        result = formatter.format_file(filepath, write=not check)
        aggregator.add_format_result(result, check=check)
        display_format_result(result, check)

    summary = aggregator.generate_summary()
    if check:
        mismatched = len(aggregator.filter_files(status=FileStatus.FORMAT_MISMATCH))
        if mismatched:
            console.print(f"\n[bold red]{mismatched} file(s) would be reformatted[/bold red]")
        else:
            console.print(f"\n[green]All {summary.total_files} file(s) are formatted[/green]")
    else:
        console.print(f"\n[bold]Formatted {summary.reformatted_files} file(s).[/bold]")

    if summary.syntax_error_files or summary.io_error_files:
        console.print(f"[red]{summary.syntax_error_files + summary.io_error_files} file(s) could not be processed[/red]")

    ctx.exit(aggregator.exit_code)


@main.command()
@click.argument('paths', nargs=-1, type=click.Path(exists=True))
@click.option('--config-path', type=click.Path(), help='Configuration file, or directory to search from')
@click.option('--print-config', is_flag=True, help='Print the resolved lint style and exit')
@click.option('--recursive/--no-recursive', default=True, help='Search directories recursively')
@click.option('--output', '-o', type=click.Path(), help='Output file for results (JSON format)')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.pass_context
def lint(ctx, paths, config_path, print_config, recursive, output, verbose):
    """Check naming style of LC-3 assembly files."""
    _set_verbose(verbose)
    style = load_lint_style(config_path, start=_config_start(paths))

    if print_config:
        console.print(Syntax(style.to_toml(), "toml"))
        return

    files = SourceScanner().find_sources(paths, recursive=recursive)
    if not files:
        console.print("[yellow]No assembly files to lint[/yellow]")
        return

    linter = Linter(style)
    aggregator = ResultAggregator()

    for filepath in files:
        result = linter.lint_file(filepath)
        aggregator.add_lint_result(result)
        display_lint_result(result)

    display_lint_summary(aggregator)

    if output:
        save_results_to_file(aggregator, output)
        console.print(f"[green]Results saved to {output}[/green]")

    ctx.exit(aggregator.exit_code)


def render_diagnostic(diagnostic: Diagnostic, source: str, filepath: str) -> Text:
    """
    Render a diagnostic with the offending source line and a caret underline.

    Args:
        diagnostic: Diagnostic to render
        source: Full text of the file the diagnostic refers to
        filepath: Name shown in the location line

    Returns:
        Rich Text ready for printing
    """
    span = diagnostic.span
    colour = "red" if diagnostic.severity is Severity.ERROR else "yellow"
    lines = source.splitlines()
    source_line = lines[span.line - 1] if 0 < span.line <= len(lines) else ""
    gutter = " " * len(str(span.line))
    underline = max(1, min(span.end - span.start, len(source_line) - span.column + 1))

    text = Text()
    text.append(f"{diagnostic.severity.value}[{diagnostic.rule}]", style=f"bold {colour}")
    text.append(f": {diagnostic.message}\n", style="bold")
    text.append(f"{gutter}--> ", style="blue")
    text.append(f"{filepath}:{span.line}:{span.column}\n")
    text.append(f"{gutter} |\n", style="blue")
    text.append(f"{span.line} | ", style="blue")
    text.append(f"{source_line}\n")
    text.append(f"{gutter} | ", style="blue")
    text.append(" " * (span.column - 1) + "^" * underline, style=f"bold {colour}")
    if diagnostic.suggestion:
        text.append(f"\n{gutter} = ", style="blue")
        text.append(f"help: replace with `{diagnostic.suggestion}`")
    return text


def render_diff(result: FormatResult) -> Text:
    """Colourise the unified diff between a file and its formatted form."""
    text = Text()
    for line in result.check.unified(result.filepath).splitlines():
        if line.startswith('+++') or line.startswith('---'):
            style = "bold"
        elif line.startswith('@@'):
            style = "cyan"
        elif line.startswith('+'):
            style = "green"
        elif line.startswith('-'):
            style = "red"
        else:
            style = None
        text.append(line + "\n", style=style)
    return text


def display_format_result(result: FormatResult, check: bool) -> None:
    """Report one formatter result on the console."""
    filename = result.filepath

    if not result.success:
        if result.error is not None:
            console.print(render_diagnostic(Diagnostic.from_syntax_error(result.error),
                                            result.original_content, filename))
        else:
            console.print(f"[red]✗[/red] {filename}: {result.message}")
        return

    if check and result.changed:
        console.print(render_diff(result))
    elif result.changed:
        console.print(f"[green]✓[/green] {filename}: reformatted")
    else:
        logger.debug(f"{filename} already formatted")


def display_lint_result(result: LintResult) -> None:
    """Report one linter result on the console."""
    if not result.success and result.error is None:
        console.print(f"[red]✗[/red] {result.filepath}: {result.message}")
        return

    for diagnostic in result.diagnostics:
        console.print(render_diagnostic(diagnostic, result.source, result.filepath))
        console.print()


def display_lint_summary(aggregator: ResultAggregator) -> None:
    """Display a summary table of the lint run."""
    summary = aggregator.generate_summary()
    summary_text = (
        f"Total Files: {summary.total_files}\n"
        f"Clean Files: {summary.ok_files}\n"
        f"Files with Issues: {summary.failed_files}\n"
        f"Total Diagnostics: {summary.total_diagnostics}"
    )
    console.print(Panel(summary_text, title="Lint Summary", border_style="blue"))

    failed = aggregator.filter_files(failed_only=True)
    if not failed:
        return

    table = Table(title="Files")
    table.add_column("File", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Diagnostics", justify="center")
    table.add_column("Rules", style="dim")

    for file_info in failed:
        status_style = "bold red" if file_info.status is FileStatus.SYNTAX_ERROR else "yellow"
        table.add_row(
            file_info.filename,
            f"[{status_style}]{file_info.status.value}[/{status_style}]",
            str(file_info.diagnostic_count),
            ", ".join(sorted(file_info.rules)) or "-",
        )

    console.print(table)


def save_results_to_file(aggregator: ResultAggregator, output_path: str) -> None:
    """Save the batch report as JSON."""
    report_data = aggregator.export_report()

    with open(output_path, 'w') as f:
        json.dump(report_data, f, indent=2)


if __name__ == '__main__':
    main()
