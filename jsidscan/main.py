"""jsidscan CLI - classify JavaScript identifiers as definitions or references."""
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import typer
from rich.table import Table

from jsidscan.analyzer.classifier import CONDITIONAL_RULES, DIRECT_RULES
from jsidscan.analyzer.parser import JavaScriptSyntaxError, SourceParser, SourceReadError
from jsidscan.analyzer.traversal import IdentifierVisitor
from jsidscan.config import ScanOptions, __version__, get_config
from jsidscan.utils.reporter import Reporter
from jsidscan.utils.safe_console import SafeConsole, plain_console

# Exit status when a file does not parse
SYNTAX_ERROR_EXIT = 10

app = typer.Typer(
    name="jsidscan",
    help="Classify every identifier in JavaScript files as a definition or a reference",
    add_completion=False
)

# Tables and human-facing output
console = SafeConsole()
# Record stream and diagnostics: no markup, no wrapping
out_console = plain_console()
err_console = plain_console(stderr=True)


def scan_files(files: List[str], options: ScanOptions, reporter: Reporter) -> int:
    """Read, parse, classify and report each file in order.

    Files are read and parsed concurrently (``options.jobs`` workers), but
    classified and reported strictly in the order given, so output is
    deterministic.

    Args:
        files: Source file paths
        options: Run configuration
        reporter: Destination for records and diagnostics

    Returns:
        Number of files skipped because of syntax errors (keep-going mode)

    Raises:
        SourceReadError: A file could not be read (always fatal)
        JavaScriptSyntaxError: A file did not parse and keep_going is off
    """
    parser = SourceParser()
    failed = 0

    executor = ThreadPoolExecutor(max_workers=options.jobs)
    try:
        futures = [executor.submit(parser.parse_file, path) for path in files]
        for future in futures:
            try:
                parsed = future.result()
            except JavaScriptSyntaxError as e:
                reporter.syntax_error(e)
                if not options.keep_going:
                    raise
                failed += 1
                continue

            visitor = IdentifierVisitor(parsed.file_path, parsed.lines,
                                        record_paths=options.record_paths)
            reporter.report_file(parsed, visitor.visit(parsed.ast))
    finally:
        executor.shutdown(wait=True, cancel_futures=True)

    return failed


@app.command()
def scan(
    files: Optional[List[str]] = typer.Argument(None, help="JavaScript source files to classify"),
    debug: bool = typer.Option(False, "--debug", help="Echo the AST path after every record"),
    verbose: bool = typer.Option(False, "--verbose", help="With --debug: show parse errors esprima tolerated"),
    ast: bool = typer.Option(False, "--ast", help="With --debug: dump each file's syntax tree as JSON to stderr"),
    keep_going: bool = typer.Option(False, "--keep-going", help="Skip files with syntax errors instead of aborting the run"),
    jobs: Optional[int] = typer.Option(None, "--jobs", "-j", min=1, help="Files to read and parse concurrently"),
    stats: bool = typer.Option(False, "--stats", help="Print a classification summary table to stderr"),
):
    """Print D/R records for every identifier in FILES."""
    if not files:
        err_console.print("No args", style="red")
        raise typer.Exit(1)

    # Unset flags fall back to JSIDSCAN_* environment values
    try:
        options = get_config().scan_options(
            debug=debug or None,
            verbose=verbose or None,
            dump_ast=ast or None,
            keep_going=keep_going or None,
            jobs=jobs,
        )
    except ValueError as e:
        err_console.print(str(e), style="red")
        raise typer.Exit(1)
    reporter = Reporter(out_console, err_console, options)

    try:
        failed = scan_files(files, options, reporter)
    except SourceReadError as e:
        err_console.print(str(e), style="red")
        raise typer.Exit(e.errno or 1)
    except JavaScriptSyntaxError:
        raise typer.Exit(SYNTAX_ERROR_EXIT)

    if stats:
        err_console.print(reporter.summary_table())

    if failed:
        raise typer.Exit(SYNTAX_ERROR_EXIT)


@app.command()
def rules():
    """Show the (node kind, property) rule table used for classification."""
    table = Table(title="Identifier Slot Rules", show_header=True, header_style="bold cyan")
    table.add_column("Node Kind", style="cyan")
    table.add_column("Property", style="magenta")
    table.add_column("Classification", style="green")

    slots = {key: rule.name.title() for key, rule in DIRECT_RULES.items()}
    slots.update({key: "Conditional" for key in CONDITIONAL_RULES})
    for (kind, prop), label in sorted(slots.items()):
        table.add_row(kind, prop, label)

    console.print(table)
    console.print(f"[dim]Any other slot is reported as Unknown. jsidscan {__version__}[/dim]")


@app.callback()
def main():
    """jsidscan - syntax-only identifier classification for JavaScript."""
    pass


if __name__ == "__main__":
    app()
