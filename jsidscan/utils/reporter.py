"""Rendering of classified identifiers and diagnostics."""
from collections import Counter
from typing import Any, Iterable

from rich.console import Console
from rich.table import Table

from ..analyzer.annotator import is_node, node_fields
from ..analyzer.classifier import Classification
from ..analyzer.parser import JavaScriptSyntaxError, ParsedSource
from ..analyzer.traversal import ClassifiedIdentifier
from ..config import ScanOptions


def to_plain(value: Any) -> Any:
    """Convert a syntax tree (esprima objects or dicts) to JSON-ready data."""
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: to_plain(item) for key, item in value.items()}
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if is_node(value) or hasattr(value, '__dict__'):
        return {key: to_plain(item) for key, item in node_fields(value).items()}
    return str(value)


class Reporter:
    """Writes D/R records to ``out`` and diagnostics to ``err``.

    Ignored records are counted but never printed; Unknown records become a
    diagnostic carrying the structural path.
    """

    def __init__(self, out: Console, err: Console, options: ScanOptions = None):
        """Initialize the reporter.

        Args:
            out: Console for the record stream (stdout)
            err: Console for diagnostics (stderr)
            options: Run configuration; defaults to ScanOptions()
        """
        self.out = out
        self.err = err
        self.options = options or ScanOptions()
        self.counts: Counter = Counter()
        self.files_reported = 0
        self.files_failed = 0

    def report_file(self, parsed: ParsedSource, records: Iterable[ClassifiedIdentifier]) -> None:
        """Report every record of one file, in order."""
        if self.options.dump_ast:
            self.err.print("Entire AST", style="green")
            self.err.print_json(data=to_plain(parsed.ast))

        if self.options.verbose:
            for error in parsed.tolerated_errors:
                self.tolerated_error(parsed.file_path, error)

        for record in records:
            self.report(record)
        self.files_reported += 1

    def report(self, record: ClassifiedIdentifier) -> None:
        self.counts[record.classification] += 1

        if record.classification in (Classification.DEFINITION, Classification.REFERENCE):
            self.out.print(record.to_line(), markup=False, highlight=False, emoji=False)
            if self.options.debug and record.path:
                self.out.print(f"    AST Path : {record.path}", style="yellow",
                               markup=False, highlight=False, emoji=False)
        elif record.classification is Classification.UNKNOWN:
            self.err.print(
                f"Unknown Identifier : {record.name} at {record.file_path} "
                f"{record.line}:{record.column},{record.source_line}",
                style="red", markup=False, highlight=False, emoji=False,
            )
            self.err.print(f"  AST Path : {record.path}", style="red",
                           markup=False, highlight=False, emoji=False)

    def syntax_error(self, error: JavaScriptSyntaxError) -> None:
        self.files_failed += 1
        self.err.print(
            f"Syntax Error: {error.file_path} at line {error.line_number} : {error.description}",
            style="red", markup=False, highlight=False, emoji=False,
        )

    def tolerated_error(self, file_path: str, error: Any) -> None:
        """Show an error esprima recovered from (verbose debug mode only)."""
        line = getattr(error, 'lineNumber', None)
        description = getattr(error, 'description', None) or str(error)
        self.err.print(
            f"Tolerated error: {file_path} at line {line} : {description}",
            style="red", markup=False, highlight=False, emoji=False,
        )

    def summary_table(self) -> Table:
        """Per-classification counts for the whole run."""
        table = Table(title="Identifier Classification Summary", show_header=True, min_width=50,
                      header_style="bold cyan")
        table.add_column("Classification", style="cyan")
        table.add_column("Count", justify="right", style="green")

        for classification in Classification:
            table.add_row(classification.name.title(), str(self.counts[classification]))
        table.add_row("Total", str(sum(self.counts.values())), style="bold")
        table.add_row("Files", str(self.files_reported))
        if self.files_failed:
            table.add_row("Files with syntax errors", str(self.files_failed), style="red")
        return table
