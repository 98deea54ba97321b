"""Esprima-backed parser for JavaScript-family source files."""
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import esprima
from esprima.error_handler import Error as EsprimaError


_SHEBANG = re.compile(r"\A#!.*")


class SourceReadError(OSError):
    """A source file could not be read. Carries the underlying errno."""

    def __init__(self, file_path: str, cause: OSError):
        super().__init__(cause.errno, cause.strerror or str(cause), str(file_path))
        self.file_path = str(file_path)
        self.cause = cause


class JavaScriptSyntaxError(Exception):
    """Source rejected under both script and module grammar."""

    def __init__(self, file_path: str, line_number: int, description: str):
        super().__init__(f"{file_path} at line {line_number} : {description}")
        self.file_path = str(file_path)
        self.line_number = line_number
        self.description = description


@dataclass
class ParsedSource:
    """A parsed file: the raw tree plus what the reporter needs around it."""
    file_path: str
    source_code: str
    ast: Any
    source_type: str  # 'script' or 'module'
    lines: List[str] = field(init=False)

    def __post_init__(self):
        self.lines = self.source_code.split("\n")

    def line_text(self, line: int) -> str:
        """Return the 1-based source line, or '' when out of range."""
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""

    @property
    def tolerated_errors(self) -> list:
        """Errors esprima recovered from in tolerant mode."""
        errors = getattr(self.ast, "errors", None)
        if errors is None and isinstance(self.ast, dict):
            errors = self.ast.get("errors")
        return list(errors or [])


def strip_shebang(source_code: str) -> str:
    """Remove a leading interpreter line, keeping its newline."""
    return _SHEBANG.sub("", source_code, count=1)


class SourceParser:
    """Parser producing ESTree-shaped trees with location info.

    Script grammar is tried first; module grammar is the fallback for
    sources using import/export.
    """

    PARSE_OPTIONS = {"loc": True, "tolerant": True}

    def read_source(self, file_path: str | Path) -> str:
        """Read a file as UTF-8 and strip its shebang line.

        Args:
            file_path: Path to source file

        Returns:
            Source text ready for parsing

        Raises:
            SourceReadError: If the file cannot be read
        """
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise SourceReadError(str(file_path), e) from e
        return strip_shebang(data.decode('utf-8', errors='replace'))

    def parse_source(self, source_code: str, file_path: str = "<string>") -> ParsedSource:
        """Parse source text into an ESTree tree.

        Args:
            source_code: JavaScript text (shebang already removed)
            file_path: Name used in diagnostics

        Returns:
            ParsedSource with the tree and the grammar that accepted it

        Raises:
            JavaScriptSyntaxError: If neither grammar accepts the text
        """
        try:
            ast = esprima.parseScript(source_code, dict(self.PARSE_OPTIONS))
            return ParsedSource(file_path, source_code, ast, 'script')
        except EsprimaError:
            pass

        try:
            ast = esprima.parseModule(source_code, dict(self.PARSE_OPTIONS))
        except EsprimaError as e:
            raise JavaScriptSyntaxError(
                file_path,
                getattr(e, 'lineNumber', None),
                getattr(e, 'description', None) or str(e),
            ) from e
        return ParsedSource(file_path, source_code, ast, 'module')

    def parse_file(self, file_path: str | Path) -> ParsedSource:
        """Read and parse one file.

        Raises:
            SourceReadError: If the file cannot be read
            JavaScriptSyntaxError: If the file does not parse
        """
        return self.parse_source(self.read_source(file_path), str(file_path))
