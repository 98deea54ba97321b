"""Shared fixtures: parse JS snippets and classify their identifiers."""
from pathlib import Path

import pytest

from jsidscan.analyzer.classifier import Classification
from jsidscan.analyzer.parser import SourceParser
from jsidscan.analyzer.traversal import IdentifierVisitor


FIXTURES_DIR = Path(__file__).parent / 'fixtures' / 'js'


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture
def parser():
    return SourceParser()


@pytest.fixture
def classify_code(parser):
    """Parse a snippet and return its ClassifiedIdentifier records."""
    def _classify(code: str, record_paths: bool = False):
        parsed = parser.parse_source(code, 'snippet.js')
        visitor = IdentifierVisitor(parsed.file_path, parsed.lines, record_paths=record_paths)
        return visitor.visit(parsed.ast)
    return _classify


def tags_for(records, name):
    """Classification tags of every record named ``name``, in order."""
    return [record.tag for record in records if record.name == name]


def emitted(records):
    """(tag, name) pairs that reach the output stream (D and R only)."""
    return [
        (record.tag, record.name) for record in records
        if record.classification in (Classification.DEFINITION, Classification.REFERENCE)
    ]
