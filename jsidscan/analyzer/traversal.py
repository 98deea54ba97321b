"""Pre-order walk that annotates a syntax tree and classifies its identifiers."""
from collections import Counter
from dataclasses import dataclass
from typing import Any, List, Optional

from .annotator import AnnotatedTree, child_properties, is_node, node_get, node_kind
from .classifier import Classification, classify


@dataclass
class ClassifiedIdentifier:
    """One identifier occurrence and its classification."""
    name: str
    file_path: str
    line: int
    column: int  # 1-based
    source_line: str
    classification: Classification
    path: Optional[str] = None  # structural path; always set for UNKNOWN

    @property
    def tag(self) -> str:
        return self.classification.tag

    def to_line(self) -> str:
        """Render as ``tag,name,file,line:column,sourceLine``."""
        return f"{self.tag},{self.name},{self.file_path},{self.line}:{self.column},{self.source_line}"


def _position(node: Any):
    """Return (line, 1-based column) from a node's ``loc``, or (0, 0)."""
    loc = node_get(node, 'loc')
    start = node_get(loc, 'start') if loc is not None else None
    if start is None:
        return 0, 0
    return node_get(start, 'line', 0), node_get(start, 'column', 0) + 1


class IdentifierVisitor:
    """Walks one syntax tree and produces a record per Identifier node.

    A fresh AnnotatedTree is built for every call to ``visit``; nothing
    survives between traversals.
    """

    def __init__(self, file_path: str = "<string>", lines: List[str] = None,
                 record_paths: bool = False):
        """Initialize the visitor for one file.

        Args:
            file_path: File name stamped on every record
            lines: Source split on newlines, for the source-line column
            record_paths: Attach structural paths to every record, not only
                to UNKNOWN ones
        """
        self.file_path = file_path
        self.lines = lines or []
        self.record_paths = record_paths

    def _line_text(self, line: int) -> str:
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""

    def visit(self, root: Any) -> List[ClassifiedIdentifier]:
        """Classify every identifier reachable from ``root``, in pre-order.

        Args:
            root: Root syntax node (esprima node or ESTree dict)

        Returns:
            One ClassifiedIdentifier per distinct Identifier node
        """
        if not is_node(root):
            raise ValueError("visit() expects a syntax node as root")

        tree = AnnotatedTree(root)
        records: List[ClassifiedIdentifier] = []
        seen = {id(root)}

        # Explicit stack of entries; children are pushed reversed so they pop
        # in property order, which keeps the walk pre-order.
        stack = [tree.root]
        while stack:
            entry = stack.pop()

            if entry.is_sequence:
                children = [(index, item) for index, item in enumerate(entry.value)
                            if is_node(item) or isinstance(item, list)]
            elif entry.kind == 'Identifier':
                records.append(self._classify(tree, entry))
                continue
            else:
                children = list(child_properties(entry.value))

            pending = []
            for prop, child in children:
                # a parser may hang one node off two slots (e.g. unrenamed
                # import specifiers); the first slot in field order wins
                if id(child) in seen:
                    continue
                seen.add(id(child))
                pending.append(tree.attach(child, entry, prop))
            stack.extend(reversed(pending))

        return records

    def _classify(self, tree: AnnotatedTree, entry) -> ClassifiedIdentifier:
        classification = classify(tree, entry)
        line, column = _position(entry.value)
        path = None
        if self.record_paths or classification is Classification.UNKNOWN:
            path = tree.path_of(entry)
        return ClassifiedIdentifier(
            name=node_get(entry.value, 'name'),
            file_path=self.file_path,
            line=line,
            column=column,
            source_line=self._line_text(line),
            classification=classification,
            path=path,
        )


def count_identifiers(root: Any) -> int:
    """Count distinct Identifier nodes reachable from ``root``."""
    count = 0
    seen = set()
    stack = [root]
    while stack:
        value = stack.pop()
        if id(value) in seen:
            continue
        seen.add(id(value))
        if isinstance(value, list):
            stack.extend(item for item in value if is_node(item) or isinstance(item, list))
        elif node_kind(value) == 'Identifier':
            count += 1
        else:
            stack.extend(child for _, child in child_properties(value))
    return count


def summarize(records: List[ClassifiedIdentifier]) -> Counter:
    """Count records per Classification."""
    return Counter(record.classification for record in records)
