"""Per-traversal parent annotation for ESTree syntax trees.

The annotator never writes onto the syntax tree. Each visited subtree gets an
``AnnotatedNode`` entry in an arena (``AnnotatedTree``); parents are referenced
by arena index, so an entry never owns its parent and the arena is simply
dropped when the traversal of a file is finished.

Sequence containers (lists of child nodes) get entries too, so that element
indices can be rendered in structural paths, but they are transparent for
ancestor lookups.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Tuple, Union

# Properties that never hold child syntax: kind tag, position metadata and
# the tolerant-parse diagnostics sequence.
NON_CHILD_PROPERTIES = frozenset({'type', 'loc', 'range', 'errors'})

Property = Union[str, int]


def node_fields(value: Any) -> Mapping:
    """Return the property mapping of a syntax node (esprima object or dict)."""
    if isinstance(value, Mapping):
        return value
    return vars(value)


def is_node(value: Any) -> bool:
    """A syntax node is anything carrying a string ``type`` property."""
    if value is None or isinstance(value, (str, bytes, int, float, bool, list, tuple)):
        return False
    try:
        return isinstance(node_fields(value).get('type'), str)
    except TypeError:
        # objects without __dict__ (e.g. compiled regex) are not nodes
        return False


def node_kind(value: Any) -> Optional[str]:
    """Return the ``type`` tag of a node, or None for non-nodes."""
    if not is_node(value):
        return None
    return node_fields(value)['type']


def node_get(value: Any, prop: str, default: Any = None) -> Any:
    """Read a property from a node regardless of its representation."""
    if value is None:
        return default
    return node_fields(value).get(prop, default)


def child_properties(node: Any) -> Iterator[Tuple[str, Any]]:
    """Yield (property, value) for properties holding a node or a sequence."""
    for prop, value in node_fields(node).items():
        if prop in NON_CHILD_PROPERTIES:
            continue
        if isinstance(value, list) or is_node(value):
            yield prop, value


@dataclass
class AnnotatedNode:
    """One visited subtree: the node (or sequence) plus its back-reference."""
    index: int
    value: Any
    parent: Optional[int]            # arena index of the parent entry
    prop: Optional[Property]         # property name, or element index in a sequence
    is_sequence: bool = False

    @property
    def kind(self) -> Optional[str]:
        return None if self.is_sequence else node_kind(self.value)

    def __eq__(self, other):
        # identity of the wrapped subtree; parent links do not participate
        if not isinstance(other, AnnotatedNode):
            return NotImplemented
        return self.value is other.value

    def __hash__(self):
        return id(self.value)


class AnnotatedTree:
    """Arena of AnnotatedNode entries for exactly one traversal."""

    def __init__(self, root: Any):
        """Create the arena with its single root entry.

        Args:
            root: Root syntax node (normally a Program node)
        """
        self._entries: List[AnnotatedNode] = []
        self.root = self._add(root, None, None, is_sequence=False)

    def __len__(self) -> int:
        return len(self._entries)

    def _add(self, value: Any, parent: Optional[int], prop: Optional[Property],
             is_sequence: bool) -> AnnotatedNode:
        entry = AnnotatedNode(len(self._entries), value, parent, prop, is_sequence)
        self._entries.append(entry)
        return entry

    def attach(self, value: Any, parent: AnnotatedNode, prop: Property) -> AnnotatedNode:
        """Record that ``value`` was reached from ``parent`` through ``prop``.

        Args:
            value: Child node or list of child nodes
            parent: Entry it was reached from
            prop: Property name, or element index when parent is a sequence

        Returns:
            The new entry for ``value``
        """
        return self._add(value, parent.index, prop, isinstance(value, list))

    def parent_of(self, entry: AnnotatedNode) -> Optional[AnnotatedNode]:
        if entry.parent is None:
            return None
        return self._entries[entry.parent]

    def node_parent(self, entry: AnnotatedNode) -> Tuple[Optional[AnnotatedNode], Optional[Property]]:
        """Return the nearest non-sequence parent and the property leading to it.

        Sequence hops are skipped: for an element of ``body`` the result is the
        node owning ``body`` and the property ``'body'``.
        """
        prop = entry.prop
        parent = self.parent_of(entry)
        while parent is not None and parent.is_sequence:
            prop = parent.prop
            parent = self.parent_of(parent)
        return parent, prop

    def find_ancestor(self, entry: AnnotatedNode, kind: str) -> Optional[Tuple[AnnotatedNode, str]]:
        """Find the nearest ancestor of ``entry`` whose kind is ``kind``.

        Walks upward over recorded parents, skipping sequence containers, so
        it runs in O(depth) and visits every ancestor at most once.

        Args:
            entry: Entry to start above (it is not itself considered)
            kind: Target node kind, e.g. 'VariableDeclarator'

        Returns:
            (ancestor entry, property through which the walk arrived), or None
        """
        current = entry
        parent, prop = self.node_parent(current)
        while parent is not None:
            if parent.kind == kind:
                return parent, prop
            current = parent
            parent, prop = self.node_parent(current)
        return None

    def path_of(self, entry: AnnotatedNode) -> str:
        """Render the structural path from the root down to ``entry``.

        Node hops render as ``{ParentKind}.prop``, sequence hops as ``[index]``.
        """
        segments = []
        current = entry
        parent = self.parent_of(current)
        while parent is not None:
            if parent.is_sequence:
                segments.append(f"[{current.prop}]")
            else:
                segments.append(f"{{{parent.kind}}}.{current.prop}")
            current = parent
            parent = self.parent_of(current)
        return "".join(reversed(segments))
