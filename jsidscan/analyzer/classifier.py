"""Syntax-only classification of identifier occurrences.

Every identifier is judged by the slot it occupies: the kind of its nearest
non-sequence parent and the property connecting the two. Most slots have a
fixed answer (``DIRECT_RULES``); a few are ambiguous on their own and look one
level further up the tree (``CONDITIONAL_RULES``). Anything else is UNKNOWN,
which is reported as a diagnostic rather than silently defaulted.

No scope resolution happens here: two identifiers with the same name are
never linked.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .annotator import AnnotatedNode, AnnotatedTree, node_get, node_kind


class Classification(Enum):
    DEFINITION = 'D'
    REFERENCE = 'R'
    IGNORED = 'I'
    UNKNOWN = 'U'

    @property
    def tag(self) -> str:
        return self.value


DEF = Classification.DEFINITION
REF = Classification.REFERENCE
IGNORED = Classification.IGNORED
UNKNOWN = Classification.UNKNOWN


@dataclass(frozen=True)
class IdentifierContext:
    """Everything a conditional rule may consult about one identifier."""
    tree: AnnotatedTree
    entry: AnnotatedNode
    parent: AnnotatedNode
    prop: str

    @property
    def node(self) -> Any:
        return self.entry.value

    @property
    def name(self) -> str:
        return node_get(self.entry.value, 'name')

    @property
    def parent_node(self) -> Any:
        return self.parent.value


# ---------------------------------------------------------------------------
# Fixed slots
# ---------------------------------------------------------------------------

DIRECT_RULES: Dict[Tuple[str, str], Classification] = {
    # Definitions
    ('ClassDeclaration', 'id'): DEF,
    ('ConditionalExpression', 'consequent'): DEF,
    ('ExportDefaultDeclaration', 'declaration'): DEF,
    ('FunctionDeclaration', 'id'): DEF,
    ('FunctionExpression', 'id'): DEF,
    ('ImportNamespaceSpecifier', 'local'): DEF,
    ('LabeledStatement', 'label'): DEF,
    ('ArrayPattern', 'elements'): DEF,      # destructuring always binds

    # References
    ('ArrayExpression', 'elements'): REF,
    ('ArrowFunctionExpression', 'body'): REF,
    ('AssignmentExpression', 'right'): REF,
    ('BreakStatement', 'label'): REF,
    ('CallExpression', 'arguments'): REF,
    ('CallExpression', 'callee'): REF,
    ('ClassDeclaration', 'superClass'): REF,
    ('ConditionalExpression', 'alternate'): REF,
    ('ConditionalExpression', 'test'): REF,
    ('ContinueStatement', 'label'): REF,
    ('DoWhileStatement', 'test'): REF,
    ('ForInStatement', 'right'): REF,
    ('ForOfStatement', 'right'): REF,
    ('ForStatement', 'test'): REF,
    ('IfStatement', 'test'): REF,
    ('ImportDefaultSpecifier', 'local'): REF,
    ('ImportSpecifier', 'imported'): REF,
    ('LogicalExpression', 'left'): REF,
    ('LogicalExpression', 'right'): REF,
    ('MemberExpression', 'object'): REF,
    ('MemberExpression', 'property'): REF,
    ('NewExpression', 'arguments'): REF,
    ('NewExpression', 'callee'): REF,
    ('Property', 'value'): REF,
    ('ReturnStatement', 'argument'): REF,
    ('SequenceExpression', 'expressions'): REF,
    ('SpreadElement', 'argument'): REF,
    ('SwitchCase', 'test'): REF,
    ('SwitchStatement', 'discriminant'): REF,
    ('TaggedTemplateExpression', 'tag'): REF,
    ('TemplateLiteral', 'expressions'): REF,
    ('ThrowStatement', 'argument'): REF,
    ('VariableDeclarator', 'init'): REF,
    ('WhileStatement', 'test'): REF,

    # Structural placeholders
    ('ArrowFunctionExpression', 'params'): IGNORED,
    ('AssignmentExpression', 'left'): IGNORED,
    ('AssignmentPattern', 'left'): IGNORED,
    ('CatchClause', 'param'): IGNORED,
    ('ExportSpecifier', 'local'): IGNORED,     # "exported" carries the answer
    ('ForInStatement', 'left'): IGNORED,
    ('ForOfStatement', 'left'): IGNORED,       # "b" of "for (b of buffer)"
    ('FunctionDeclaration', 'params'): IGNORED,
    ('FunctionExpression', 'params'): IGNORED,
    ('RestElement', 'argument'): IGNORED,
}


# ---------------------------------------------------------------------------
# Loop-control helpers
# ---------------------------------------------------------------------------

def declares_loop_variable(for_statement: Any, name: str) -> bool:
    """True if the for-loop's init clause declares ``name``.

    Only ``for (let/var/const x = ...; ...)`` headers declare anything; an
    absent init or a plain expression init declares nothing.
    """
    init = node_get(for_statement, 'init')
    if node_kind(init) != 'VariableDeclaration':
        return False
    for declarator in node_get(init, 'declarations') or []:
        if node_kind(declarator) != 'VariableDeclarator':
            continue
        target = node_get(declarator, 'id')
        if node_kind(target) == 'Identifier' and node_get(target, 'name') == name:
            return True
    return False


def is_loop_control_use(ctx: IdentifierContext) -> bool:
    """True for a loop-control variable used in its loop's test or update."""
    found = ctx.tree.find_ancestor(ctx.parent, 'ForStatement')
    if found is None:
        return False
    loop, prop = found
    return prop in ('test', 'update') and declares_loop_variable(loop.value, ctx.name)


# ---------------------------------------------------------------------------
# Context-dependent slots
# ---------------------------------------------------------------------------

def _export_specifier_exported(ctx: IdentifierContext) -> Classification:
    # export { foo, bar as baz }: only a rename introduces a new name
    local = node_get(ctx.parent_node, 'local')
    if node_get(local, 'name') == ctx.name:
        return IGNORED
    return DEF


def _method_definition_key(ctx: IdentifierContext) -> Classification:
    return IGNORED if ctx.name == 'constructor' else DEF


def _import_specifier_local(ctx: IdentifierContext) -> Classification:
    imported = node_get(ctx.parent_node, 'imported')
    return DEF if node_get(imported, 'name') != ctx.name else REF


def _property_key(ctx: IdentifierContext) -> Classification:
    prop_node = ctx.parent_node
    if node_get(prop_node, 'shorthand'):
        # reported through the value slot instead
        return IGNORED

    key = node_get(prop_node, 'key')
    value = node_get(prop_node, 'value')
    found = ctx.tree.find_ancestor(ctx.parent, 'VariableDeclarator')
    if found is not None:
        _, via = found
        if via == 'init' and key is not value:
            return DEF
        if via == 'id' and key is value:
            return DEF
    return REF


def _variable_declarator_id(ctx: IdentifierContext) -> Classification:
    found = ctx.tree.find_ancestor(ctx.parent, 'ForInStatement')
    if found is not None and found[1] == 'left':
        return IGNORED
    # A for-loop header declaration is the loop-control variable's one
    # Definition; its test/update uses are suppressed by _operand.
    return DEF


def _operand(ctx: IdentifierContext) -> Classification:
    return IGNORED if is_loop_control_use(ctx) else REF


def _for_statement_update(ctx: IdentifierContext) -> Classification:
    if declares_loop_variable(ctx.parent_node, ctx.name):
        return IGNORED
    return REF


CONDITIONAL_RULES: Dict[Tuple[str, str], Callable[[IdentifierContext], Classification]] = {
    ('ExportSpecifier', 'exported'): _export_specifier_exported,
    ('MethodDefinition', 'key'): _method_definition_key,
    ('ImportSpecifier', 'local'): _import_specifier_local,
    ('Property', 'key'): _property_key,
    ('VariableDeclarator', 'id'): _variable_declarator_id,
    ('BinaryExpression', 'left'): _operand,
    ('BinaryExpression', 'right'): _operand,
    ('UpdateExpression', 'argument'): _operand,
    ('UnaryExpression', 'argument'): _operand,
    ('ForStatement', 'update'): _for_statement_update,
}


def rule_for(
    kind: Optional[str], prop: Optional[str]
) -> Union[Classification, Callable[[IdentifierContext], Classification], None]:
    """Return the table entry for a slot: a Classification, a handler, or None."""
    key = (kind, prop)
    if key in CONDITIONAL_RULES:
        return CONDITIONAL_RULES[key]
    return DIRECT_RULES.get(key)


def classify(tree: AnnotatedTree, entry: AnnotatedNode) -> Classification:
    """Classify one Identifier entry of an annotated tree.

    Args:
        tree: Arena the entry belongs to
        entry: Entry wrapping an Identifier node

    Returns:
        The identifier's Classification; UNKNOWN for uncovered slots
    """
    if entry.kind != 'Identifier':
        raise ValueError(f"classify() expects an Identifier, got {entry.kind!r}")

    parent, prop = tree.node_parent(entry)
    if parent is None:
        # a bare Identifier root has no slot to judge
        return UNKNOWN

    rule = rule_for(parent.kind, prop)
    if rule is None:
        return UNKNOWN
    if isinstance(rule, Classification):
        return rule
    return rule(IdentifierContext(tree, entry, parent, prop))
