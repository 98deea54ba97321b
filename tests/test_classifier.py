"""Rule-table tests: each syntactic slot and its classification.

Snippets are parsed with esprima so the trees have the exact shape the
classifier sees in production.
"""
from typing import Callable, Union, get_type_hints

import pytest

from jsidscan.analyzer.annotator import AnnotatedTree
from jsidscan.analyzer.classifier import (
    CONDITIONAL_RULES,
    DIRECT_RULES,
    Classification,
    IdentifierContext,
    classify,
    declares_loop_variable,
    rule_for,
)

from conftest import emitted, tags_for


class TestDeclarations:
    """Slots that introduce a name."""

    def test_function_declaration_and_params(self, classify_code):
        records = classify_code("function add(a, b) { return a + b; }")

        assert tags_for(records, 'add') == ['D']
        # params are placeholders, the uses in the body are references
        assert tags_for(records, 'a') == ['I', 'R']
        assert tags_for(records, 'b') == ['I', 'R']

    def test_function_expression_name(self, classify_code):
        records = classify_code("var f = function inner(x) { return x; };")

        assert tags_for(records, 'f') == ['D']
        assert tags_for(records, 'inner') == ['D']
        assert tags_for(records, 'x') == ['I', 'R']

    def test_class_declaration(self, classify_code):
        records = classify_code(
            "class Dog extends Animal { constructor() {} bark() {} }"
        )

        assert tags_for(records, 'Dog') == ['D']
        assert tags_for(records, 'Animal') == ['R']
        assert tags_for(records, 'bark') == ['D']
        # the constructor key never counts as a definition
        assert tags_for(records, 'constructor') == ['I']

    def test_label(self, classify_code):
        records = classify_code("outer: for (;;) { break outer; }")

        assert tags_for(records, 'outer') == ['D', 'R']

    def test_continue_label(self, classify_code):
        records = classify_code("loop: while (go) { continue loop; }")

        assert tags_for(records, 'loop') == ['D', 'R']
        assert tags_for(records, 'go') == ['R']

    def test_conditional_consequent_is_definition(self, classify_code):
        records = classify_code("r = c ? d : e;")

        assert tags_for(records, 'r') == ['I']
        assert tags_for(records, 'c') == ['R']
        assert tags_for(records, 'd') == ['D']
        assert tags_for(records, 'e') == ['R']

    def test_arrow_function(self, classify_code):
        records = classify_code("const id = (p) => p;")

        assert tags_for(records, 'id') == ['D']
        assert tags_for(records, 'p') == ['I', 'R']


class TestDestructuring:

    def test_array_pattern_binds_every_element(self, classify_code):
        records = classify_code("const [p, q] = arr;")

        assert emitted(records) == [('D', 'p'), ('D', 'q'), ('R', 'arr')]

    def test_array_pattern_rest_and_holes(self, classify_code):
        records = classify_code("const [, first, ...rest] = list;")

        assert tags_for(records, 'first') == ['D']
        assert tags_for(records, 'rest') == ['I']
        assert tags_for(records, 'list') == ['R']

    def test_object_pattern_rename_key(self, classify_code):
        # key reached through the declarator's "id" with distinct value node
        records = classify_code("const {a: b} = o;")

        assert tags_for(records, 'a') == ['R']
        assert tags_for(records, 'b') == ['R']
        assert tags_for(records, 'o') == ['R']

    def test_object_literal_key_under_initializer(self, classify_code):
        records = classify_code("const o = {a: b};")

        assert tags_for(records, 'o') == ['D']
        assert tags_for(records, 'a') == ['D']
        assert tags_for(records, 'b') == ['R']

    def test_object_literal_key_outside_declarator(self, classify_code):
        records = classify_code("send({key: value});")

        assert tags_for(records, 'send') == ['R']
        assert tags_for(records, 'key') == ['R']
        assert tags_for(records, 'value') == ['R']

    def test_shorthand_property_yields_one_reference(self, classify_code):
        records = classify_code("const o = {x};")

        assert [tag for tag, name in emitted(records) if name == 'x'] == ['R']
        # the key slot is still offered to the classifier, as Ignored
        assert sorted(tags_for(records, 'x')) == ['I', 'R']

    def test_default_value_in_parameter(self, classify_code):
        records = classify_code("function f(a = 1) {}")

        assert tags_for(records, 'a') == ['I']


class TestLoopControl:

    def test_loop_variable_reported_once(self, classify_code):
        records = classify_code("for (let i = 0; i < 10; i++) { }")

        assert tags_for(records, 'i') == ['D', 'I', 'I']
        assert [tag for tag, name in emitted(records) if name == 'i'] == ['D']

    def test_loop_variable_used_in_body_is_reference(self, classify_code):
        records = classify_code(
            "for (let i = 0; i < n; i++) { total += i; }"
        )

        assert tags_for(records, 'i') == ['D', 'I', 'I', 'R']
        assert tags_for(records, 'n') == ['R']
        assert tags_for(records, 'total') == ['I']

    def test_loop_without_declaration(self, classify_code):
        records = classify_code("for (j = 0; j < 3; j++) {}")

        assert tags_for(records, 'j') == ['I', 'R', 'R']

    def test_bare_update_identifier(self, classify_code):
        records = classify_code("for (let i = 0; i < 3; i) {}\nfor (let k = 0; k < 3; other) {}")

        assert tags_for(records, 'i') == ['D', 'I', 'I']
        assert tags_for(records, 'other') == ['R']

    def test_loop_with_empty_header(self, classify_code):
        records = classify_code("for (;;i++) { x++; }")

        assert tags_for(records, 'i') == ['R']
        assert tags_for(records, 'x') == ['R']

    def test_for_in_declaration_is_ignored(self, classify_code):
        records = classify_code("for (var k in obj) { use(k); }")

        assert tags_for(records, 'k') == ['I', 'R']
        assert tags_for(records, 'obj') == ['R']

    def test_for_in_body_declaration_is_definition(self, classify_code):
        records = classify_code("for (var k in obj) { var inner = k; }")

        assert tags_for(records, 'inner') == ['D']

    def test_for_of(self, classify_code):
        records = classify_code("for (const v of list) {}\nfor (w of list) {}")

        assert tags_for(records, 'v') == ['D']
        assert tags_for(records, 'w') == ['I']
        assert tags_for(records, 'list') == ['R', 'R']

    def test_declares_loop_variable(self, parser):
        parsed = parser.parse_source("for (var a = 0, b = 1; ;) {}")
        loop = parsed.ast.body[0]

        assert declares_loop_variable(loop, 'a')
        assert declares_loop_variable(loop, 'b')
        assert not declares_loop_variable(loop, 'c')


class TestModules:

    def test_renamed_import_defines_local(self, classify_code):
        records = classify_code('import {a as b} from "m";')

        assert [tag for tag, name in emitted(records) if tag == 'D'] == ['D']
        assert tags_for(records, 'b') == ['D']
        assert tags_for(records, 'a') == ['R']

    def test_plain_import_is_single_reference(self, classify_code):
        records = classify_code('import {a} from "m";')

        assert emitted(records) == [('R', 'a')]

    def test_default_and_namespace_imports(self, classify_code):
        records = classify_code('import d from "m";\nimport * as ns from "n";')

        assert tags_for(records, 'd') == ['R']
        assert tags_for(records, 'ns') == ['D']

    def test_plain_export_defines_nothing(self, classify_code):
        records = classify_code("const foo = 1;\nexport {foo};")

        assert tags_for(records, 'foo') == ['D', 'I']

    def test_renamed_export_defines_exported_name(self, classify_code):
        records = classify_code("const foo = 1;\nexport {foo as bar};")

        assert tags_for(records, 'bar') == ['D']
        assert tags_for(records, 'foo') == ['D', 'I']

    def test_export_default_identifier(self, classify_code):
        records = classify_code("const thing = 1;\nexport default thing;")

        assert tags_for(records, 'thing') == ['D', 'D']


class TestReferences:

    @pytest.mark.parametrize("code, name", [
        ("x = a.b;", 'a'),
        ("x = a.b;", 'b'),
        ("x = new Foo(arg);", 'Foo'),
        ("x = new Foo(arg);", 'arg'),
        ("x = a || fallback;", 'fallback'),
        ("x = [elem];", 'elem'),
        ("x = [...spread];", 'spread'),
        ("x = typeof value;", 'value'),
        ("x = (first, second);", 'second'),
        ("x = `${inner}`;", 'inner'),
        ("x = tag`text`;", 'tag'),
        ("if (cond) {}", 'cond'),
        ("while (w) {}", 'w'),
        ("do {} while (d);", 'd'),
        ("switch (s) { case k: break; }", 's'),
        ("switch (s) { case k: break; }", 'k'),
        ("function f() { return r; }", 'r'),
        ("function f() { throw err; }", 'err'),
    ])
    def test_expression_slots(self, classify_code, code, name):
        records = classify_code(code)

        assert tags_for(records, name) == ['R']

    def test_catch_param_is_ignored(self, classify_code):
        records = classify_code("try {} catch (err) { log(err); }")

        assert tags_for(records, 'err') == ['I', 'R']


class TestUnknown:

    def test_uncovered_slot_is_unknown(self, classify_code):
        records = classify_code("mystery;")

        assert len(records) == 1
        assert records[0].classification is Classification.UNKNOWN
        assert records[0].path == "{Program}.body[0]{ExpressionStatement}.expression"

    def test_unknown_does_not_stop_traversal(self, classify_code):
        records = classify_code("mystery;\nconst after = 1;")

        assert [record.tag for record in records] == ['U', 'D']


class TestRuleTable:

    def test_tables_do_not_overlap(self):
        assert not set(DIRECT_RULES) & set(CONDITIONAL_RULES)

    def test_rule_for_lookup(self):
        assert rule_for('FunctionDeclaration', 'id') is Classification.DEFINITION
        assert callable(rule_for('Property', 'key'))
        assert rule_for('ExpressionStatement', 'expression') is None

    def test_rule_for_return_annotation(self):
        hints = get_type_hints(rule_for)

        assert hints['return'] == Union[
            Classification, Callable[[IdentifierContext], Classification], None
        ]

    def test_classify_rejects_non_identifier(self):
        tree = AnnotatedTree({"type": "Program", "body": []})

        with pytest.raises(ValueError):
            classify(tree, tree.root)

    def test_lone_identifier_root_is_unknown(self):
        tree = AnnotatedTree({"type": "Identifier", "name": "x"})

        assert classify(tree, tree.root) is Classification.UNKNOWN
