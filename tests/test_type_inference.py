"""
Type inference and alias tracking tests.
"""

import pytest

from codecoach.ast_parser import parse_code
from codecoach.type_inference import (
    AliasMap,
    InferredType,
    build_alias_map,
    build_type_map,
    type_of,
)


def _types(code):
    return build_type_map(parse_code(code).index)


def _aliases(code):
    index = parse_code(code).index
    return build_alias_map(index, build_type_map(index))


class TestTypeMap:
    """Declared names mapped to the type of their initializer."""

    @pytest.mark.parametrize(
        "initializer,expected",
        [
            ("[1, 2]", InferredType.ARRAY),
            ("{ a: 1 }", InferredType.OBJECT),
            ("'text'", InferredType.STRING),
            ("`t${x}`", InferredType.STRING),
            ("42", InferredType.NUMBER),
            ("true", InferredType.BOOLEAN),
            ("null", InferredType.NULL),
            ("/ab+/", InferredType.REGEXP),
            ("() => 1", InferredType.FUNCTION),
            ("new Map()", InferredType.MAP),
            ("new Set([1])", InferredType.SET),
            ("new Date()", InferredType.DATE),
            ("new Widget()", InferredType.OBJECT),
            ("Array.from(y)", InferredType.ARRAY),
            ("Object.keys(y)", InferredType.ARRAY),
            ("JSON.stringify(y)", InferredType.STRING),
            ("parseInt(y)", InferredType.NUMBER),
            ("([1])", InferredType.ARRAY),
        ],
    )
    def test_initializer_types(self, initializer, expected):
        assert _types(f"const v = {initializer};")["v"] is expected

    def test_unknown_is_not_stored(self):
        types = _types("const v = compute();")

        assert "v" not in types
        assert type_of(types, "v") is InferredType.UNKNOWN
        assert type_of(types, None) is InferredType.UNKNOWN

    def test_later_declaration_wins(self):
        types = _types("let v = 1;\nfunction f() { const v = []; }\n")
        assert types["v"] is InferredType.ARRAY

    def test_mutable_containers(self):
        assert InferredType.OBJECT.is_mutable_container
        assert InferredType.ARRAY.is_mutable_container
        assert not InferredType.MAP.is_mutable_container


class TestAliasMap:
    """Names bound to the same object or array."""

    def test_plain_alias(self):
        aliases = _aliases("const a = {};\nconst b = a;\nconst c = b;\n")
        group = aliases.groups["a"]

        assert group.aliases == ["a", "b", "c"]
        assert group.shared
        assert aliases.canonical("c") == "a"
        assert group.others() == ["b", "c"]

    def test_primitive_is_not_aliased(self):
        aliases = _aliases("const a = 1;\nconst b = a;\n")
        assert aliases.groups == {}

    def test_property_alias(self):
        aliases = _aliases("const list = [];\nconst holder = { items: list };\nholder.items.push(1);\n")
        group = aliases.groups["list"]

        assert "holder.items" in group.aliases
        assert [m.path for m in group.mutations] == ["holder.items.push"]

    def test_mutations_recorded_in_order(self):
        aliases = _aliases("const a = {};\nconst b = a;\nb.x = 1;\na.y = 2;\n")
        group = aliases.mutated[0]

        assert group.source == "a"
        assert [(m.path, m.line) for m in group.mutations] == [("b.x", 3), ("a.y", 4)]

    def test_unshared_mutation_ignored(self):
        aliases = _aliases("const a = {};\na.x = 1;\n")
        assert aliases.mutated == []

    def test_augmented_assignment_is_mutation(self):
        aliases = _aliases("const a = {count: 0};\nconst b = a;\nb.count += 1;\n")
        group = aliases.groups["a"]

        assert [(m.path, m.line) for m in group.mutations] == [("b.count", 3)]

    def test_mutation_through_chained_alias(self):
        aliases = _aliases("const a = {};\nconst b = a;\nconst c = b;\nc.x = 1;\n")

        assert list(aliases.groups) == ["a"]
        assert [m.path for m in aliases.groups["a"].mutations] == ["c.x"]

    def test_property_alias_of_alias(self):
        aliases = _aliases("const a = [];\nconst b = a;\nconst box = { items: b };\n")

        assert aliases.groups["a"].aliases == ["a", "b", "box.items"]

    def test_group_for_unknown_path(self):
        assert AliasMap().group_for("nothing.here") is None
