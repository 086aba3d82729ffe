"""
Tree traversal helpers - walkers, search and the per-kind node index.
"""

from codecoach.ast_extractors.base import (
    NodeIndex,
    NodeKind,
    ancestors,
    children,
    contains,
    find_first,
    is_kind,
    kind,
    node_location,
    node_text,
    walk,
    walk_with_depth,
    within,
)
from codecoach.ast_parser import parse_code
from codecoach.rules.base import Detection, by_slug_and_details, keep_first


def _root(code):
    return parse_code(code).root


class TestWalk:
    """Pre-order walking with pruning and depth caps."""

    def test_preorder(self):
        root = _root("f(a);")
        kinds = [kind(n) for n in walk(root)]

        assert kinds[0] is NodeKind.PROGRAM
        assert kinds.index(NodeKind.CALL_EXPRESSION) < kinds.index(NodeKind.ARGUMENTS)

    def test_start_depth_is_zero(self):
        root = _root("let x = 1;")
        depths = dict((node_text(n), d) for n, d in walk_with_depth(root) if kind(n) is NodeKind.IDENTIFIER)

        first = next(walk_with_depth(root))
        assert first[1] == 0
        assert depths["x"] == 3

    def test_prune_skips_subtree_but_yields_node(self):
        root = _root("function outer() { inner(); }\nafter();")
        prune = lambda n: kind(n) is NodeKind.FUNCTION_DECLARATION  # noqa: E731
        names = [node_text(n) for n in walk(root, prune=prune) if kind(n) is NodeKind.CALL_EXPRESSION]

        assert names == ["after()"]
        assert any(kind(n) is NodeKind.FUNCTION_DECLARATION for n in walk(root, prune=prune))

    def test_start_node_is_never_pruned(self):
        fn = _root("function f() { g(); }").named_children[0]
        prune = lambda n: kind(n) is NodeKind.FUNCTION_DECLARATION  # noqa: E731

        assert contains(fn, lambda n: kind(n) is NodeKind.CALL_EXPRESSION, prune=prune)

    def test_max_depth(self):
        root = _root("a(b(c(d())));")
        shallow = [n for n in walk(root, max_depth=2)]

        assert all(d <= 2 for _n, d in walk_with_depth(root, max_depth=2))
        assert len(shallow) < len(list(walk(root)))

    def test_none_is_empty(self):
        assert list(walk(None)) == []
        assert children(None) == []


class TestSearch:
    """find_first / contains / ancestors / within."""

    def test_find_first_in_source_order(self):
        root = _root("one(); two();")
        call = find_first(root, lambda n: kind(n) is NodeKind.CALL_EXPRESSION)

        assert node_text(call) == "one()"
        assert node_location(call) == (1, 0)

    def test_find_first_excluding_self(self):
        outer = _root("a(b());").named_children[0].named_children[0]
        inner = find_first(outer, lambda n: kind(n) is NodeKind.CALL_EXPRESSION, include_self=False)

        assert node_text(inner) == "b()"

    def test_ancestors_and_within(self):
        root = _root("if (x) { y(); }")
        call = find_first(root, lambda n: kind(n) is NodeKind.CALL_EXPRESSION)
        parents = list(ancestors(call))

        assert any(is_kind(p, NodeKind.IF_STATEMENT) for p in parents)
        assert parents[-1].type == "program"
        assert within(call, root)


class TestNodeIndex:
    """Nodes bucketed by kind in source order."""

    def test_of_multiple_kinds_sorted(self):
        index = NodeIndex(_root("var a = 1;\nlet b = 2;\nvar c = 3;"))
        decls = index.of(NodeKind.VARIABLE_DECLARATION, NodeKind.LEXICAL_DECLARATION)

        assert [node_text(d)[:5] for d in decls] == ["var a", "let b", "var c"]

    def test_empty_index(self):
        index = NodeIndex(None)

        assert index.nodes == []
        assert index.of(NodeKind.IDENTIFIER) == []
        assert not index.has(NodeKind.IDENTIFIER)
        assert not index.truncated


class TestKeepFirst:
    """Post-filter keeping one detection per key."""

    def test_default_key_is_slug(self):
        items = [
            Detection("a", details="1"),
            Detection("b", details="2"),
            Detection("a", details="3"),
        ]

        assert [d.details for d in keep_first(items)] == ["1", "2"]

    def test_slug_and_details_key(self):
        items = [
            Detection("a", details="1"),
            Detection("a", details="1"),
            Detection("a", details="2"),
        ]

        assert [d.details for d in keep_first(items, by_slug_and_details)] == ["1", "2"]
