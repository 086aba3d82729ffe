"""
End-to-end behavioral properties of the analysis pipeline.

Each test feeds a small snippet through ``analyze`` (ESLint disabled) and
checks one observable guarantee: determinism, the canonical findings for
common beginner mistakes, total-failure handling and learner prioritization.
"""

from codecoach.ast_parser import DiagnosticKind
from codecoach.curriculum import Layer, UserLevel, classify_detections, prioritize_for_learner


# =============================================================================
# DETERMINISM
# =============================================================================
class TestIdempotence:
    """Analyzing the same snippet twice gives the same answer."""

    def test_same_detections_twice(self, analyze_js):
        code = """
var total = 0;
const items = [1, 2, 3];
for (let i = 0; i <= items.length; i++) {
  if (items[i] == '2') total += items[i];
}
const doubled = items.map(x => x * 2);
"""
        first = analyze_js(code)
        second = analyze_js(code)

        assert [d.to_dict() for d in first.detections] == [d.to_dict() for d in second.detections]
        assert first.summary.to_dict() == second.summary.to_dict()

    def test_input_order_is_source_order(self, analyze_js, slugs):
        """Native findings come before data-flow findings."""
        result = analyze_js("var x = 1;\nconst a = [1];\nfor (let i = 0; i <= a.length; i++) {}\n")
        sources = [d.source.value for d in result.detections]

        assert "dataflow" in sources
        assert sources.index("dataflow") > sources.index("native")
        assert sources[sources.index("dataflow"):] == ["dataflow"] * sources.count("dataflow")


# =============================================================================
# CANONICAL FINDINGS
# =============================================================================
class TestVarUsage:
    """A single ``var`` is flagged by both var detectors."""

    def test_var_declaration(self, analyze_js, find):
        result = analyze_js("var x = 1;")

        no_var = find(result, "no-var-usage")
        assert len(no_var) == 1
        assert no_var[0].negative and no_var[0].trivial
        assert no_var[0].details == "var declaration found — use let or const instead"
        assert no_var[0].location.line == 1

        hoisting = find(result, "var-hoisting")
        assert len(hoisting) == 1
        assert hoisting[0].negative

    def test_let_const_only(self, analyze_js, find):
        result = analyze_js("const x = 1;\nlet y = 2;")

        no_var = find(result, "no-var-usage")
        assert len(no_var) == 1
        assert no_var[0].positive and not no_var[0].negative
        assert no_var[0].details == "No var declarations — using modern let/const"
        assert find(result, "var-hoisting") == []


class TestLoopBounds:
    """``i <= arr.length`` is an off-by-one; ``i <= arr.length - 1`` is not."""

    def test_inclusive_length_bound(self, analyze_js, find):
        code = "const arr = [1, 2, 3];\nfor (let i = 0; i <= arr.length; i++) {\n  console.log(arr[i]);\n}\n"
        found = find(analyze_js(code), "loop-bounds-off-by-one")

        assert len(found) == 1
        assert found[0].negative
        assert found[0].location.line == 2
        assert found[0].details.startswith("Loop uses 'i <= arr.length' — this iterates one time too many.")

    def test_minus_one_bound(self, analyze_js, find):
        code = "const arr = [1, 2, 3];\nfor (let i = 0; i <= arr.length - 1; i++) {\n  console.log(arr[i]);\n}\n"
        assert find(analyze_js(code), "loop-bounds-off-by-one") == []

    def test_exclusive_bound(self, analyze_js, find):
        code = "const arr = [1, 2];\nfor (let i = 0; i < arr.length; i++) {}\n"
        assert find(analyze_js(code), "loop-bounds-off-by-one") == []

    def test_unknown_collection_is_not_flagged(self, analyze_js, find):
        code = "function f(arr) {\n  for (let i = 0; i <= arr.length; i++) {}\n}\n"
        assert find(analyze_js(code), "loop-bounds-off-by-one") == []


class TestShallowCopy:
    """Nested writes through a spread copy reach the original."""

    def test_nested_write_through_spread(self, analyze_js, find):
        code = """
const original = { nested: { value: 1 } };
const copy = { ...original };
copy.nested.value = 2;
"""
        found = find(analyze_js(code), "shallow-copy-nested-mutation")

        assert len(found) == 1
        assert found[0].negative
        assert found[0].details.startswith(
            "Shallow copy 'copy' (from 'original') has nested property 'nested.value' mutated"
        )

    def test_top_level_write_is_safe(self, analyze_js, find):
        code = "const original = { a: 1 };\nconst copy = { ...original };\ncopy.a = 2;\n"
        assert find(analyze_js(code), "shallow-copy-nested-mutation") == []


class TestMapCallbacks:
    """``map`` callbacks with and without a returned value."""

    def test_implicit_return(self, analyze_js, find):
        result = analyze_js("const doubled = [1, 2].map(x => x * 2);")

        found = find(result, "array-map")
        assert len(found) == 1
        assert found[0].positive and found[0].idiomatic
        assert found[0].details == "map() with implicit return"
        assert find(result, "array-method-no-return") == []

    def test_empty_block(self, analyze_js, find):
        result = analyze_js("const out = [1, 2].map(x => {});")

        found = find(result, "array-map")
        assert found[0].negative
        assert found[0].details == "map() callback has no return statement — will produce array of undefined"

        dataflow = find(result, "array-method-no-return")
        assert len(dataflow) == 1
        assert dataflow[0].details == "map() callback has empty body — will always return undefined."

    def test_block_without_return(self, analyze_js, find):
        result = analyze_js("const out = [1, 2].map(x => { x * 2; });")
        found = find(result, "array-method-no-return")

        assert found[0].details == "map() callback has no return statement — will produce undefined values."


class TestReferenceSharing:
    """Writes through an alias of a shared object."""

    def test_mutation_through_alias(self, analyze_js, find):
        result = analyze_js("const a = {};\nconst b = a;\nb.x = 1;\n")
        found = find(result, "object-reference-sharing")

        assert len(found) == 1
        assert found[0].negative
        assert found[0].location.line == 3
        assert found[0].details.startswith("Mutating shared object 'a' via 'b.x' — also referenced by b.")

    def test_unaliased_object(self, analyze_js, find):
        result = analyze_js("const a = {};\na.x = 1;\n")
        assert find(result, "object-reference-sharing") == []

    def test_compound_assignment_through_alias(self, analyze_js, find):
        result = analyze_js("const a = {count: 0};\nconst b = a;\nb.count += 1;\n")
        found = find(result, "object-reference-sharing")

        assert len(found) == 1
        assert found[0].location.line == 3

    def test_alias_of_alias(self, analyze_js, find):
        result = analyze_js("const a = {};\nconst b = a;\nconst c = b;\nc.x = 1;\n")
        found = find(result, "object-reference-sharing")

        assert len(found) == 1
        assert found[0].details.startswith(
            "Mutating shared object 'a' via 'c.x' — also referenced by b, c."
        )


# =============================================================================
# FAILURE HANDLING
# =============================================================================
class TestMalformedInput:
    """Input with no recoverable statement yields diagnostics and nothing else."""

    def test_garbage(self, analyze_js):
        result = analyze_js(")))  ]]]  }}}")

        assert result.detections == []
        assert result.parsed.root is None
        assert result.parsed.is_empty
        assert any(d.kind is DiagnosticKind.PARSE for d in result.diagnostics)

    def test_empty_string(self, analyze_js):
        result = analyze_js("")

        assert result.detections == []
        assert result.summary.total == 0

    def test_partial_recovery_keeps_findings(self, analyze_js, slugs):
        result = analyze_js("var x = 1;\nfunction broken( {\n")

        assert "no-var-usage" in slugs(result)
        assert result.diagnostics


# =============================================================================
# LEARNER PRIORITIZATION
# =============================================================================
class TestFundamentalsFirst:
    """Fundamental issues hide every other layer."""

    def test_fundamental_issue_blocks_patterns(self, analyze_js):
        code = "var label = a ? (b ? 'x' : 'y') : 'z';\n"
        result = analyze_js(code)
        layers = classify_detections(result.detections)

        assert layers.issues(Layer.PATTERNS)
        assert layers.issues(Layer.FUNDAMENTALS)

        prioritized = prioritize_for_learner(layers, UserLevel.ADVANCED)
        fundamental_slugs = {d.topic_slug for d in layers.fundamentals}
        assert prioritized
        assert all(d.topic_slug in fundamental_slugs for d in prioritized)

    def test_patterns_surface_without_fundamental_issues(self, analyze_js):
        code = "const label = a ? (b ? 'x' : 'y') : 'z';\n"
        layers = classify_detections(analyze_js(code).detections)

        assert not layers.issues(Layer.FUNDAMENTALS)
        advanced = prioritize_for_learner(layers, UserLevel.ADVANCED)
        assert "nested-ternary" in [d.topic_slug for d in advanced]
        assert prioritize_for_learner(layers, UserLevel.BEGINNER) == []
