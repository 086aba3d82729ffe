"""
Data-flow detector tests.

These detectors reason about values across statements (aliases, copies,
hoisting, loop bounds), so most tests go through the full pipeline.
"""

from codecoach.rules.dataflow import data_flow


class TestNestedTernary:
    """Ternaries nested in a branch of another ternary."""

    def test_nested(self, rule_context):
        found = data_flow.find_nested_ternary(rule_context("const v = a ? 1 : b ? 2 : 3;"))

        assert len(found) == 1
        assert found[0].details == (
            "Nested ternary operator — hard to read. Consider using if/else or early returns instead."
        )

    def test_flat(self, rule_context):
        assert data_flow.find_nested_ternary(rule_context("const v = a ? 1 : 2;")) == []


class TestDeepNesting:
    """Blocks nested past four levels, once per line."""

    def test_reports_first_deep_line(self, rule_context):
        code = """if (a) {
  if (b) {
    if (c) {
      x();
    }
  }
}
"""
        found = data_flow.find_deep_nesting(rule_context(code))

        assert len(found) == 1
        assert found[0].location.line == 3
        assert found[0].details.startswith("Code nested 5 levels deep")

    def test_shallow(self, rule_context):
        assert data_flow.find_deep_nesting(rule_context("if (a) { if (b) { x(); } }")) == []


class TestLongParameterList:
    """More than four parameters."""

    def test_five_parameters(self, rule_context):
        found = data_flow.find_long_parameter_list(rule_context("function make(a, b, c, d, e) {}"))
        assert found[0].details == (
            "Function 'make' has 5 parameters — consider using an options object instead."
        )

    def test_anonymous_arrow(self, rule_context):
        found = data_flow.find_long_parameter_list(rule_context("run((a, b, c, d, e) => a);"))
        assert "'anonymous'" in found[0].details

    def test_four_parameters(self, rule_context):
        assert data_flow.find_long_parameter_list(rule_context("function f(a, b, c, d) {}")) == []


class TestObjectSpreadMissing:
    """One object stored under several properties."""

    def test_shared_defaults(self, rule_context):
        code = "const defaults = { on: true };\nconst a = { x: defaults, y: defaults };\n"
        found = data_flow.find_object_spread_missing(rule_context(code))

        assert len(found) == 1
        assert found[0].details.startswith("Object 'defaults' assigned by reference to 2 properties")


class TestVarUsedBeforeInit:
    """Top-level reads before a var initializer runs."""

    def test_read_before_init(self, analyze_js, find):
        found = find(analyze_js("console.log(count);\nvar count = 5;\n"), "var-used-before-init")

        assert len(found) == 1
        assert found[0].details == (
            "Variable 'count' is used on line 1 but not initialized until line 2 — "
            "it will be undefined due to var hoisting."
        )

    def test_read_inside_function_is_deferred(self, analyze_js, find):
        code = "function show() { console.log(count); }\nvar count = 5;\nshow();\n"
        assert find(analyze_js(code), "var-used-before-init") == []


class TestArrayAsObject:
    """Arrays written with string keys."""

    def test_string_key(self, analyze_js, find):
        found = find(analyze_js("const list = [];\nlist['name'] = 'x';\n"), "array-as-object")

        assert len(found) == 1
        assert found[0].details.startswith("Array 'list' is used with string key \"name\"")

    def test_numeric_index(self, analyze_js, find):
        assert find(analyze_js("const list = [];\nlist[0] = 'x';\n"), "array-as-object") == []


class TestStringArithmetic:
    """Arithmetic that silently coerces strings."""

    def test_string_literal_operand(self, analyze_js, find):
        found = find(analyze_js("const n = '5' * 2;"), "string-arithmetic-coercion")
        assert found[0].details.startswith("Arithmetic operator '*' used with string \"5\"")

    def test_plus_is_concatenation(self, analyze_js, find):
        assert find(analyze_js("const s = 'a' + 1;"), "string-arithmetic-coercion") == []


class TestSelfMutation:
    """Mutating an array inside its own iteration callback."""

    def test_push_inside_foreach(self, analyze_js, find):
        code = "const xs = [1, 2];\nxs.forEach(x => {\n  if (x > 1) xs.push(x);\n});\n"
        found = find(analyze_js(code), "array-self-mutation-in-iteration")

        assert len(found) == 1
        assert found[0].location.line == 3
        assert found[0].details.startswith("Array 'xs' is mutated via .push() inside its own .forEach() callback")

    def test_other_array(self, analyze_js, find):
        code = "const xs = [1];\nconst ys = [];\nxs.forEach(x => ys.push(x));\n"
        assert find(analyze_js(code), "array-self-mutation-in-iteration") == []


class TestDataflowTagging:
    """Every data-flow finding carries the dataflow source."""

    def test_source(self, analyze_js):
        result = analyze_js("const v = a ? 1 : b ? 2 : 3;")
        nested = [d for d in result.detections if d.topic_slug == "nested-ternary"]

        assert nested[0].source.value == "dataflow"


class TestSelfMutationVariants:
    """Index writes and the once-per-array rule."""

    def test_index_assignment(self, rule_context):
        code = "const xs = [1, 2];\nxs.forEach((x, i) => {\n  xs[i] = x * 2;\n});\n"
        found = data_flow.find_array_self_mutation_in_iteration(rule_context(code))

        assert len(found) == 1
        assert found[0].location.line == 3
        assert found[0].details.startswith(
            "Array 'xs' is mutated via .index assignment() inside its own .forEach() callback"
        )

    def test_once_per_array(self, rule_context):
        code = """const xs = [1];
const ys = [2];
xs.forEach(x => xs.push(x));
xs.map(x => xs.pop());
ys.forEach(y => ys.push(y));
"""
        found = data_flow.find_array_self_mutation_in_iteration(rule_context(code))

        assert [d.location.line for d in found] == [3, 5]

    def test_nested_function_is_skipped(self, rule_context):
        code = "const xs = [1];\nxs.forEach(x => { later(() => xs.push(x)); });\n"
        assert data_flow.find_array_self_mutation_in_iteration(rule_context(code)) == []


class TestShallowCopyVariants:
    """Nested mutation through a copy made by spread or Object.assign."""

    def test_mutating_method_on_nested_array(self, rule_context):
        code = "const original = { items: [] };\nconst copy = { ...original };\ncopy.items.push(1);\n"
        found = data_flow.find_shallow_copy_nested_mutation(rule_context(code))

        assert len(found) == 1
        assert found[0].location.line == 3
        assert found[0].details.startswith(
            "Shallow copy 'copy' (from 'original') calls 'items.push()'"
        )

    def test_assignment_wins_over_call(self, rule_context):
        code = """const original = { items: [], meta: {} };
const copy = { ...original };
copy.items.push(1);
copy.meta.owner = 'me';
"""
        found = data_flow.find_shallow_copy_nested_mutation(rule_context(code))

        assert len(found) == 1
        assert found[0].location.line == 4

    def test_object_assign_copy(self, rule_context):
        code = "const original = { nested: {} };\nconst copy = Object.assign({}, original);\ncopy.nested.flag = true;\n"
        found = data_flow.find_shallow_copy_nested_mutation(rule_context(code))

        assert len(found) == 1

    def test_plain_method_call(self, rule_context):
        code = "const original = { items: [] };\nconst copy = { ...original };\ncopy.toString();\n"
        assert data_flow.find_shallow_copy_nested_mutation(rule_context(code)) == []


class TestOncePerName:
    """Hoisting and dictionary misuse report each variable once."""

    def test_var_reported_once(self, rule_context):
        code = "log(count);\nlog(count);\nlog(total);\nvar count = 1;\nvar total = 2;\n"
        found = data_flow.find_var_used_before_init(rule_context(code))

        assert [d.location.line for d in found] == [1, 3]

    def test_array_as_object_once_per_array(self, rule_context):
        code = "const list = [];\nlist['a'] = 1;\nlist['b'] = 2;\n"
        found = data_flow.find_array_as_object(rule_context(code))

        assert len(found) == 1
        assert found[0].location.line == 2
