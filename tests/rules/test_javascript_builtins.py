"""
Built-in object detector tests - arrays, collections, numbers, objects,
strings, regular expressions and dates.
"""

from codecoach.rules.javascript import (
    array_mutation_methods,
    date_handling,
    map_set_collections,
    number_math,
    object_methods,
    regex_patterns,
    string_methods,
)


def _details(found):
    return [d.details for d in found]


# =============================================================================
# ARRAYS
# =============================================================================
class TestArrayMutationMethods:
    """Mutation, search and indexing on arrays."""

    def test_push_pop_once_per_method(self, rule_context):
        code = "const a = [];\na.push(1);\na.push(2);\na.pop();\n"
        found = array_mutation_methods.find_push_pop(rule_context(code))

        assert _details(found) == [".push() used to add elements", ".pop() used to remove last element"]
        assert found[0].location.line == 2

    def test_sort_with_comparator(self, rule_context):
        found = array_mutation_methods.find_sort(rule_context("nums.sort((a, b) => a - b);"))

        assert found[0].positive and found[0].idiomatic
        assert found[0].details == ".sort() with comparator function"

    def test_sort_without_comparator(self, rule_context):
        found = array_mutation_methods.find_sort(rule_context("nums.sort();"))

        assert found[0].negative and not found[0].positive
        assert found[0].details == ".sort() without comparator — may produce unexpected results for numbers"

    def test_index_of_suggests_includes(self, rule_context):
        code = "const a = [1];\nif (a.indexOf(1) !== -1) {}\nif (a.includes(2)) {}\n"
        found = array_mutation_methods.find_index_of_includes(rule_context(code))

        assert _details(found) == [
            ".indexOf() used — consider .includes() for boolean checks",
            ".includes() used for membership check",
        ]
        assert found[0].trivial and not found[0].idiomatic
        assert found[1].idiomatic

    def test_length_access(self, rule_context):
        found = array_mutation_methods.find_array_length(rule_context("const n = items.length;"))
        assert _details(found) == [".length property accessed"]

    def test_numeric_index_only(self, rule_context):
        assert array_mutation_methods.find_bracket_notation(rule_context("const x = a[0];"))
        assert array_mutation_methods.find_bracket_notation(rule_context("const x = a[i];")) == []

    def test_no_mutation_calls(self, rule_context):
        assert array_mutation_methods.find_push_pop(rule_context("const a = [1, 2];")) == []


# =============================================================================
# COLLECTIONS
# =============================================================================
class TestMapSetCollections:
    """Map, Set and weak collections."""

    def test_map_and_set(self, rule_context):
        context = rule_context("const m = new Map();\nconst s = new Set([1]);\n")

        assert _details(map_set_collections.find_map_basics(context)) == ["Map collection used"]
        assert _details(map_set_collections.find_set_basics(context)) == ["Set collection used"]

    def test_iteration_needs_a_collection(self, rule_context):
        with_map = rule_context("const m = new Map();\nm.forEach(v => v);\n")
        without = rule_context("[1, 2].forEach(v => v);")

        found = map_set_collections.find_map_set_iteration(with_map)
        assert _details(found) == [".forEach() used for collection iteration"]
        assert map_set_collections.find_map_set_iteration(without) == []

    def test_weak_map(self, rule_context):
        found = map_set_collections.find_weak_map_weak_ref(rule_context("const cache = new WeakMap();"))
        assert _details(found) == ["WeakMap used for weak references"]

    def test_plain_object_is_not_a_collection(self, rule_context):
        context = rule_context("const m = {};")

        assert map_set_collections.find_map_basics(context) == []
        assert map_set_collections.find_set_basics(context) == []


# =============================================================================
# NUMBERS
# =============================================================================
class TestNumberParsing:
    """Explicit conversions and unary plus."""

    def test_parse_int_without_radix(self, rule_context):
        found = number_math.find_number_parsing(rule_context("const n = parseInt(input);"))

        assert len(found) == 1
        assert found[0].negative and found[0].trivial
        assert found[0].details == "parseInt() without radix parameter"

    def test_parse_int_with_radix(self, rule_context):
        found = number_math.find_number_parsing(rule_context("const n = parseInt(input, 10);"))

        assert not found[0].negative and found[0].idiomatic
        assert found[0].details == "parseInt() used for number parsing"

    def test_conversions_reported_each(self, rule_context):
        code = "const a = parseFloat(x);\nconst b = Number(y);\n"
        found = number_math.find_number_parsing(rule_context(code))

        assert _details(found) == [
            "parseFloat() used for number parsing",
            "Number() used for number conversion",
        ]

    def test_unary_plus_only_without_conversions(self, rule_context):
        alone = number_math.find_number_parsing(rule_context("const n = +value;"))
        mixed = number_math.find_number_parsing(rule_context("const n = +value;\nconst m = Number(x);\n"))

        assert _details(alone) == ["Unary + used for number coercion — consider Number() for clarity"]
        assert alone[0].trivial
        assert _details(mixed) == ["Number() used for number conversion"]


class TestNumberChecksAndFormatting:
    """Validation, formatting and Math helpers."""

    def test_global_is_nan(self, rule_context):
        found = number_math.find_number_checking(rule_context("if (isNaN(x)) {}"))

        assert found[0].negative and found[0].trivial
        assert found[0].details == "Global isNaN() — prefer Number.isNaN() for strict checking"

    def test_number_is_nan(self, rule_context):
        found = number_math.find_number_checking(rule_context("if (Number.isNaN(x)) {}"))

        assert not found[0].negative and found[0].idiomatic
        assert found[0].details == "Number.isNaN() used for number validation"

    def test_to_fixed(self, rule_context):
        found = number_math.find_number_formatting(rule_context("const label = price.toFixed(2);"))
        assert _details(found) == [".toFixed() used for number formatting"]

    def test_math_method(self, rule_context):
        found = number_math.find_math_methods(rule_context("const top = Math.max(a, b);"))
        assert _details(found) == ["Math.max() used"]

    def test_bare_max_is_not_math(self, rule_context):
        assert number_math.find_math_methods(rule_context("const top = max(a, b);")) == []


# =============================================================================
# OBJECTS
# =============================================================================
class TestObjectMethods:
    """Object statics, computed keys and property access."""

    def test_keys_values_once_each(self, rule_context):
        code = "Object.keys(a);\nObject.keys(b);\nObject.values(a);\n"
        found = object_methods.find_keys_values_entries(rule_context(code))

        assert _details(found) == ["Object.keys() used", "Object.values() used"]

    def test_assign_and_freeze(self, rule_context):
        code = "const merged = Object.assign({}, a, b);\nObject.freeze(merged);\n"
        found = object_methods.find_assign_freeze(rule_context(code))

        assert _details(found) == [
            "Object.assign() used for object merging",
            "Object.freeze() used for immutability",
        ]

    def test_from_entries(self, rule_context):
        found = object_methods.find_from_entries(rule_context("const o = Object.fromEntries(pairs);"))
        assert _details(found) == ["Object.fromEntries() used to build object from entries"]

    def test_computed_key(self, rule_context):
        found = object_methods.find_computed_property_names(rule_context("const o = { [key]: 1 };"))
        assert _details(found) == ["Computed property name [expr] used in object"]

    def test_plain_key_is_not_computed(self, rule_context):
        assert object_methods.find_computed_property_names(rule_context("const o = { key: 1 };")) == []

    def test_dot_and_string_bracket_access(self, rule_context):
        found = object_methods.find_property_access_patterns(rule_context("const a = o.x;\nconst b = o['y'];\n"))

        assert _details(found) == [
            "Dot notation property access",
            "Bracket notation with string literal — dot notation may be clearer",
        ]
        assert found[1].trivial

    def test_existence_checks_in_source_order(self, rule_context):
        code = "o.hasOwnProperty('a');\nif ('b' in o) {}\n"
        found = object_methods.find_property_existence_check(rule_context(code))

        assert _details(found) == [
            ".hasOwnProperty() used for property check",
            "'in' operator used for property existence check",
        ]
        assert not found[0].idiomatic


# =============================================================================
# STRINGS
# =============================================================================
class TestStringMethods:
    """Templates, tokenizing and string helpers."""

    def test_template_and_concatenation(self, rule_context):
        code = "const a = `Hi ${name}`;\nconst b = `Yo ${name}`;\nconst c = 'Hi ' + name;\n"
        found = string_methods.find_template_literals(rule_context(code))

        assert _details(found) == [
            "Template literal with interpolation",
            "String concatenation with + — consider template literals",
        ]
        assert found[1].negative and found[1].trivial

    def test_plain_template_is_silent(self, rule_context):
        assert string_methods.find_template_literals(rule_context("const s = `plain`;")) == []

    def test_split_and_join(self, rule_context):
        code = "const parts = line.split(',');\nconst back = parts.join('-');\n"
        found = string_methods.find_split_join(rule_context(code))

        assert _details(found) == [
            ".split() used to tokenize string",
            ".join() used to combine array into string",
        ]

    def test_search_methods_capped(self, rule_context):
        code = "s.startsWith('a');\ns.endsWith('b');\ns.match(/c/);\n"
        found = string_methods.find_string_search_methods(rule_context(code))

        assert _details(found) == [
            ".startsWith() used for string searching",
            ".endsWith() used for string searching",
        ]

    def test_transform(self, rule_context):
        found = string_methods.find_string_transform(rule_context("const t = raw.trim();"))
        assert _details(found) == [".trim() used for string transformation"]

    def test_substr_is_deprecated(self, rule_context):
        found = string_methods.find_string_slice_substring(rule_context("const t = name.substr(1);"))

        assert found[0].negative and found[0].trivial
        assert found[0].details == ".substr() is deprecated — use .slice() instead"

    def test_array_slice_is_skipped(self, rule_context):
        code = "const a = [1, 2];\nconst b = a.slice(1);\n"
        assert string_methods.find_string_slice_substring(rule_context(code)) == []

    def test_pad_start(self, rule_context):
        found = string_methods.find_string_pad_repeat(rule_context("const d = day.padStart(2, '0');"))
        assert _details(found) == [".padStart() used"]


# =============================================================================
# REGULAR EXPRESSIONS
# =============================================================================
class TestRegexPatterns:
    """Literals, flags, groups and methods."""

    def test_literal_with_flags(self, rule_context):
        context = rule_context("const re = /ab+c/gi;\nre.test(s);\n")

        assert _details(regex_patterns.find_regex_literal(context)) == ["Regular expression literal used"]
        assert _details(regex_patterns.find_regex_flags(context)) == ["Regex flags used: gi"]
        assert _details(regex_patterns.find_regex_methods(context)) == [".test() regex method used"]

    def test_constructor(self, rule_context):
        found = regex_patterns.find_regex_literal(rule_context("const re = new RegExp('a+');"))
        assert _details(found) == ["RegExp constructor used"]

    def test_no_flags(self, rule_context):
        assert regex_patterns.find_regex_flags(rule_context("const re = /abc/;")) == []

    def test_named_groups(self, rule_context):
        found = regex_patterns.find_regex_groups(rule_context("const re = /(?<year>[0-9]{4})/;"))

        assert found[0].idiomatic
        assert found[0].details == "Named capture groups used in regex"

    def test_plain_groups(self, rule_context):
        found = regex_patterns.find_regex_groups(rule_context("const re = /([0-9]+)-([0-9]+)/;"))

        assert not found[0].idiomatic
        assert found[0].details == "Capture groups used in regex"

    def test_non_capturing_group(self, rule_context):
        assert regex_patterns.find_regex_groups(rule_context("const re = /(?:ab)c/;")) == []


# =============================================================================
# DATES
# =============================================================================
class TestDateHandling:
    """Date construction, formatting and accessors."""

    def test_new_date(self, rule_context):
        found = date_handling.find_date_creation(rule_context("const d = new Date();"))
        assert _details(found) == ["new Date() used for date creation"]

    def test_date_now(self, rule_context):
        found = date_handling.find_date_creation(rule_context("const t = Date.now();"))
        assert _details(found) == ["Date.now() used for timestamp"]

    def test_no_dates(self, rule_context):
        assert date_handling.find_date_creation(rule_context("const t = 1;")) == []

    def test_iso_formatting_is_idiomatic(self, rule_context):
        found = date_handling.find_date_formatting(rule_context("const s = d.toISOString();"))

        assert found[0].idiomatic
        assert found[0].details == ".toISOString() used for date formatting"

    def test_utc_string_is_not_idiomatic(self, rule_context):
        found = date_handling.find_date_formatting(rule_context("const s = d.toUTCString();"))

        assert found[0].positive and not found[0].idiomatic

    def test_accessor(self, rule_context):
        found = date_handling.find_date_methods(rule_context("const y = d.getFullYear();"))
        assert _details(found) == [".getFullYear() Date method used"]
