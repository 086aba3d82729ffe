"""Array mutation, search, copy and indexing detectors.

Each topic is reported once per method variant (first occurrence only).
"""

from codecoach.ast_extractors.base import NodeKind, kind
from codecoach.ast_extractors.javascript import arguments, member_property, subscript_index
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    by_slug_and_details,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="array_mutation_methods", category="arrays", order=70)

PUSH_POP_DETAILS = {
    "push": ".push() used to add elements",
    "pop": ".pop() used to remove last element",
}

SLICE_CONCAT_DETAILS = {
    "slice": ".slice() used for non-mutating copy/subarray",
    "concat": ".concat() used for non-mutating merge",
}

ARRAY_STATIC_DETAILS = {
    "from": "Array.from() used to create array from iterable",
    "isArray": "Array.isArray() used for type checking",
}


def _method_findings(context, slug, details_by_method):
    found = [
        detection(slug, call, positive=True, idiomatic=True, details=details_by_method[method])
        for call, method in context.method_calls(*details_by_method)
    ]
    return keep_first(found, key=by_slug_and_details)


def find_push_pop(context: StandardRuleContext) -> list[Detection]:
    return _method_findings(context, "array-push-pop", PUSH_POP_DETAILS)


def find_shift_unshift(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("array-shift-unshift", call, positive=True, idiomatic=True, details=f".{method}() used")
        for call, method in context.method_calls("shift", "unshift")[:1]
    ]


def find_splice(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "array-splice",
            call,
            positive=True,
            idiomatic=True,
            details=".splice() used for in-place array modification",
        )
        for call, _method in context.method_calls("splice")[:1]
    ]


def find_index_of_includes(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, method in context.method_calls("indexOf", "includes"):
        if method == "indexOf":
            found.append(
                detection(
                    "array-indexOf-includes",
                    call,
                    positive=True,
                    trivial=True,
                    details=".indexOf() used — consider .includes() for boolean checks",
                )
            )
        else:
            found.append(
                detection(
                    "array-indexOf-includes",
                    call,
                    positive=True,
                    idiomatic=True,
                    details=".includes() used for membership check",
                )
            )
    return keep_first(found, key=by_slug_and_details)


def find_sort(context: StandardRuleContext) -> list[Detection]:
    for call, _method in context.method_calls("sort"):
        has_comparator = bool(arguments(call))
        return [
            detection(
                "array-sort",
                call,
                positive=has_comparator,
                negative=not has_comparator,
                idiomatic=has_comparator,
                details=".sort() with comparator function"
                if has_comparator
                else ".sort() without comparator — may produce unexpected results for numbers",
            )
        ]
    return []


def find_slice_concat(context: StandardRuleContext) -> list[Detection]:
    return _method_findings(context, "array-slice-concat", SLICE_CONCAT_DETAILS)


def find_flat_flat_map(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "array-flat-flatMap",
            call,
            positive=True,
            idiomatic=True,
            details=f".{method}() used for array flattening",
        )
        for call, method in context.method_calls("flat", "flatMap")[:1]
    ]


def find_array_from_is_array(context: StandardRuleContext) -> list[Detection]:
    found = [
        detection(
            "array-from-isArray",
            call,
            positive=True,
            idiomatic=True,
            details=ARRAY_STATIC_DETAILS[method],
        )
        for call, method in context.static_calls("Array", *ARRAY_STATIC_DETAILS)
    ]
    return keep_first(found, key=by_slug_and_details)


def find_array_length(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.MEMBER_EXPRESSION):
        if member_property(node) == "length":
            return [
                detection(
                    "array-length",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=".length property accessed",
                )
            ]
    return []


def find_bracket_notation(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.SUBSCRIPT_EXPRESSION):
        if kind(subscript_index(node)) is NodeKind.NUMBER:
            return [
                detection(
                    "bracket-notation",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Bracket notation used for indexed access",
                )
            ]
    return []
