"""String formatting, searching and transformation detectors."""

from codecoach.ast_extractors.base import NodeKind, field, kind
from codecoach.ast_extractors.javascript import (
    identifier_name,
    is_string_literal,
    method_call,
    operator,
    template_has_substitution,
)
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    by_slug_and_details,
    detection,
    keep_first,
)
from codecoach.type_inference import InferredType

METADATA = RuleMetadata(name="string_methods", category="strings", order=80)

SEARCH_METHODS = (
    "indexOf",
    "lastIndexOf",
    "startsWith",
    "endsWith",
    "includes",
    "search",
    "match",
    "matchAll",
)

TRANSFORM_METHODS = (
    "toLowerCase",
    "toUpperCase",
    "trim",
    "trimStart",
    "trimEnd",
    "replace",
    "replaceAll",
)

# Reported at most this many distinct methods per snippet
METHOD_VARIANT_LIMIT = 2


def find_template_literals(context: StandardRuleContext) -> list[Detection]:
    """First interpolated template (good) and first ``"..." + x`` (style note)."""
    found = []
    for node in context.nodes(NodeKind.TEMPLATE_STRING, NodeKind.BINARY_EXPRESSION):
        if kind(node) is NodeKind.TEMPLATE_STRING:
            if template_has_substitution(node):
                found.append(
                    detection(
                        "template-literals",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Template literal with interpolation",
                    )
                )
        elif operator(node) == "+" and (
            is_string_literal(field(node, "left")) or is_string_literal(field(node, "right"))
        ):
            found.append(
                detection(
                    "template-literals",
                    node,
                    negative=True,
                    trivial=True,
                    details="String concatenation with + — consider template literals",
                )
            )
    return keep_first(found, key=lambda d: d.negative)


def find_split_join(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, method in context.method_calls("split", "join"):
        details = (
            ".split() used to tokenize string"
            if method == "split"
            else ".join() used to combine array into string"
        )
        found.append(
            detection("string-split-join", call, positive=True, idiomatic=True, details=details)
        )
    return keep_first(found, key=by_slug_and_details)


def _distinct_methods(context, slug, methods, purpose):
    found = [
        detection(slug, call, positive=True, idiomatic=True, details=f".{method}() used for {purpose}")
        for call, method in context.method_calls(*methods)
    ]
    return keep_first(found, key=by_slug_and_details)[:METHOD_VARIANT_LIMIT]


def find_string_search_methods(context: StandardRuleContext) -> list[Detection]:
    return _distinct_methods(context, "string-search-methods", SEARCH_METHODS, "string searching")


def find_string_transform(context: StandardRuleContext) -> list[Detection]:
    return _distinct_methods(
        context, "string-transform", TRANSFORM_METHODS, "string transformation"
    )


def find_string_slice_substring(context: StandardRuleContext) -> list[Detection]:
    """First extraction call whose receiver is not known to be an array."""
    for call, method in context.method_calls("slice", "substring", "substr"):
        receiver, _ = method_call(call)
        if kind(receiver) is NodeKind.ARRAY:
            continue
        if context.type_of(identifier_name(receiver)) is InferredType.ARRAY:
            continue

        deprecated = method == "substr"
        return [
            detection(
                "string-slice-substring",
                call,
                positive=True,
                negative=deprecated,
                idiomatic=method == "slice",
                trivial=deprecated,
                details=".substr() is deprecated — use .slice() instead"
                if deprecated
                else f".{method}() used for string extraction",
            )
        ]
    return []


def find_string_pad_repeat(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("string-pad-repeat", call, positive=True, idiomatic=True, details=f".{method}() used")
        for call, method in context.method_calls("padStart", "padEnd", "repeat")[:1]
    ]
