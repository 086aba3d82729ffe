"""Object static helpers, property access and existence checks."""

from codecoach.ast_extractors.base import NodeKind, field, kind
from codecoach.ast_extractors.javascript import (
    is_computed_key,
    is_private_member,
    is_string_literal,
    operator,
    subscript_index,
)
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    by_slug_and_details,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="object_methods", category="objects", order=90)

ASSIGN_FREEZE_DETAILS = {
    "assign": "Object.assign() used for object merging",
    "freeze": "Object.freeze() used for immutability",
}


def _object_static(context, slug, details_by_method):
    found = [
        detection(slug, call, positive=True, idiomatic=True, details=details_by_method[method])
        for call, method in context.static_calls("Object", *details_by_method)
    ]
    return keep_first(found, key=by_slug_and_details)


def find_keys_values_entries(context: StandardRuleContext) -> list[Detection]:
    return _object_static(
        context,
        "object-keys-values-entries",
        {name: f"Object.{name}() used" for name in ("keys", "values", "entries")},
    )


def find_assign_freeze(context: StandardRuleContext) -> list[Detection]:
    return _object_static(context, "object-assign-freeze", ASSIGN_FREEZE_DETAILS)


def find_from_entries(context: StandardRuleContext) -> list[Detection]:
    return _object_static(
        context,
        "object-fromEntries",
        {"fromEntries": "Object.fromEntries() used to build object from entries"},
    )


def find_computed_property_names(context: StandardRuleContext) -> list[Detection]:
    """First ``{[expr]: value}`` key or computed object-literal method name."""
    for node in context.nodes(NodeKind.PAIR, NodeKind.METHOD_DEFINITION):
        if kind(node) is NodeKind.PAIR:
            computed = is_computed_key(node)
        else:
            computed = (
                kind(node.parent) is NodeKind.OBJECT
                and kind(field(node, "name")) is NodeKind.COMPUTED_PROPERTY_NAME
            )
        if computed:
            return [
                detection(
                    "computed-property-names",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Computed property name [expr] used in object",
                )
            ]
    return []


def find_property_access_patterns(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.MEMBER_EXPRESSION, NodeKind.SUBSCRIPT_EXPRESSION):
        if kind(node) is NodeKind.MEMBER_EXPRESSION:
            if not is_private_member(node):
                found.append(
                    detection(
                        "property-access-patterns",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Dot notation property access",
                    )
                )
        elif is_string_literal(subscript_index(node)):
            found.append(
                detection(
                    "property-access-patterns",
                    node,
                    positive=True,
                    trivial=True,
                    details="Bracket notation with string literal — dot notation may be clearer",
                )
            )
    return keep_first(found, key=by_slug_and_details)


def find_property_existence_check(context: StandardRuleContext) -> list[Detection]:
    """First ``key in obj`` and first hasOwnProperty/hasOwn call."""
    found = []
    for node in context.nodes(NodeKind.BINARY_EXPRESSION):
        if operator(node) == "in":
            found.append(
                detection(
                    "property-existence-check",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="'in' operator used for property existence check",
                )
            )
            break
    for call, method in context.method_calls("hasOwnProperty", "hasOwn")[:1]:
        found.append(
            detection(
                "property-existence-check",
                call,
                positive=True,
                idiomatic=method == "hasOwn",
                details=f".{method}() used for property check",
            )
        )
    return sorted(found, key=lambda d: (d.location.line, d.location.column))
