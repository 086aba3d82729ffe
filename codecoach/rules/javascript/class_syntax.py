"""ES class syntax detectors."""

from codecoach.ast_extractors.base import NodeKind, field, kind, node_text
from codecoach.ast_extractors.javascript import (
    CLASS_KINDS,
    class_superclass,
    field_name_node,
    function_name,
    identifier_name,
    method_kind,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="class_syntax", category="classes", order=140)


def _is_private(name_node) -> bool:
    return kind(name_node) is NodeKind.PRIVATE_PROPERTY_IDENTIFIER


def _class_methods(context):
    """(method, kind) for methods declared in a class body with a public name."""
    for node in context.nodes(NodeKind.METHOD_DEFINITION):
        if kind(node.parent) is not NodeKind.CLASS_BODY:
            continue
        if _is_private(field(node, "name")):
            continue
        yield node, method_kind(node)


def find_class_declaration(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(*CLASS_KINDS)[:1]:
        name = function_name(node)
        return [
            detection(
                "class-declaration",
                node,
                positive=True,
                idiomatic=True,
                details=f"Class '{name}' declared" if name else "Class expression used",
            )
        ]
    return []


def find_class_methods(context: StandardRuleContext) -> list[Detection]:
    for node, member_kind in _class_methods(context):
        if member_kind == "constructor":
            details = "Class constructor defined"
        elif member_kind == "method":
            details = f"Class method '{function_name(node)}' defined"
        else:
            continue
        return [detection("class-methods", node, positive=True, idiomatic=True, details=details)]
    return []


def find_class_inheritance(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(*CLASS_KINDS):
        parent = class_superclass(node)
        if parent is None:
            continue
        return [
            detection(
                "class-inheritance",
                node,
                positive=True,
                idiomatic=True,
                details=f"Class extends {identifier_name(parent) or 'parent class'}",
            )
        ]
    return []


def find_class_getters_setters(context: StandardRuleContext) -> list[Detection]:
    for node, member_kind in _class_methods(context):
        if member_kind in ("get", "set"):
            return [
                detection(
                    "class-getters-setters",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f"Class {member_kind}ter '{function_name(node)}' defined",
                )
            ]
    return []


def find_class_private_fields(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.FIELD_DEFINITION, NodeKind.METHOD_DEFINITION):
        name = field_name_node(node) if kind(node) is NodeKind.FIELD_DEFINITION else field(node, "name")
        if _is_private(name):
            return [
                detection(
                    "class-private-fields",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Private class member (#) used",
                )
            ]
    return []


def find_class_properties(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.FIELD_DEFINITION):
        name = field_name_node(node)
        if name is None or _is_private(name):
            continue
        return [
            detection(
                "class-properties",
                node,
                positive=True,
                idiomatic=True,
                details=f"Class property '{node_text(name)}' declared",
            )
        ]
    return []
