"""Error boundary and retry detectors."""

import re

from codecoach.ast_extractors.base import Node, NodeKind, field, kind, node_text, walk
from codecoach.ast_extractors.javascript import (
    call_name,
    class_members,
    class_superclass,
    declarator_name,
    field_name_node,
    function_name,
    identifier_name,
    if_parts,
    jsx_attributes,
    jsx_opening,
    member_property,
    string_value,
    unwrap,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(
    name="error_boundaries", category="react-errors", order=360, requires_react=True
)

ELEMENT_KINDS = (NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT)

COMPONENT_BASES = frozenset(["Component", "PureComponent"])

FALLBACK_ATTRIBUTES = frozenset(["fallback", "FallbackComponent", "fallbackRender"])

RESET_ATTRIBUTES = frozenset(["onReset", "resetKeys"])

RESET_CALLS = ("resetErrorBoundary", "resetError", "retry")

ERROR_BOUNDARY_TAG = re.compile(r"ErrorBoundary", re.IGNORECASE)

RETRY_NAME = re.compile(r"retry", re.IGNORECASE)


def _extends_component(cls: Node) -> bool:
    base = class_superclass(cls)
    return identifier_name(base) in COMPONENT_BASES or member_property(base) == "Component"


def _member_names(cls: Node) -> tuple[set[str], set[str]]:
    """(method names, field names) declared in a class body."""
    methods, fields = set(), set()
    for member in class_members(cls):
        if kind(member) is NodeKind.METHOD_DEFINITION:
            methods.add(function_name(member))
        elif kind(member) is NodeKind.FIELD_DEFINITION:
            fields.add(node_text(field_name_node(member)))
    return methods, fields


def _boundary_attributes(element: Node) -> set[str]:
    """Attribute names of an element whose plain tag name mentions ErrorBoundary."""
    name = field(jsx_opening(element), "name")
    if kind(name) is not NodeKind.IDENTIFIER or not ERROR_BOUNDARY_TAG.search(node_text(name)):
        return set()
    return {attr_name for attr_name, _value, _attr in jsx_attributes(element)}


def find_error_boundary_basics(context: StandardRuleContext) -> list[Detection]:
    """Class components with error lifecycle methods, then the library import."""
    found = []
    for cls in context.nodes(NodeKind.CLASS_DECLARATION):
        if not _extends_component(cls):
            continue
        methods, fields = _member_names(cls)
        did_catch = "componentDidCatch" in methods
        derived = "getDerivedStateFromError" in methods | fields
        if not (did_catch or derived):
            continue
        name = function_name(cls)
        label = f" '{name}'" if name else ""
        hook = "componentDidCatch" if did_catch else "getDerivedStateFromError"
        found.append(
            detection(
                "error-boundary-basics",
                cls,
                positive=True,
                idiomatic=True,
                details=f"Error boundary class{label} with {hook}",
            )
        )

    for node in context.nodes(NodeKind.IMPORT_STATEMENT):
        if string_value(field(node, "source")) == "react-error-boundary":
            found.append(
                detection(
                    "error-boundary-basics",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="react-error-boundary library used",
                )
            )
            break
    return found


def find_error_boundary_fallback(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(*ELEMENT_KINDS, NodeKind.IF_STATEMENT):
        if kind(node) is NodeKind.IF_STATEMENT:
            condition, _consequence, _alternative = if_parts(node)
            if member_property(unwrap(condition)) == "hasError":
                return [
                    detection(
                        "error-boundary-fallback",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Error boundary renders fallback when hasError is true",
                    )
                ]
        elif _boundary_attributes(node) & FALLBACK_ATTRIBUTES:
            return [
                detection(
                    "error-boundary-fallback",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Error boundary with fallback UI",
                )
            ]
    return []


def find_error_boundary_recovery(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.CALL_EXPRESSION, *ELEMENT_KINDS):
        if kind(node) is NodeKind.CALL_EXPRESSION:
            if call_name(node) in RESET_CALLS:
                return [
                    detection(
                        "error-boundary-recovery",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Error recovery mechanism with reset/retry function",
                    )
                ]
        elif _boundary_attributes(node) & RESET_ATTRIBUTES:
            return [
                detection(
                    "error-boundary-recovery",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Error boundary with recovery/reset capability",
                )
            ]
    return []


def _is_retry_loop(loop: Node) -> bool:
    kinds = {kind(n) for n in walk(loop)}
    return NodeKind.TRY_STATEMENT in kinds and NodeKind.AWAIT_EXPRESSION in kinds


def find_retry_logic(context: StandardRuleContext) -> list[Detection]:
    candidates = context.nodes(
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.VARIABLE_DECLARATOR,
        NodeKind.WHILE_STATEMENT,
        NodeKind.FOR_STATEMENT,
    )
    for node in candidates:
        k = kind(node)
        if k is NodeKind.FUNCTION_DECLARATION:
            name = function_name(node)
            if name and RETRY_NAME.search(name):
                details = f"Retry logic in function '{name}'"
                break
        elif k is NodeKind.VARIABLE_DECLARATOR:
            name = declarator_name(node)
            if name and RETRY_NAME.search(name):
                details = f"Retry logic with '{name}'"
                break
        elif _is_retry_loop(node):
            details = "Retry loop with try-catch and async operations"
            break
    else:
        return []
    return [detection("retry-logic", node, positive=True, idiomatic=True, details=details)]
