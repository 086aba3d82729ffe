"""Effect pitfalls, refs and custom hook design."""

from codecoach.ast_extractors.base import NodeKind, field, kind, same_node, walk
from codecoach.ast_extractors.javascript import (
    arguments,
    block_statements,
    call_name,
    function_body,
    is_async,
    is_deferred,
    is_function_literal,
    is_hook_name,
    jsx_attribute,
    jsx_value_expression,
    member_property,
    parameters,
    return_argument,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection
from codecoach.rules.react._shared import custom_hook_definitions, state_setters

METADATA = RuleMetadata(
    name="advanced_hooks", category="react-hooks", order=320, requires_react=True
)

ELEMENT_KINDS = (NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT)


def _has_inner_async(callback) -> bool:
    return any(
        is_deferred(node) and is_async(node) and not same_node(node, callback)
        for node in walk(callback)
    )


def find_use_effect_async(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useEffect"):
        args = arguments(call)
        if not args:
            continue
        callback = args[0]
        if is_function_literal(callback) and is_async(callback):
            found.append(
                detection(
                    "useeffect-async",
                    call,
                    negative=True,
                    details="async function passed directly to useEffect - define async function inside and call it",
                )
            )
        elif _has_inner_async(callback):
            found.append(
                detection(
                    "useeffect-async",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Async logic properly wrapped inside useEffect callback",
                )
            )
    return found


def find_use_effect_infinite_loop(context: StandardRuleContext) -> list[Detection]:
    """Effects without a dependency array that call a state setter."""
    setters = state_setters(context)
    if not setters:
        return []
    found = []
    for call, _name in context.calls_named("useEffect"):
        args = arguments(call)
        if len(args) != 1:
            continue
        if any(
            kind(node) is NodeKind.CALL_EXPRESSION and call_name(node) in setters
            for node in walk(args[0])
        ):
            found.append(
                detection(
                    "useeffect-infinite-loop",
                    call,
                    negative=True,
                    details="useEffect sets state without dependency array - potential infinite loop",
                )
            )
    return found


def _ref_attributes(context):
    for element in context.nodes(*ELEMENT_KINDS):
        attribute = jsx_attribute(element, "ref")
        if attribute is not None:
            yield attribute


def find_use_ref_dom(context: StandardRuleContext) -> list[Detection]:
    for _value, attr in _ref_attributes(context):
        return [
            detection(
                "useref-dom",
                attr,
                positive=True,
                idiomatic=True,
                details="ref attribute used on DOM element",
            )
        ]
    return []


def find_use_ref_mutable(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.ASSIGNMENT_EXPRESSION):
        if member_property(field(node, "left")) == "current":
            return [
                detection(
                    "useref-mutable",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Mutable ref value updated via .current assignment",
                )
            ]
    return []


def find_callback_refs(context: StandardRuleContext) -> list[Detection]:
    for value, attr in _ref_attributes(context):
        if kind(value) is NodeKind.JSX_EXPRESSION and is_function_literal(jsx_value_expression(value)):
            return [
                detection(
                    "callback-refs",
                    attr,
                    positive=True,
                    idiomatic=True,
                    details="Callback ref pattern used",
                )
            ]
    return []


def find_custom_hook_parameters(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "custom-hook-parameters",
            node,
            positive=True,
            idiomatic=True,
            details=f"Custom hook {name} accepts parameters",
        )
        for node, name, fn in custom_hook_definitions(context)
        if parameters(fn)
    ]


def find_custom_hook_return(context: StandardRuleContext) -> list[Detection]:
    """Custom hooks whose block body has a top-level ``return <value>``."""
    found = []
    for node, name, fn in custom_hook_definitions(context):
        body = block_statements(fn) or []
        if any(
            kind(stmt) is NodeKind.RETURN_STATEMENT and return_argument(stmt) is not None
            for stmt in body
        ):
            found.append(
                detection(
                    "custom-hook-return",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f"Custom hook {name} returns values",
                )
            )
    return found


def find_custom_hook_composition(context: StandardRuleContext) -> list[Detection]:
    """Custom hooks that call other hooks directly in their own body."""
    found = []
    for node, name, fn in custom_hook_definitions(context):
        if any(
            kind(inner) is NodeKind.CALL_EXPRESSION and is_hook_name(call_name(inner))
            for inner in walk(function_body(fn), prune=is_deferred)
        ):
            found.append(
                detection(
                    "custom-hook-composition",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f"Custom hook {name} composes other hooks",
                )
            )
    return found
