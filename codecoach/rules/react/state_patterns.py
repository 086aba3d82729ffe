"""State management detectors built on ``useState``/``useReducer`` bindings."""

import re

from codecoach.ast_extractors.base import Node, NodeKind, children, contains, field, kind, node_text
from codecoach.ast_extractors.javascript import (
    arguments,
    function_body,
    function_name,
    identifier_name,
    jsx_value_expression,
    member_object,
    method_call,
    parameters,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection
from codecoach.rules.react._shared import state_bindings, state_setters

METADATA = RuleMetadata(name="state_patterns", category="react-state", order=340, requires_react=True)

STATE_MUTATING_METHODS = frozenset(["push", "pop", "shift", "unshift", "splice", "sort", "reverse"])

LOADING_NAMES = ("loading", "isLoading", "isFetching", "pending", "isPending")

ERROR_NAMES = ("error", "isError", "hasError", "errorMessage", "err")

REDUCER_NAME = re.compile(r"reducer", re.IGNORECASE)

MIN_COMPLEX_STATE_KEYS = 3


def find_state_immutability(context: StandardRuleContext) -> list[Detection]:
    """Mutating calls and property assignments on ``useState`` values.

    When state exists and nothing mutates it, one unlocated positive finding
    is reported instead.
    """
    state_vars = {state for state, _setter, _call in state_bindings(context) if state}
    if not state_vars:
        return []

    found = []
    for node in context.nodes(NodeKind.CALL_EXPRESSION, NodeKind.ASSIGNMENT_EXPRESSION):
        if kind(node) is NodeKind.CALL_EXPRESSION:
            obj, method = method_call(node)
            if method in STATE_MUTATING_METHODS and identifier_name(obj) in state_vars:
                found.append(
                    detection(
                        "state-immutability",
                        node,
                        negative=True,
                        details=f"Direct mutation of state with .{method}() - use immutable update instead",
                    )
                )
        else:
            left = field(node, "left")
            if kind(left) is NodeKind.MEMBER_EXPRESSION and identifier_name(member_object(left)) in state_vars:
                found.append(
                    detection(
                        "state-immutability",
                        node,
                        negative=True,
                        details="Direct property assignment on state - use immutable update with spread/map",
                    )
                )

    if not found:
        found.append(
            detection(
                "state-immutability",
                positive=True,
                idiomatic=True,
                details="State updates appear to follow immutability patterns",
            )
        )
    return found


def find_lifting_state(context: StandardRuleContext) -> list[Detection]:
    setters = state_setters(context)
    if not setters:
        return []
    for attr in context.nodes(NodeKind.JSX_ATTRIBUTE):
        parts = children(attr)
        if len(parts) < 2 or kind(parts[1]) is not NodeKind.JSX_EXPRESSION:
            continue
        if identifier_name(jsx_value_expression(parts[1])) in setters:
            return [
                detection(
                    "lifting-state",
                    attr,
                    positive=True,
                    idiomatic=True,
                    details="State setter passed as prop - lifted state pattern",
                )
            ]
    return []


def _named_state(context, slug, names, label):
    for state, _setter, call in state_bindings(context):
        if state in names:
            return [
                detection(
                    slug,
                    call,
                    positive=True,
                    idiomatic=True,
                    details=f"{label} state '{state}' tracked with useState",
                )
            ]
    return []


def find_loading_states(context: StandardRuleContext) -> list[Detection]:
    return _named_state(context, "loading-states", LOADING_NAMES, "Loading")


def find_error_state_handling(context: StandardRuleContext) -> list[Detection]:
    return _named_state(context, "error-state-handling", ERROR_NAMES, "Error")


def _looks_like_reducer(fn: Node) -> bool:
    if REDUCER_NAME.search(function_name(fn) or ""):
        return True
    params = parameters(fn)
    return len(params) == 2 and (params[0].name == "state" or params[1].name == "action")


def find_reducer_patterns(context: StandardRuleContext) -> list[Detection]:
    found = []
    functions = context.nodes(
        NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION
    )
    for fn in functions:
        if not _looks_like_reducer(fn):
            continue
        has_switch = contains(
            function_body(fn),
            lambda n: kind(n) is NodeKind.SWITCH_STATEMENT,
            max_depth=context.scan_depth,
        )
        if has_switch:
            found.append(
                detection(
                    "reducer-patterns",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Reducer with switch/case action handling pattern",
                )
            )
    return found


def find_complex_state(context: StandardRuleContext) -> list[Detection]:
    for call, _name in context.calls_named("useReducer"):
        args = arguments(call)
        if len(args) < 2 or kind(args[1]) is not NodeKind.OBJECT:
            continue
        if len(children(args[1])) >= MIN_COMPLEX_STATE_KEYS:
            return [
                detection(
                    "complex-state",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="useReducer managing complex state object",
                )
            ]
    return []


def _identifier_keys(obj: Node) -> list[str]:
    keys = []
    for prop in children(obj):
        k = kind(prop)
        if k is NodeKind.SHORTHAND_PROPERTY_IDENTIFIER:
            keys.append(node_text(prop))
        elif k in (NodeKind.PAIR, NodeKind.METHOD_DEFINITION):
            key = field(prop, "key") if k is NodeKind.PAIR else field(prop, "name")
            if kind(key) is NodeKind.PROPERTY_IDENTIFIER:
                keys.append(node_text(key))
    return keys


def find_state_normalization(context: StandardRuleContext) -> list[Detection]:
    """Objects shaped like ``{ byId, allIds }`` or holding ``entities``."""
    for obj in context.nodes(NodeKind.OBJECT):
        keys = [k.lower() for k in _identifier_keys(obj)]
        by_id = any("byid" in k for k in keys)
        all_ids = any("allids" in k for k in keys)
        if (by_id and all_ids) or any("entities" in k for k in keys):
            return [
                detection(
                    "state-normalization",
                    obj,
                    positive=True,
                    idiomatic=True,
                    details="Normalized state structure detected (byId/allIds or entities pattern)",
                )
            ]
    return []
