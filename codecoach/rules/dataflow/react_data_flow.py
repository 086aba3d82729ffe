"""Data-flow detectors for React state and effect lifetimes."""

from codecoach.ast_extractors.base import NodeKind, field, kind, walk
from codecoach.ast_extractors.javascript import (
    MUTATING_ARRAY_METHODS,
    arguments,
    block_statements,
    call_name,
    identifier_name,
    is_function_literal,
    member_object,
    member_property,
    method_call,
    return_argument,
    subscript_index,
    unwrap,
)
from codecoach.rules.base import (
    Detection,
    DetectionSource,
    RuleMetadata,
    StandardRuleContext,
    detection,
)
from codecoach.rules.react._shared import state_bindings

METADATA = RuleMetadata(
    name="react_data_flow",
    category="data-flow",
    order=410,
    requires_react=True,
    source=DetectionSource.DATAFLOW,
)

SUBSCRIPTION_METHODS = frozenset(
    ["addEventListener", "setInterval", "setTimeout", "subscribe", "observe", "on"]
)

ASSIGNMENT_KINDS = (NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.AUGMENTED_ASSIGNMENT_EXPRESSION)


def _written_property(target) -> str:
    if kind(target) is NodeKind.MEMBER_EXPRESSION:
        return member_property(target) or "?"
    return identifier_name(subscript_index(target)) or "?"


def find_state_mutation_react(context: StandardRuleContext) -> list[Detection]:
    """Writes to ``useState`` values, assignments first, then mutating calls."""
    state_vars = {state for state, _setter, _call in state_bindings(context) if state}
    if not state_vars:
        return []

    found = []
    for node in context.nodes(*ASSIGNMENT_KINDS):
        target = unwrap(field(node, "left"))
        if kind(target) not in (NodeKind.MEMBER_EXPRESSION, NodeKind.SUBSCRIPT_EXPRESSION):
            continue
        name = identifier_name(member_object(target))
        if name not in state_vars:
            continue
        found.append(
            detection(
                "state-mutation-react",
                node,
                negative=True,
                details=f"Direct mutation of state variable '{name}.{_written_property(target)}' — use "
                "the setter function with a new object/array instead.",
            )
        )

    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        obj, method = method_call(call)
        name = identifier_name(obj)
        if name not in state_vars or method not in MUTATING_ARRAY_METHODS:
            continue
        found.append(
            detection(
                "state-mutation-react",
                call,
                negative=True,
                details=f"Calling '{name}.{method}()' mutates state directly — use the setter with a "
                f"new array (e.g., [...{name}, newItem]).",
            )
        )
    return found


def _subscription_name(callback) -> str | None:
    """Last subscribing call made anywhere inside the effect body."""
    found = None
    for node in walk(field(callback, "body")):
        if kind(node) is not NodeKind.CALL_EXPRESSION:
            continue
        _obj, method = method_call(node)
        name = method or call_name(node)
        if name in SUBSCRIPTION_METHODS:
            found = name
    return found


def _returns_cleanup(callback) -> bool:
    for stmt in block_statements(callback) or []:
        if kind(stmt) is NodeKind.RETURN_STATEMENT and is_function_literal(return_argument(stmt)):
            return True
    return False


def find_missing_cleanup_effect(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useEffect"):
        args = arguments(call)
        if not args or not is_function_literal(args[0]):
            continue
        subscription = _subscription_name(args[0])
        if subscription is None or _returns_cleanup(args[0]):
            continue
        found.append(
            detection(
                "missing-cleanup-effect",
                call,
                negative=True,
                details=f"useEffect uses '{subscription}' but has no cleanup return — may cause memory "
                "leaks. Return a cleanup function.",
            )
        )
    return found
