"""Function, parameter and closure detectors."""

from dataclasses import dataclass

from codecoach.ast_extractors.base import Node, NodeKind, ancestors, kind, node_text, walk
from codecoach.ast_extractors.javascript import (
    DECLARATION_KINDS,
    LOOP_KINDS,
    arguments,
    block_statements,
    call_name,
    declarator_name,
    declarators,
    function_body,
    function_name,
    identifier_name,
    is_deferred,
    is_function_literal,
    is_hook_name,
    method_call,
    parameter_names,
    parameters,
    return_argument,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="function_patterns", category="functions", order=50)


@dataclass(frozen=True)
class FunctionPatterns:
    """Names and node kinds used by the function detectors."""

    SIDE_EFFECT_GLOBALS = frozenset(["console", "document", "window"])

    CALLBACK_ARGUMENT_KINDS = frozenset(
        [NodeKind.ARROW_FUNCTION, NodeKind.FUNCTION_EXPRESSION, NodeKind.IDENTIFIER]
    )

    STATEFUL_RETURN_KINDS = frozenset(
        [NodeKind.OBJECT, NodeKind.ARROW_FUNCTION, NodeKind.FUNCTION_EXPRESSION]
    )


FUNCTION_NODE_KINDS = (
    NodeKind.FUNCTION_DECLARATION,
    NodeKind.FUNCTION_EXPRESSION,
    NodeKind.ARROW_FUNCTION,
)


def find_default_parameters(context: StandardRuleContext) -> list[Detection]:
    for fn in context.nodes(*FUNCTION_NODE_KINDS):
        if any(p.default is not None for p in parameters(fn)):
            return [
                detection(
                    "default-parameters",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Default parameter values used",
                )
            ]
    return []


def find_rest_parameters(context: StandardRuleContext) -> list[Detection]:
    for fn in context.nodes(*FUNCTION_NODE_KINDS):
        if any(p.rest for p in parameters(fn)):
            return [
                detection(
                    "rest-parameters",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Rest parameters (...args) used",
                )
            ]
    return []


def _has_side_effects(body: Node, params: set[str]) -> tuple[bool, bool]:
    """(side effects, has return) for a function body, nested functions included."""
    side_effects = False
    returns = False
    for node in walk(body):
        k = kind(node)
        if k in (NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.AUGMENTED_ASSIGNMENT_EXPRESSION):
            left = node.child_by_field_name("left")
            target = identifier_name(left)
            if target is not None and target not in params:
                side_effects = True
            if kind(left) in (NodeKind.MEMBER_EXPRESSION, NodeKind.SUBSCRIPT_EXPRESSION):
                side_effects = True
        elif k is NodeKind.MEMBER_EXPRESSION:
            owner = identifier_name(node.child_by_field_name("object"))
            if owner in FunctionPatterns.SIDE_EFFECT_GLOBALS:
                side_effects = True
        elif k is NodeKind.RETURN_STATEMENT:
            returns = True
    return side_effects, returns


def find_pure_functions(context: StandardRuleContext) -> list[Detection]:
    found = []
    for fn in context.nodes(NodeKind.FUNCTION_DECLARATION):
        name = function_name(fn)
        body = function_body(fn)
        if name is None or body is None:
            continue
        params = {p.name for p in parameters(fn) if p.name is not None}
        side_effects, returns = _has_side_effects(body, params)
        if returns and not side_effects:
            found.append(
                detection(
                    "pure-functions",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details=f"Function '{name}' appears to be a pure function",
                )
            )
    return found


def find_callback_functions(context: StandardRuleContext) -> list[Detection]:
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        name = call_name(call) or method_call(call)[1] or ""
        if is_hook_name(name):
            continue
        if any(kind(arg) in FunctionPatterns.CALLBACK_ARGUMENT_KINDS for arg in arguments(call)):
            return [
                detection(
                    "callback-functions",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Function passed as callback argument",
                )
            ]
    return []


def _returns_function(fn: Node) -> bool:
    body = function_body(fn)
    if is_function_literal(body):
        return True
    for node in walk(body, prune=is_deferred):
        if kind(node) is NodeKind.RETURN_STATEMENT and is_function_literal(return_argument(node)):
            return True
    return False


def find_higher_order_functions(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "higher-order-functions",
            fn,
            positive=True,
            idiomatic=True,
            details="Higher-order function that returns a function",
        )
        for fn in context.nodes(*FUNCTION_NODE_KINDS)
        if _returns_function(fn)
    ]


def _local_names(fn: Node) -> set[str]:
    """Parameters and variables a function declares in its own scope."""
    names = set(parameter_names(fn))
    for node in walk(function_body(fn), prune=is_deferred):
        if kind(node) in DECLARATION_KINDS:
            for declarator in declarators(node):
                name = declarator_name(declarator)
                if name is not None:
                    names.add(name)
    return names


def find_closure_basics(context: StandardRuleContext) -> list[Detection]:
    """First nested function reading a name declared by an enclosing function."""
    for fn in context.nodes(*FUNCTION_NODE_KINDS):
        enclosing = [a for a in ancestors(fn) if kind(a) in FUNCTION_NODE_KINDS]
        if not enclosing:
            continue

        outer: set[str] = set()
        for parent in enclosing:
            outer |= _local_names(parent)
        outer -= set(parameter_names(fn))
        if not outer:
            continue

        for node in walk(function_body(fn), prune=is_deferred):
            if kind(node) is NodeKind.IDENTIFIER and node_text(node) in outer:
                return [
                    detection(
                        "closure-basics",
                        fn,
                        positive=True,
                        idiomatic=True,
                        details="Closure: inner function accesses outer scope variables",
                    )
                ]
    return []


def find_closure_in_loops(context: StandardRuleContext) -> list[Detection]:
    for fn in context.nodes(NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION):
        if any(kind(a) in LOOP_KINDS for a in ancestors(fn)):
            return [
                detection(
                    "closure-in-loops",
                    fn,
                    negative=True,
                    details="Function created inside loop - may capture loop variable by reference",
                )
            ]
    return []


def find_closure_state(context: StandardRuleContext) -> list[Detection]:
    for fn in context.nodes(*FUNCTION_NODE_KINDS):
        body = block_statements(fn)
        if not body:
            continue
        has_local = any(kind(stmt) in DECLARATION_KINDS for stmt in body)
        returns_state = any(
            kind(stmt) is NodeKind.RETURN_STATEMENT
            and kind(return_argument(stmt)) in FunctionPatterns.STATEFUL_RETURN_KINDS
            for stmt in body
        )
        if has_local and returns_state:
            return [
                detection(
                    "closure-state",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Closure used to encapsulate private state",
                )
            ]
    return []
