"""Hook and JSX bookkeeping shared by the React detector modules."""

from collections.abc import Iterator

from codecoach.ast_extractors.base import Node, NodeKind, children, kind, node_text, walk
from codecoach.ast_extractors.javascript import (
    arguments,
    block_statements,
    declarator_parts,
    enclosing_declarator,
    function_name,
    is_function_literal,
    is_hook_name,
    is_jsx,
)
from codecoach.rules.base import StandardRuleContext


def state_pattern(call: Node) -> Node | None:
    """Array pattern a useState call is destructured into, or None."""
    declarator = enclosing_declarator(call)
    if declarator is None:
        return None
    target, _value = declarator_parts(declarator)
    if kind(target) is NodeKind.ARRAY_PATTERN:
        return target
    return None


def state_bindings(context: StandardRuleContext) -> list[tuple[str | None, str | None, Node]]:
    """(state name, setter name, call) for each ``const [x, setX] = useState()``."""
    bindings = []
    for call, _name in context.calls_named("useState"):
        elements = children(state_pattern(call))
        names = [node_text(e) if kind(e) is NodeKind.IDENTIFIER else None for e in elements[:2]]
        names += [None] * (2 - len(names))
        bindings.append((names[0], names[1], call))
    return bindings


def state_setters(context: StandardRuleContext) -> set[str]:
    return {setter for _state, setter, _call in state_bindings(context) if setter}


def effect_has_cleanup(call: Node) -> bool:
    """True when the effect callback's block body returns at top level."""
    args = arguments(call)
    if not args:
        return False
    body = block_statements(args[0]) or []
    return any(kind(stmt) is NodeKind.RETURN_STATEMENT for stmt in body)


def custom_hook_definitions(context: StandardRuleContext) -> Iterator[tuple[Node, str, Node]]:
    """(reported node, name, function) for functions named ``useXxx``.

    Declarations report the function itself; ``const useX = () => ...``
    reports the declarator.
    """
    for node in context.nodes(NodeKind.FUNCTION_DECLARATION, NodeKind.VARIABLE_DECLARATOR):
        if kind(node) is NodeKind.FUNCTION_DECLARATION:
            name, fn = function_name(node), node
        else:
            target, fn = declarator_parts(node)
            if not is_function_literal(fn) or kind(target) is not NodeKind.IDENTIFIER:
                continue
            name = node_text(target)
        if is_hook_name(name):
            yield node, name, fn


def contains_jsx(node: Node | None, max_depth: int | None = None) -> bool:
    return any(is_jsx(n) for n in walk(node, max_depth=max_depth))
