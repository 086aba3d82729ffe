"""Switch, for...in, guard clause and short-circuit detectors."""

from codecoach.ast_extractors.base import NodeKind, children, kind
from codecoach.ast_extractors.javascript import (
    block_statements,
    first_expression,
    if_parts,
    is_for_in,
    operator,
    statements,
    switch_cases,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="control_flow", category="control", order=130)

CASE_TERMINATORS = frozenset(
    [NodeKind.BREAK_STATEMENT, NodeKind.RETURN_STATEMENT, NodeKind.THROW_STATEMENT]
)

# Guard clauses are only looked for among a function's leading statements
GUARD_WINDOW = 3


def _has_fallthrough(switch) -> bool:
    for case in switch_cases(switch):
        body = statements(case)
        if body and kind(body[-1]) not in CASE_TERMINATORS:
            return True
    return False


def find_switch_case(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.SWITCH_STATEMENT)[:1]:
        fallthrough = _has_fallthrough(node)
        return [
            detection(
                "switch-case",
                node,
                positive=not fallthrough,
                negative=fallthrough,
                idiomatic=not fallthrough,
                trivial=fallthrough,
                details="switch statement has potential fall-through cases"
                if fallthrough
                else "switch/case statement used",
            )
        ]
    return []


def find_for_in_loops(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.FOR_IN_STATEMENT):
        if is_for_in(node):
            return [
                detection(
                    "for-in-loops",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="for...in loop used for object key iteration",
                )
            ]
    return []


def _is_guard(statement) -> bool:
    if kind(statement) is not NodeKind.IF_STATEMENT:
        return False
    _condition, consequence, _alternative = if_parts(statement)
    if kind(consequence) is NodeKind.RETURN_STATEMENT:
        return True
    if kind(consequence) is NodeKind.STATEMENT_BLOCK:
        inner = children(consequence)
        return len(inner) == 1 and kind(inner[0]) is NodeKind.RETURN_STATEMENT
    return False


def find_guard_clauses(context: StandardRuleContext) -> list[Detection]:
    for fn in context.nodes(
        NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION
    ):
        body = block_statements(fn)
        if body and any(_is_guard(stmt) for stmt in body[:GUARD_WINDOW]):
            return [
                detection(
                    "guard-clauses",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Guard clause pattern — early return for edge cases",
                )
            ]
    return []


def find_short_circuit_evaluation(context: StandardRuleContext) -> list[Detection]:
    """First ``cond && act()`` statement or ``a || default`` expression."""
    for node in context.nodes(NodeKind.EXPRESSION_STATEMENT, NodeKind.BINARY_EXPRESSION):
        if kind(node) is NodeKind.EXPRESSION_STATEMENT:
            expr = first_expression(node)
            op = operator(expr) if kind(expr) is NodeKind.BINARY_EXPRESSION else None
            if op in ("&&", "||"):
                return [
                    detection(
                        "short-circuit-evaluation",
                        node,
                        positive=True,
                        idiomatic=True,
                        details=f"Short-circuit evaluation with {op}",
                    )
                ]
        elif operator(node) == "||":
            return [
                detection(
                    "short-circuit-evaluation",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Logical OR (||) used for default value pattern",
                )
            ]
    return []
