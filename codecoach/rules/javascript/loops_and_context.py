"""Loop constructs and ``this`` binding detectors."""

from codecoach.ast_extractors.base import NodeKind, ancestors, kind
from codecoach.ast_extractors.javascript import is_for_in, is_for_of
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    by_slug_and_details,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="loops_and_context", category="control", order=60)

BINDING_METHODS = ("bind", "call", "apply")


def find_for_loop_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("for-loop-basics", node, positive=True, idiomatic=True, details="for loop used")
        for node in context.nodes(NodeKind.FOR_STATEMENT)[:1]
    ]


def find_for_of_loops(context: StandardRuleContext) -> list[Detection]:
    """First for...of (good) and first for...in (style note)."""
    found = []
    for node in context.nodes(NodeKind.FOR_IN_STATEMENT):
        if is_for_of(node):
            found.append(
                detection(
                    "for-of-loops",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="for...of loop used for iteration",
                )
            )
        elif is_for_in(node):
            found.append(
                detection(
                    "for-of-loops",
                    node,
                    negative=True,
                    trivial=True,
                    details="for...in iterates over keys - consider for...of for values",
                )
            )
    return keep_first(found, key=by_slug_and_details)


def find_while_loops(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("while-loops", node, positive=True, idiomatic=True, details="while loop used")
        for node in context.nodes(NodeKind.WHILE_STATEMENT, NodeKind.DO_STATEMENT)[:1]
    ]


def find_this_binding(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("this-binding", node, positive=True, idiomatic=True, details="'this' keyword used")
        for node in context.nodes(NodeKind.THIS)[:1]
    ]


def find_bind_call_apply(context: StandardRuleContext) -> list[Detection]:
    found = [
        detection(
            "bind-call-apply",
            call,
            positive=True,
            idiomatic=True,
            details=f".{method}() used for context binding",
        )
        for call, method in context.method_calls(*BINDING_METHODS)
    ]
    return keep_first(found, key=by_slug_and_details)


def find_arrow_vs_regular_this(context: StandardRuleContext) -> list[Detection]:
    """``this`` classified by the nearest enclosing arrow or regular function."""
    found = []
    for node in context.nodes(NodeKind.THIS):
        for parent in ancestors(node):
            k = kind(parent)
            if k is NodeKind.ARROW_FUNCTION:
                found.append(
                    detection(
                        "arrow-vs-regular-this",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="'this' in arrow function inherits from enclosing scope (lexical this)",
                    )
                )
                break
            if k in (NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION):
                found.append(
                    detection(
                        "arrow-vs-regular-this",
                        node,
                        positive=True,
                        details="'this' in regular function depends on call site (dynamic this)",
                    )
                )
                break
    return keep_first(found, key=by_slug_and_details)
