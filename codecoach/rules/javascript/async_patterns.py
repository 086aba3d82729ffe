"""Promise and async/await detectors."""

from codecoach.ast_extractors.base import NodeKind, kind
from codecoach.ast_extractors.javascript import (
    callee,
    identifier_name,
    in_try_block,
    is_async,
    method_call,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="async_patterns", category="async", order=20)


def _good(slug, node, details):
    return detection(slug, node, positive=True, idiomatic=True, details=details)


def find_promise_basics(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.NEW_EXPRESSION, NodeKind.CALL_EXPRESSION):
        if kind(node) is NodeKind.NEW_EXPRESSION:
            if identifier_name(callee(node)) == "Promise":
                found.append(_good("promise-basics", node, "Promise constructor used"))
        elif method_call(node)[1] == "then":
            found.append(_good("promise-basics", node, ".then() used"))
    return found


def find_promise_chaining(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _method in context.method_calls("then"):
        inner, _ = method_call(call)
        if kind(inner) is NodeKind.CALL_EXPRESSION and method_call(inner)[1] == "then":
            found.append(_good("promise-chaining", call, "Promise chaining detected"))
    return found


def find_promise_catch(context: StandardRuleContext) -> list[Detection]:
    """Every .catch() handler, or one finding when .then() chains have none."""
    calls = context.method_calls("then", "catch")
    found = [
        _good("promise-catch", call, ".catch() error handler present")
        for call, method in calls
        if method == "catch"
    ]
    has_then = any(method == "then" for _call, method in calls)
    if has_then and not found:
        found.append(
            detection(
                "promise-catch",
                negative=True,
                details="Promise chain without .catch() error handler",
            )
        )
    return found


def find_async_await_basics(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.FUNCTION_EXPRESSION,
        NodeKind.ARROW_FUNCTION,
        NodeKind.AWAIT_EXPRESSION,
    ):
        if kind(node) is NodeKind.AWAIT_EXPRESSION:
            found.append(_good("async-await-basics", node, "await expression used"))
        elif is_async(node):
            found.append(_good("async-await-basics", node, "async function declared"))
    return found


def find_async_await_error_handling(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.AWAIT_EXPRESSION):
        if in_try_block(node):
            found.append(
                _good("async-await-error-handling", node, "await properly wrapped in try-catch")
            )
        else:
            found.append(
                detection(
                    "async-await-error-handling",
                    node,
                    negative=True,
                    details="await without try-catch error handling",
                )
            )
    return found


def find_promise_all(context: StandardRuleContext) -> list[Detection]:
    return [
        _good("promise-all", call, "Promise.all() for parallel execution")
        for call, _method in context.static_calls("Promise", "all")
    ]


def find_promise_race(context: StandardRuleContext) -> list[Detection]:
    return [
        _good("promise-race", call, "Promise.race() detected")
        for call, _method in context.static_calls("Promise", "race")
    ]


def find_request_cancellation(context: StandardRuleContext) -> list[Detection]:
    return [
        _good("request-cancellation", node, "AbortController for request cancellation")
        for node, _name in context.constructions("AbortController")
    ]
