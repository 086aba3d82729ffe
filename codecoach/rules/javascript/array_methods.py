"""Array iteration method detectors (map, filter, reduce, find, some/every, forEach)."""

from dataclasses import dataclass

from codecoach.ast_extractors.base import Node, NodeKind, contains, kind
from codecoach.ast_extractors.javascript import (
    arguments,
    function_body,
    is_function_literal,
    method_call,
    parameters,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="array_methods", category="arrays", order=10)


@dataclass(frozen=True)
class ArrayMethodPatterns:
    """Method names the iteration detectors key on."""

    CHAIN_METHODS = frozenset(["map", "filter", "reduce", "find", "some", "every", "flatMap", "flat"])

    SOME_EVERY = frozenset(["some", "every"])


def has_return(body: Node, max_depth: int) -> bool:
    return contains(body, lambda n: kind(n) is NodeKind.RETURN_STATEMENT, max_depth=max_depth)


def _callback_findings(
    context: StandardRuleContext, method: str, missing_return: str
) -> list[Detection]:
    slug = f"array-{method}"
    detections = []
    for call, _method in context.method_calls(method):
        args = arguments(call)
        has_callback = bool(args)
        callback = args[0] if args else None
        is_literal = callback is not None and is_function_literal(callback)

        returns = True
        details = None
        if is_literal:
            body = function_body(callback)
            if kind(body) is not NodeKind.STATEMENT_BLOCK:
                details = f"{method}() with implicit return"
            else:
                returns = has_return(body, context.scan_depth)
                details = missing_return if not returns else f"{method}() with callback"
        elif not has_callback and method == "map":
            details = "map() called without callback"

        correct = has_callback and is_literal and returns
        detections.append(
            detection(
                slug,
                call,
                positive=correct,
                negative=not has_callback or (is_literal and not returns),
                idiomatic=correct,
                details=details,
            )
        )
    return detections


def find_array_map(context: StandardRuleContext) -> list[Detection]:
    return _callback_findings(
        context,
        "map",
        "map() callback has no return statement — will produce array of undefined",
    )


def find_array_filter(context: StandardRuleContext) -> list[Detection]:
    return _callback_findings(
        context,
        "filter",
        "filter() callback has no return statement — will always return undefined (falsy)",
    )


def find_array_reduce(context: StandardRuleContext) -> list[Detection]:
    detections = []
    for call, _method in context.method_calls("reduce"):
        args = arguments(call)
        has_callback = bool(args)
        has_initial = len(args) >= 2
        correct_params = (
            has_callback
            and kind(args[0]) is NodeKind.ARROW_FUNCTION
            and len(parameters(args[0])) >= 2
        )
        detections.append(
            detection(
                "array-reduce",
                call,
                positive=has_callback and has_initial and correct_params,
                negative=not has_callback or not has_initial,
                idiomatic=correct_params and has_initial,
                details=None
                if has_initial
                else "reduce() without initial value can cause errors on empty arrays",
            )
        )
    return detections


def find_array_find(context: StandardRuleContext) -> list[Detection]:
    detections = []
    for call, _method in context.method_calls("find"):
        has_callback = bool(arguments(call))
        detections.append(
            detection(
                "array-find",
                call,
                positive=has_callback,
                negative=not has_callback,
                idiomatic=has_callback,
            )
        )
    return detections


def find_array_some_every(context: StandardRuleContext) -> list[Detection]:
    detections = []
    for call, method in context.method_calls(*ArrayMethodPatterns.SOME_EVERY):
        has_callback = bool(arguments(call))
        verdict = "used correctly" if has_callback else "missing predicate"
        detections.append(
            detection(
                "array-some-every",
                call,
                positive=has_callback,
                negative=not has_callback,
                idiomatic=has_callback,
                details=f"{method}() {verdict}",
            )
        )
    return detections


def find_array_foreach(context: StandardRuleContext) -> list[Detection]:
    detections = []
    for call, _method in context.method_calls("forEach"):
        has_callback = bool(arguments(call))
        detections.append(
            detection(
                "array-foreach",
                call,
                positive=has_callback,
                negative=not has_callback,
                trivial=True,
                details="Consider if map/filter would be more appropriate",
            )
        )
    return detections


def find_array_method_chaining(context: StandardRuleContext) -> list[Detection]:
    detections = []
    for call, _method in context.method_calls(*ArrayMethodPatterns.CHAIN_METHODS):
        inner, _ = method_call(call)
        if kind(inner) is not NodeKind.CALL_EXPRESSION:
            continue
        _obj, inner_method = method_call(inner)
        if inner_method in ArrayMethodPatterns.CHAIN_METHODS:
            detections.append(
                detection(
                    "array-method-chaining",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Chained array methods detected",
                )
            )
    return detections
