"""Number parsing, validation, formatting and Math detectors."""

from codecoach.ast_extractors.base import NodeKind, kind
from codecoach.ast_extractors.javascript import arguments, call_name, operator, static_call
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="number_math", category="numbers", order=100)

NUMBER_CHECKS = frozenset(["isNaN", "isFinite", "isInteger", "isSafeInteger"])

NUMBER_FORMATTERS = ("toFixed", "toPrecision", "toLocaleString")


def _parse_finding(call, name):
    if name == "parseInt" and len(arguments(call)) < 2:
        return detection(
            "number-parsing",
            call,
            positive=True,
            negative=True,
            trivial=True,
            details="parseInt() without radix parameter",
        )
    return detection(
        "number-parsing",
        call,
        positive=True,
        idiomatic=True,
        details=f"{name}() used for number parsing",
    )


def find_number_parsing(context: StandardRuleContext) -> list[Detection]:
    """Every explicit conversion call; unary ``+`` only when none exist."""
    found = []
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        name = call_name(call)
        owner, method = static_call(call)
        if name in ("parseInt", "parseFloat"):
            found.append(_parse_finding(call, name))
        elif name == "Number" or (owner == "Number" and method in ("parseInt", "parseFloat")):
            label = name or f"Number.{method}"
            found.append(
                detection(
                    "number-parsing",
                    call,
                    positive=True,
                    idiomatic=True,
                    details=f"{label}() used for number conversion",
                )
            )
    if found:
        return found

    return [
        detection(
            "number-parsing",
            node,
            positive=True,
            trivial=True,
            details="Unary + used for number coercion — consider Number() for clarity",
        )
        for node in context.nodes(NodeKind.UNARY_EXPRESSION)
        if operator(node) == "+"
    ]


def find_number_checking(context: StandardRuleContext) -> list[Detection]:
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        if call_name(call) == "isNaN":
            return [
                detection(
                    "number-checking",
                    call,
                    positive=True,
                    negative=True,
                    trivial=True,
                    details="Global isNaN() — prefer Number.isNaN() for strict checking",
                )
            ]
        owner, method = static_call(call)
        if owner == "Number" and method in NUMBER_CHECKS:
            return [
                detection(
                    "number-checking",
                    call,
                    positive=True,
                    idiomatic=True,
                    details=f"Number.{method}() used for number validation",
                )
            ]
    return []


def find_number_formatting(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.CALL_EXPRESSION, NodeKind.NEW_EXPRESSION):
        if kind(node) is NodeKind.NEW_EXPRESSION:
            if static_call(node) == ("Intl", "NumberFormat"):
                return [
                    detection(
                        "number-formatting",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Intl.NumberFormat used for locale-aware formatting",
                    )
                ]
            continue
        _owner, method = static_call(node)
        if method in NUMBER_FORMATTERS:
            return [
                detection(
                    "number-formatting",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f".{method}() used for number formatting",
                )
            ]
    return []


def find_math_methods(context: StandardRuleContext) -> list[Detection]:
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        owner, method = static_call(call)
        if owner == "Math":
            return [
                detection("math-methods", call, positive=True, idiomatic=True, details=f"Math.{method}() used")
            ]
    return []
