"""Error handling, fetch and modern-syntax basics."""

from dataclasses import dataclass

from codecoach.ast_extractors.base import NodeKind, kind
from codecoach.ast_extractors.javascript import (
    arguments,
    callee,
    declaration_kind,
    first_expression,
    identifier_name,
    member_property,
    string_value,
    try_parts,
)
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="error_handling", category="errors", order=30)


@dataclass(frozen=True)
class ErrorPatterns:
    """Constructor names treated as proper error objects."""

    THROWABLE = frozenset(["Error", "TypeError", "RangeError", "SyntaxError"])

    WITH_MESSAGE = frozenset(["Error", "TypeError", "RangeError", "SyntaxError", "ReferenceError"])

    STATUS_PROPERTIES = frozenset(["ok", "status"])

    DESCRIPTIVE_MESSAGE_LENGTH = 10


def find_try_catch(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.TRY_STATEMENT):
        _block, handler, finalizer = try_parts(node)
        has_catch = handler is not None
        has_finally = finalizer is not None
        if has_catch:
            details = "try-catch-finally block" if has_finally else "try-catch block"
        else:
            details = "try without catch handler"
        found.append(
            detection(
                "try-catch",
                node,
                positive=has_catch,
                negative=not has_catch and not has_finally,
                idiomatic=has_catch,
                details=details,
            )
        )
    return found


def find_error_throwing(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.THROW_STATEMENT):
        argument = first_expression(node)
        is_error = (
            kind(argument) is NodeKind.NEW_EXPRESSION
            and identifier_name(callee(argument)) in ErrorPatterns.THROWABLE
        )
        found.append(
            detection(
                "error-throwing",
                node,
                positive=is_error,
                negative=not is_error,
                idiomatic=is_error,
                trivial=not is_error,
                details="Throwing proper Error object"
                if is_error
                else "Consider throwing an Error object instead of primitives",
            )
        )
    return found


def find_error_messages(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node, _name in context.constructions(*ErrorPatterns.WITH_MESSAGE):
        args = arguments(node)
        has_message = bool(args)
        message = string_value(args[0]) if args else None
        descriptive = message is not None and len(message) > ErrorPatterns.DESCRIPTIVE_MESSAGE_LENGTH

        if descriptive:
            details = "Error with descriptive message"
        elif has_message:
            details = "Error message could be more descriptive"
        else:
            details = "Error constructed without message"

        found.append(
            detection(
                "error-messages",
                node,
                positive=descriptive,
                negative=not has_message,
                idiomatic=descriptive,
                trivial=has_message and not descriptive,
                details=details,
            )
        )
    return found


def find_fetch_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("fetch-basics", call, positive=True, idiomatic=True, details="fetch API used")
        for call, _name in context.calls_named("fetch")
    ]


def find_fetch_with_options(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("fetch"):
        args = arguments(call)
        if len(args) >= 2 and kind(args[1]) is NodeKind.OBJECT:
            found.append(
                detection(
                    "fetch-with-options",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="fetch with request options",
                )
            )
    return found


def find_fetch_error_checking(context: StandardRuleContext) -> list[Detection]:
    """Each fetch call, judged by whether ``.ok`` or ``.status`` is read anywhere."""
    checks_status = any(
        member_property(node) in ErrorPatterns.STATUS_PROPERTIES
        for node in context.nodes(NodeKind.MEMBER_EXPRESSION)
    )
    return [
        detection(
            "fetch-error-checking",
            call,
            positive=checks_status,
            negative=not checks_status,
            idiomatic=checks_status,
            details="fetch with response status checking"
            if checks_status
            else "fetch without checking response.ok or response.status",
        )
        for call, _name in context.calls_named("fetch")
    ]


def find_let_const_usage(context: StandardRuleContext) -> list[Detection]:
    found = []
    has_block_scoped = False
    for node in context.nodes(NodeKind.VARIABLE_DECLARATION, NodeKind.LEXICAL_DECLARATION):
        if declaration_kind(node) == "var":
            found.append(
                detection(
                    "let-const-usage",
                    node,
                    negative=True,
                    trivial=True,
                    details="var used instead of let/const",
                )
            )
        else:
            has_block_scoped = True

    if has_block_scoped and not found:
        found.append(
            detection(
                "let-const-usage",
                positive=True,
                idiomatic=True,
                details="Using let/const instead of var",
            )
        )
    return found


def find_destructuring(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.OBJECT_PATTERN, NodeKind.ARRAY_PATTERN):
        if kind(node) is NodeKind.OBJECT_PATTERN:
            found.append(
                detection(
                    "object-destructuring",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Object destructuring used",
                )
            )
        else:
            found.append(
                detection(
                    "array-destructuring",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Array destructuring used",
                )
            )
    return keep_first(found)


def find_spread_operator(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("spread-operator", node, positive=True, idiomatic=True, details="Spread operator used")
        for node in context.nodes(NodeKind.SPREAD_ELEMENT)[:1]
    ]


def find_arrow_functions(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "arrow-functions", node, positive=True, idiomatic=True, details="Arrow function syntax used"
        )
        for node in context.nodes(NodeKind.ARROW_FUNCTION)[:1]
    ]
