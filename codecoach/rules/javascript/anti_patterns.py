"""Common JavaScript anti-patterns.

Most detectors here only produce negative findings; each reports the first
offending site.
"""

from codecoach.ast_extractors.base import NodeKind, children, field, kind, node_text
from codecoach.ast_extractors.javascript import (
    declaration_kind,
    member_property,
    number_value,
    operator,
    string_value,
    try_parts,
    unwrap,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="anti_patterns", category="anti-patterns", order=230)

ALLOWED_NUMBERS = frozenset([0, 1, -1, 2, 100])

# A number literal directly under one of these is treated as named or indexed
NAMED_NUMBER_PARENTS = frozenset(
    [
        NodeKind.VARIABLE_DECLARATOR,
        NodeKind.MEMBER_EXPRESSION,
        NodeKind.SUBSCRIPT_EXPRESSION,
        NodeKind.PAIR,
        NodeKind.ARRAY,
    ]
)


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def find_no_var_usage(context: StandardRuleContext) -> list[Detection]:
    declarations = context.nodes(NodeKind.VARIABLE_DECLARATION, NodeKind.LEXICAL_DECLARATION)
    for node in declarations:
        if declaration_kind(node) == "var":
            return [
                detection(
                    "no-var-usage",
                    node,
                    negative=True,
                    trivial=True,
                    details="var declaration found — use let or const instead",
                )
            ]
    if declarations:
        return [
            detection(
                "no-var-usage",
                positive=True,
                idiomatic=True,
                details="No var declarations — using modern let/const",
            )
        ]
    return []


def find_strict_equality(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.BINARY_EXPRESSION):
        op = operator(node)
        if op not in ("==", "!="):
            continue
        if any(kind(unwrap(field(node, side))) is NodeKind.NULL for side in ("left", "right")):
            continue
        return [
            detection(
                "strict-equality",
                node,
                negative=True,
                trivial=True,
                details=f"Loose equality ({op}) used — prefer strict equality ({op}=)",
            )
        ]
    return []


def find_no_eval(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "no-eval",
            call,
            negative=True,
            details="eval() used — security risk and performance issue",
        )
        for call, _name in context.calls_named("eval")[:1]
    ]


def find_no_inner_html(context: StandardRuleContext) -> list[Detection]:
    """First ``el.innerHTML = ...`` or ``dangerouslySetInnerHTML`` attribute."""
    for node in context.nodes(NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.JSX_ATTRIBUTE):
        if kind(node) is NodeKind.ASSIGNMENT_EXPRESSION:
            if member_property(field(node, "left")) == "innerHTML":
                return [
                    detection(
                        "no-innerHTML",
                        node,
                        negative=True,
                        details="innerHTML assignment — XSS risk, use textContent or DOM methods",
                    )
                ]
        else:
            parts = children(node)
            if parts and node_text(parts[0]) == "dangerouslySetInnerHTML":
                return [
                    detection(
                        "no-innerHTML",
                        node,
                        negative=True,
                        details="dangerouslySetInnerHTML used — ensure input is sanitized",
                    )
                ]
    return []


def find_no_magic_numbers(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.NUMBER):
        value = number_value(node)
        if value is None or value in ALLOWED_NUMBERS:
            continue
        if kind(node.parent) in NAMED_NUMBER_PARENTS:
            continue
        return [
            detection(
                "no-magic-numbers",
                node,
                negative=True,
                trivial=True,
                details=f"Magic number {_format_number(value)} — consider extracting to a named constant",
            )
        ]
    return []


def find_empty_catch_blocks(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.TRY_STATEMENT):
        _body, handler, _finalizer = try_parts(node)
        if handler is not None and not children(field(handler, "body")):
            return [
                detection(
                    "empty-catch-blocks",
                    node,
                    negative=True,
                    details="Empty catch block — errors are silently swallowed",
                )
            ]
    return []


def find_implicit_type_coercion(context: StandardRuleContext) -> list[Detection]:
    """First ``!!x`` or ``"" + x`` coercion."""
    for node in context.nodes(NodeKind.UNARY_EXPRESSION, NodeKind.BINARY_EXPRESSION):
        if kind(node) is NodeKind.UNARY_EXPRESSION:
            argument = unwrap(field(node, "argument"))
            if (
                operator(node) == "!"
                and kind(argument) is NodeKind.UNARY_EXPRESSION
                and operator(argument) == "!"
            ):
                return [
                    detection(
                        "implicit-type-coercion",
                        node,
                        positive=True,
                        trivial=True,
                        details="Double negation (!!) for boolean coercion — consider Boolean()",
                    )
                ]
        elif operator(node) == "+" and "" in (
            string_value(field(node, "left")),
            string_value(field(node, "right")),
        ):
            return [
                detection(
                    "implicit-type-coercion",
                    node,
                    negative=True,
                    trivial=True,
                    details="Empty string concatenation for type coercion — consider String()",
                )
            ]
    return []
