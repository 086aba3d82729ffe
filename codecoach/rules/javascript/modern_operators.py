"""Modern operators and type checks."""

from codecoach.ast_extractors.base import NodeKind, field, kind
from codecoach.ast_extractors.javascript import is_optional_chain, operator, unwrap
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="modern_operators", category="operators", order=120)

LOGICAL_ASSIGNMENT_OPERATORS = frozenset(["&&=", "||=", "??="])


def _first_operator(context, node_kinds, operators):
    for node in context.nodes(*node_kinds):
        op = operator(node)
        if op in operators:
            return node, op
    return None, None


def find_optional_chaining(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(
        NodeKind.MEMBER_EXPRESSION, NodeKind.SUBSCRIPT_EXPRESSION, NodeKind.CALL_EXPRESSION
    ):
        if is_optional_chain(node):
            return [
                detection(
                    "optional-chaining",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Optional chaining (?.) used for safe property access",
                )
            ]
    return []


def find_nullish_coalescing(context: StandardRuleContext) -> list[Detection]:
    node, _op = _first_operator(context, [NodeKind.BINARY_EXPRESSION], {"??"})
    if node is None:
        return []
    return [
        detection(
            "nullish-coalescing",
            node,
            positive=True,
            idiomatic=True,
            details="Nullish coalescing (??) used for default values",
        )
    ]


def find_logical_assignment(context: StandardRuleContext) -> list[Detection]:
    node, op = _first_operator(
        context, [NodeKind.AUGMENTED_ASSIGNMENT_EXPRESSION], LOGICAL_ASSIGNMENT_OPERATORS
    )
    if node is None:
        return []
    return [
        detection(
            "logical-assignment", node, positive=True, idiomatic=True, details=f"Logical assignment {op} used"
        )
    ]


def find_typeof_operator(context: StandardRuleContext) -> list[Detection]:
    node, _op = _first_operator(context, [NodeKind.UNARY_EXPRESSION], {"typeof"})
    if node is None:
        return []
    return [
        detection(
            "typeof-operator",
            node,
            positive=True,
            idiomatic=True,
            details="typeof operator used for type checking",
        )
    ]


def find_instanceof_operator(context: StandardRuleContext) -> list[Detection]:
    node, _op = _first_operator(context, [NodeKind.BINARY_EXPRESSION], {"instanceof"})
    if node is None:
        return []
    return [
        detection(
            "instanceof-operator",
            node,
            positive=True,
            idiomatic=True,
            details="instanceof operator used for type checking",
        )
    ]


def _compares_null(node) -> bool:
    return any(kind(unwrap(field(node, side))) is NodeKind.NULL for side in ("left", "right"))


def find_equality_operators(context: StandardRuleContext) -> list[Detection]:
    """First strict comparison and first loose comparison (null checks are fine)."""
    found = []
    for node in context.nodes(NodeKind.BINARY_EXPRESSION):
        op = operator(node)
        if op in ("===", "!=="):
            found.append(
                detection(
                    "equality-operators",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f"Strict equality ({op}) used",
                )
            )
        elif op in ("==", "!="):
            null_check = _compares_null(node)
            found.append(
                detection(
                    "equality-operators",
                    node,
                    positive=null_check,
                    negative=not null_check,
                    idiomatic=null_check,
                    trivial=not null_check,
                    details=f"Loose equality ({op}) with null — acceptable pattern"
                    if null_check
                    else f"Loose equality ({op}) — prefer strict equality ({op}=)",
                )
            )
    return keep_first(found, key=lambda d: (d.details or "").startswith("Strict"))


def find_ternary_operator(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "ternary-operator",
            node,
            positive=True,
            idiomatic=True,
            details="Ternary operator used for conditional expression",
        )
        for node in context.nodes(NodeKind.TERNARY_EXPRESSION)
    ]
