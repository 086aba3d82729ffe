"""Context, memoization and re-render detectors."""

from codecoach.ast_extractors.base import Node, NodeKind, field, kind, node_text, walk
from codecoach.ast_extractors.javascript import (
    arguments,
    jsx_attributes,
    jsx_opening,
    jsx_value_expression,
    static_call,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(
    name="advanced_react", category="react-advanced", order=350, requires_react=True
)

ELEMENT_KINDS = (NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT)

UNSTABLE_KEY_CALLS = frozenset([("Math", "random"), ("Date", "now")])

# Attributes whose inline values do not affect child re-renders
RERENDER_EXEMPT_ATTRIBUTES = frozenset(["className", "key", "ref"])


def _react_calls(context, name):
    """Calls to ``name(...)`` or ``React.name(...)`` in source order."""
    found = []
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        obj, method = static_call(call)
        bare = field(call, "function")
        if (kind(bare) is NodeKind.IDENTIFIER and node_text(bare) == name) or (
            obj == "React" and method == name
        ):
            found.append(call)
    return found


def _is_provider(element: Node) -> bool:
    """``<Ctx.Provider>`` or ``<ThemeProvider>``."""
    opening = jsx_opening(element)
    name = field(opening, "name")
    if kind(name) is NodeKind.IDENTIFIER:
        return node_text(name).endswith("Provider")
    if kind(name) is NodeKind.MEMBER_EXPRESSION:
        return node_text(field(name, "property")) == "Provider"
    return False


def find_context_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "context-basics",
            call,
            positive=True,
            idiomatic=True,
            details="React Context created with createContext()",
        )
        for call in _react_calls(context, "createContext")[:1]
    ]


def find_context_provider(context: StandardRuleContext) -> list[Detection]:
    for element in context.nodes(*ELEMENT_KINDS):
        if _is_provider(element):
            return [
                detection(
                    "context-provider",
                    element,
                    positive=True,
                    idiomatic=True,
                    details="Context Provider component used",
                )
            ]
    return []


def find_context_performance(context: StandardRuleContext) -> list[Detection]:
    if not any(_is_provider(element) for element in context.nodes(*ELEMENT_KINDS)):
        return []
    if context.calls_named("useMemo"):
        return [
            detection(
                "context-performance",
                positive=True,
                idiomatic=True,
                details="Context value memoized with useMemo to prevent unnecessary re-renders",
            )
        ]
    return [
        detection(
            "context-performance",
            negative=True,
            trivial=True,
            details="Context Provider without memoized value - may cause unnecessary re-renders",
        )
    ]


def find_react_memo(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "react-memo",
            call,
            positive=True,
            idiomatic=True,
            details="React.memo() used to prevent unnecessary re-renders",
        )
        for call in _react_calls(context, "memo")[:1]
    ]


def _key_stability(callback: Node) -> tuple[bool, bool]:
    """(has stable key, has unstable key) among key props under callback."""
    stable = unstable = False
    for node in walk(callback):
        if kind(node) not in ELEMENT_KINDS:
            continue
        for name, value, _attr in jsx_attributes(node):
            if name != "key" or kind(value) is not NodeKind.JSX_EXPRESSION:
                continue
            expr = jsx_value_expression(value)
            if kind(expr) is NodeKind.CALL_EXPRESSION:
                if static_call(expr) in UNSTABLE_KEY_CALLS:
                    unstable = True
            else:
                stable = True
    return stable, unstable


def find_key_optimization(context: StandardRuleContext) -> list[Detection]:
    """Key stability per ``.map()`` call; one finding, negatives preferred."""
    found = []
    for call, _method in context.method_calls("map"):
        args = arguments(call)
        if not args:
            continue
        stable, unstable = _key_stability(args[0])
        if unstable:
            found.append(
                detection(
                    "key-optimization",
                    call,
                    negative=True,
                    details="Unstable key (Math.random/Date.now) causes unnecessary re-renders",
                )
            )
        elif stable:
            found.append(
                detection(
                    "key-optimization",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Stable key prop used for optimized reconciliation",
                )
            )
    negatives = [d for d in found if d.negative]
    return (negatives or found)[:1]


def find_unnecessary_rerenders(context: StandardRuleContext) -> list[Detection]:
    for element in context.nodes(*ELEMENT_KINDS):
        for name, value, attr in jsx_attributes(element):
            if name in RERENDER_EXEMPT_ATTRIBUTES or kind(value) is not NodeKind.JSX_EXPRESSION:
                continue
            expr_kind = kind(jsx_value_expression(value))
            if expr_kind in (NodeKind.OBJECT, NodeKind.ARRAY):
                literal = "object" if expr_kind is NodeKind.OBJECT else "array"
                return [
                    detection(
                        "unnecessary-rerenders",
                        attr,
                        negative=True,
                        trivial=True,
                        details=f"Inline {literal} in JSX prop creates new reference each render",
                    )
                ]
    return []
