"""DOM querying, manipulation and event detectors."""

from codecoach.ast_extractors.base import NodeKind, field, kind
from codecoach.ast_extractors.javascript import member_object, member_property, method_call
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="dom_operations", category="dom", order=200)

QUERY_METHODS = (
    "querySelector",
    "querySelectorAll",
    "getElementById",
    "getElementsByClassName",
    "getElementsByTagName",
)

MODERN_QUERIES = frozenset(["querySelector", "querySelectorAll"])

MANIPULATION_METHODS = (
    "createElement",
    "appendChild",
    "removeChild",
    "replaceChild",
    "insertBefore",
    "append",
    "prepend",
    "remove",
    "cloneNode",
    "setAttribute",
    "removeAttribute",
    "insertAdjacentHTML",
    "insertAdjacentElement",
)

TEXT_PROPERTIES = frozenset(["textContent", "innerText"])

CLASS_LIST_METHODS = frozenset(["add", "remove", "toggle", "contains", "replace"])


def find_dom_query_selectors(context: StandardRuleContext) -> list[Detection]:
    for call, method in context.method_calls(*QUERY_METHODS)[:1]:
        modern = method in MODERN_QUERIES
        return [
            detection(
                "dom-query-selectors",
                call,
                positive=True,
                idiomatic=modern,
                trivial=not modern,
                details=f"{method}() used for DOM querying"
                if modern
                else f"{method}() used — consider querySelector/querySelectorAll",
            )
        ]
    return []


def find_dom_manipulation(context: StandardRuleContext) -> list[Detection]:
    """First manipulation call, else the first textContent/innerText assignment."""
    for call, method in context.method_calls(*MANIPULATION_METHODS)[:1]:
        return [
            detection(
                "dom-manipulation",
                call,
                positive=True,
                idiomatic=True,
                details=f".{method}() used for DOM manipulation",
            )
        ]

    for node in context.nodes(NodeKind.ASSIGNMENT_EXPRESSION):
        prop = member_property(field(node, "left"))
        if prop in TEXT_PROPERTIES:
            return [
                detection(
                    "dom-manipulation",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f".{prop} assignment for DOM text manipulation",
                )
            ]
    return []


def find_dom_events(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "dom-events",
            call,
            positive=True,
            idiomatic=True,
            details="addEventListener() used for DOM event handling",
        )
        for call, _method in context.method_calls("addEventListener")[:1]
    ]


def find_dom_class_list(context: StandardRuleContext) -> list[Detection]:
    for call, method in context.method_calls(*CLASS_LIST_METHODS):
        receiver, _ = method_call(call)
        if member_property(receiver) == "classList":
            return [
                detection(
                    "dom-classlist",
                    call,
                    positive=True,
                    idiomatic=True,
                    details=f"classList.{method}() used for CSS class management",
                )
            ]
    return []


def find_dom_dataset(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.MEMBER_EXPRESSION):
        owner = member_object(node)
        if kind(owner) is NodeKind.MEMBER_EXPRESSION and member_property(owner) == "dataset":
            return [
                detection(
                    "dom-dataset",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="element.dataset used for data attribute access",
                )
            ]
    return []
