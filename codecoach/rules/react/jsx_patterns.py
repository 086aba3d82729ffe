"""JSX syntax, rendering and props detectors."""

import re

from codecoach.ast_extractors.base import Node, NodeKind, children, field, kind, node_text, walk
from codecoach.ast_extractors.javascript import (
    arguments,
    function_body,
    jsx_attribute,
    jsx_attributes,
    jsx_name,
    jsx_value_expression,
    member_property,
    operator,
    parameters,
)
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    by_slug_and_details,
    detection,
    keep_first,
)
from codecoach.rules.react._shared import contains_jsx

METADATA = RuleMetadata(name="jsx_patterns", category="jsx", order=310, requires_react=True)

ELEMENT_KINDS = (NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT)

DOM_ONLY_ATTRIBUTES = frozenset(["className", "style", "key", "ref"])

FORM_FIELDS = frozenset(["input", "textarea", "select"])

EVENT_ATTRIBUTE = re.compile(r"^on[A-Z]")

INDEX_NAMES = frozenset(["index", "i"])


def _expression_parent(node: Node) -> Node | None:
    parent = node.parent
    while kind(parent) is NodeKind.PARENTHESIZED_EXPRESSION:
        parent = parent.parent
    return parent


def _is_expression_container(node: Node) -> bool:
    """``{...}`` in JSX, excluding spread attributes."""
    inner = children(node)
    return not (inner and kind(inner[0]) is NodeKind.SPREAD_ELEMENT)


def find_jsx_syntax(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("jsx-syntax", node, positive=True, idiomatic=True, details="JSX syntax used")
        for node in context.nodes(*ELEMENT_KINDS, NodeKind.JSX_FRAGMENT)[:1]
    ]


def find_jsx_expressions(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.JSX_EXPRESSION):
        if _is_expression_container(node):
            return [
                detection(
                    "jsx-expressions",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="JSX expression container used",
                )
            ]
    return []


def find_jsx_conditional_rendering(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.BINARY_EXPRESSION, NodeKind.TERNARY_EXPRESSION):
        if kind(_expression_parent(node)) is not NodeKind.JSX_EXPRESSION:
            continue
        if kind(node) is NodeKind.TERNARY_EXPRESSION:
            details = "Ternary operator for conditional rendering"
        elif operator(node) == "&&":
            details = "&& operator for conditional rendering"
        else:
            continue
        found.append(
            detection("jsx-conditional-rendering", node, positive=True, idiomatic=True, details=details)
        )
    return found


def find_jsx_list_rendering(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _method in context.method_calls("map"):
        args = arguments(call)
        if args and contains_jsx(args[0]):
            found.append(
                detection(
                    "jsx-list-rendering",
                    call,
                    positive=True,
                    idiomatic=True,
                    details=".map() returning JSX for list rendering",
                )
            )
    return found


def _key_kind(value: Node | None, index_param: str | None) -> str:
    """Classify a key attribute value as ``index``, ``id`` or ``other``."""
    if kind(value) is not NodeKind.JSX_EXPRESSION:
        return "other"
    expr = jsx_value_expression(value)
    if kind(expr) is NodeKind.IDENTIFIER:
        name = node_text(expr)
        if name == index_param or name in INDEX_NAMES:
            return "index"
    elif member_property(expr) == "id":
        return "id"
    return "other"


def _key_finding(element: Node, index_param: str | None) -> Detection:
    attribute = jsx_attribute(element, "key")
    if attribute is None:
        return detection(
            "jsx-keys", element, negative=True, details="Missing key prop in list-rendered JSX"
        )
    key_kind = _key_kind(attribute[0], index_param)
    if key_kind == "index":
        return detection(
            "jsx-keys",
            element,
            negative=True,
            trivial=True,
            details="Using array index as key - can cause issues with reordering",
        )
    if key_kind == "id":
        return detection(
            "jsx-keys",
            element,
            positive=True,
            idiomatic=True,
            details="Using unique id as key - good practice",
        )
    return detection("jsx-keys", element, positive=True, idiomatic=True, details="Key prop present")


def find_jsx_keys(context: StandardRuleContext) -> list[Detection]:
    """Every JSX element inside a ``.map()`` callback, judged by its key prop."""
    found = []
    for call, _method in context.method_calls("map"):
        args = arguments(call)
        if not args:
            continue
        callback = args[0]
        params = parameters(callback)
        index_param = params[1].name if len(params) > 1 else None
        for node in walk(function_body(callback)):
            if kind(node) in ELEMENT_KINDS:
                found.append(_key_finding(node, index_param))
    return found


def find_props_basics(context: StandardRuleContext) -> list[Detection]:
    for element in context.nodes(*ELEMENT_KINDS):
        for name, _value, attr in jsx_attributes(element):
            if name not in DOM_ONLY_ATTRIBUTES:
                return [
                    detection(
                        "props-basics",
                        attr,
                        positive=True,
                        idiomatic=True,
                        details="Props passed to components",
                    )
                ]
    return []


def _pattern_binds_children(pattern: Node) -> bool:
    for prop in children(pattern):
        k = kind(prop)
        if k is NodeKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN:
            key = prop
        elif k is NodeKind.PAIR_PATTERN:
            key = field(prop, "key")
        elif k is NodeKind.OBJECT_ASSIGNMENT_PATTERN:
            key = field(prop, "left")
        else:
            continue
        if node_text(key) == "children":
            return True
    return False


def find_children_prop(context: StandardRuleContext) -> list[Detection]:
    found = []
    for node in context.nodes(NodeKind.MEMBER_EXPRESSION, NodeKind.OBJECT_PATTERN):
        if kind(node) is NodeKind.MEMBER_EXPRESSION:
            if member_property(node) == "children":
                found.append(
                    detection(
                        "children-prop",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="children prop accessed",
                    )
                )
        elif _pattern_binds_children(node):
            found.append(
                detection(
                    "children-prop",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="children destructured from props",
                )
            )
    return found


def find_event_handlers(context: StandardRuleContext) -> list[Detection]:
    """First use of each distinct ``onXxx`` attribute."""
    found = []
    for element in context.nodes(*ELEMENT_KINDS):
        for name, _value, attr in jsx_attributes(element):
            if EVENT_ATTRIBUTE.match(name):
                found.append(
                    detection(
                        "event-handlers",
                        attr,
                        positive=True,
                        idiomatic=True,
                        details=f"{name} event handler",
                    )
                )
    return keep_first(found, key=by_slug_and_details)


def find_controlled_components(context: StandardRuleContext) -> list[Detection]:
    found = []
    for element in context.nodes(*ELEMENT_KINDS):
        if jsx_name(element) not in FORM_FIELDS:
            continue
        has_value = jsx_attribute(element, "value") is not None
        has_on_change = jsx_attribute(element, "onChange") is not None
        if has_value and has_on_change:
            found.append(
                detection(
                    "controlled-components",
                    element,
                    positive=True,
                    idiomatic=True,
                    details="Controlled component with value and onChange",
                )
            )
        elif has_value:
            found.append(
                detection(
                    "controlled-components",
                    element,
                    negative=True,
                    details="Controlled component missing onChange handler",
                )
            )
    return found
