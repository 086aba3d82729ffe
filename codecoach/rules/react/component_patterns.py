"""Component design detectors: props, composition and event handling."""

import re

from codecoach.ast_extractors.base import Node, NodeKind, children, field, kind
from codecoach.ast_extractors.javascript import (
    function_body,
    function_name,
    is_capitalized,
    is_function_literal,
    jsx_attribute,
    jsx_attributes,
    jsx_child_elements,
    jsx_name,
    jsx_opening,
    jsx_value_expression,
    member_property,
    operator,
    parameters,
    string_value,
    unwrap,
)
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection
from codecoach.rules.react._shared import contains_jsx

METADATA = RuleMetadata(
    name="component_patterns", category="react-components", order=330, requires_react=True
)

ELEMENT_KINDS = (NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT)

FORM_FIELDS = frozenset(["input", "textarea", "select"])

CONTAINER_TAGS = frozenset(["div", "ul", "ol", "table", "tbody", "section", "main", "nav", "form"])

EVENT_PARAM_NAMES = frozenset(["e", "event", "evt"])

EVENT_ATTRIBUTE = re.compile(r"^on[A-Z]")


def _props_pattern(fn: Node) -> Node | None:
    """Object pattern of a function's first parameter, when it has no default."""
    params = parameters(fn)
    if not params or params[0].default is not None:
        return None
    pattern = params[0].pattern
    if kind(pattern) is NodeKind.OBJECT_PATTERN:
        return pattern
    return None


def _component_name(element: Node) -> str | None:
    """Capitalized plain tag name of a JSX element, else None."""
    opening = jsx_opening(element)
    if opening is None or kind(field(opening, "name")) is not NodeKind.IDENTIFIER:
        return None
    name = jsx_name(element)
    return name if is_capitalized(name) else None


def _is_component_element(node: Node | None) -> bool:
    return kind(node) in ELEMENT_KINDS and _component_name(node) is not None


def find_props_destructuring(context: StandardRuleContext) -> list[Detection]:
    functions = context.nodes(
        NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION
    )
    for fn in functions:
        if _props_pattern(fn) is None:
            continue
        if is_capitalized(function_name(fn)) or contains_jsx(
            function_body(fn), max_depth=context.scan_depth
        ):
            return [
                detection(
                    "props-destructuring",
                    fn,
                    positive=True,
                    idiomatic=True,
                    details="Props destructured in function parameters",
                )
            ]
    return []


def find_prop_types_validation(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.IMPORT_STATEMENT, NodeKind.ASSIGNMENT_EXPRESSION):
        if kind(node) is NodeKind.IMPORT_STATEMENT:
            if string_value(field(node, "source")) == "prop-types":
                return [
                    detection(
                        "prop-types-validation",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="PropTypes imported for runtime type checking",
                    )
                ]
        elif member_property(field(node, "left")) == "propTypes":
            return [
                detection(
                    "prop-types-validation",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="PropTypes validation defined",
                )
            ]
    return []


def _has_destructuring_default(pattern: Node) -> bool:
    for prop in children(pattern):
        k = kind(prop)
        if k is NodeKind.OBJECT_ASSIGNMENT_PATTERN:
            return True
        if k is NodeKind.PAIR_PATTERN and kind(field(prop, "value")) is NodeKind.ASSIGNMENT_PATTERN:
            return True
    return False


def find_default_props(context: StandardRuleContext) -> list[Detection]:
    """Legacy ``X.defaultProps = ...`` or defaults in destructured props."""
    candidates = context.nodes(
        NodeKind.ASSIGNMENT_EXPRESSION, NodeKind.FUNCTION_DECLARATION, NodeKind.ARROW_FUNCTION
    )
    for node in candidates:
        if kind(node) is NodeKind.ASSIGNMENT_EXPRESSION:
            if member_property(field(node, "left")) == "defaultProps":
                return [
                    detection(
                        "default-props",
                        node,
                        positive=True,
                        trivial=True,
                        details="defaultProps used - consider default parameter values instead",
                    )
                ]
            continue
        pattern = _props_pattern(node)
        if (
            pattern is not None
            and _has_destructuring_default(pattern)
            and contains_jsx(function_body(node), max_depth=context.scan_depth)
        ):
            return [
                detection(
                    "default-props",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Default prop values via destructuring defaults",
                )
            ]
    return []


def find_uncontrolled_components(context: StandardRuleContext) -> list[Detection]:
    for element in context.nodes(*ELEMENT_KINDS):
        if jsx_name(element) not in FORM_FIELDS:
            continue
        if jsx_attribute(element, "defaultValue") or jsx_attribute(element, "defaultChecked"):
            return [
                detection(
                    "uncontrolled-components",
                    element,
                    positive=True,
                    idiomatic=True,
                    details="Uncontrolled component with defaultValue/defaultChecked",
                )
            ]
    return []


def find_component_composition(context: StandardRuleContext) -> list[Detection]:
    for element in context.nodes(NodeKind.JSX_ELEMENT):
        if _component_name(element) is None:
            continue
        if any(_is_component_element(child) for child in jsx_child_elements(element)):
            return [
                detection(
                    "component-composition",
                    element,
                    positive=True,
                    idiomatic=True,
                    details="Component composition - components nested within components",
                )
            ]
    return []


def find_conditional_component_rendering(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.TERNARY_EXPRESSION, NodeKind.BINARY_EXPRESSION):
        if kind(node) is NodeKind.TERNARY_EXPRESSION:
            branches = (unwrap(field(node, "consequence")), unwrap(field(node, "alternative")))
            if any(_is_component_element(branch) for branch in branches):
                return [
                    detection(
                        "conditional-component-rendering",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Conditional rendering of components",
                    )
                ]
        elif operator(node) == "&&" and _is_component_element(unwrap(field(node, "right"))):
            return [
                detection(
                    "conditional-component-rendering",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Conditional component rendering with && operator",
                )
            ]
    return []


def _event_attributes(context):
    for element in context.nodes(*ELEMENT_KINDS):
        for name, value, attr in jsx_attributes(element):
            if EVENT_ATTRIBUTE.match(name):
                yield name, value, attr


def find_event_handler_params(context: StandardRuleContext) -> list[Detection]:
    for _name, value, attr in _event_attributes(context):
        if kind(value) is not NodeKind.JSX_EXPRESSION:
            continue
        handler = jsx_value_expression(value)
        if not is_function_literal(handler) or not parameters(handler):
            continue
        conventional = parameters(handler)[0].name in EVENT_PARAM_NAMES
        return [
            detection(
                "event-handler-params",
                attr,
                positive=True,
                idiomatic=conventional,
                details="Event handler with properly named event parameter"
                if conventional
                else "Event handler accepts event parameter",
            )
        ]
    return []


def find_prevent_default(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "prevent-default",
            call,
            positive=True,
            idiomatic=True,
            details="preventDefault() called to prevent default browser behavior",
        )
        for call, _method in context.method_calls("preventDefault")[:1]
    ]


def find_event_delegation(context: StandardRuleContext) -> list[Detection]:
    """A handler on a container element that wraps content."""
    for element in context.nodes(NodeKind.JSX_ELEMENT):
        tag = jsx_name(element)
        if tag not in CONTAINER_TAGS:
            continue
        has_handler = any(EVENT_ATTRIBUTE.match(name) for name, _value, _attr in jsx_attributes(element))
        content = [
            c
            for c in children(element)
            if kind(c) not in (NodeKind.JSX_OPENING_ELEMENT, NodeKind.JSX_CLOSING_ELEMENT)
        ]
        if has_handler and content:
            return [
                detection(
                    "event-delegation",
                    element,
                    positive=True,
                    idiomatic=True,
                    details=f"Event handler on container <{tag}> - event delegation pattern",
                )
            ]
    return []
