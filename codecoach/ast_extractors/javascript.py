"""JavaScript/TypeScript shape helpers shared by the detectors.

The javascript, typescript and tsx grammars disagree on a few shapes
(parameters are wrapped in required_parameter nodes in the typed grammars,
class fields have two names, for-loop conditions may be wrapped in an
expression_statement). These helpers hide those differences.
"""

import re
from dataclasses import dataclass

from .base import (
    Node,
    NodeKind,
    ancestors,
    children,
    field,
    kind,
    node_text,
    token_types,
)

FUNCTION_KINDS = frozenset(
    [
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.FUNCTION_EXPRESSION,
        NodeKind.ARROW_FUNCTION,
        NodeKind.METHOD_DEFINITION,
    ]
)

FUNCTION_LITERAL_KINDS = frozenset([NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION])

# Functions whose body runs later than the surrounding code
DEFERRED_KINDS = frozenset(
    [NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION, NodeKind.ARROW_FUNCTION]
)

LOOP_KINDS = frozenset(
    [
        NodeKind.FOR_STATEMENT,
        NodeKind.FOR_IN_STATEMENT,
        NodeKind.WHILE_STATEMENT,
        NodeKind.DO_STATEMENT,
    ]
)

JSX_KINDS = frozenset(
    [NodeKind.JSX_ELEMENT, NodeKind.JSX_SELF_CLOSING_ELEMENT, NodeKind.JSX_FRAGMENT]
)

DECLARATION_KINDS = frozenset([NodeKind.VARIABLE_DECLARATION, NodeKind.LEXICAL_DECLARATION])

CLASS_KINDS = frozenset([NodeKind.CLASS_DECLARATION, NodeKind.CLASS])

HOOK_NAME = re.compile(r"^use[A-Z]")

MUTATING_ARRAY_METHODS = frozenset(
    ["push", "pop", "shift", "unshift", "splice", "sort", "reverse", "fill"]
)


def is_function(node: Node) -> bool:
    return kind(node) in FUNCTION_KINDS


def is_function_literal(node: Node) -> bool:
    return kind(node) in FUNCTION_LITERAL_KINDS


def is_deferred(node: Node) -> bool:
    return kind(node) in DEFERRED_KINDS


def is_jsx(node: Node) -> bool:
    return kind(node) in JSX_KINDS


def is_hook_name(name: str | None) -> bool:
    return bool(name) and HOOK_NAME.match(name) is not None


def is_capitalized(name: str | None) -> bool:
    return bool(name) and name[0].isupper()


def unwrap(node: Node) -> Node:
    """Strip parentheses around an expression."""
    while node is not None and kind(node) is NodeKind.PARENTHESIZED_EXPRESSION:
        inner = children(node)
        if not inner:
            break
        node = inner[0]
    return node


def identifier_name(node: Node) -> str | None:
    """Name of a bare identifier (after unwrapping parentheses)."""
    node = unwrap(node)
    if kind(node) is NodeKind.IDENTIFIER:
        return node_text(node)
    return None


def operator(node: Node) -> str | None:
    """Operator token of a binary, unary, update or augmented assignment."""
    op = field(node, "operator")
    if op is None:
        return None
    return op.type


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


def string_value(node: Node) -> str | None:
    """Contents of a string literal without quotes."""
    node = unwrap(node)
    if kind(node) is not NodeKind.STRING:
        return None
    text = node_text(node)
    if len(text) >= 2:
        return text[1:-1]
    return ""


def is_string_literal(node: Node) -> bool:
    return kind(unwrap(node)) is NodeKind.STRING


def number_value(node: Node) -> float | None:
    """Numeric value of a number literal (negated when wrapped in unary minus)."""
    node = unwrap(node)
    sign = 1.0
    if kind(node) is NodeKind.UNARY_EXPRESSION and operator(node) == "-":
        sign = -1.0
        node = unwrap(field(node, "argument"))
    if kind(node) is not NodeKind.NUMBER:
        return None
    text = node_text(node).replace("_", "").rstrip("n")
    try:
        lowered = text.lower()
        if lowered.startswith(("0x", "0o", "0b")):
            return sign * float(int(lowered, 0))
        return sign * float(text)
    except ValueError:
        return None


def template_has_substitution(node: Node) -> bool:
    return any(kind(c) is NodeKind.TEMPLATE_SUBSTITUTION for c in children(node))


# ---------------------------------------------------------------------------
# Calls and members
# ---------------------------------------------------------------------------


def callee(call: Node) -> Node | None:
    """Callee of a call, or constructor of a new expression."""
    if kind(call) is NodeKind.NEW_EXPRESSION:
        return unwrap(field(call, "constructor"))
    return unwrap(field(call, "function"))


def call_name(call: Node) -> str | None:
    """Name of a call whose callee is a bare identifier."""
    return identifier_name(callee(call))


def arguments(call: Node) -> list[Node]:
    args = field(call, "arguments")
    if args is None or kind(args) is not NodeKind.ARGUMENTS:
        return []
    return children(args)


def member_object(node: Node) -> Node | None:
    return unwrap(field(node, "object"))


def member_property(node: Node) -> str | None:
    """Property name of a non-computed member access."""
    node = unwrap(node)
    if kind(node) is not NodeKind.MEMBER_EXPRESSION:
        return None
    prop = field(node, "property")
    if prop is None:
        return None
    return node_text(prop)


def is_private_member(node: Node) -> bool:
    prop = field(node, "property")
    return kind(prop) is NodeKind.PRIVATE_PROPERTY_IDENTIFIER


def subscript_index(node: Node) -> Node | None:
    return unwrap(field(node, "index"))


def is_optional_chain(node: Node) -> bool:
    return any(c.type in ("optional_chain", "?.") for c in node.children)


def method_call(call: Node) -> tuple[Node | None, str | None]:
    """(object, method) for ``obj.method(...)`` calls, else (None, None)."""
    target = callee(call)
    if kind(target) is not NodeKind.MEMBER_EXPRESSION:
        return None, None
    return member_object(target), member_property(target)


def static_call(call: Node) -> tuple[str | None, str | None]:
    """(Object, method) for calls shaped ``Identifier.method(...)``."""
    obj, method = method_call(call)
    return identifier_name(obj), method


def member_chain(node: Node) -> tuple[str, list[str]] | None:
    """Resolve ``root.a.b[c]`` into (root, [a, b, c]).

    Computed keys contribute their literal or identifier text, or ``?``.
    """
    parts: list[str] = []
    current = unwrap(node)
    while kind(current) in (NodeKind.MEMBER_EXPRESSION, NodeKind.SUBSCRIPT_EXPRESSION):
        if kind(current) is NodeKind.MEMBER_EXPRESSION:
            parts.insert(0, member_property(current) or "?")
        else:
            index = subscript_index(current)
            key = string_value(index)
            if key is None and kind(index) in (NodeKind.IDENTIFIER, NodeKind.NUMBER):
                key = node_text(index)
            parts.insert(0, key if key is not None else "?")
        current = member_object(current)
        if current is None:
            return None
    if kind(current) is NodeKind.IDENTIFIER:
        return node_text(current), parts
    return None


def is_dynamic_import(call: Node) -> bool:
    return kind(field(call, "function")) is NodeKind.IMPORT


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def declaration_kind(node: Node) -> str | None:
    """``var``, ``let`` or ``const`` for a declaration statement."""
    k = kind(node)
    if k is NodeKind.VARIABLE_DECLARATION:
        return "var"
    if k is NodeKind.LEXICAL_DECLARATION:
        for token in token_types(node):
            if token in ("let", "const"):
                return token
        return "let"
    return None


def declarators(node: Node) -> list[Node]:
    return [c for c in children(node) if kind(c) is NodeKind.VARIABLE_DECLARATOR]


def declarator_parts(node: Node) -> tuple[Node | None, Node | None]:
    """(binding target, initializer) of a variable declarator."""
    return field(node, "name"), unwrap(field(node, "value"))


def declarator_name(node: Node) -> str | None:
    target, _value = declarator_parts(node)
    if kind(target) is NodeKind.IDENTIFIER:
        return node_text(target)
    return None


def enclosing_declarator(node: Node) -> Node | None:
    """Variable declarator that directly holds node as its initializer."""
    parent = node.parent
    while kind(parent) is NodeKind.PARENTHESIZED_EXPRESSION:
        parent = parent.parent
    if kind(parent) is NodeKind.VARIABLE_DECLARATOR:
        return parent
    return None


def pattern_names(pattern: Node) -> list[str]:
    """All identifiers bound by a binding pattern."""
    names = []
    stack = [pattern]
    while stack:
        current = stack.pop()
        k = kind(current)
        if k in (NodeKind.IDENTIFIER, NodeKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN):
            names.append(node_text(current))
        elif k is NodeKind.PAIR_PATTERN:
            value = field(current, "value")
            if value is not None:
                stack.append(value)
        elif k in (NodeKind.ASSIGNMENT_PATTERN, NodeKind.OBJECT_ASSIGNMENT_PATTERN):
            left = field(current, "left")
            if left is not None:
                stack.append(left)
        elif k in (NodeKind.OBJECT_PATTERN, NodeKind.ARRAY_PATTERN, NodeKind.REST_PATTERN):
            stack.extend(reversed(children(current)))
    return names


# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Param:
    """One formal parameter normalized across grammars."""

    node: Node
    pattern: Node
    default: Node | None = None
    rest: bool = False

    @property
    def name(self) -> str | None:
        target = self.pattern
        if kind(target) is NodeKind.REST_PATTERN:
            inner = children(target)
            target = inner[0] if inner else None
        if kind(target) is NodeKind.IDENTIFIER:
            return node_text(target)
        return None


def parameters(fn: Node) -> list[Param]:
    """Formal parameters of any function kind."""
    single = field(fn, "parameter")
    if single is not None:
        return [Param(node=single, pattern=single)]

    params_node = field(fn, "parameters")
    if params_node is None:
        return []

    params = []
    for param in children(params_node):
        k = kind(param)
        if k in (NodeKind.REQUIRED_PARAMETER, NodeKind.OPTIONAL_PARAMETER):
            pattern = field(param, "pattern")
            if pattern is None:
                continue
            params.append(
                Param(
                    node=param,
                    pattern=pattern,
                    default=field(param, "value"),
                    rest=kind(pattern) is NodeKind.REST_PATTERN,
                )
            )
        elif k is NodeKind.ASSIGNMENT_PATTERN:
            params.append(Param(node=param, pattern=field(param, "left"), default=field(param, "right")))
        elif k is NodeKind.REST_PATTERN:
            params.append(Param(node=param, pattern=param, rest=True))
        elif k in (
            NodeKind.IDENTIFIER,
            NodeKind.OBJECT_PATTERN,
            NodeKind.ARRAY_PATTERN,
        ):
            params.append(Param(node=param, pattern=param))
    return params


def parameter_names(fn: Node) -> list[str]:
    names = []
    for param in parameters(fn):
        names.extend(pattern_names(param.pattern))
    return names


def function_body(fn: Node) -> Node | None:
    return field(fn, "body")


def block_statements(fn: Node) -> list[Node] | None:
    """Statements of a function's block body, or None for expression bodies."""
    body = function_body(fn)
    if kind(body) is not NodeKind.STATEMENT_BLOCK:
        return None
    return children(body)


def function_name(fn: Node) -> str | None:
    name = field(fn, "name")
    if name is None:
        return None
    return node_text(name)


def is_async(fn: Node) -> bool:
    return "async" in token_types(fn)


def statements(node: Node) -> list[Node]:
    """Statement list of a block, program or switch case."""
    k = kind(node)
    if k in (NodeKind.SWITCH_CASE, NodeKind.SWITCH_DEFAULT):
        value = field(node, "value")
        return [c for c in children(node) if value is None or c.id != value.id]
    return children(node)


def return_argument(ret: Node) -> Node | None:
    inner = children(ret)
    return unwrap(inner[0]) if inner else None


def first_expression(node: Node) -> Node | None:
    inner = children(node)
    return unwrap(inner[0]) if inner else None


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def if_parts(node: Node) -> tuple[Node | None, Node | None, Node | None]:
    """(condition, consequence, alternative statement) of an if statement."""
    condition = unwrap(field(node, "condition"))
    consequence = field(node, "consequence")
    alternative = field(node, "alternative")
    if kind(alternative) is NodeKind.ELSE_CLAUSE:
        inner = children(alternative)
        alternative = inner[0] if inner else None
    return condition, consequence, alternative


def for_condition(node: Node) -> Node | None:
    """Test expression of a counted for loop."""
    condition = field(node, "condition")
    if kind(condition) is NodeKind.EXPRESSION_STATEMENT:
        return first_expression(condition)
    if kind(condition) is NodeKind.EMPTY_STATEMENT:
        return None
    return unwrap(condition)


def for_increment(node: Node) -> Node | None:
    return unwrap(field(node, "increment"))


def for_initializer(node: Node) -> Node | None:
    return field(node, "initializer")


def is_for_of(node: Node) -> bool:
    return kind(node) is NodeKind.FOR_IN_STATEMENT and "of" in token_types(node)


def is_for_in(node: Node) -> bool:
    return kind(node) is NodeKind.FOR_IN_STATEMENT and "in" in token_types(node)


def try_parts(node: Node) -> tuple[Node | None, Node | None, Node | None]:
    """(block, catch clause, finally clause) of a try statement."""
    return field(node, "body"), field(node, "handler"), field(node, "finalizer")


def switch_cases(node: Node) -> list[Node]:
    body = field(node, "body")
    return [
        c for c in children(body) if kind(c) in (NodeKind.SWITCH_CASE, NodeKind.SWITCH_DEFAULT)
    ]


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


def pair_key_name(pair: Node) -> str | None:
    """Static key of an object pair (identifier, string or number key)."""
    key = field(pair, "key")
    k = kind(key)
    if k in (NodeKind.PROPERTY_IDENTIFIER, NodeKind.IDENTIFIER, NodeKind.NUMBER):
        return node_text(key)
    if k is NodeKind.STRING:
        return string_value(key)
    return None


def is_computed_key(pair: Node) -> bool:
    return kind(field(pair, "key")) is NodeKind.COMPUTED_PROPERTY_NAME


def object_pairs(node: Node) -> list[Node]:
    return [c for c in children(node) if kind(c) is NodeKind.PAIR]


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------


def class_superclass(node: Node) -> Node | None:
    """Expression after ``extends`` for either grammar."""
    for child in children(node):
        if kind(child) is not NodeKind.CLASS_HERITAGE:
            continue
        for inner in children(child):
            if inner.type == "extends_clause":
                value = field(inner, "value")
                if value is None:
                    parts = children(inner)
                    value = parts[0] if parts else None
                return unwrap(value)
            return unwrap(inner)
    return None


def class_members(node: Node) -> list[Node]:
    return children(field(node, "body"))


def field_name_node(node: Node) -> Node | None:
    """Name node of a class field for either grammar."""
    return field(node, "property") or field(node, "name")


def method_kind(node: Node) -> str:
    """``get``, ``set``, ``constructor`` or ``method``."""
    tokens = token_types(node)
    if "get" in tokens:
        return "get"
    if "set" in tokens:
        return "set"
    if function_name(node) == "constructor":
        return "constructor"
    return "method"


# ---------------------------------------------------------------------------
# JSX
# ---------------------------------------------------------------------------


def jsx_opening(node: Node) -> Node | None:
    """Node holding the tag name and attributes of a JSX element."""
    k = kind(node)
    if k is NodeKind.JSX_SELF_CLOSING_ELEMENT:
        return node
    if k is NodeKind.JSX_ELEMENT:
        opening = field(node, "open_tag")
        if opening is None:
            for child in children(node):
                if kind(child) is NodeKind.JSX_OPENING_ELEMENT:
                    return child
        return opening
    return None


def jsx_name(node: Node) -> str:
    """Tag name of a JSX element ("" for fragments)."""
    opening = jsx_opening(node)
    if opening is None:
        return ""
    name = field(opening, "name")
    if name is None:
        return ""
    return node_text(name)


def jsx_attributes(node: Node) -> list[tuple[str, Node | None, Node]]:
    """(name, value, attribute node) for each attribute of a JSX element."""
    opening = jsx_opening(node)
    result = []
    for attr in children(opening):
        if kind(attr) is not NodeKind.JSX_ATTRIBUTE:
            continue
        parts = children(attr)
        if not parts:
            continue
        name = node_text(parts[0])
        value = parts[1] if len(parts) > 1 else None
        result.append((name, value, attr))
    return result


def jsx_attribute(node: Node, name: str) -> tuple[Node | None, Node] | None:
    """(value, attribute node) for the named attribute, or None."""
    for attr_name, value, attr in jsx_attributes(node):
        if attr_name == name:
            return value, attr
    return None


def jsx_value_expression(value: Node | None) -> Node | None:
    """Expression inside ``{...}`` for an attribute value, else the value itself."""
    if kind(value) is NodeKind.JSX_EXPRESSION:
        return first_expression(value)
    return value


def jsx_child_elements(node: Node) -> list[Node]:
    return [c for c in children(node) if is_jsx(c)]


def in_try_block(node: Node) -> bool:
    """True when node sits inside the protected block of some try statement."""
    child = node
    for parent in ancestors(node):
        if kind(parent) is NodeKind.TRY_STATEMENT:
            body = field(parent, "body")
            if body is not None and body.id == child.id:
                return True
        child = parent
    return False
