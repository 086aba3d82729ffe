"""Base utilities and shared helpers for syntax-tree traversal.

Every detector sees the tree through this module: node kinds are a closed
enum instead of raw grammar strings, traversal is an iterative walk over
named children, and locations follow one convention (1-based line, 0-based
column).

Traversal never recurses in Python. A walk carries an explicit stack and an
optional depth cap, so minified or adversarial input is truncated instead of
exhausting the interpreter stack.
"""

from collections.abc import Callable, Iterator
from enum import Enum
from typing import Any

Node = Any


class NodeKind(Enum):
    """Closed set of tree-sitter node kinds the analysis inspects."""

    PROGRAM = "program"
    ERROR = "ERROR"
    COMMENT = "comment"

    IDENTIFIER = "identifier"
    PROPERTY_IDENTIFIER = "property_identifier"
    PRIVATE_PROPERTY_IDENTIFIER = "private_property_identifier"
    SHORTHAND_PROPERTY_IDENTIFIER = "shorthand_property_identifier"
    SHORTHAND_PROPERTY_IDENTIFIER_PATTERN = "shorthand_property_identifier_pattern"
    THIS = "this"
    SUPER = "super"
    IMPORT = "import"

    NULL = "null"
    UNDEFINED = "undefined"
    TRUE = "true"
    FALSE = "false"
    NUMBER = "number"
    STRING = "string"
    TEMPLATE_STRING = "template_string"
    TEMPLATE_SUBSTITUTION = "template_substitution"
    REGEX = "regex"
    REGEX_PATTERN = "regex_pattern"
    REGEX_FLAGS = "regex_flags"

    ARRAY = "array"
    OBJECT = "object"
    PAIR = "pair"
    COMPUTED_PROPERTY_NAME = "computed_property_name"
    SPREAD_ELEMENT = "spread_element"

    OBJECT_PATTERN = "object_pattern"
    ARRAY_PATTERN = "array_pattern"
    PAIR_PATTERN = "pair_pattern"
    OBJECT_ASSIGNMENT_PATTERN = "object_assignment_pattern"
    ASSIGNMENT_PATTERN = "assignment_pattern"
    REST_PATTERN = "rest_pattern"

    VARIABLE_DECLARATION = "variable_declaration"
    LEXICAL_DECLARATION = "lexical_declaration"
    VARIABLE_DECLARATOR = "variable_declarator"

    FUNCTION_DECLARATION = "function_declaration"
    FUNCTION_EXPRESSION = "function_expression"
    ARROW_FUNCTION = "arrow_function"
    METHOD_DEFINITION = "method_definition"
    FORMAL_PARAMETERS = "formal_parameters"
    REQUIRED_PARAMETER = "required_parameter"
    OPTIONAL_PARAMETER = "optional_parameter"

    CLASS_DECLARATION = "class_declaration"
    CLASS = "class"
    CLASS_HERITAGE = "class_heritage"
    CLASS_BODY = "class_body"
    FIELD_DEFINITION = "field_definition"

    CALL_EXPRESSION = "call_expression"
    NEW_EXPRESSION = "new_expression"
    ARGUMENTS = "arguments"
    MEMBER_EXPRESSION = "member_expression"
    SUBSCRIPT_EXPRESSION = "subscript_expression"
    ASSIGNMENT_EXPRESSION = "assignment_expression"
    AUGMENTED_ASSIGNMENT_EXPRESSION = "augmented_assignment_expression"
    BINARY_EXPRESSION = "binary_expression"
    UNARY_EXPRESSION = "unary_expression"
    UPDATE_EXPRESSION = "update_expression"
    TERNARY_EXPRESSION = "ternary_expression"
    PARENTHESIZED_EXPRESSION = "parenthesized_expression"
    SEQUENCE_EXPRESSION = "sequence_expression"
    AWAIT_EXPRESSION = "await_expression"

    IMPORT_STATEMENT = "import_statement"
    IMPORT_CLAUSE = "import_clause"
    NAMED_IMPORTS = "named_imports"
    NAMESPACE_IMPORT = "namespace_import"
    EXPORT_STATEMENT = "export_statement"
    EXPORT_CLAUSE = "export_clause"

    STATEMENT_BLOCK = "statement_block"
    EXPRESSION_STATEMENT = "expression_statement"
    EMPTY_STATEMENT = "empty_statement"
    IF_STATEMENT = "if_statement"
    ELSE_CLAUSE = "else_clause"
    FOR_STATEMENT = "for_statement"
    FOR_IN_STATEMENT = "for_in_statement"
    WHILE_STATEMENT = "while_statement"
    DO_STATEMENT = "do_statement"
    SWITCH_STATEMENT = "switch_statement"
    SWITCH_BODY = "switch_body"
    SWITCH_CASE = "switch_case"
    SWITCH_DEFAULT = "switch_default"
    TRY_STATEMENT = "try_statement"
    CATCH_CLAUSE = "catch_clause"
    FINALLY_CLAUSE = "finally_clause"
    THROW_STATEMENT = "throw_statement"
    RETURN_STATEMENT = "return_statement"
    BREAK_STATEMENT = "break_statement"
    CONTINUE_STATEMENT = "continue_statement"

    JSX_ELEMENT = "jsx_element"
    JSX_SELF_CLOSING_ELEMENT = "jsx_self_closing_element"
    JSX_OPENING_ELEMENT = "jsx_opening_element"
    JSX_CLOSING_ELEMENT = "jsx_closing_element"
    JSX_ATTRIBUTE = "jsx_attribute"
    JSX_EXPRESSION = "jsx_expression"
    JSX_TEXT = "jsx_text"
    JSX_FRAGMENT = "jsx_fragment"

    TYPE_ANNOTATION = "type_annotation"
    TYPE_ARGUMENTS = "type_arguments"
    TYPE_PARAMETERS = "type_parameters"
    INTERFACE_DECLARATION = "interface_declaration"
    TYPE_ALIAS_DECLARATION = "type_alias_declaration"
    ENUM_DECLARATION = "enum_declaration"
    AS_EXPRESSION = "as_expression"
    SATISFIES_EXPRESSION = "satisfies_expression"
    NON_NULL_EXPRESSION = "non_null_expression"
    ACCESSIBILITY_MODIFIER = "accessibility_modifier"

    OTHER = "<other>"


# Grammar spellings that mean the same construct
_ALIASES = {
    "function": NodeKind.FUNCTION_EXPRESSION,
    "generator_function": NodeKind.FUNCTION_EXPRESSION,
    "generator_function_declaration": NodeKind.FUNCTION_DECLARATION,
    "public_field_definition": NodeKind.FIELD_DEFINITION,
    "abstract_class_declaration": NodeKind.CLASS_DECLARATION,
}

_BY_TYPE = {member.value: member for member in NodeKind}
_BY_TYPE.update(_ALIASES)


def kind(node: Node) -> NodeKind:
    """Map a tree-sitter node onto its NodeKind (OTHER when unknown)."""
    if node is None:
        return NodeKind.OTHER
    return _BY_TYPE.get(node.type, NodeKind.OTHER)


def is_kind(node: Node, *kinds: NodeKind) -> bool:
    """True when node is one of the given kinds."""
    return node is not None and kind(node) in kinds


def children(node: Node) -> list[Node]:
    """Named children in source order, comments excluded."""
    if node is None:
        return []
    return [c for c in node.named_children if c.type != "comment"]


def field(node: Node, name: str) -> Node | None:
    """Child stored under a grammar field name."""
    if node is None:
        return None
    return node.child_by_field_name(name)


def token_types(node: Node) -> list[str]:
    """Types of the anonymous (keyword/punctuation) children of a node."""
    if node is None:
        return []
    return [c.type for c in node.children if not c.is_named]


def node_text(node: Node) -> str:
    """Source text of a node as str."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_location(node: Node) -> tuple[int, int]:
    """Return (line, column) with a 1-based line and a 0-based column."""
    row, column = node.start_point[0], node.start_point[1]
    return row + 1, column


def node_line(node: Node) -> int:
    return node.start_point[0] + 1


def same_node(a: Node, b: Node) -> bool:
    return a is not None and b is not None and a.id == b.id


def walk_with_depth(
    node: Node,
    prune: Callable[[Node], bool] | None = None,
    max_depth: int | None = None,
) -> Iterator[tuple[Node, int]]:
    """Pre-order walk over named children yielding (node, depth).

    The start node has depth 0. A node for which ``prune`` returns True is
    still yielded but its subtree is skipped (the start node is never pruned).
    Nodes deeper than ``max_depth`` are not visited.
    """
    if node is None:
        return

    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        yield current, depth

        if depth > 0 and prune is not None and prune(current):
            continue
        if max_depth is not None and depth >= max_depth:
            continue

        named = current.named_children
        for child in reversed(named):
            if child.type != "comment":
                stack.append((child, depth + 1))


def walk(
    node: Node,
    prune: Callable[[Node], bool] | None = None,
    max_depth: int | None = None,
) -> Iterator[Node]:
    """Pre-order walk over named children (see walk_with_depth)."""
    for current, _depth in walk_with_depth(node, prune=prune, max_depth=max_depth):
        yield current


def find_first(
    node: Node,
    predicate: Callable[[Node], bool],
    prune: Callable[[Node], bool] | None = None,
    max_depth: int | None = None,
    include_self: bool = True,
) -> Node | None:
    """First node in pre-order matching predicate, or None."""
    for current in walk(node, prune=prune, max_depth=max_depth):
        if not include_self and same_node(current, node):
            continue
        if predicate(current):
            return current
    return None


def contains(
    node: Node,
    predicate: Callable[[Node], bool],
    prune: Callable[[Node], bool] | None = None,
    max_depth: int | None = None,
) -> bool:
    return find_first(node, predicate, prune=prune, max_depth=max_depth) is not None


def ancestors(node: Node) -> Iterator[Node]:
    """Parents of node from nearest to the root."""
    current = node.parent if node is not None else None
    while current is not None:
        yield current
        current = current.parent


def within(node: Node, container: Node) -> bool:
    """True when node's byte range falls inside container's."""
    return container.start_byte <= node.start_byte and node.end_byte <= container.end_byte


class NodeIndex:
    """All nodes of a tree grouped by kind, each bucket in source order.

    Built once per analysis so that detectors looking for a handful of kinds
    do not each re-walk the tree.
    """

    def __init__(self, root: Node | None, max_depth: int | None = None):
        self.nodes: list[Node] = []
        self.by_kind: dict[NodeKind, list[Node]] = {}
        self.truncated = False

        if root is None:
            return

        for current, depth in walk_with_depth(root, max_depth=max_depth):
            if max_depth is not None and depth >= max_depth and current.named_child_count:
                self.truncated = True
            self.nodes.append(current)
            self.by_kind.setdefault(kind(current), []).append(current)

    def of(self, *kinds: NodeKind) -> list[Node]:
        """Nodes of the given kinds in source order."""
        if len(kinds) == 1:
            return list(self.by_kind.get(kinds[0], ()))
        selected = [n for k in kinds for n in self.by_kind.get(k, ())]
        selected.sort(key=lambda n: (n.start_byte, -n.end_byte))
        return selected

    def has(self, *kinds: NodeKind) -> bool:
        return any(self.by_kind.get(k) for k in kinds)
