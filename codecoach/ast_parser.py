"""Tree-sitter front end: dialect detection, error recovery and framework flags."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tree_sitter_language_pack import get_parser

from codecoach.ast_extractors.base import Node, NodeIndex, NodeKind, kind, node_text
from codecoach.ast_extractors.javascript import HOOK_NAME, call_name, string_value
from codecoach.utils.logging import logger


class Dialect(Enum):
    """Source dialects the front end understands."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JSX = "jsx"
    TSX = "tsx"

    @property
    def grammar(self) -> str:
        if self is Dialect.TYPESCRIPT:
            return "typescript"
        if self is Dialect.TSX:
            return "tsx"
        return "javascript"

    @property
    def is_typed(self) -> bool:
        return self in (Dialect.TYPESCRIPT, Dialect.TSX)


class DiagnosticKind(Enum):
    PARSE = "parse"
    DETECTOR = "detector"
    RULE_ENGINE = "rule-engine"


@dataclass(frozen=True)
class ParseDiagnostic:
    """A recoverable problem met while analyzing a snippet."""

    message: str
    line: int = 0
    column: int = 0
    kind: DiagnosticKind = DiagnosticKind.PARSE

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "line": self.line,
            "column": self.column,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class FrameworkContext:
    """Framework signals found in a tree."""

    has_react_import: bool = False
    uses_hooks: bool = False
    uses_jsx: bool = False

    @property
    def is_react(self) -> bool:
        return self.has_react_import or self.uses_hooks or self.uses_jsx


@dataclass
class ParsedCode:
    """Parse output for one snippet. ``root`` is None for an empty program."""

    source: str
    dialect: Dialect
    root: Node | None = None
    index: NodeIndex = field(default_factory=lambda: NodeIndex(None))
    is_react: bool = False
    has_typescript: bool = False
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)

    @property
    def language(self) -> str:
        return self.dialect.value

    @property
    def statements(self) -> list[Node]:
        if self.root is None:
            return []
        return [c for c in self.root.named_children if c.type != "comment"]

    @property
    def is_empty(self) -> bool:
        return not self.statements


# Node kinds only the typed grammars produce
TYPED_KINDS = frozenset(
    [
        NodeKind.TYPE_ANNOTATION,
        NodeKind.TYPE_ARGUMENTS,
        NodeKind.TYPE_PARAMETERS,
        NodeKind.INTERFACE_DECLARATION,
        NodeKind.TYPE_ALIAS_DECLARATION,
        NodeKind.ENUM_DECLARATION,
        NodeKind.AS_EXPRESSION,
        NodeKind.SATISFIES_EXPRESSION,
        NodeKind.NON_NULL_EXPRESSION,
        NodeKind.ACCESSIBILITY_MODIFIER,
    ]
)

MARKUP_KINDS = frozenset(
    [
        NodeKind.JSX_ELEMENT,
        NodeKind.JSX_SELF_CLOSING_ELEMENT,
        NodeKind.JSX_FRAGMENT,
        NodeKind.JSX_TEXT,
    ]
)

# Statements that count as recovered even when they contain a syntax error
STRUCTURAL_KINDS = frozenset(
    [
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.CLASS_DECLARATION,
        NodeKind.LEXICAL_DECLARATION,
        NodeKind.VARIABLE_DECLARATION,
        NodeKind.IMPORT_STATEMENT,
        NodeKind.EXPORT_STATEMENT,
        NodeKind.INTERFACE_DECLARATION,
        NodeKind.TYPE_ALIAS_DECLARATION,
    ]
)

REACT_MODULES = frozenset(["react", "React"])

MAX_DIAGNOSTICS = 50


def detect_framework_context(index: NodeIndex) -> FrameworkContext:
    """Look for React imports, hook calls and markup in an indexed tree."""
    has_react_import = any(
        string_value(imp.child_by_field_name("source")) in REACT_MODULES
        for imp in index.of(NodeKind.IMPORT_STATEMENT)
    )
    uses_hooks = any(
        HOOK_NAME.match(call_name(call) or "") for call in index.of(NodeKind.CALL_EXPRESSION)
    )
    uses_jsx = index.has(*MARKUP_KINDS)
    return FrameworkContext(
        has_react_import=has_react_import,
        uses_hooks=uses_hooks,
        uses_jsx=uses_jsx,
    )


def collect_diagnostics(root: Node, limit: int = MAX_DIAGNOSTICS) -> list[ParseDiagnostic]:
    """Turn ERROR and MISSING nodes into diagnostics in source order."""
    diagnostics: list[ParseDiagnostic] = []
    if root is None or not root.has_error:
        return diagnostics

    stack = [root]
    while stack and len(diagnostics) < limit:
        node = stack.pop()
        line, column = node.start_point[0] + 1, node.start_point[1]
        if node.is_missing:
            diagnostics.append(ParseDiagnostic(f"Missing '{node.type}'", line, column))
            continue
        if node.type == "ERROR":
            snippet = node_text(node).strip().splitlines()
            near = snippet[0][:40] if snippet else ""
            message = f"Unexpected token near '{near}'" if near else "Unexpected token"
            diagnostics.append(ParseDiagnostic(message, line, column))
        for child in reversed(node.children):
            if child.has_error or child.is_missing:
                stack.append(child)

    return diagnostics


def _recovered(statement: Node) -> bool:
    if statement.type == "ERROR":
        return False
    return not statement.has_error or kind(statement) in STRUCTURAL_KINDS


class ASTParser:
    """Parse JavaScript, TypeScript and their JSX dialects with tree-sitter."""

    def __init__(self, max_source_bytes: int = 256 * 1024, max_tree_depth: int = 400):
        self.max_source_bytes = max_source_bytes
        self.max_tree_depth = max_tree_depth

    def _parse_tree(self, source: bytes, grammar: str):
        parser = get_parser(grammar)
        return parser.parse(source)

    def _failure(self, code: str, dialect: Dialect, message: str, diagnostics=None) -> ParsedCode:
        diagnostics = list(diagnostics or [])
        diagnostics.insert(0, ParseDiagnostic(message))
        logger.debug(f"Parse failed ({dialect.value}): {message}")
        return ParsedCode(
            source=code,
            dialect=dialect,
            has_typescript=dialect.is_typed,
            diagnostics=diagnostics,
        )

    def parse(self, code: str, dialect: Dialect | None = None) -> ParsedCode:
        """Parse code, auto-detecting the dialect when no hint is given.

        Never raises: a tree with no recoverable statement becomes an empty
        program carrying the diagnostics that explain why.
        """
        fallback = dialect or Dialect.JAVASCRIPT

        try:
            source = code.encode("utf-8")
        except UnicodeEncodeError as e:
            return self._failure(code, fallback, f"Source is not valid UTF-8: {e}")

        if len(source) > self.max_source_bytes:
            return self._failure(
                code,
                fallback,
                f"Source is {len(source)} bytes, limit is {self.max_source_bytes}",
            )

        try:
            if dialect is None:
                tree = self._parse_tree(source, "tsx")
                index = NodeIndex(tree.root_node, self.max_tree_depth)
                dialect = self._classify(index)
                if not dialect.is_typed:
                    tree = self._parse_tree(source, dialect.grammar)
                    index = NodeIndex(tree.root_node, self.max_tree_depth)
            else:
                tree = self._parse_tree(source, dialect.grammar)
                index = NodeIndex(tree.root_node, self.max_tree_depth)
        except Exception as e:
            logger.opt(exception=True).warning(f"tree-sitter could not parse snippet: {e}")
            return self._failure(code, fallback, f"Parser unavailable: {e}")

        root = tree.root_node
        diagnostics = collect_diagnostics(root)

        statements = [c for c in root.named_children if c.type != "comment"]
        if root.type == "ERROR" or (statements and not any(_recovered(s) for s in statements)):
            return self._failure(code, dialect, "No statement could be recovered", diagnostics)

        if index.truncated:
            diagnostics.append(
                ParseDiagnostic(f"Tree deeper than {self.max_tree_depth} levels; truncated")
            )

        context = detect_framework_context(index)
        return ParsedCode(
            source=code,
            dialect=dialect,
            root=root,
            index=index,
            is_react=context.is_react,
            has_typescript=dialect.is_typed,
            diagnostics=diagnostics,
        )

    def _classify(self, index: NodeIndex) -> Dialect:
        typed = index.has(*TYPED_KINDS)
        markup = index.has(*MARKUP_KINDS)
        if typed and markup:
            return Dialect.TSX
        if typed:
            return Dialect.TYPESCRIPT
        if markup:
            return Dialect.JSX
        return Dialect.JAVASCRIPT

    def detect_dialect(self, code: str) -> Dialect:
        """Dialect the parser would pick for code without a hint."""
        return self.parse(code).dialect


def parse_code(code: str, dialect: Dialect | None = None, **limits) -> ParsedCode:
    return ASTParser(**limits).parse(code, dialect)
