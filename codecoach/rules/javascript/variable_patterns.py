"""Variable declaration and scoping detectors."""

from codecoach.ast_extractors.base import NodeKind, ancestors, kind, node_line, node_text, walk
from codecoach.ast_extractors.javascript import (
    declaration_kind,
    declarator_name,
    declarators,
    function_body,
    identifier_name,
    is_function,
    pair_key_name,
)
from codecoach.rules.base import (
    Detection,
    RuleMetadata,
    StandardRuleContext,
    detection,
    keep_first,
)

METADATA = RuleMetadata(name="variable_patterns", category="variables", order=40)

BLOCK_KINDS = frozenset(
    [
        NodeKind.IF_STATEMENT,
        NodeKind.FOR_STATEMENT,
        NodeKind.FOR_IN_STATEMENT,
        NodeKind.WHILE_STATEMENT,
        NodeKind.DO_STATEMENT,
        NodeKind.SWITCH_CASE,
        NodeKind.SWITCH_DEFAULT,
    ]
)

REFERENCE_KINDS = frozenset([NodeKind.IDENTIFIER, NodeKind.SHORTHAND_PROPERTY_IDENTIFIER])


def find_var_hoisting(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "var-hoisting",
            node,
            negative=True,
            trivial=True,
            details="var declaration is hoisted to function scope - prefer let/const",
        )
        for node in context.nodes(NodeKind.VARIABLE_DECLARATION)
    ]


def _scope_roots(context: StandardRuleContext):
    yield context.root
    for fn in context.nodes(
        NodeKind.FUNCTION_DECLARATION,
        NodeKind.FUNCTION_EXPRESSION,
        NodeKind.ARROW_FUNCTION,
        NodeKind.METHOD_DEFINITION,
    ):
        body = function_body(fn)
        if body is not None:
            yield body


def find_temporal_dead_zone(context: StandardRuleContext) -> list[Detection]:
    """References to a let/const name on a line above its declaration, per scope.

    Nested function bodies are separate scopes; a reference inside one runs
    later and is never in the dead zone of the enclosing scope.
    """
    if context.root is None:
        return []

    detections = []
    for scope in _scope_roots(context):
        declared: dict[str, int] = {}
        declaring_ids = set()
        scope_nodes = list(walk(scope, prune=is_function))

        for node in scope_nodes:
            if declaration_kind(node) not in ("let", "const"):
                continue
            for declarator in declarators(node):
                name = declarator_name(declarator)
                if name is None:
                    continue
                declared.setdefault(name, node_line(declarator))
                declaring_ids.add(declarator.child_by_field_name("name").id)

        if not declared:
            continue

        for node in scope_nodes:
            if kind(node) not in REFERENCE_KINDS or node.id in declaring_ids:
                continue
            name = node_text(node)
            decl_line = declared.get(name)
            if decl_line is not None and node_line(node) < decl_line:
                detections.append(
                    detection(
                        "temporal-dead-zone",
                        node,
                        negative=True,
                        details=f"Variable '{name}' referenced before declaration (temporal dead zone)",
                    )
                )

    detections.sort(key=lambda d: (d.location.line, d.location.column))
    return detections


def find_block_vs_function_scope(context: StandardRuleContext) -> list[Detection]:
    """One finding: the first var inside a block, else the first block-scoped let/const."""
    negatives = []
    positives = []
    for node in context.nodes(NodeKind.VARIABLE_DECLARATION, NodeKind.LEXICAL_DECLARATION):
        if not any(kind(parent) in BLOCK_KINDS for parent in ancestors(node)):
            continue
        if declaration_kind(node) == "var":
            negatives.append(
                detection(
                    "block-vs-function-scope",
                    node,
                    negative=True,
                    details="var inside block - leaks to function scope. Use let/const for block scoping",
                )
            )
        else:
            positives.append(
                detection(
                    "block-vs-function-scope",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Block-scoped variable declaration with let/const",
                )
            )

    if negatives:
        return negatives[:1]
    return positives[:1]


def find_object_shorthand(context: StandardRuleContext) -> list[Detection]:
    """First shorthand property and first ``{key: key}`` longhand."""
    found = []
    for node in context.nodes(
        NodeKind.SHORTHAND_PROPERTY_IDENTIFIER,
        NodeKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN,
        NodeKind.PAIR,
        NodeKind.PAIR_PATTERN,
    ):
        k = kind(node)
        if k in (
            NodeKind.SHORTHAND_PROPERTY_IDENTIFIER,
            NodeKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN,
        ):
            found.append(
                detection(
                    "object-shorthand",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Object shorthand property used",
                )
            )
            continue

        key = node.child_by_field_name("key")
        if kind(key) is not NodeKind.PROPERTY_IDENTIFIER:
            continue
        name = pair_key_name(node)
        if identifier_name(node.child_by_field_name("value")) == name:
            found.append(
                detection(
                    "object-shorthand",
                    node,
                    negative=True,
                    trivial=True,
                    details=f"{{{name}: {name}}} can be shortened to {{{name}}}",
                )
            )

    return keep_first(found, key=lambda d: d.positive)
