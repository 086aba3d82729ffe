"""ES module import/export detectors."""

from codecoach.ast_extractors.base import Node, NodeKind, children, field, kind, token_types
from codecoach.ast_extractors.javascript import is_dynamic_import
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="module_patterns", category="modules", order=150)


def _import_clause_parts(node: Node) -> set[NodeKind]:
    """Kinds of the bindings an import statement introduces."""
    parts = set()
    for clause in children(node):
        if kind(clause) is not NodeKind.IMPORT_CLAUSE:
            continue
        for binding in children(clause):
            k = kind(binding)
            if k is NodeKind.NAMED_IMPORTS and not children(binding):
                continue
            parts.add(k)
    return parts


def _is_default_export(node: Node) -> bool:
    return "default" in token_types(node)


def _is_named_export(node: Node) -> bool:
    if _is_default_export(node):
        return False
    if field(node, "declaration") is not None:
        return True
    return any(
        kind(c) is NodeKind.EXPORT_CLAUSE or c.type == "namespace_export" for c in children(node)
    )


def _first_import_and_export(context, import_kind, is_export, import_details, export_details, slug):
    found = []
    for node in context.nodes(NodeKind.IMPORT_STATEMENT):
        if import_kind in _import_clause_parts(node):
            found.append(detection(slug, node, positive=True, idiomatic=True, details=import_details))
            break
    for node in context.nodes(NodeKind.EXPORT_STATEMENT):
        if is_export(node):
            found.append(detection(slug, node, positive=True, idiomatic=True, details=export_details))
            break
    return sorted(found, key=lambda d: (d.location.line, d.location.column))


def find_named_import_export(context: StandardRuleContext) -> list[Detection]:
    return _first_import_and_export(
        context,
        NodeKind.NAMED_IMPORTS,
        _is_named_export,
        "Named import used",
        "Named export used",
        "import-export-named",
    )


def find_default_import_export(context: StandardRuleContext) -> list[Detection]:
    return _first_import_and_export(
        context,
        NodeKind.IDENTIFIER,
        _is_default_export,
        "Default import used",
        "Default export used",
        "import-export-default",
    )


def find_dynamic_import(context: StandardRuleContext) -> list[Detection]:
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        if is_dynamic_import(call):
            return [
                detection(
                    "import-dynamic",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Dynamic import() used for code splitting",
                )
            ]
    return []


def find_namespace_import(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.IMPORT_STATEMENT):
        if NodeKind.NAMESPACE_IMPORT in _import_clause_parts(node):
            return [
                detection(
                    "import-namespace",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Namespace import (import * as ...) used",
                )
            ]
    return []
