"""Regular expression detectors."""

import re

from codecoach.ast_extractors.base import NodeKind, field, kind, node_text
from codecoach.ast_extractors.javascript import callee, identifier_name
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="regex_patterns", category="regex", order=190)

CAPTURE_GROUP = re.compile(r"\((?!\?)")
NAMED_GROUP = re.compile(r"\(\?<\w+>")


def _flags(node) -> str:
    return node_text(field(node, "flags"))


def _pattern(node) -> str:
    return node_text(field(node, "pattern"))


def find_regex_literal(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.REGEX, NodeKind.NEW_EXPRESSION):
        if kind(node) is NodeKind.REGEX:
            details = "Regular expression literal used"
        elif identifier_name(callee(node)) == "RegExp":
            details = "RegExp constructor used"
        else:
            continue
        return [detection("regex-literal", node, positive=True, idiomatic=True, details=details)]
    return []


def find_regex_methods(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "regex-methods",
            call,
            positive=True,
            idiomatic=True,
            details=f".{method}() regex method used",
        )
        for call, method in context.method_calls("test", "exec")[:1]
    ]


def find_regex_flags(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.REGEX):
        flags = _flags(node)
        if flags:
            return [
                detection(
                    "regex-flags",
                    node,
                    positive=True,
                    idiomatic=True,
                    details=f"Regex flags used: {flags}",
                )
            ]
    return []


def find_regex_groups(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.REGEX):
        pattern = _pattern(node)
        named = NAMED_GROUP.search(pattern) is not None
        if named or CAPTURE_GROUP.search(pattern):
            return [
                detection(
                    "regex-groups",
                    node,
                    positive=True,
                    idiomatic=named,
                    details="Named capture groups used in regex"
                    if named
                    else "Capture groups used in regex",
                )
            ]
    return []
