"""JSON serialization detectors."""

from codecoach.ast_extractors.base import NodeKind, ancestors, kind
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="json_operations", category="data", order=110)


def find_json_parse(context: StandardRuleContext) -> list[Detection]:
    """First JSON.parse call, judged by whether any try statement encloses it."""
    for call, _method in context.static_calls("JSON", "parse")[:1]:
        guarded = any(kind(parent) is NodeKind.TRY_STATEMENT for parent in ancestors(call))
        return [
            detection(
                "json-parse",
                call,
                positive=guarded,
                negative=not guarded,
                idiomatic=guarded,
                details="JSON.parse() with error handling"
                if guarded
                else "JSON.parse() without try-catch — may throw on invalid JSON",
            )
        ]
    return []


def find_json_stringify(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "json-stringify",
            call,
            positive=True,
            idiomatic=True,
            details="JSON.stringify() used for serialization",
        )
        for call, _method in context.static_calls("JSON", "stringify")[:1]
    ]
