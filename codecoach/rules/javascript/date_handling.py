"""Date construction, formatting and accessor detectors."""

from codecoach.ast_extractors.base import NodeKind, kind
from codecoach.ast_extractors.javascript import callee, identifier_name, static_call
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="date_handling", category="dates", order=180)

FORMAT_METHODS = (
    "toLocaleDateString",
    "toLocaleTimeString",
    "toLocaleString",
    "toISOString",
    "toDateString",
    "toTimeString",
    "toUTCString",
)

DATE_METHODS = (
    "getTime",
    "getFullYear",
    "getMonth",
    "getDate",
    "getDay",
    "getHours",
    "getMinutes",
    "getSeconds",
    "getMilliseconds",
    "setFullYear",
    "setMonth",
    "setDate",
    "setHours",
    "setMinutes",
)


def find_date_creation(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.NEW_EXPRESSION, NodeKind.CALL_EXPRESSION):
        if kind(node) is NodeKind.NEW_EXPRESSION:
            if identifier_name(callee(node)) == "Date":
                return [
                    detection(
                        "date-creation",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="new Date() used for date creation",
                    )
                ]
        elif static_call(node) == ("Date", "now"):
            return [
                detection(
                    "date-creation",
                    node,
                    positive=True,
                    idiomatic=True,
                    details="Date.now() used for timestamp",
                )
            ]
    return []


def find_date_formatting(context: StandardRuleContext) -> list[Detection]:
    for node in context.nodes(NodeKind.CALL_EXPRESSION, NodeKind.NEW_EXPRESSION):
        owner, method = static_call(node)
        if kind(node) is NodeKind.NEW_EXPRESSION:
            if (owner, method) == ("Intl", "DateTimeFormat"):
                return [
                    detection(
                        "date-formatting",
                        node,
                        positive=True,
                        idiomatic=True,
                        details="Intl.DateTimeFormat used for locale-aware date formatting",
                    )
                ]
        elif method in FORMAT_METHODS:
            return [
                detection(
                    "date-formatting",
                    node,
                    positive=True,
                    idiomatic=method.startswith("toLocale") or method == "toISOString",
                    details=f".{method}() used for date formatting",
                )
            ]
    return []


def find_date_methods(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "date-methods",
            call,
            positive=True,
            idiomatic=True,
            details=f".{method}() Date method used",
        )
        for call, method in context.method_calls(*DATE_METHODS)[:1]
    ]
