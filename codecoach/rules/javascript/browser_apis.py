"""Web storage, URL, FormData and History API detectors."""

from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="browser_apis", category="browser", order=210)

STORAGE_OBJECTS = ("localStorage", "sessionStorage")
STORAGE_METHODS = ("getItem", "setItem", "removeItem", "clear")
HISTORY_METHODS = ("pushState", "replaceState", "back", "forward", "go")


def find_local_storage(context: StandardRuleContext) -> list[Detection]:
    calls = []
    for owner in STORAGE_OBJECTS:
        calls.extend((call, owner, method) for call, method in context.static_calls(owner, *STORAGE_METHODS))
    calls.sort(key=lambda item: item[0].start_byte)
    return [
        detection(
            "localStorage-usage",
            call,
            positive=True,
            idiomatic=True,
            details=f"{owner}.{method}() used for client-side storage",
        )
        for call, owner, method in calls[:1]
    ]


def find_url_api(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("url-api", node, positive=True, idiomatic=True, details=f"{name} API used for URL handling")
        for node, name in context.constructions("URL", "URLSearchParams")[:1]
    ]


def find_form_data_api(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "formdata-api",
            node,
            positive=True,
            idiomatic=True,
            details="FormData API used for form data handling",
        )
        for node, _name in context.constructions("FormData")[:1]
    ]


def find_history_api(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "history-api",
            call,
            positive=True,
            idiomatic=True,
            details=f"history.{method}() used for navigation",
        )
        for call, method in context.static_calls("history", *HISTORY_METHODS)[:1]
    ]
