"""Timer and scheduling detectors.

Timer functions match both bare calls (``setTimeout(...)``) and member calls
(``window.setTimeout(...)``).
"""

from codecoach.ast_extractors.base import NodeKind
from codecoach.ast_extractors.javascript import arguments, call_name, method_call
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="timers_scheduling", category="timers", order=170)

RATE_LIMITERS = frozenset(["debounce", "throttle"])


def _scheduled_calls(context, *names):
    """(call, name) for calls to any of names, bare or as a method."""
    found = []
    for call in context.nodes(NodeKind.CALL_EXPRESSION):
        name = call_name(call) or method_call(call)[1]
        if name in names:
            found.append((call, name))
    return found


def find_set_timeout(context: StandardRuleContext) -> list[Detection]:
    for call, _name in _scheduled_calls(context, "setTimeout")[:1]:
        args = arguments(call)
        has_callback = len(args) >= 1
        has_delay = len(args) >= 2
        return [
            detection(
                "setTimeout-usage",
                call,
                positive=has_callback and has_delay,
                negative=not has_callback,
                idiomatic=has_callback and has_delay,
                details="setTimeout() used with callback and delay" if has_delay else "setTimeout() used",
            )
        ]
    return []


def find_set_interval(context: StandardRuleContext) -> list[Detection]:
    """One unlocated finding when setInterval appears, judged by clearInterval."""
    calls = {name for _call, name in _scheduled_calls(context, "setInterval", "clearInterval")}
    if "setInterval" not in calls:
        return []
    cleared = "clearInterval" in calls
    return [
        detection(
            "setInterval-usage",
            positive=cleared,
            negative=not cleared,
            idiomatic=cleared,
            trivial=not cleared,
            details="setInterval() with clearInterval() cleanup"
            if cleared
            else "setInterval() without clearInterval() — potential memory leak",
        )
    ]


def find_request_animation_frame(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "requestAnimationFrame-usage",
            call,
            positive=True,
            idiomatic=True,
            details="requestAnimationFrame() used for animation scheduling",
        )
        for call, _name in _scheduled_calls(context, "requestAnimationFrame")[:1]
    ]


def find_debounce_throttle(context: StandardRuleContext) -> list[Detection]:
    """A debounce/throttle helper call, else the setTimeout + clearTimeout idiom."""
    for call, name in _scheduled_calls(context, *RATE_LIMITERS)[:1]:
        return [
            detection(
                "debounce-throttle",
                call,
                positive=True,
                idiomatic=True,
                details=f"{name}() used for rate limiting",
            )
        ]

    names = {name for _call, name in _scheduled_calls(context, "setTimeout", "clearTimeout")}
    if names == {"setTimeout", "clearTimeout"}:
        return [
            detection(
                "debounce-throttle",
                positive=True,
                idiomatic=True,
                details="Custom debounce pattern detected (setTimeout + clearTimeout)",
            )
        ]
    return []
