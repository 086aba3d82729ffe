"""Map, Set and weak collection detectors."""

from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="map_set_collections", category="collections", order=160)

ITERATION_METHODS = ("entries", "keys", "values", "forEach")

WEAK_COLLECTIONS = ("WeakMap", "WeakSet", "WeakRef")


def find_map_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("map-basics", node, positive=True, idiomatic=True, details="Map collection used")
        for node, _name in context.constructions("Map")[:1]
    ]


def find_set_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("set-basics", node, positive=True, idiomatic=True, details="Set collection used")
        for node, _name in context.constructions("Set")[:1]
    ]


def find_map_set_iteration(context: StandardRuleContext) -> list[Detection]:
    """First iteration call, reported only when the snippet builds a Map or Set."""
    if not context.constructions("Map", "Set"):
        return []
    return [
        detection(
            "map-set-iteration",
            call,
            positive=True,
            idiomatic=True,
            details=f".{method}() used for collection iteration",
        )
        for call, method in context.method_calls(*ITERATION_METHODS)[:1]
    ]


def find_weak_map_weak_ref(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "weakmap-weakref",
            node,
            positive=True,
            idiomatic=True,
            details=f"{name} used for weak references",
        )
        for node, name in context.constructions(*WEAK_COLLECTIONS)[:1]
    ]
