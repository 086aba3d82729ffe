"""Intersection, Mutation and Resize observer detectors."""

from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection

METADATA = RuleMetadata(name="observer_apis", category="browser", order=220)


def _first_observer(context, slug, constructor, details):
    return [
        detection(slug, node, positive=True, idiomatic=True, details=details)
        for node, _name in context.constructions(constructor)[:1]
    ]


def find_intersection_observer(context: StandardRuleContext) -> list[Detection]:
    return _first_observer(
        context,
        "intersection-observer",
        "IntersectionObserver",
        "IntersectionObserver used for visibility detection",
    )


def find_mutation_observer(context: StandardRuleContext) -> list[Detection]:
    return _first_observer(
        context,
        "mutation-observer",
        "MutationObserver",
        "MutationObserver used for DOM change detection",
    )


def find_resize_observer(context: StandardRuleContext) -> list[Detection]:
    return _first_observer(
        context,
        "resize-observer",
        "ResizeObserver",
        "ResizeObserver used for element size monitoring",
    )
