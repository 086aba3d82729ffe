"""Detector discovery and fault-isolated execution.

Every module under the rule sub-packages that defines ``METADATA`` and one or
more ``find_*`` functions is a detector module. Modules run in
``METADATA.order``; functions within a module run in definition order.
"""

import dataclasses
import importlib
import inspect
import pkgutil
from collections.abc import Iterable
from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType

from codecoach.ast_parser import DiagnosticKind, ParseDiagnostic
from codecoach.rules.base import (
    Detection,
    DetectionSource,
    RuleFunction,
    RuleMetadata,
    StandardRuleContext,
)
from codecoach.utils.logging import logger

RULE_PACKAGES = ("javascript", "react", "dataflow")


@dataclass(frozen=True)
class RuleInfo:
    """A discovered detector function."""

    name: str
    module: str
    function: RuleFunction
    metadata: RuleMetadata
    line: int

    @property
    def qualified_name(self) -> str:
        return f"{self.module}.{self.name}"


def _rule_functions(module: ModuleType) -> list[tuple[str, RuleFunction]]:
    found = []
    for name, obj in inspect.getmembers(module, inspect.isfunction):
        if not name.startswith("find_") or obj.__module__ != module.__name__:
            continue
        params = list(inspect.signature(obj).parameters)
        if params != ["context"]:
            logger.warning(f"Skipping {module.__name__}.{name}: expected a single 'context' parameter")
            continue
        found.append((name, obj))
    return found


@lru_cache(maxsize=1)
def discover_rules() -> tuple[RuleInfo, ...]:
    """Import every detector module once and return its rules in run order."""
    import codecoach.rules as rules_package

    rules: list[RuleInfo] = []
    for package_name in RULE_PACKAGES:
        package = importlib.import_module(f"{rules_package.__name__}.{package_name}")
        for module_info in pkgutil.iter_modules(package.__path__):
            if module_info.name.startswith("_"):
                continue
            module_name = f"{package.__name__}.{module_info.name}"
            module = importlib.import_module(module_name)
            metadata = getattr(module, "METADATA", None)
            if not isinstance(metadata, RuleMetadata):
                continue
            for name, func in _rule_functions(module):
                rules.append(
                    RuleInfo(
                        name=name,
                        module=module_name,
                        function=func,
                        metadata=metadata,
                        line=func.__code__.co_firstlineno,
                    )
                )

    rules.sort(key=lambda r: (r.metadata.order, r.line))
    logger.debug(f"Discovered {len(rules)} detectors")
    return tuple(rules)


class RulesOrchestrator:
    """Run detectors over one snippet, isolating faults."""

    def __init__(self, rules: Iterable[RuleInfo] | None = None):
        self.rules = tuple(rules) if rules is not None else discover_rules()

    def applicable(self, source: DetectionSource, is_react: bool) -> list[RuleInfo]:
        return [
            r
            for r in self.rules
            if r.metadata.source is source and (is_react or not r.metadata.requires_react)
        ]

    def run(
        self,
        context: StandardRuleContext,
        source: DetectionSource,
        diagnostics: list[ParseDiagnostic],
    ) -> list[Detection]:
        """Run every applicable rule of one source and tag its output.

        A rule that raises contributes nothing; the fault is appended to
        diagnostics and logged, and the remaining rules still run.
        """
        detections: list[Detection] = []
        for rule in self.applicable(source, context.parsed.is_react):
            try:
                found = rule.function(context)
            except Exception as e:
                logger.opt(exception=True).warning(
                    f"Detector {rule.qualified_name} failed: {type(e).__name__}: {e}"
                )
                diagnostics.append(
                    ParseDiagnostic(
                        f"{rule.metadata.name}.{rule.name} failed: {type(e).__name__}: {e}",
                        kind=DiagnosticKind.DETECTOR,
                    )
                )
                continue

            for item in found or []:
                detections.append(dataclasses.replace(item, source=rule.metadata.source))

        return detections

    def get_rule_stats(self) -> dict[str, object]:
        by_category: dict[str, int] = {}
        for rule in self.rules:
            by_category[rule.metadata.category] = by_category.get(rule.metadata.category, 0) + 1
        return {
            "total_rules": len(self.rules),
            "react_rules": sum(1 for r in self.rules if r.metadata.requires_react),
            "by_category": by_category,
        }
