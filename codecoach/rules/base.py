"""Base contracts for detector standardization."""

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from codecoach.ast_extractors.base import Node, NodeIndex, NodeKind, node_location
from codecoach.ast_extractors.javascript import (
    call_name,
    callee,
    identifier_name,
    method_call,
    static_call,
)
from codecoach.ast_parser import ParsedCode
from codecoach.config_runtime import DEFAULTS
from codecoach.type_inference import AliasMap, InferredType, TypeMap, type_of

T = TypeVar("T")


class DetectionSource(Enum):
    """Which analysis produced a detection."""

    NATIVE = "native"
    DATAFLOW = "dataflow"
    ESLINT = "eslint"


@dataclass(frozen=True)
class Location:
    line: int
    column: int

    def to_dict(self) -> dict[str, int]:
        return {"line": self.line, "column": self.column}


@dataclass(frozen=True)
class Detection:
    """One finding about a pattern in the snippet.

    The four tags are independent: a finding may be both positive and
    negative ("works, but worth a style note").
    """

    topic_slug: str
    positive: bool = False
    negative: bool = False
    idiomatic: bool = False
    trivial: bool = False
    location: Location | None = None
    details: str | None = None
    source: DetectionSource = DetectionSource.NATIVE

    @property
    def detected(self) -> bool:
        return True

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire shape."""
        result = {
            "topicSlug": self.topic_slug,
            "detected": True,
            "isPositive": self.positive,
            "isNegative": self.negative,
            "isIdiomatic": self.idiomatic,
            "isTrivial": self.trivial,
            "source": self.source.value,
        }
        if self.location is not None:
            result["location"] = self.location.to_dict()
        if self.details is not None:
            result["details"] = self.details
        return result


def detection(
    topic_slug: str,
    node: Node | None = None,
    *,
    positive: bool = False,
    negative: bool = False,
    idiomatic: bool = False,
    trivial: bool = False,
    details: str | None = None,
) -> Detection:
    """Build a Detection located at node."""
    location = None
    if node is not None:
        line, column = node_location(node)
        location = Location(line, column)
    return Detection(
        topic_slug=topic_slug,
        positive=positive,
        negative=negative,
        idiomatic=idiomatic,
        trivial=trivial,
        location=location,
        details=details,
    )


def keep_first(
    detections: Iterable[T],
    key: Callable[[T], Hashable] | None = None,
) -> list[T]:
    """Keep the first detection per key, preserving order.

    The default key is the topic slug, which reports a topic at most once per
    snippet. Detectors that report once per variant pass their own key.
    """
    key = key or (lambda d: d.topic_slug)
    seen = set()
    kept = []
    for item in detections:
        marker = key(item)
        if marker in seen:
            continue
        seen.add(marker)
        kept.append(item)
    return kept


def by_slug_and_details(item: Detection) -> Hashable:
    return item.topic_slug, item.details


@dataclass
class StandardRuleContext:
    """Everything a detector may read for one snippet. Never mutated by rules."""

    parsed: ParsedCode
    types: TypeMap = field(default_factory=dict)
    aliases: AliasMap = field(default_factory=AliasMap)
    limits: dict[str, int] = field(default_factory=lambda: dict(DEFAULTS["limits"]))

    @property
    def index(self) -> NodeIndex:
        return self.parsed.index

    @property
    def root(self) -> Node | None:
        return self.parsed.root

    @property
    def statements(self) -> list[Node]:
        return self.parsed.statements

    @property
    def scan_depth(self) -> int:
        return self.limits.get("max_scan_depth", DEFAULTS["limits"]["max_scan_depth"])

    def nodes(self, *kinds: NodeKind) -> list[Node]:
        """Indexed nodes of the given kinds in source order."""
        return self.index.of(*kinds)

    def type_of(self, name: str | None) -> InferredType:
        return type_of(self.types, name)

    def method_calls(self, *names: str) -> list[tuple[Node, str]]:
        """(call, method) for every ``x.method(...)`` call with a listed method name."""
        found = []
        for call in self.index.of(NodeKind.CALL_EXPRESSION):
            _obj, method = method_call(call)
            if method in names:
                found.append((call, method))
        return found

    def calls_named(self, *names: str) -> list[tuple[Node, str]]:
        """(call, name) for every ``name(...)`` call with a listed bare callee."""
        found = []
        for call in self.index.of(NodeKind.CALL_EXPRESSION):
            name = call_name(call)
            if name in names:
                found.append((call, name))
        return found

    def constructions(self, *names: str) -> list[tuple[Node, str]]:
        """(new expression, class name) for every ``new Name(...)`` with a listed name."""
        found = []
        for node in self.index.of(NodeKind.NEW_EXPRESSION):
            name = identifier_name(callee(node))
            if name in names:
                found.append((node, name))
        return found

    def static_calls(self, owner: str, *methods: str) -> list[tuple[Node, str]]:
        """(call, method) for every ``Owner.method(...)`` call with a listed method."""
        found = []
        for call in self.index.of(NodeKind.CALL_EXPRESSION):
            obj, method = static_call(call)
            if obj == owner and method in methods:
                found.append((call, method))
        return found


@dataclass(frozen=True)
class RuleMetadata:
    """Metadata describing when a detector module runs and how it is tagged."""

    name: str
    category: str
    order: int
    requires_react: bool = False
    source: DetectionSource = DetectionSource.NATIVE


RuleFunction = Callable[[StandardRuleContext], list[Detection]]
