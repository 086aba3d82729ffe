"""Three-layer curriculum: topic catalog, detection classifier and prioritizer.

Topics are grouped into fundamentals, intermediate and patterns. A learner
only sees intermediate or pattern issues once no fundamental issue remains
in the snippet.
"""

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path

import yaml

from codecoach.exceptions import CurriculumError
from codecoach.linters.eslint import rule_to_slug
from codecoach.rules.base import Detection
from codecoach.utils.logging import logger

DEFAULT_CATALOG = Path(__file__).parent / "data" / "curriculum.yaml"

REQUIRED_FIELDS = ("slug", "name", "layer", "category", "description")

MAX_SURFACED_ISSUES = 5


class Layer(Enum):
    FUNDAMENTALS = "fundamentals"
    INTERMEDIATE = "intermediate"
    PATTERNS = "patterns"


class UserLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class LayerInfo:
    name: str
    short_name: str
    priority: str
    description: str


LAYER_INFO = {
    Layer.FUNDAMENTALS: LayerInfo(
        name="Fundamentals",
        short_name="Foundation",
        priority="40-50%",
        description="Master these first. Everything else builds on them.",
    ),
    Layer.INTERMEDIATE: LayerInfo(
        name="Intermediate",
        short_name="Next Level",
        priority="30%",
        description="Build on your fundamentals with deeper concepts.",
    ),
    Layer.PATTERNS: LayerInfo(
        name="Patterns",
        short_name="Design Patterns",
        priority="20%",
        description="Advanced techniques for maintainable code.",
    ),
}

VISIBLE_LAYERS = {
    UserLevel.BEGINNER: [Layer.FUNDAMENTALS],
    UserLevel.INTERMEDIATE: [Layer.FUNDAMENTALS, Layer.INTERMEDIATE],
    UserLevel.ADVANCED: [Layer.FUNDAMENTALS, Layer.INTERMEDIATE, Layer.PATTERNS],
}

# ESLint rules placed outside the default intermediate layer
_FUNDAMENTAL_RULES = [
    "for-direction",
    "getter-return",
    "no-async-promise-executor",
    "no-compare-neg-zero",
    "no-cond-assign",
    "no-constant-binary-expression",
    "no-constant-condition",
    "no-dupe-args",
    "no-dupe-keys",
    "no-duplicate-case",
    "no-empty-pattern",
    "no-ex-assign",
    "no-fallthrough",
    "no-self-assign",
    "no-self-compare",
    "no-sparse-arrays",
    "no-unreachable",
    "use-isnan",
    "valid-typeof",
    "no-unsafe-finally",
    "no-unsafe-negation",
    "no-loss-of-precision",
    "no-extra-boolean-cast",
    "no-regex-spaces",
    "no-control-regex",
    "no-empty-character-class",
    "no-invalid-regexp",
    "no-misleading-character-class",
    "no-prototype-builtins",
    "no-unexpected-multiline",
    "no-inner-declarations",
    "no-func-assign",
    "no-import-assign",
    "no-obj-calls",
    "no-setter-return",
    "no-global-assign",
    "no-delete-var",
    "no-octal",
    "no-with",
]

_PATTERN_RULES = [
    "no-await-in-loop",
    "require-atomic-updates",
    "require-await",
    "prefer-promise-reject-errors",
    "complexity",
    "class-methods-use-this",
    "grouped-accessor-pairs",
    "logical-assignment-operators",
    "prefer-named-capture-group",
    "accessor-pairs",
    "no-useless-backreference",
    "react/jsx-no-constructed-context-values",
    "react/no-unstable-nested-components",
    "react/no-object-type-as-default-prop",
    "react/prefer-stateless-function",
]

ESLINT_LAYER_OVERRIDES = {
    **{rule_to_slug(rule): Layer.FUNDAMENTALS for rule in _FUNDAMENTAL_RULES},
    **{rule_to_slug(rule): Layer.PATTERNS for rule in _PATTERN_RULES},
}


@dataclass(frozen=True)
class CurriculumTopic:
    slug: str
    name: str
    layer: Layer
    category: str
    description: str
    framework: str = "shared"
    criticality: str = "medium"
    prerequisites: tuple[str, ...] = ()
    triggers: tuple[str, ...] = ()


@dataclass
class ThreeLayerAnalysis:
    """Detections bucketed by curriculum layer."""

    fundamentals: list[Detection] = field(default_factory=list)
    intermediate: list[Detection] = field(default_factory=list)
    patterns: list[Detection] = field(default_factory=list)
    unclassified: list[Detection] = field(default_factory=list)

    def bucket(self, layer: Layer) -> list[Detection]:
        return {
            Layer.FUNDAMENTALS: self.fundamentals,
            Layer.INTERMEDIATE: self.intermediate,
            Layer.PATTERNS: self.patterns,
        }[layer]

    def issues(self, layer: Layer) -> list[Detection]:
        return [d for d in self.bucket(layer) if d.negative]

    @property
    def counts(self) -> dict[str, int]:
        return {layer.value: len(self.bucket(layer)) for layer in Layer}


class Curriculum:
    """Read-only topic catalog indexed by slug and trigger."""

    def __init__(self, topics: list[CurriculumTopic]):
        self.topics = list(topics)
        self._by_slug = {t.slug: t for t in self.topics}
        self._trigger_layers: dict[str, Layer] = {}
        for topic in self.topics:
            for trigger in topic.triggers:
                self._trigger_layers.setdefault(trigger, topic.layer)

    def __len__(self) -> int:
        return len(self.topics)

    def topics_by_layer(self, layer: Layer) -> list[CurriculumTopic]:
        return [t for t in self.topics if t.layer is layer]

    def find_topic(self, slug: str) -> CurriculumTopic | None:
        return self._by_slug.get(slug)

    def layer_for(self, slug: str) -> Layer | None:
        """Layer a detection slug belongs to, or None when it cannot be placed."""
        layer = self._trigger_layers.get(slug)
        if layer is not None:
            return layer
        if slug.startswith("eslint-"):
            return ESLINT_LAYER_OVERRIDES.get(slug, Layer.INTERMEDIATE)
        return None


def _topic_from_entry(entry, position: int, source: Path) -> CurriculumTopic:
    if not isinstance(entry, dict):
        raise CurriculumError(
            f"Topic #{position} in {source} is not a mapping", {"position": position}
        )
    missing = [name for name in REQUIRED_FIELDS if not entry.get(name)]
    if missing:
        raise CurriculumError(
            f"Topic #{position} in {source} is missing {', '.join(missing)}",
            {"position": position, "missing": missing},
        )
    try:
        layer = Layer(entry["layer"])
    except ValueError as e:
        raise CurriculumError(
            f"Topic '{entry['slug']}' has unknown layer '{entry['layer']}'",
            {"slug": entry["slug"]},
        ) from e

    return CurriculumTopic(
        slug=entry["slug"],
        name=entry["name"],
        layer=layer,
        category=entry["category"],
        description=entry["description"],
        framework=entry.get("framework", "shared"),
        criticality=entry.get("criticality", "medium"),
        prerequisites=tuple(entry.get("prerequisites") or ()),
        triggers=tuple(entry.get("triggers") or (entry["slug"],)),
    )


@lru_cache(maxsize=8)
def _load(path: str) -> Curriculum:
    source = Path(path)
    if not source.exists():
        raise CurriculumError(f"Curriculum catalog not found: {source}", {"path": path})

    try:
        with open(source, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise CurriculumError(f"Could not read curriculum catalog {source}: {e}", {"path": path}) from e

    if not isinstance(data, dict) or not isinstance(data.get("topics"), list):
        raise CurriculumError(f"Curriculum catalog {source} has no 'topics' list", {"path": path})

    topics = []
    seen = set()
    for position, entry in enumerate(data["topics"], 1):
        topic = _topic_from_entry(entry, position, source)
        if topic.slug in seen:
            raise CurriculumError(f"Duplicate topic slug '{topic.slug}' in {source}", {"slug": topic.slug})
        seen.add(topic.slug)
        topics.append(topic)

    logger.debug(f"Loaded {len(topics)} curriculum topics from {source}")
    return Curriculum(topics)


def load_curriculum(path: str | Path | None = None) -> Curriculum:
    """Load a topic catalog, the bundled one when no path is given.

    Raises:
        CurriculumError: The file is missing, unreadable or malformed
    """
    return _load(str(Path(path).resolve() if path else DEFAULT_CATALOG))


def classify_detections(
    detections: list[Detection], curriculum: Curriculum | None = None
) -> ThreeLayerAnalysis:
    curriculum = curriculum or load_curriculum()
    analysis = ThreeLayerAnalysis()
    for item in detections:
        layer = curriculum.layer_for(item.topic_slug)
        if layer is None:
            analysis.unclassified.append(item)
        else:
            analysis.bucket(layer).append(item)
    return analysis


def _as_level(level: UserLevel | str) -> UserLevel:
    return level if isinstance(level, UserLevel) else UserLevel(level)


def prioritize_for_learner(
    analysis: ThreeLayerAnalysis,
    level: UserLevel | str,
    limit: int = MAX_SURFACED_ISSUES,
) -> list[Detection]:
    """Issues to show a learner, fundamentals first.

    Any fundamental issue hides every intermediate and pattern issue, whatever
    the level. Otherwise intermediate issues show for non-beginners and pattern
    issues for intermediate and advanced learners.
    """
    level = _as_level(level)
    fundamentals = analysis.issues(Layer.FUNDAMENTALS)
    if fundamentals:
        return fundamentals[:limit]

    surfaced = []
    if level is not UserLevel.BEGINNER:
        surfaced.extend(analysis.issues(Layer.INTERMEDIATE))
        surfaced.extend(analysis.issues(Layer.PATTERNS))
    return surfaced[:limit]


def estimate_user_level(fundamentals: float, intermediate: float, patterns: float = 0) -> UserLevel:
    """Level from per-layer mastery on a 0-5 scale; patterns mastery is not used."""
    if fundamentals < 3:
        return UserLevel.BEGINNER
    if intermediate < 3:
        return UserLevel.INTERMEDIATE
    if fundamentals >= 4:
        return UserLevel.ADVANCED
    return UserLevel.INTERMEDIATE


def visible_layers(level: UserLevel | str) -> list[Layer]:
    return list(VISIBLE_LAYERS[_as_level(level)])


def layer_info(layer: Layer | str) -> LayerInfo:
    return LAYER_INFO[layer if isinstance(layer, Layer) else Layer(layer)]


def topics_for_detected(
    slugs: list[str], curriculum: Curriculum | None = None
) -> dict[Layer, list[CurriculumTopic]]:
    """Catalog topics triggered by any of the detected slugs, per layer."""
    curriculum = curriculum or load_curriculum()
    detected = set(slugs)
    return {
        layer: [t for t in curriculum.topics_by_layer(layer) if detected.intersection(t.triggers)]
        for layer in Layer
    }
