"""Snippet analysis pipeline.

Parse once, infer types and aliases, run the native detectors, the ESLint
adapter and the data-flow detectors in that order, then summarize. Every stage
is isolated: a failure becomes a diagnostic and the rest of the pipeline
still runs, so ``analyze`` always returns a result.
"""

from dataclasses import dataclass, field
from typing import Any

from codecoach.ast_parser import (
    ASTParser,
    Dialect,
    DiagnosticKind,
    ParseDiagnostic,
    ParsedCode,
)
from codecoach.config_runtime import DEFAULTS
from codecoach.linters.eslint import ESLintRunner
from codecoach.rules.base import Detection, DetectionSource, StandardRuleContext
from codecoach.rules.orchestrator import RulesOrchestrator
from codecoach.type_inference import AliasMap, build_alias_map, build_type_map
from codecoach.utils.logging import get_request_id, logger

FRAMEWORK_CONTEXTS = {
    "react": "React/JSX code",
    "typescript": "TypeScript code",
    "javascript": "JavaScript code",
}


@dataclass
class AnalysisSummary:
    total: int = 0
    positive: int = 0
    negative: int = 0
    idiomatic: int = 0
    is_react: bool = False
    has_typescript: bool = False
    top_issues: list[Detection] = field(default_factory=list)
    topics_covered: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDetections": self.total,
            "positiveCount": self.positive,
            "negativeCount": self.negative,
            "idiomaticCount": self.idiomatic,
            "isReact": self.is_react,
            "hasTypeScript": self.has_typescript,
            "topIssues": [d.to_dict() for d in self.top_issues],
            "topicsCovered": list(self.topics_covered),
        }


@dataclass
class AnalysisResult:
    """Everything one ``analyze`` call found.

    ``issues_found`` lists negative detections with non-trivial ones first;
    ``positive_findings`` lists detections that are positive and not negative.
    """

    parsed: ParsedCode
    detections: list[Detection] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)
    summary: AnalysisSummary = field(default_factory=AnalysisSummary)
    topics_detected: list[str] = field(default_factory=list)
    issues_found: list[Detection] = field(default_factory=list)
    positive_findings: list[Detection] = field(default_factory=list)


@dataclass
class TopicPerformance:
    topic_slug: str
    detection_count: int
    positive_count: int
    negative_count: int
    idiomatic_count: int
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "topicSlug": self.topic_slug,
            "detectionCount": self.detection_count,
            "positiveCount": self.positive_count,
            "negativeCount": self.negative_count,
            "idiomaticCount": self.idiomatic_count,
            "score": self.score,
        }


@dataclass
class AnalysisContext:
    """Hand-off for the feedback writer."""

    framework_context: str
    issues_summary: str
    positive_summary: str
    topics_to_address: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "frameworkContext": self.framework_context,
            "issuesSummary": self.issues_summary,
            "positiveSummary": self.positive_summary,
            "topicsToAddress": list(self.topics_to_address),
        }


def _unique_slugs(detections: list[Detection]) -> list[str]:
    return list(dict.fromkeys(d.topic_slug for d in detections))


def _non_trivial_first(detections: list[Detection]) -> list[Detection]:
    # sorted() is stable, so source order holds within each group
    return sorted(detections, key=lambda d: d.trivial)


def _resolve_dialect(dialect: Dialect | str | None, diagnostics: list[ParseDiagnostic]):
    if dialect is None or isinstance(dialect, Dialect):
        return dialect
    try:
        return Dialect(dialect)
    except ValueError:
        diagnostics.append(ParseDiagnostic(f"Unknown dialect '{dialect}'; detecting instead"))
        return None


def _parse(code: str, dialect: Dialect | None, limits: dict[str, int]) -> ParsedCode:
    parser = ASTParser(
        max_source_bytes=limits["max_source_bytes"],
        max_tree_depth=limits["max_tree_depth"],
    )
    try:
        return parser.parse(code, dialect)
    except Exception as e:
        logger.opt(exception=True).error(f"Front end failed: {type(e).__name__}: {e}")
        fallback = dialect or Dialect.JAVASCRIPT
        return ParsedCode(
            source=code,
            dialect=fallback,
            has_typescript=fallback.is_typed,
            diagnostics=[ParseDiagnostic(f"Front end failed: {type(e).__name__}: {e}")],
        )


def _build_context(
    parsed: ParsedCode, limits: dict[str, int], diagnostics: list[ParseDiagnostic]
) -> StandardRuleContext:
    """Rule context with whatever inference succeeded; a failed pass leaves its map empty."""
    context = StandardRuleContext(parsed=parsed, limits=limits)
    try:
        context.types = build_type_map(parsed.index)
    except Exception as e:
        logger.opt(exception=True).warning(f"Type inference failed: {e}")
        diagnostics.append(
            ParseDiagnostic(f"Type inference failed: {type(e).__name__}: {e}", kind=DiagnosticKind.DETECTOR)
        )
        return context

    try:
        context.aliases = build_alias_map(parsed.index, context.types)
    except Exception as e:
        logger.opt(exception=True).warning(f"Alias tracking failed: {e}")
        context.aliases = AliasMap()
        diagnostics.append(
            ParseDiagnostic(f"Alias tracking failed: {type(e).__name__}: {e}", kind=DiagnosticKind.DETECTOR)
        )
    return context


def _run_eslint(
    code: str,
    parsed: ParsedCode,
    settings: dict[str, Any],
    diagnostics: list[ParseDiagnostic],
    request_id: str,
) -> list[Detection]:
    try:
        run = ESLintRunner(settings).run(
            code, parsed.is_react, parsed.has_typescript, request_id=request_id
        )
    except Exception as e:
        logger.opt(exception=True).error(f"ESLint adapter failed: {e}")
        diagnostics.append(
            ParseDiagnostic(f"ESLint adapter failed: {type(e).__name__}: {e}", kind=DiagnosticKind.RULE_ENGINE)
        )
        return []
    if run.error:
        diagnostics.append(ParseDiagnostic(run.error, kind=DiagnosticKind.RULE_ENGINE))
    return run.detections


def summarize(
    parsed: ParsedCode,
    detections: list[Detection],
    diagnostics: list[ParseDiagnostic],
    max_top_issues: int = 3,
) -> AnalysisResult:
    issues = _non_trivial_first([d for d in detections if d.negative])
    positives = [d for d in detections if d.positive and not d.negative]
    topics = _unique_slugs(detections)
    summary = AnalysisSummary(
        total=len(detections),
        positive=len(positives),
        negative=len(issues),
        idiomatic=sum(1 for d in detections if d.idiomatic),
        is_react=parsed.is_react,
        has_typescript=parsed.has_typescript,
        top_issues=issues[:max_top_issues],
        topics_covered=topics,
    )
    return AnalysisResult(
        parsed=parsed,
        detections=detections,
        diagnostics=diagnostics,
        summary=summary,
        topics_detected=topics,
        issues_found=issues,
        positive_findings=positives,
    )


def analyze(
    code: str,
    dialect: Dialect | str | None = None,
    *,
    config: dict[str, Any] | None = None,
    eslint: bool | None = None,
    request_id: str | None = None,
) -> AnalysisResult:
    """Analyze one snippet. Never raises.

    Args:
        code: Source text of the snippet
        dialect: Dialect hint; detected from the tree when omitted
        config: Runtime configuration (see ``config_runtime``); defaults when omitted
        eslint: Overrides ``eslint.enabled`` when given
        request_id: Correlation ID bound to every log line of this call

    Returns:
        AnalysisResult with detections in native, ESLint, data-flow order
    """
    config = config or DEFAULTS
    limits = {**DEFAULTS["limits"], **config.get("limits", {})}
    eslint_settings = {**DEFAULTS["eslint"], **config.get("eslint", {})}
    if eslint is not None:
        eslint_settings["enabled"] = eslint

    request_id = request_id or get_request_id()
    with logger.contextualize(request_id=request_id):
        diagnostics: list[ParseDiagnostic] = []
        parsed = None
        detections: list[Detection] = []
        try:
            hint = _resolve_dialect(dialect, diagnostics)
            parsed = _parse(code, hint, limits)
            diagnostics[:0] = parsed.diagnostics

            orchestrator = RulesOrchestrator()
            context = _build_context(parsed, limits, diagnostics)
            if parsed.root is not None:
                detections.extend(orchestrator.run(context, DetectionSource.NATIVE, diagnostics))
            detections.extend(_run_eslint(code, parsed, eslint_settings, diagnostics, request_id))
            if parsed.root is not None:
                detections.extend(orchestrator.run(context, DetectionSource.DATAFLOW, diagnostics))
        except Exception as e:
            logger.opt(exception=True).error(f"Analysis aborted: {type(e).__name__}: {e}")
            diagnostics.append(
                ParseDiagnostic(f"Analysis aborted: {type(e).__name__}: {e}", kind=DiagnosticKind.DETECTOR)
            )
            if parsed is None:
                parsed = ParsedCode(source=code, dialect=Dialect.JAVASCRIPT)

        result = summarize(parsed, detections, diagnostics, limits["max_top_issues"])
        logger.debug(
            f"Analyzed {parsed.language} snippet: {result.summary.total} detections, "
            f"{result.summary.negative} issues, {len(diagnostics)} diagnostics"
        )
        return result


def score_topic_performance(detections: list[Detection]) -> list[TopicPerformance]:
    """Per-topic counts and a 0..1 score, in first-seen topic order.

    The score starts from the positive ratio, loses half the negative ratio,
    gains 0.1 when any detection is idiomatic, and is clamped to [0, 1].
    """
    by_topic: dict[str, list[Detection]] = {}
    for item in detections:
        by_topic.setdefault(item.topic_slug, []).append(item)

    performances = []
    for slug, items in by_topic.items():
        total = len(items)
        positive = sum(1 for d in items if d.positive and not d.negative)
        negative = sum(1 for d in items if d.negative)
        idiomatic = sum(1 for d in items if d.idiomatic)

        score = 0.5
        if total:
            score = positive / total - 0.5 * (negative / total)
            if idiomatic:
                score += 0.1
            score = max(0.0, min(1.0, score))

        performances.append(
            TopicPerformance(
                topic_slug=slug,
                detection_count=total,
                positive_count=positive,
                negative_count=negative,
                idiomatic_count=idiomatic,
                score=score,
            )
        )
    return performances


def prioritize_issues(detections: list[Detection], max_issues: int = 3) -> list[Detection]:
    return _non_trivial_first([d for d in detections if d.negative])[:max_issues]


def relevant_topics_for_feedback(result: AnalysisResult) -> list[str]:
    """Slugs with issues, then slugs with positive findings."""
    return _unique_slugs(result.issues_found + result.positive_findings)


def serialize_analysis(result: AnalysisResult) -> dict[str, Any]:
    """JSON-ready form of a result for storage."""
    summary = result.summary
    return {
        "language": result.parsed.language,
        "isReact": result.parsed.is_react,
        "hasTypeScript": result.parsed.has_typescript,
        "parseErrors": [
            d.to_dict() for d in result.diagnostics if d.kind is DiagnosticKind.PARSE
        ],
        "summary": {
            "totalDetections": summary.total,
            "positiveCount": summary.positive,
            "negativeCount": summary.negative,
            "idiomaticCount": summary.idiomatic,
            "topicsCovered": list(summary.topics_covered),
        },
        "detections": [d.to_dict() for d in result.detections],
        "topicsDetected": list(result.topics_detected),
    }


def _bullets(detections: list[Detection], fallback_detail: str, limit: int) -> str:
    return "\n".join(f"- {d.topic_slug}: {d.details or fallback_detail}" for d in detections[:limit])


def build_analysis_context(result: AnalysisResult, max_items: int = 5) -> AnalysisContext:
    if result.parsed.is_react:
        framework = FRAMEWORK_CONTEXTS["react"]
    elif result.parsed.has_typescript:
        framework = FRAMEWORK_CONTEXTS["typescript"]
    else:
        framework = FRAMEWORK_CONTEXTS["javascript"]

    issues = (
        _bullets(result.issues_found, "Issue detected", max_items)
        if result.issues_found
        else "No significant issues detected"
    )
    positives = (
        _bullets(result.positive_findings, "Good usage", max_items)
        if result.positive_findings
        else "Limited positive patterns detected"
    )
    return AnalysisContext(
        framework_context=framework,
        issues_summary=issues,
        positive_summary=positives,
        topics_to_address=_unique_slugs(result.issues_found),
    )
