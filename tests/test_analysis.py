"""
Analysis pipeline tests - summary, scoring, serialization and feedback context.
"""

from unittest.mock import patch

import pytest

from codecoach.analysis import (
    build_analysis_context,
    prioritize_issues,
    relevant_topics_for_feedback,
    score_topic_performance,
    serialize_analysis,
)
from codecoach.ast_parser import DiagnosticKind, Dialect
from codecoach.rules.base import Detection


def _d(slug, **tags):
    return Detection(topic_slug=slug, **tags)


class TestSummary:
    """Counts and ordering on the result."""

    def test_counts(self, analyze_js):
        result = analyze_js("var x = 1;\nconst ys = [1, 2].map(y => y * 2);\n")
        summary = result.summary

        assert summary.total == len(result.detections)
        assert summary.negative == len(result.issues_found)
        assert summary.positive == len(result.positive_findings)
        assert summary.idiomatic == sum(1 for d in result.detections if d.idiomatic)
        assert summary.topics_covered == result.topics_detected
        assert len(set(result.topics_detected)) == len(result.topics_detected)

    def test_issues_non_trivial_first(self, analyze_js):
        code = "var total = 0;\nconst arr = [1, 2];\nfor (let i = 0; i <= arr.length; i++) {}\n"
        result = analyze_js(code)
        trivial_flags = [d.trivial for d in result.issues_found]

        assert trivial_flags == sorted(trivial_flags)
        assert not result.issues_found[0].trivial
        assert len(result.summary.top_issues) <= 3

    def test_top_issue_limit_from_config(self, analyze_js):
        code = "var a = 1;\nvar b = 2;\nvar c = 3;\nif (a == b) {}\n"
        result = analyze_js(code, config={"limits": {"max_top_issues": 1}})

        assert len(result.summary.top_issues) == 1

    def test_string_dialect(self, analyze_js):
        result = analyze_js("const x: number = 1;", "typescript")

        assert result.parsed.dialect is Dialect.TYPESCRIPT
        assert result.summary.has_typescript

    def test_unknown_dialect_falls_back(self, analyze_js):
        result = analyze_js("const x = 1;", "coffeescript")

        assert result.parsed.dialect is Dialect.JAVASCRIPT
        assert "Unknown dialect 'coffeescript'" in result.diagnostics[0].message

    def test_never_raises(self, analyze_js):
        with patch("codecoach.analysis.build_type_map", side_effect=RuntimeError("broken")):
            result = analyze_js("var x = 1;")

        assert "no-var-usage" in [d.topic_slug for d in result.detections]
        assert any(
            d.kind is DiagnosticKind.DETECTOR and "Type inference failed" in d.message
            for d in result.diagnostics
        )


class TestTopicScoring:
    """Per-topic performance."""

    def test_scores(self):
        detections = [
            _d("array-map", positive=True, idiomatic=True),
            _d("array-map", positive=True),
            _d("no-var-usage", negative=True),
            _d("mixed", positive=True, negative=True),
        ]
        scores = {p.topic_slug: p for p in score_topic_performance(detections)}

        assert scores["array-map"].score == pytest.approx(1.0)
        assert scores["array-map"].idiomatic_count == 1
        assert scores["no-var-usage"].score == 0.0
        assert scores["mixed"].positive_count == 0
        assert scores["mixed"].negative_count == 1

    def test_order_and_shape(self):
        perf = score_topic_performance([_d("b", positive=True), _d("a", negative=True)])

        assert [p.topic_slug for p in perf] == ["b", "a"]
        assert perf[0].to_dict() == {
            "topicSlug": "b",
            "detectionCount": 1,
            "positiveCount": 1,
            "negativeCount": 0,
            "idiomaticCount": 0,
            "score": 1.0,
        }

    def test_partial_score(self):
        detections = [_d("t", positive=True), _d("t", negative=True)]
        assert score_topic_performance(detections)[0].score == pytest.approx(0.25)


class TestPrioritizeIssues:
    """Negative detections, non-trivial first."""

    def test_ordering(self):
        detections = [
            _d("a", negative=True, trivial=True),
            _d("b", positive=True),
            _d("c", negative=True),
            _d("d", negative=True),
            _d("e", negative=True),
        ]

        assert [d.topic_slug for d in prioritize_issues(detections)] == ["c", "d", "e"]
        assert [d.topic_slug for d in prioritize_issues(detections, 5)] == ["c", "d", "e", "a"]


class TestSerialization:
    """Storage shape of an analysis."""

    def test_shape(self, analyze_js):
        result = analyze_js("var x = 1;\nconst broken = ;\n")
        payload = serialize_analysis(result)

        assert payload["language"] == "javascript"
        assert payload["isReact"] is False
        assert payload["summary"]["totalDetections"] == len(payload["detections"])
        assert payload["topicsDetected"] == result.topics_detected
        assert payload["parseErrors"]
        assert all(e["kind"] == "parse" for e in payload["parseErrors"])
        assert payload["detections"][0]["topicSlug"]


class TestAnalysisContext:
    """Hand-off for the feedback writer."""

    def test_react_context(self, analyze_js):
        code = "function A() {\n  const [v, setV] = useState(0);\n  return <p>{v}</p>;\n}\n"
        result = analyze_js(code)
        context = build_analysis_context(result)

        assert context.framework_context == "React/JSX code"
        assert "usestate-basics" in relevant_topics_for_feedback(result)
        assert context.positive_summary.startswith("- ")

    def test_issue_bullets(self, analyze_js):
        result = analyze_js("var x = 1;")
        context = build_analysis_context(result)

        assert context.framework_context == "JavaScript code"
        assert "- no-var-usage: var declaration found — use let or const instead" in context.issues_summary
        assert context.topics_to_address == relevant_topics_for_feedback(result)[: len(context.topics_to_address)]

    def test_empty(self, analyze_js):
        context = build_analysis_context(analyze_js(""))

        assert context.to_dict() == {
            "frameworkContext": "JavaScript code",
            "issuesSummary": "No significant issues detected",
            "positiveSummary": "Limited positive patterns detected",
            "topicsToAddress": [],
        }
