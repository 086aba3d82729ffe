"""codecoach - coaching analysis for JavaScript, TypeScript and React snippets."""

__version__ = "0.1.0"

from codecoach.analysis import (
    AnalysisResult,
    analyze,
    build_analysis_context,
    prioritize_issues,
    relevant_topics_for_feedback,
    score_topic_performance,
    serialize_analysis,
)
from codecoach.ast_parser import Dialect
from codecoach.rules.base import Detection, DetectionSource

__all__ = [
    "__version__",
    "AnalysisResult",
    "Detection",
    "DetectionSource",
    "Dialect",
    "analyze",
    "build_analysis_context",
    "prioritize_issues",
    "relevant_topics_for_feedback",
    "score_topic_performance",
    "serialize_analysis",
]
