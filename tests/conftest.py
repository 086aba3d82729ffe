"""Pytest configuration and fixtures."""

import pytest

from codecoach.analysis import analyze
from codecoach.ast_parser import parse_code
from codecoach.rules.base import StandardRuleContext
from codecoach.type_inference import build_alias_map, build_type_map


@pytest.fixture
def analyze_js():
    """Analyze a snippet with the ESLint pass disabled.

    Keeps tests independent of a Node toolchain; pass ``eslint=True`` to
    override.
    """

    def _analyze(code, dialect=None, **kwargs):
        kwargs.setdefault("eslint", False)
        return analyze(code, dialect, **kwargs)

    return _analyze


@pytest.fixture
def slugs():
    """Topic slugs of a result (or detection list), optionally filtered by a tag."""

    def _slugs(result, tag=None):
        detections = getattr(result, "detections", result)
        if tag is not None:
            detections = [d for d in detections if getattr(d, tag)]
        return [d.topic_slug for d in detections]

    return _slugs


@pytest.fixture
def rule_context():
    """Build the rule context a detector sees for a snippet."""

    def _context(code, dialect=None):
        parsed = parse_code(code, dialect)
        types = build_type_map(parsed.index)
        return StandardRuleContext(
            parsed=parsed,
            types=types,
            aliases=build_alias_map(parsed.index, types),
        )

    return _context


@pytest.fixture
def find(slugs):
    """Detections of one slug in a result."""

    def _find(result, slug):
        return [d for d in result.detections if d.topic_slug == slug]

    return _find
