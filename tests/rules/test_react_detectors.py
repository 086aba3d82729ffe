"""
React detector tests - hooks, state handling and effect cleanup.
"""

from codecoach.ast_parser import Dialect
from codecoach.rules.react import react_hooks

COUNTER = """
import React, { useState, useEffect } from 'react';

function Counter() {
  const [count, setCount] = useState(0);
  useEffect(() => {
    document.title = `Clicked ${count} times`;
  }, [count]);
  return <button onClick={() => setCount(c => c + 1)}>{count}</button>;
}
"""


class TestUseState:
    """useState destructuring."""

    def test_destructured(self, rule_context):
        found = react_hooks.find_use_state_basics(rule_context("const [v, setV] = useState(0);"))

        assert found[0].positive and found[0].idiomatic
        assert not found[0].negative
        assert found[0].details == "useState with proper array destructuring"

    def test_not_destructured(self, rule_context):
        found = react_hooks.find_use_state_basics(rule_context("const state = useState(0);"))

        assert found[0].positive and found[0].negative
        assert found[0].details == "useState should use array destructuring [state, setState]"

    def test_functional_update(self, rule_context):
        found = react_hooks.find_use_state_functional_updates(rule_context(COUNTER))
        assert [d.topic_slug for d in found] == ["usestate-functional-updates"]


class TestUseEffectDependencies:
    """Dependency arrays on effects."""

    def test_empty_array(self, rule_context):
        found = react_hooks.find_use_effect_dependencies(rule_context("useEffect(() => {}, []);"))
        assert found[0].details == "Empty dependency array - runs once on mount"

    def test_counted_dependencies(self, rule_context):
        found = react_hooks.find_use_effect_dependencies(rule_context("useEffect(() => {}, [a, b]);"))
        assert found[0].details == "Dependency array with 2 dependencies"

    def test_missing_array(self, rule_context):
        found = react_hooks.find_use_effect_dependencies(rule_context("useEffect(() => {});"))

        assert found[0].negative
        assert found[0].details == "Missing dependency array - effect runs on every render"


class TestReactGating:
    """React detectors only run on React snippets."""

    def test_component_is_react(self, analyze_js, slugs):
        result = analyze_js(COUNTER, Dialect.JSX)

        assert result.parsed.is_react
        assert result.summary.is_react
        assert "usestate-basics" in slugs(result)
        assert "useeffect-dependencies" in slugs(result)

    def test_plain_script_skips_react(self, analyze_js, slugs):
        result = analyze_js("const total = [1, 2].reduce((a, b) => a + b, 0);")

        assert not result.parsed.is_react
        assert not any(s.startswith("use") for s in slugs(result))


class TestStateMutation:
    """Writes straight into useState values."""

    def test_push_on_state(self, analyze_js, find):
        code = """
function List() {
  const [items, setItems] = useState([]);
  const add = (x) => { items.push(x); setItems(items); };
  return null;
}
"""
        found = find(analyze_js(code), "state-mutation-react")

        assert len(found) == 1
        assert found[0].source.value == "dataflow"
        assert found[0].details.startswith("Calling 'items.push()' mutates state directly")

    def test_property_assignment(self, analyze_js, find):
        code = """
function Form() {
  const [user, setUser] = useState({ name: '' });
  const rename = (n) => { user.name = n; };
  return null;
}
"""
        found = find(analyze_js(code), "state-mutation-react")
        assert found[0].details.startswith("Direct mutation of state variable 'user.name'")

    def test_setter_with_copy(self, analyze_js, find):
        code = """
function List() {
  const [items, setItems] = useState([]);
  const add = (x) => setItems([...items, x]);
  return null;
}
"""
        assert find(analyze_js(code), "state-mutation-react") == []


class TestEffectCleanup:
    """Subscriptions in effects without a cleanup return."""

    def test_listener_without_cleanup(self, analyze_js, find):
        code = """
function Tracker() {
  useEffect(() => {
    window.addEventListener('resize', onResize);
  }, []);
  return null;
}
"""
        found = find(analyze_js(code), "missing-cleanup-effect")

        assert len(found) == 1
        assert found[0].details.startswith("useEffect uses 'addEventListener' but has no cleanup return")

    def test_listener_with_cleanup(self, analyze_js, find):
        code = """
function Tracker() {
  useEffect(() => {
    window.addEventListener('resize', onResize);
    return () => window.removeEventListener('resize', onResize);
  }, []);
  return null;
}
"""
        assert find(analyze_js(code), "missing-cleanup-effect") == []
