"""
Platform detector tests - browser APIs, the DOM, observers, timers and
ES modules.
"""

from codecoach.rules.javascript import (
    browser_apis,
    dom_operations,
    module_patterns,
    observer_apis,
    timers_scheduling,
)


def _details(found):
    return [d.details for d in found]


# =============================================================================
# BROWSER APIS
# =============================================================================
class TestBrowserApis:
    """Storage, URL, FormData and History."""

    def test_first_storage_call_across_storages(self, rule_context):
        code = "sessionStorage.getItem('a');\nlocalStorage.setItem('b', '1');\n"
        found = browser_apis.find_local_storage(rule_context(code))

        assert _details(found) == ["sessionStorage.getItem() used for client-side storage"]
        assert found[0].location.line == 1

    def test_storage_method_on_other_object(self, rule_context):
        assert browser_apis.find_local_storage(rule_context("cache.setItem('a', 1);")) == []

    def test_url_and_form_data(self, rule_context):
        context = rule_context("const u = new URL(href);\nconst f = new FormData(form);\n")

        assert _details(browser_apis.find_url_api(context)) == ["URL API used for URL handling"]
        assert _details(browser_apis.find_form_data_api(context)) == ["FormData API used for form data handling"]

    def test_history(self, rule_context):
        found = browser_apis.find_history_api(rule_context("history.pushState({}, '', '/next');"))
        assert _details(found) == ["history.pushState() used for navigation"]


# =============================================================================
# DOM
# =============================================================================
class TestDomOperations:
    """Querying, manipulation, events, classes and data attributes."""

    def test_query_selector(self, rule_context):
        found = dom_operations.find_dom_query_selectors(rule_context("document.querySelector('.btn');"))

        assert found[0].idiomatic and not found[0].trivial
        assert found[0].details == "querySelector() used for DOM querying"

    def test_get_element_by_id(self, rule_context):
        found = dom_operations.find_dom_query_selectors(rule_context("document.getElementById('app');"))

        assert found[0].trivial and not found[0].idiomatic
        assert found[0].details == "getElementById() used — consider querySelector/querySelectorAll"

    def test_manipulation_call(self, rule_context):
        found = dom_operations.find_dom_manipulation(rule_context("list.appendChild(item);"))
        assert _details(found) == [".appendChild() used for DOM manipulation"]

    def test_text_assignment_fallback(self, rule_context):
        found = dom_operations.find_dom_manipulation(rule_context("title.textContent = 'Hi';"))
        assert _details(found) == [".textContent assignment for DOM text manipulation"]

    def test_events(self, rule_context):
        found = dom_operations.find_dom_events(rule_context("btn.addEventListener('click', onClick);"))
        assert _details(found) == ["addEventListener() used for DOM event handling"]

    def test_class_list_receiver(self, rule_context):
        found = dom_operations.find_dom_class_list(rule_context("el.classList.toggle('open');"))
        assert _details(found) == ["classList.toggle() used for CSS class management"]

    def test_toggle_elsewhere_is_not_class_list(self, rule_context):
        assert dom_operations.find_dom_class_list(rule_context("menu.toggle('open');")) == []

    def test_dataset(self, rule_context):
        found = dom_operations.find_dom_dataset(rule_context("const id = el.dataset.userId;"))
        assert _details(found) == ["element.dataset used for data attribute access"]

    def test_no_dom(self, rule_context):
        context = rule_context("const total = a + b;")

        assert dom_operations.find_dom_query_selectors(context) == []
        assert dom_operations.find_dom_manipulation(context) == []
        assert dom_operations.find_dom_dataset(context) == []


# =============================================================================
# OBSERVERS
# =============================================================================
class TestObserverApis:
    """One finding per observer constructor."""

    def test_each_observer(self, rule_context):
        code = """
const io = new IntersectionObserver(onVisible);
const mo = new MutationObserver(onChange);
const ro = new ResizeObserver(onResize);
"""
        context = rule_context(code)

        assert _details(observer_apis.find_intersection_observer(context)) == [
            "IntersectionObserver used for visibility detection"
        ]
        assert _details(observer_apis.find_mutation_observer(context)) == [
            "MutationObserver used for DOM change detection"
        ]
        assert _details(observer_apis.find_resize_observer(context)) == [
            "ResizeObserver used for element size monitoring"
        ]

    def test_other_constructor(self, rule_context):
        context = rule_context("const o = new Observer();")

        assert observer_apis.find_intersection_observer(context) == []
        assert observer_apis.find_resize_observer(context) == []


# =============================================================================
# TIMERS
# =============================================================================
class TestTimers:
    """setTimeout, setInterval cleanup and rate limiting."""

    def test_timeout_with_delay(self, rule_context):
        found = timers_scheduling.find_set_timeout(rule_context("setTimeout(() => save(), 100);"))

        assert found[0].idiomatic
        assert found[0].details == "setTimeout() used with callback and delay"

    def test_method_form_without_delay(self, rule_context):
        found = timers_scheduling.find_set_timeout(rule_context("window.setTimeout(save);"))

        assert not found[0].positive and not found[0].idiomatic
        assert found[0].details == "setTimeout() used"

    def test_interval_cleared(self, rule_context):
        code = "const id = setInterval(tick, 1000);\nclearInterval(id);\n"
        found = timers_scheduling.find_set_interval(rule_context(code))

        assert found[0].location is None
        assert found[0].idiomatic
        assert found[0].details == "setInterval() with clearInterval() cleanup"

    def test_interval_never_cleared(self, rule_context):
        found = timers_scheduling.find_set_interval(rule_context("setInterval(tick, 1000);"))

        assert found[0].negative and found[0].trivial
        assert found[0].details == "setInterval() without clearInterval() — potential memory leak"

    def test_animation_frame(self, rule_context):
        found = timers_scheduling.find_request_animation_frame(rule_context("requestAnimationFrame(draw);"))
        assert _details(found) == ["requestAnimationFrame() used for animation scheduling"]

    def test_debounce_helper(self, rule_context):
        found = timers_scheduling.find_debounce_throttle(rule_context("const onInput = debounce(save, 300);"))
        assert _details(found) == ["debounce() used for rate limiting"]

    def test_hand_written_debounce(self, rule_context):
        code = "clearTimeout(timer);\ntimer = setTimeout(save, 300);\n"
        found = timers_scheduling.find_debounce_throttle(rule_context(code))

        assert _details(found) == ["Custom debounce pattern detected (setTimeout + clearTimeout)"]

    def test_timeout_alone_is_not_debounce(self, rule_context):
        assert timers_scheduling.find_debounce_throttle(rule_context("setTimeout(save, 300);")) == []


# =============================================================================
# MODULES
# =============================================================================
class TestModulePatterns:
    """Import and export forms."""

    def test_named(self, rule_context):
        code = "import { a } from './a';\nexport const b = a;\n"
        found = module_patterns.find_named_import_export(rule_context(code))

        assert _details(found) == ["Named import used", "Named export used"]

    def test_empty_braces_are_not_named(self, rule_context):
        assert module_patterns.find_named_import_export(rule_context("import {} from './a';")) == []

    def test_default(self, rule_context):
        code = "import React from 'react';\nexport default function App() {}\n"
        found = module_patterns.find_default_import_export(rule_context(code))

        assert _details(found) == ["Default import used", "Default export used"]

    def test_default_export_is_not_named(self, rule_context):
        code = "export default function App() {}\n"
        assert module_patterns.find_named_import_export(rule_context(code)) == []

    def test_dynamic(self, rule_context):
        found = module_patterns.find_dynamic_import(rule_context("import('./chart').then(m => m.draw());"))
        assert _details(found) == ["Dynamic import() used for code splitting"]

    def test_namespace(self, rule_context):
        found = module_patterns.find_namespace_import(rule_context("import * as utils from './utils';"))
        assert _details(found) == ["Namespace import (import * as ...) used"]
