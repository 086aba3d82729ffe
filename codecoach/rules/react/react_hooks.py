"""Core React hook detectors.

Hooks are matched as bare calls (``useState(...)``), the way they are
written after a named import from ``react``.
"""

from codecoach.ast_extractors.base import NodeKind, children, kind
from codecoach.ast_extractors.javascript import arguments, is_function_literal
from codecoach.rules.base import Detection, RuleMetadata, StandardRuleContext, detection
from codecoach.rules.react._shared import (
    custom_hook_definitions,
    effect_has_cleanup,
    state_pattern,
    state_setters,
)

METADATA = RuleMetadata(name="react_hooks", category="react-hooks", order=300, requires_react=True)


def _dependency_hook(context, hook, slug):
    found = []
    for call, _name in context.calls_named(hook):
        has_deps = len(arguments(call)) >= 2
        found.append(
            detection(
                slug,
                call,
                positive=has_deps,
                negative=not has_deps,
                idiomatic=has_deps,
                details=f"{hook} with dependency array" if has_deps else f"{hook} missing dependency array",
            )
        )
    return found


def find_use_state_basics(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useState"):
        destructured = len(children(state_pattern(call))) >= 2
        found.append(
            detection(
                "usestate-basics",
                call,
                positive=True,
                negative=not destructured,
                idiomatic=destructured,
                details="useState with proper array destructuring"
                if destructured
                else "useState should use array destructuring [state, setState]",
            )
        )
    return found


def find_use_state_functional_updates(context: StandardRuleContext) -> list[Detection]:
    setters = state_setters(context)
    if not setters:
        return []
    found = []
    for call, _name in context.calls_named(*setters):
        args = arguments(call)
        if args and is_function_literal(args[0]):
            found.append(
                detection(
                    "usestate-functional-updates",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Functional update pattern used for setState",
                )
            )
    return found


def find_use_effect_basics(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useEffect"):
        args = arguments(call)
        has_callback = bool(args)
        has_deps = len(args) >= 2
        found.append(
            detection(
                "useeffect-basics",
                call,
                positive=has_callback,
                negative=not has_callback,
                idiomatic=has_callback and has_deps,
                details="useEffect with dependency array"
                if has_deps
                else "useEffect without dependency array",
            )
        )
    return found


def find_use_effect_dependencies(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useEffect"):
        args = arguments(call)
        if len(args) >= 2:
            deps = args[1]
            if kind(deps) is not NodeKind.ARRAY:
                continue
            count = len(children(deps))
            found.append(
                detection(
                    "useeffect-dependencies",
                    call,
                    positive=True,
                    idiomatic=True,
                    details="Empty dependency array - runs once on mount"
                    if count == 0
                    else f"Dependency array with {count} dependencies",
                )
            )
        elif len(args) == 1:
            found.append(
                detection(
                    "useeffect-dependencies",
                    call,
                    negative=True,
                    details="Missing dependency array - effect runs on every render",
                )
            )
    return found


def find_use_effect_cleanup(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "useeffect-cleanup",
            call,
            positive=True,
            idiomatic=True,
            details="useEffect with cleanup function",
        )
        for call, _name in context.calls_named("useEffect")
        if effect_has_cleanup(call)
    ]


def find_use_ref_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection("useref-basics", call, positive=True, idiomatic=True, details="useRef hook used")
        for call, _name in context.calls_named("useRef")
    ]


def find_use_memo_basics(context: StandardRuleContext) -> list[Detection]:
    return _dependency_hook(context, "useMemo", "usememo-basics")


def find_use_callback_basics(context: StandardRuleContext) -> list[Detection]:
    return _dependency_hook(context, "useCallback", "usecallback-basics")


def find_use_reducer_basics(context: StandardRuleContext) -> list[Detection]:
    found = []
    for call, _name in context.calls_named("useReducer"):
        complete = len(arguments(call)) >= 2
        found.append(
            detection(
                "usereducer-basics",
                call,
                positive=complete,
                negative=not complete,
                idiomatic=complete,
                details="useReducer for complex state management",
            )
        )
    return found


def find_use_context_hook(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "usecontext-hook",
            call,
            positive=True,
            idiomatic=True,
            details="useContext hook for consuming context",
        )
        for call, _name in context.calls_named("useContext")
    ]


def find_custom_hook_basics(context: StandardRuleContext) -> list[Detection]:
    return [
        detection(
            "custom-hook-basics",
            node,
            positive=True,
            idiomatic=True,
            details=f"Custom hook {name} defined",
        )
        for node, name, _fn in custom_hook_definitions(context)
    ]
