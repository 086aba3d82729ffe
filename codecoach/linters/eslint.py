"""ESLint adapter.

Runs the ESLint CLI over a snippet read from stdin and turns each reported
violation into a negative Detection. ESLint is a black box here: a missing
binary, a timeout or unreadable output yields no detections and a message the
caller can record as a diagnostic, never an exception.
"""

import json
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from codecoach.config_runtime import DEFAULTS
from codecoach.rules.base import Detection, DetectionSource, Location
from codecoach.utils.logging import get_subprocess_env, logger

# ESLint rules that duplicate a native topic report under the native slug
OVERLAP_SLUGS = {
    "no-var": "no-var-usage",
    "eqeqeq": "strict-equality",
    "no-eval": "no-eval",
    "no-empty": "empty-catch-blocks",
    "no-magic-numbers": "no-magic-numbers",
    "no-implicit-coercion": "implicit-type-coercion",
    "prefer-const": "let-const-usage",
    "prefer-template": "template-literals",
    "prefer-rest-params": "rest-parameters",
    "prefer-spread": "spread-operator",
    "object-shorthand": "object-shorthand",
    "prefer-arrow-callback": "callback-functions",
    "dot-notation": "property-access-patterns",
    "prefer-destructuring": "object-destructuring",
    "no-useless-catch": "empty-catch-blocks",
    "guard-for-in": "for-in-loops",
    "react/jsx-key": "jsx-keys",
    "react/no-direct-mutation-state": "state-immutability",
    "react/no-array-index-key": "jsx-keys",
    "react/jsx-no-duplicate-props": "props-basics",
    "react-hooks/exhaustive-deps": "useeffect-dependencies",
    "react-hooks/rules-of-hooks": "usestate-basics",
}

CORE_RULES: dict[str, Any] = {
    # Error prevention
    "for-direction": "error",
    "getter-return": "error",
    "no-async-promise-executor": "error",
    "no-compare-neg-zero": "error",
    "no-cond-assign": "error",
    "no-const-assign": "error",
    "no-constant-binary-expression": "error",
    "no-constant-condition": "error",
    "no-debugger": "warn",
    "no-dupe-args": "error",
    "no-dupe-else-if": "error",
    "no-dupe-keys": "error",
    "no-duplicate-case": "error",
    "no-empty-pattern": "error",
    "no-ex-assign": "error",
    "no-fallthrough": "error",
    "no-func-assign": "error",
    "no-import-assign": "error",
    "no-inner-declarations": "error",
    "no-irregular-whitespace": "warn",
    "no-loss-of-precision": "error",
    "no-obj-calls": "error",
    "no-prototype-builtins": "warn",
    "no-self-assign": "error",
    "no-self-compare": "error",
    "no-sparse-arrays": "error",
    "no-this-before-super": "error",
    "no-unexpected-multiline": "error",
    "no-unreachable": "error",
    "no-unreachable-loop": "error",
    "no-unsafe-finally": "error",
    "no-unsafe-negation": "error",
    "no-unsafe-optional-chaining": "error",
    "use-isnan": "error",
    "valid-typeof": "error",
    "no-case-declarations": "error",
    "no-delete-var": "error",
    "no-global-assign": "error",
    "no-octal": "error",
    "no-with": "error",
    "no-class-assign": "error",
    "no-dupe-class-members": "error",
    "no-new-native-nonconstructor": "error",
    "constructor-super": "error",
    "no-setter-return": "error",
    "require-yield": "error",
    "no-control-regex": "warn",
    "no-empty-character-class": "error",
    "no-invalid-regexp": "error",
    "no-misleading-character-class": "error",
    "no-regex-spaces": "warn",
    "no-extra-boolean-cast": "warn",
    "no-useless-backreference": "warn",
    # Overlapping with native topics
    "no-var": "error",
    "eqeqeq": "error",
    "no-eval": "error",
    "prefer-const": "warn",
    "no-empty": "warn",
    "no-implicit-coercion": "warn",
    "prefer-template": "warn",
    "prefer-rest-params": "warn",
    "prefer-spread": "warn",
    "object-shorthand": "warn",
    "prefer-arrow-callback": "warn",
    "dot-notation": "warn",
    "prefer-destructuring": ["warn", {"object": True, "array": False}],
    "no-useless-catch": "warn",
    "guard-for-in": "warn",
    # Best practices
    "array-callback-return": "warn",
    "no-loop-func": "warn",
    "no-template-curly-in-string": "warn",
    "no-unmodified-loop-condition": "warn",
    "no-promise-executor-return": "warn",
    "no-constructor-return": "warn",
    "no-duplicate-imports": "warn",
    "no-throw-literal": "warn",
    "consistent-return": "warn",
    "default-case": "warn",
    "default-case-last": "warn",
    "default-param-last": "warn",
    "no-else-return": "warn",
    "no-lone-blocks": "warn",
    "no-useless-constructor": "warn",
    "no-useless-return": "warn",
    "no-useless-rename": "warn",
    "no-useless-computed-key": "warn",
    "no-useless-concat": "warn",
    "no-useless-escape": "warn",
    "no-new": "warn",
    "no-new-func": "warn",
    "no-new-wrappers": "warn",
    "no-sequences": "warn",
    "no-unused-expressions": "warn",
    "no-caller": "warn",
    "no-extend-native": "warn",
    "no-extra-bind": "warn",
    "no-return-assign": "warn",
    "no-script-url": "warn",
    "no-param-reassign": "warn",
    "no-implied-eval": "warn",
    "no-alert": "warn",
    "no-lonely-if": "warn",
    "no-unneeded-ternary": "warn",
    "no-useless-call": "warn",
    "no-unused-private-class-members": "warn",
    "block-scoped-var": "warn",
    "radix": "warn",
    "prefer-object-has-own": "warn",
    "prefer-object-spread": "warn",
    "prefer-regex-literals": "warn",
    "arrow-body-style": "warn",
    "no-useless-assignment": "warn",
    # Advanced patterns
    "no-await-in-loop": "warn",
    "require-atomic-updates": "warn",
    "require-await": "warn",
    "prefer-promise-reject-errors": "warn",
    "complexity": ["warn", {"max": 15}],
    "class-methods-use-this": "warn",
    "grouped-accessor-pairs": "warn",
    "accessor-pairs": "warn",
    "logical-assignment-operators": "warn",
    "prefer-named-capture-group": "warn",
    "no-magic-numbers": [
        "warn",
        {
            "ignore": [0, 1, -1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 100],
            "ignoreDefaultValues": True,
            "ignoreArrayIndexes": True,
        },
    ],
}

REACT_RULES: dict[str, Any] = {
    "react/jsx-key": "error",
    "react/no-direct-mutation-state": "error",
    "react/no-array-index-key": "warn",
    "react/jsx-no-duplicate-props": "error",
    "react/display-name": "warn",
    "react/no-children-prop": "warn",
    "react/no-danger": "warn",
    "react/no-danger-with-children": "error",
    "react/no-deprecated": "warn",
    "react/no-string-refs": "warn",
    "react/no-unescaped-entities": "warn",
    "react/no-unknown-property": "warn",
    "react/require-render-return": "error",
    "react/self-closing-comp": "warn",
    "react/void-dom-elements-no-children": "error",
    "react/jsx-no-target-blank": "warn",
    "react/jsx-no-script-url": "warn",
    "react/jsx-no-comment-textnodes": "warn",
    "react/jsx-boolean-value": "warn",
    "react/jsx-curly-brace-presence": "warn",
    "react/jsx-fragments": "warn",
    "react/jsx-no-useless-fragment": "warn",
    "react/jsx-pascal-case": "warn",
    "react/jsx-no-bind": ["warn", {"allowArrowFunctions": True}],
    "react/jsx-no-leaked-render": "warn",
    "react/jsx-no-constructed-context-values": "warn",
    "react/no-unstable-nested-components": "warn",
    "react/no-access-state-in-setstate": "warn",
    "react/no-this-in-sfc": "warn",
    "react/no-unused-state": "warn",
    "react/no-unused-prop-types": "warn",
    "react/button-has-type": "warn",
    "react/forward-ref-uses-ref": "warn",
    "react/function-component-definition": [
        "warn",
        {"namedComponents": "function-declaration"},
    ],
    "react/iframe-missing-sandbox": "warn",
    "react/no-invalid-html-attribute": "warn",
    "react/no-namespace": "warn",
    "react/no-object-type-as-default-prop": "warn",
    "react/no-unsafe": "warn",
    "react/prefer-stateless-function": "warn",
    "react/style-prop-object": "warn",
    "react/jsx-props-no-spread-multi": "warn",
    "react/hook-use-state": "warn",
}

HOOKS_RULES: dict[str, Any] = {
    "react-hooks/rules-of-hooks": "error",
    "react-hooks/exhaustive-deps": "warn",
    "react-hooks/set-state-in-effect": "warn",
    "react-hooks/set-state-in-render": "error",
    "react-hooks/no-deriving-state-in-effects": "warn",
    "react-hooks/error-boundaries": "warn",
    "react-hooks/purity": "warn",
}

CONFIG_TEMPLATE = """\
{imports}

export default [
  {{
    files: ["**/*.{{js,jsx,mjs,cjs,ts,tsx}}"],
{plugins}    languageOptions: {{
{parser}      ecmaVersion: 2022,
      sourceType: "module",
{parser_options}      globals: {globals},
    }},
{settings}    rules: {rules},
  }},
];
"""


def rule_to_slug(rule_id: str) -> str:
    """Native slug for overlapping rules, ``eslint-<rule>`` for the rest."""
    if rule_id in OVERLAP_SLUGS:
        return OVERLAP_SLUGS[rule_id]
    return "eslint-" + rule_id.replace("/", "-", 1)


def rules_for(is_react: bool) -> dict[str, Any]:
    if not is_react:
        return dict(CORE_RULES)
    return {**CORE_RULES, **REACT_RULES, **HOOKS_RULES}


def build_flat_config(is_react: bool, has_typescript: bool) -> str:
    """Render one of the four flat configs as an ES module."""
    imports = ['import globals from "globals";']
    if has_typescript:
        imports.append('import tseslint from "typescript-eslint";')
    if is_react:
        imports.append('import react from "eslint-plugin-react";')
        imports.append('import reactHooks from "eslint-plugin-react-hooks";')
        plugins = '    plugins: { react, "react-hooks": reactHooks },\n'
        parser_options = "      parserOptions: { ecmaFeatures: { jsx: true } },\n"
        global_sets = '{ ...globals.es2021, ...globals.browser, React: "readonly" }'
        settings = '    settings: { react: { version: "18" } },\n'
    else:
        plugins = parser_options = settings = ""
        global_sets = "{ ...globals.es2021, ...globals.browser, ...globals.node }"

    return CONFIG_TEMPLATE.format(
        imports="\n".join(imports),
        plugins=plugins,
        parser="      parser: tseslint.parser,\n" if has_typescript else "",
        parser_options=parser_options,
        globals=global_sets,
        settings=settings,
        rules=json.dumps(rules_for(is_react), indent=2),
    )


def stdin_filename(is_react: bool, has_typescript: bool) -> str:
    if has_typescript:
        return "snippet.tsx" if is_react else "snippet.ts"
    return "snippet.jsx" if is_react else "snippet.js"


def message_to_detection(message: dict[str, Any]) -> Detection:
    rule_id = message["ruleId"]
    line = message.get("line") or 0
    column = message.get("column") or 1
    return Detection(
        topic_slug=rule_to_slug(rule_id),
        negative=True,
        trivial=message.get("fix") is not None,
        # ESLint columns are 1-based
        location=Location(line, max(column - 1, 0)),
        details=f"[ESLint {rule_id}] {message.get('message', '')}",
        source=DetectionSource.ESLINT,
    )


def parse_report(stdout: str) -> list[Detection]:
    """Detections from ``--format json`` output. Raises ValueError when unreadable."""
    results = json.loads(stdout)
    if not isinstance(results, list):
        raise ValueError("ESLint output is not a list of file results")
    detections = []
    for file_result in results:
        for message in file_result.get("messages", []):
            if not message.get("ruleId"):
                continue
            detections.append(message_to_detection(message))
    return detections


@dataclass
class ESLintRun:
    """Outcome of one ESLint invocation. ``error`` is set when it failed."""

    detections: list[Detection] = field(default_factory=list)
    error: str | None = None


class ESLintRunner:
    """Invoke the ESLint CLI on single snippets."""

    def __init__(self, settings: dict[str, Any] | None = None):
        settings = {**DEFAULTS["eslint"], **(settings or {})}
        self.enabled = settings["enabled"]
        self.binary = settings["binary"]
        self.timeout = settings["timeout"]
        self.project_dir = Path(settings["project_dir"] or ".")

    @property
    def name(self) -> str:
        return "eslint"

    def _failed(self, message: str) -> ESLintRun:
        logger.error(f"[{self.name}] {message}")
        return ESLintRun(error=message)

    def run(
        self,
        code: str,
        is_react: bool,
        has_typescript: bool = False,
        request_id: str | None = None,
    ) -> ESLintRun:
        """Lint code with the config matching its dialect. Never raises.

        ``request_id`` is handed to the ESLint process for log correlation.
        """
        if not self.enabled:
            return ESLintRun()

        eslint_bin = shutil.which(self.binary)
        if not eslint_bin:
            logger.warning(f"[{self.name}] '{self.binary}' not found - skipping ESLint")
            return ESLintRun(error=f"ESLint binary '{self.binary}' not found")

        config_path = None
        try:
            # Next to node_modules so the plugin imports resolve
            with tempfile.NamedTemporaryFile(
                "w",
                suffix=".mjs",
                prefix=".codecoach-eslint-",
                dir=self.project_dir,
                delete=False,
                encoding="utf-8",
            ) as f:
                f.write(build_flat_config(is_react, has_typescript))
                config_path = f.name

            cmd = [
                eslint_bin,
                "--config",
                config_path,
                "--stdin",
                "--stdin-filename",
                stdin_filename(is_react, has_typescript),
                "--format",
                "json",
            ]
            result = subprocess.run(
                cmd,
                input=code,
                capture_output=True,
                text=True,
                cwd=str(self.project_dir),
                env=get_subprocess_env(request_id),
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            return self._failed(f"Timed out after {self.timeout} seconds")
        except Exception as e:
            return self._failed(f"Execution failed: {type(e).__name__}: {e}")
        finally:
            if config_path:
                try:
                    os.unlink(config_path)
                except OSError:
                    logger.debug(f"Could not remove temp config: {config_path}")

        if not result.stdout.strip():
            stderr = result.stderr.strip().splitlines()
            reason = stderr[0] if stderr else f"exit code {result.returncode}"
            return self._failed(f"No output: {reason}")

        try:
            detections = parse_report(result.stdout)
        except (ValueError, AttributeError, KeyError) as e:
            return self._failed(f"Invalid JSON output: {e}")

        logger.debug(f"[{self.name}] Found {len(detections)} issues")
        return ESLintRun(detections=detections)


def analyze_with_eslint(
    code: str,
    is_react: bool,
    has_typescript: bool = False,
    settings: dict[str, Any] | None = None,
) -> list[Detection]:
    """Lint a snippet; an empty list when ESLint is unavailable or fails."""
    return ESLintRunner(settings).run(code, is_react, has_typescript).detections
