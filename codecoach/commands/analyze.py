"""Analyze a snippet and show what a learner should work on."""

import json

import click
from rich.markup import escape
from rich.table import Table

from codecoach.analysis import analyze as analyze_code
from codecoach.analysis import (
    build_analysis_context,
    prioritize_issues,
    score_topic_performance,
    serialize_analysis,
)
from codecoach.ast_parser import Dialect
from codecoach.config_runtime import load_runtime_config
from codecoach.curriculum import (
    UserLevel,
    classify_detections,
    layer_info,
    load_curriculum,
    prioritize_for_learner,
)
from codecoach.ui import console, print_header, print_warning
from codecoach.utils.error_handler import handle_exceptions
from codecoach.utils.logging import new_request_id


def _tags(detection) -> str:
    tags = []
    if detection.positive:
        tags.append("[positive]+[/positive]")
    if detection.negative:
        tags.append("[negative]-[/negative]")
    if detection.idiomatic:
        tags.append("[idiomatic]idiomatic[/idiomatic]")
    if detection.trivial:
        tags.append("[trivial]trivial[/trivial]")
    return " ".join(tags)


def _detections_table(detections) -> Table:
    table = Table(show_lines=False)
    table.add_column("Line", justify="right", style="dim")
    table.add_column("Topic", style="slug")
    table.add_column("Tags")
    table.add_column("Source", style="dim")
    table.add_column("Details")
    for d in detections:
        line = str(d.location.line) if d.location else ""
        table.add_row(line, d.topic_slug, _tags(d), d.source.value, escape(d.details or ""))
    return table


@click.command("analyze")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--dialect",
    type=click.Choice([d.value for d in Dialect]),
    help="Dialect of the snippet (detected when omitted)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the serialized analysis as JSON")
@click.option(
    "--level",
    type=click.Choice([lvl.value for lvl in UserLevel]),
    default=UserLevel.BEGINNER.value,
    show_default=True,
    help="Learner level used to prioritize issues",
)
@click.option("--no-eslint", is_flag=True, help="Skip the ESLint pass")
@click.option("--root", default=".", help="Directory holding .codecoach/config.json")
@handle_exceptions
def analyze(source, dialect, as_json, level, no_eslint, root):
    """Analyze a JavaScript, TypeScript or React snippet.

    SOURCE is a file path, or '-' to read standard input.

    \b
    EXAMPLES:
      codecoach analyze component.jsx
      cat snippet.js | codecoach analyze - --level intermediate
      codecoach analyze app.ts --json --no-eslint
    """
    config = load_runtime_config(root)
    code = source.read()

    result = analyze_code(
        code,
        Dialect(dialect) if dialect else None,
        config=config,
        eslint=False if no_eslint else None,
        request_id=new_request_id(),
    )
    curriculum = load_curriculum(config["paths"]["curriculum"] or None)
    layers = classify_detections(result.detections, curriculum)
    limits = config["limits"]
    prioritized = prioritize_for_learner(layers, level, limits["max_surfaced_issues"])

    if as_json:
        payload = serialize_analysis(result)
        payload["layers"] = layers.counts
        payload["prioritized"] = [d.to_dict() for d in prioritized]
        payload["diagnostics"] = [d.to_dict() for d in result.diagnostics]
        payload["topIssues"] = [
            d.to_dict() for d in prioritize_issues(result.detections, limits["max_prioritized_issues"])
        ]
        payload["topicPerformance"] = [p.to_dict() for p in score_topic_performance(result.detections)]
        payload["feedbackContext"] = build_analysis_context(result, limits["max_context_items"]).to_dict()
        click.echo(json.dumps(payload, indent=2))
        return

    parsed = result.parsed
    print_header(f"ANALYSIS ({parsed.language}{', React' if parsed.is_react else ''})")
    for diagnostic in result.diagnostics:
        print_warning(escape(f"[{diagnostic.kind.value}] line {diagnostic.line}: {diagnostic.message}"))

    if result.detections:
        console.print(_detections_table(result.detections))
    else:
        console.print("[dim]No patterns detected[/dim]")

    summary = result.summary
    console.print(
        f"\n{summary.total} detections: [positive]{summary.positive} positive[/positive], "
        f"[negative]{summary.negative} issues[/negative], {summary.idiomatic} idiomatic"
    )
    counts = layers.counts
    console.print(
        " | ".join(f"[{name}]{layer_info(name).name}[/{name}] {count}" for name, count in counts.items())
    )

    print_header(f"FOCUS FOR A {level.upper()} LEARNER")
    if not prioritized:
        console.print("[success]Nothing to fix at this level[/success]")
    for d in prioritized:
        line = f"line {d.location.line}: " if d.location else ""
        console.print(f"  [slug]{d.topic_slug}[/slug] {line}{escape(d.details or '')}")
