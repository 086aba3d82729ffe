"""List the curriculum catalog."""

import click
from rich.table import Table

from codecoach.config_runtime import load_runtime_config
from codecoach.curriculum import Layer, layer_info, load_curriculum
from codecoach.ui import console, print_header
from codecoach.utils.error_handler import handle_exceptions


@click.command("topics")
@click.option(
    "--layer",
    type=click.Choice([layer.value for layer in Layer]),
    help="Only list topics of one layer",
)
@click.option("--root", default=".", help="Directory holding .codecoach/config.json")
@handle_exceptions
def topics(layer, root):
    """List curriculum topics by layer."""
    config = load_runtime_config(root)
    curriculum = load_curriculum(config["paths"]["curriculum"] or None)

    layers = [Layer(layer)] if layer else list(Layer)
    for current in layers:
        info = layer_info(current)
        print_header(f"{info.name.upper()} ({info.priority})")
        console.print(f"[dim]{info.description}[/dim]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Slug", style="slug")
        table.add_column("Name")
        table.add_column("Category", style="dim")
        table.add_column("Criticality")
        for topic in curriculum.topics_by_layer(current):
            table.add_row(topic.slug, topic.name, topic.category, topic.criticality)
        console.print(table)
