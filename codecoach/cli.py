"""codecoach CLI - Main entry point and command registration hub."""
# ruff: noqa: E402 - Intentional lazy loading: commands imported after cli group definition

import click

from codecoach import __version__


@click.group()
@click.version_option(version=__version__, prog_name="codecoach")
@click.help_option("-h", "--help")
def cli():
    """codecoach - coaching feedback for JavaScript, TypeScript and React snippets.

    \b
    QUICK START:
      codecoach analyze snippet.jsx           # Detections and learner focus
      codecoach analyze - --json < app.ts     # Machine-readable analysis
      codecoach topics --layer fundamentals   # Browse the curriculum
    """
    pass


from codecoach.commands.analyze import analyze
from codecoach.commands.topics import topics

cli.add_command(analyze)
cli.add_command(topics)


def main():
    cli()


if __name__ == "__main__":
    main()
