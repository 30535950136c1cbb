"""refgraph show -- summarize a commit's place in history."""

from __future__ import annotations

import click

from refgraph.cli.formatting import format_report


@click.command()
@click.argument("commit")
@click.option("--no-branches", is_flag=True, help="Skip the containing-branches lookup.")
@click.option("--no-tag-sequence", is_flag=True, help="Skip the nearest-tag lookups.")
@click.pass_context
def show(ctx: click.Context, commit: str, no_branches: bool, no_tag_sequence: bool) -> None:
    """Show parents, containing branches, tags and nearest tags of COMMIT."""
    from refgraph.cli import _graph_session

    with _graph_session(ctx) as (g, console, token):
        report = g.inspect(
            commit,
            token,
            show_branches=not no_branches,
            show_tag_sequence=not no_tag_sequence,
        )
        format_report(report, console)
