"""refgraph contains -- list branches whose history includes a commit."""

from __future__ import annotations

import click

from refgraph.cli.formatting import format_branches


@click.command()
@click.argument("commit")
@click.pass_context
def contains(ctx: click.Context, commit: str) -> None:
    """List branches that contain COMMIT."""
    from refgraph.cli import _graph_session

    with _graph_session(ctx) as (g, console, token):
        branches = g.branches_containing(commit, cancel_check=token)
        format_branches(branches, console)
