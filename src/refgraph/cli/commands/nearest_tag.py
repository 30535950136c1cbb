"""refgraph nearest-tag -- find the closest tag before or after a commit."""

from __future__ import annotations

import click

from refgraph.operations.proximity import Direction


@click.command("nearest-tag")
@click.argument("commit")
@click.option(
    "-d",
    "--direction",
    default=Direction.PRECEDING.value,
    type=click.Choice([d.value for d in Direction], case_sensitive=False),
    help="Search ancestors (preceding) or descendants (following).",
)
@click.pass_context
def nearest_tag(ctx: click.Context, commit: str, direction: str) -> None:
    """Show the tag closest to COMMIT in the given direction."""
    from refgraph.cli import _graph_session

    with _graph_session(ctx) as (g, console, token):
        label = g.nearest_tag(commit, Direction(direction.lower()), cancel_check=token)
        if label is None:
            console.print(f"[dim]No {direction.lower()} tag.[/dim]")
        else:
            console.print(f"[cyan]{label}[/cyan]", highlight=False)
