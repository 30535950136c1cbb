"""refgraph refs -- list branches and tags."""

from __future__ import annotations

import click

from refgraph.cli.formatting import format_refs
from refgraph.models.refs import RefKind


@click.command()
@click.option(
    "--kind",
    default=None,
    type=click.Choice([k.value for k in RefKind], case_sensitive=False),
    help="Only list refs of this kind.",
)
@click.pass_context
def refs(ctx: click.Context, kind: str | None) -> None:
    """List stored refs."""
    from refgraph.cli import _graph_session

    with _graph_session(ctx) as (g, console, _token):
        format_refs(g.list_refs(RefKind(kind.lower()) if kind else None), console)
