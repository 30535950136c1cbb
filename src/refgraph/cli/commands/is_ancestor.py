"""refgraph is-ancestor -- exit 0 if one commit is an ancestor of another."""

from __future__ import annotations

import click


@click.command("is-ancestor")
@click.argument("candidate")
@click.argument("tip")
@click.option("-q", "--quiet", is_flag=True, help="Report only through the exit status.")
@click.pass_context
def is_ancestor(ctx: click.Context, candidate: str, tip: str, quiet: bool) -> None:
    """Exit 0 if CANDIDATE is TIP or one of its ancestors, 1 otherwise.

    Errors (unknown revisions, a missing database) exit with 128.
    """
    from refgraph.cli import EXIT_FATAL, _graph_session

    with _graph_session(ctx, error_status=EXIT_FATAL) as (g, console, token):
        result = g.is_ancestor(candidate, tip, cancel_check=token)
        if not quiet:
            console.print("yes" if result else "no")
        if not result:
            raise SystemExit(1)
