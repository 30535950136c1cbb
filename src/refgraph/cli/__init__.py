"""refgraph CLI -- terminal interface for branch and tag reachability queries.

This module is NEVER imported from refgraph/__init__.py.
It is only loaded via the ``refgraph`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install refgraph[cli]"
    ) from None

from refgraph.cli.formatting import format_error, get_console
from refgraph.exceptions import QueryCancelledError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from refgraph.cancel import CancellationToken
    from refgraph.refgraph import RefGraph

# Conventional exit status for an interrupted command.
EXIT_CANCELLED = 130
# Default status for failed commands. Commands whose "no" answer is
# exit 1 fail with EXIT_FATAL instead.
EXIT_ERROR = 1
EXIT_FATAL = 128


@click.group()
@click.option(
    "--db",
    default=".refgraph.db",
    envvar="REFGRAPH_DB",
    help="Path to refgraph database.",
)
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0),
    help="Cancel queries that run longer than this many seconds.",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Use exact per-branch ancestry walks for containment.",
)
@click.pass_context
def cli(ctx: click.Context, db: str, timeout: float | None, strict: bool) -> None:
    """refgraph: which branches contain a commit, and which tags surround it."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    ctx.obj["timeout"] = timeout
    ctx.obj["strict"] = strict


def _get_graph(ctx: click.Context) -> RefGraph:
    """Open a RefGraph instance from Click context."""
    import os

    from refgraph.models.config import RefGraphConfig
    from refgraph.refgraph import RefGraph

    db_path = ctx.obj["db_path"]
    if not os.path.exists(db_path):
        raise FileNotFoundError(f"Database not found: {db_path}")

    config = RefGraphConfig(db_path=db_path, strict_ancestry=ctx.obj.get("strict", False))
    return RefGraph.open(db_path, config=config)


def _make_token(ctx: click.Context) -> CancellationToken:
    from refgraph.cancel import CancellationToken

    timeout = ctx.obj.get("timeout")
    if timeout is None:
        return CancellationToken()
    return CancellationToken.with_timeout(timeout)


@contextmanager
def _graph_session(
    ctx: click.Context,
    error_status: int = EXIT_ERROR,
) -> Iterator[tuple[RefGraph, Console, CancellationToken]]:
    """Open a RefGraph, yield (graph, console, token), and handle cleanup.

    Ensures the graph is closed on exit and formats exceptions as CLI errors
    that exit with *error_status*. A cancelled query exits with status 130.
    """
    console = get_console()
    try:
        g = _get_graph(ctx)
        try:
            yield g, console, _make_token(ctx)
        finally:
            g.close()
    except SystemExit:
        raise
    except QueryCancelledError:
        format_error("Query cancelled (timeout reached).", console)
        raise SystemExit(EXIT_CANCELLED) from None
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(error_status) from None


# Register subcommands after cli group is defined
from refgraph.cli.commands.contains import contains  # noqa: E402
from refgraph.cli.commands.is_ancestor import is_ancestor  # noqa: E402
from refgraph.cli.commands.nearest_tag import nearest_tag  # noqa: E402
from refgraph.cli.commands.refs import refs  # noqa: E402
from refgraph.cli.commands.show import show  # noqa: E402

cli.add_command(contains)
cli.add_command(is_ancestor)
cli.add_command(nearest_tag)
cli.add_command(refs)
cli.add_command(show)
