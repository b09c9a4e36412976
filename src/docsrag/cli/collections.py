"""docs-rag list / query / refresh commands."""

import asyncio
import json
import time

import click

from docsrag.cli.utils import get_facade
from docsrag.core.errors import DocsRagError
from docsrag.core.formatting import format_duration, pluralize


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_command(ctx: click.Context, as_json: bool) -> None:
    """List document collections."""
    facade = get_facade(ctx)
    collections = facade.list_collections()

    if as_json:
        click.echo(json.dumps([c.to_dict() for c in collections], indent=2))
        return

    if not collections:
        click.echo(f"No document collections in {facade.catalog.docs_path}")
        return
    for collection in collections:
        click.echo(f"{collection.id:<30} {collection.description}")
    click.echo(f"\n{pluralize(len(collections), 'collection')}")


@click.command()
@click.argument("collection_id")
@click.argument("text")
@click.pass_context
def query_command(ctx: click.Context, collection_id: str, text: str) -> None:
    """Ask a question about a collection.

    The collection is indexed first if needed.
    """
    facade = get_facade(ctx)
    try:
        answer = asyncio.run(facade.query(collection_id, text))
    except DocsRagError as e:
        raise click.ClickException(e.message) from e
    click.echo(answer)


@click.command()
@click.argument("collection_id")
@click.option("--full", is_flag=True, help="Discard persisted embeddings and re-embed every chunk")
@click.pass_context
def refresh_command(ctx: click.Context, collection_id: str, full: bool) -> None:
    """Rebuild a collection's index from its current content."""
    facade = get_facade(ctx)
    start = time.monotonic()
    try:
        index = asyncio.run(facade.refresh(collection_id, full=full))
    except DocsRagError as e:
        raise click.ClickException(e.message) from e
    click.echo(
        f"Re-indexed '{collection_id}': {pluralize(index.size, 'chunk')} "
        f"in {format_duration(time.monotonic() - start)}"
    )
