"""docs-rag CLI."""

from pathlib import Path

import click

from docsrag.cli.collections import list_command, query_command, refresh_command
from docsrag.cli.serve import serve_command
from docsrag.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="docs-rag")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default ~/.config/docs-rag/config.yaml)",
)
@click.option(
    "--docs-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Storage root for document collections (overrides DOCS_PATH)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None, docs_path: Path | None) -> None:
    """docs-rag - RAG over local document collections, served over MCP."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    ctx.obj["docs_path"] = docs_path
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(serve_command, name="serve")
cli.add_command(list_command, name="list")
cli.add_command(query_command, name="query")
cli.add_command(refresh_command, name="refresh")


if __name__ == "__main__":
    cli()
