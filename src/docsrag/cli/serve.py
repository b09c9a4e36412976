"""docs-rag serve command - run the MCP server."""

import click

from docsrag.cli.utils import get_config


@click.command()
@click.option("--http", "use_http", is_flag=True, help="Serve over HTTP instead of stdio")
@click.option("--host", default=None, help="HTTP bind address (default from config)")
@click.option("--port", type=int, default=None, help="HTTP port (default from config)")
@click.pass_context
def serve_command(ctx: click.Context, use_http: bool, host: str | None, port: int | None) -> None:
    """Run the docs-rag MCP server.

    Speaks MCP over stdio by default, so it can be launched directly by an
    MCP client.
    """
    from docsrag.mcp.server import run_server

    config = get_config(ctx)
    server = config.server.model_copy(
        update={
            "transport": "http" if use_http else config.server.transport,
            "host": host or config.server.host,
            "port": port or config.server.port,
        }
    )
    run_server(config.model_copy(update={"server": server}))
