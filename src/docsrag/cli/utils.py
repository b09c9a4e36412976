"""CLI utilities."""

from pathlib import Path

import click

from docsrag.config.loader import load_config
from docsrag.config.models import DocsRagConfig
from docsrag.core.errors import DocsRagError
from docsrag.retrieval.ops import RetrievalFacade


def get_config(ctx: click.Context) -> DocsRagConfig:
    """Load configuration once per invocation, honouring group options.

    Raises:
        click.ClickException: If the configuration is invalid
    """
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        overrides: dict[str, object] = {}
        docs_path: Path | None = obj.get("docs_path")
        if docs_path is not None:
            overrides["storage"] = {"docs_path": docs_path}
        try:
            obj["config"] = load_config(obj.get("config_path"), **overrides)
        except DocsRagError as e:
            raise click.ClickException(e.message) from e
    return obj["config"]  # type: ignore[no-any-return]


def get_facade(ctx: click.Context) -> RetrievalFacade:
    try:
        return RetrievalFacade.from_config(get_config(ctx))
    except DocsRagError as e:
        raise click.ClickException(e.message) from e
