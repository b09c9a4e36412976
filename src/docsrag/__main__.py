"""Allow ``python -m docsrag``."""

from docsrag.cli.main import cli

if __name__ == "__main__":
    cli()
