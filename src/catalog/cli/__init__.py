"""CLI commands for the catalog API.

Provides command-line interface using Typer:
- catalog serve: Run the API server
- catalog cache stats: Show live cache key counts
- catalog cache clear: Delete every cached entry

Usage:
    catalog --help
    catalog serve --port 3000
    catalog cache stats
    catalog cache clear --yes
"""

import typer

from catalog.cli.cache_cmd import app as cache_app
from catalog.cli.serve import app as serve_app

app = typer.Typer(
    name="catalog",
    help="Catalog API: product catalog with a Redis cache-aside layer",
    no_args_is_help=True,
)

app.add_typer(serve_app, name="serve")
app.add_typer(cache_app, name="cache")


@app.callback()
def callback() -> None:
    """Catalog API: product catalog with a Redis cache-aside layer."""
    pass


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
