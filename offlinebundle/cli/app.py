"""Main Typer application: imports and registers all CLI commands.

Entry point: ``offlinebundle`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from offlinebundle.cli.commands.download import download_cmd
from offlinebundle.cli.commands.manifest_cmd import show_manifest_cmd
from offlinebundle.cli.commands.package import package_cmd
from offlinebundle.cli.commands.resolve import resolve_cmd
from offlinebundle.config import BundleSettings

app = typer.Typer(
    name="offlinebundle",
    help="Build self-contained offline bundles of opencode.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to OFFLINE_BUNDLE_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging once for every subcommand."""
    level = (log_level or BundleSettings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="download-deps", help="Fetch all offline dependencies and write the manifest.")(download_cmd)
app.command(name="package", help="Assemble and compress the offline bundle.")(package_cmd)
app.command(name="show-manifest", help="Show the components recorded in a manifest.")(show_manifest_cmd)
app.command(name="resolve", help="Show where offline mode looks up a dependency.")(resolve_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
