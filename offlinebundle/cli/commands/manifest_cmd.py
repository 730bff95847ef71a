"""``offlinebundle show-manifest``: render a manifest as a Rich table."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from offlinebundle.config import BundleSettings
from offlinebundle.core.manifest import load_manifest
from offlinebundle.layout import MANIFEST_FILENAME
from offlinebundle.models.manifest import Manifest

console = Console()
err_console = Console(stderr=True)


def build_manifest_table(manifest: Manifest) -> Table:
    table = Table(
        title=f"Manifest {manifest.version} ({manifest.platform}-{manifest.arch})",
        caption=f"created {manifest.created}",
        header_style="bold cyan",
    )
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    components = manifest.components
    table.add_row("ripgrep", components.ripgrep)
    table.add_row("clangd", components.clangd)
    table.add_row("rust-analyzer", components.rust_analyzer)
    for name, version in sorted(components.npm_packages.items()):
        table.add_row(f"[dim]npm[/dim] {name}", version)
    if manifest.bundle_version:
        table.add_row("[bold]bundle[/bold]", manifest.bundle_version)
    if manifest.commit_sha:
        table.add_row("[bold]commit[/bold]", manifest.commit_sha)
    return table


def show_manifest_cmd(
    path: Path = typer.Argument(
        None, help="Manifest file. Defaults to the deps root's manifest.json."
    ),
) -> None:
    """Show the resolved component versions recorded in a manifest."""
    path = path or BundleSettings().deps_dir / MANIFEST_FILENAME
    try:
        manifest = load_manifest(path)
    except Exception as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)
    console.print(build_manifest_table(manifest))
