"""``offlinebundle resolve``: where offline mode finds a dependency.

Mirrors the host application's offline path resolver so operators can
check a deps root before shipping it.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from offlinebundle.config import BundleSettings
from offlinebundle.layout import RIPGREP_DIR, OfflinePathResolver

console = Console()


def resolve_cmd(
    name: str = typer.Argument(..., help="Binary, npm package or LSP name."),
    kind: str = typer.Option(
        "binary", "--kind", "-k", help="One of: binary, npm, lsp."
    ),
    deps_dir: Path = typer.Option(
        None, "--deps-dir", "-d", help="Dependency root. Defaults to dist/offline-deps."
    ),
    subpath: str = typer.Option(
        RIPGREP_DIR, "--subpath", help="Directory holding a plain binary."
    ),
    binary: str = typer.Option(
        None, "--binary", help="LSP binary name (defaults to NAME)."
    ),
) -> None:
    """Print the offline path for a dependency and whether it exists."""
    resolver = OfflinePathResolver(True, deps_dir or BundleSettings().deps_dir)
    if kind == "binary":
        path = resolver.resolve_binary(name, subpath)
    elif kind == "npm":
        path = resolver.resolve_npm_package(name)
    elif kind == "lsp":
        path = resolver.resolve_lsp_binary(name, binary or name)
    else:
        console.print(f"[bold red]Unknown kind:[/bold red] {kind}")
        raise typer.Exit(code=2)

    exists = path is not None and path.exists()
    status = "[green]present[/green]" if exists else "[red]missing[/red]"
    console.print(f"{path}  {status}")
    if not exists:
        raise typer.Exit(code=1)
