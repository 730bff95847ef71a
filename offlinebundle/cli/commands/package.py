"""``offlinebundle package``: assemble and compress the offline bundle.

Requires a completed ``download-deps`` run. Builds the host application
unless ``--build-dir`` points at an existing build output.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from offlinebundle.config import BundleSettings
from offlinebundle.core.packager import DistributionPackager

console = Console()
err_console = Console(stderr=True)


def package_cmd(
    build_dir: Path = typer.Option(
        None,
        "--build-dir",
        "-b",
        help="Prebuilt host output directory (containing bin/). Skips the host build.",
    ),
    deps_dir: Path = typer.Option(
        None, "--deps-dir", "-d", help="Dependency root produced by download-deps."
    ),
    dist_dir: Path = typer.Option(
        None, "--dist-dir", help="Directory receiving the bundle and the tarball."
    ),
) -> None:
    """Package the offline bundle into a single tarball."""
    overrides = {
        key: value
        for key, value in {"deps_dir": deps_dir, "dist_dir": dist_dir}.items()
        if value is not None
    }
    settings = BundleSettings(**overrides)

    console.print("[bold cyan]=== OpenCode Offline Bundle Packager ===[/bold cyan]")
    try:
        result = DistributionPackager(settings).package(build_dir)
    except Exception as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    manifest = result.assembly.manifest
    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Packaging complete![/bold green]",
                "",
                f"[bold]Bundle:[/bold]  {result.assembly.bundle_dir}",
                f"[bold]Tarball:[/bold] {result.archive.path} ({result.archive.size_mb:.2f} MB)",
                f"[bold]SHA-256:[/bold] {result.archive.sha256}",
                f"[bold]Version:[/bold] {manifest.bundle_version or '-'}",
                f"[bold]Commit:[/bold]  {manifest.commit_sha or '-'}",
            ]),
            title="[bold]Offline Bundle[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
