"""``offlinebundle download-deps``: run the acquisition pipeline.

Wipes the dependency root, fetches ripgrep, clangd, rust-analyzer and
the npm package set, and writes ``manifest.json`` once all succeeded.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from offlinebundle.config import BundleSettings
from offlinebundle.core.orchestrator import AcquisitionOrchestrator

console = Console()
err_console = Console(stderr=True)


def download_cmd(
    deps_dir: Path = typer.Option(
        None,
        "--deps-dir",
        "-d",
        help="Dependency root to (re)create. Defaults to dist/offline-deps.",
    ),
    clangd_tag: str = typer.Option(
        None, "--clangd-tag", help="Pin clangd to a release tag instead of latest."
    ),
    rust_analyzer_tag: str = typer.Option(
        None, "--rust-analyzer-tag", help="Pin rust-analyzer to a release tag instead of latest."
    ),
) -> None:
    """Download every offline dependency into the dependency root."""
    overrides = {
        key: value
        for key, value in {
            "deps_dir": deps_dir,
            "clangd_tag": clangd_tag,
            "rust_analyzer_tag": rust_analyzer_tag,
        }.items()
        if value is not None
    }
    settings = BundleSettings(**overrides)

    console.print("[bold cyan]=== OpenCode Offline Dependencies Downloader ===[/bold cyan]")
    try:
        manifest = AcquisitionOrchestrator(settings).run()
    except Exception as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    components = manifest.components
    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Download complete![/bold green]",
                "",
                f"[bold]ripgrep:[/bold]       {components.ripgrep}",
                f"[bold]clangd:[/bold]        {components.clangd}",
                f"[bold]rust-analyzer:[/bold] {components.rust_analyzer}",
                f"[bold]npm packages:[/bold]  {len(components.npm_packages)}",
                "",
                f"[dim]Dependencies saved to: {settings.deps_dir}[/dim]",
            ]),
            title="[bold]Offline Dependencies[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
