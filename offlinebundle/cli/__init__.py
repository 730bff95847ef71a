"""offlinebundle CLI: Typer-based command-line interface.

Provides the ``offlinebundle`` command with subcommands for fetching the
offline dependencies, packaging the bundle, inspecting a manifest and
resolving offline dependency paths.

All output uses Rich for formatted terminal display.
"""
