# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring the manifest commands."""

from __future__ import annotations

import typer

from .commands import register

app = typer.Typer(
    name="pgext-manifest",
    help="Compile the PostgreSQL extension manifest into build, init and docs artifacts.",
    no_args_is_help=True,
    add_completion=False,
)
register(app)


def main() -> None:
    """Run the ``pgext-manifest`` console script."""

    app()


__all__ = ["app", "main"]
