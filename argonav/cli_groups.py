"""Command hierarchy groups for the argonav CLI.

Provides logical grouping of commands under:
  argonav config   - Search settings management
"""

from __future__ import annotations

import typer

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration: discovery limits and cache timeouts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
