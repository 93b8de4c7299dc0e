"""Command-line surface for crate-stager."""

from crate_stager.ui.cli import build_parser, run_cli
from crate_stager.ui.render import CLIRenderer, create_renderer

__all__ = ["CLIRenderer", "build_parser", "create_renderer", "run_cli"]
