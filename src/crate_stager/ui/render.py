"""Output rendering for the crate-stager CLI.

File: src/crate_stager/ui/render.py

Purpose
- Keep stdout plain: it carries host build tool directives and progress lines.
- Render diagnostics on stderr with ``rich``, honouring ``NO_COLOR`` and ``--no-color``.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from collections.abc import Mapping
    from typing import TextIO


class CLIRenderer:
    """Thin CLI output renderer."""

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stdout = stdout
        self._errors = Console(
            file=stderr,
            stderr=True,
            no_color=no_color,
            highlight=False,
            soft_wrap=True,
        )

    @property
    def stdout(self) -> TextIO:
        """Stream shared with progress lines and host build tool directives."""

        return self._stdout if self._stdout is not None else sys.stdout

    def text(self, line: str) -> None:
        """Print a plain text line on stdout."""

        print(line, file=self.stdout)

    def write(self, text: str) -> None:
        """Write ``text`` to stdout verbatim."""

        self.stdout.write(text)
        self.stdout.flush()

    def kv_lines(self, values: Mapping[str, str]) -> None:
        """Print ``KEY=value`` lines in key order."""

        for key in sorted(values):
            self.text(f"{key}={values[key]}")

    def error(self, message: str, *, detail: str | None = None) -> None:
        """Print a failure diagnostic on stderr."""

        self._errors.print(f"[bold red]error:[/bold red] {escape(message)}")
        if detail and self.verbose:
            self._errors.print(escape(detail), style="dim")

    def hint(self, message: str) -> None:
        """Print an actionable hint on stderr."""

        self._errors.print(f"[yellow]hint:[/yellow] {escape(message)}")


def create_renderer(
    *,
    no_color: bool = False,
    verbose: bool = False,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, verbose=verbose, stdout=stdout, stderr=stderr)


__all__ = ["CLIRenderer", "create_renderer"]
