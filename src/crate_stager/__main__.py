"""Module entrypoint for ``python -m crate_stager``."""

from __future__ import annotations

from crate_stager.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
