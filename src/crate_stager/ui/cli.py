"""Command-line interface router for crate-stager."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from crate_stager.config import (
    ConfigLoadError,
    load_environment,
    load_settings,
)
from crate_stager.errors import ManifestError, StagedBuildError
from crate_stager.main import ExitCode, exit_code_for
from crate_stager.observability import setup_logging, shutdown_logging
from crate_stager.orchestrator import run_build_crate
from crate_stager.staging import (
    compile_environment,
    qualify_manifest_paths,
    qualify_manifest_paths_in_text,
)
from crate_stager.ui.render import CLIRenderer, create_renderer

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import TextIO


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="crate-stager",
        description=(
            "crate-stager: compile and run a build crate away from the caller's project tree.\n\n"
            "Common workflows:\n"
            "  crate-stager run ./build-script        Stage, compile and run a build crate\n"
            "  crate-stager qualify Cargo.toml --base-dir DIR\n"
            "                                         Re-anchor relative dependency paths\n"
            "  crate-stager env                       Show the toolchain environment allow-list\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true", default=False)
    common.add_argument("--no-color", action="store_true", default=False)

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run", parents=[common], help="Stage, compile and run a build crate."
    )
    run_parser.add_argument("build_crate_src", help="Build crate source directory.")
    run_parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to a crate-stager TOML config (default: ./crate-stager.toml if present).",
    )
    run_parser.add_argument("--log-file", default=None, help="Also write JSON-lines logs here.")
    run_parser.add_argument("--log-level", default=None, help="Log level (default: INFO).")
    run_parser.set_defaults(handler=_cmd_run)

    qualify_parser = subparsers.add_parser(
        "qualify", parents=[common], help="Rewrite relative dependency paths in a manifest."
    )
    qualify_parser.add_argument("manifest", help="Path to the manifest file.")
    qualify_parser.add_argument("--base-dir", required=True, help="Directory to anchor paths to.")
    qualify_parser.add_argument(
        "--in-place",
        action="store_true",
        default=False,
        help="Write the result back instead of printing it.",
    )
    qualify_parser.set_defaults(handler=_cmd_qualify)

    env_parser = subparsers.add_parser(
        "env", parents=[common], help="Print the environment handed to the toolchain."
    )
    env_parser.set_defaults(handler=_cmd_env)

    return parser


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr if stderr is None else stderr)
        return int(ExitCode.CONFIG_ERROR)

    renderer = create_renderer(
        no_color=namespace.no_color,
        verbose=namespace.verbose,
        stdout=stdout,
        stderr=stderr,
    )
    try:
        return int(handler(namespace, renderer))
    except (StagedBuildError, ConfigLoadError) as exc:
        renderer.error(str(exc), detail=_cause_detail(exc))
        if isinstance(exc, ConfigLoadError) and str(exc).endswith("from env"):
            renderer.hint(
                "run under the host build tool or export CARGO, PATH and CARGO_MANIFEST_DIR"
            )
        return int(exit_code_for(exc))


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_run(args: argparse.Namespace, renderer: CLIRenderer) -> int:
    settings = load_settings(
        args.config_path,
        cli_overrides={"log_file": args.log_file, "log_level": args.log_level},
    )
    level = "DEBUG" if args.verbose else settings.log_level
    setup_logging(level, stream=renderer.stdout, log_file=settings.log_file)
    try:
        run_build_crate(
            args.build_crate_src,
            settings=settings,
            directive_stream=renderer.stdout,
        )
    finally:
        shutdown_logging()
    return int(ExitCode.SUCCESS)


def _cmd_qualify(args: argparse.Namespace, renderer: CLIRenderer) -> int:
    manifest = Path(args.manifest)
    if args.in_place:
        qualify_manifest_paths(manifest, args.base_dir)
        return int(ExitCode.SUCCESS)

    try:
        with manifest.open(encoding="utf-8", newline="") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError("Can't read Cargo.toml to stream from", manifest) from exc
    renderer.write(qualify_manifest_paths_in_text(text, args.base_dir))
    return int(ExitCode.SUCCESS)


def _cmd_env(args: argparse.Namespace, renderer: CLIRenderer) -> int:
    environment = load_environment()
    renderer.kv_lines(compile_environment(environment))
    return int(ExitCode.SUCCESS)


def _cause_detail(exc: BaseException) -> str | None:
    cause = exc.__cause__
    if cause is None:
        return None
    return f"caused by {type(cause).__name__}: {cause}"


__all__ = ["build_parser", "run_cli"]
