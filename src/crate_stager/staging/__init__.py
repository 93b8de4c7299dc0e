"""
crate-stager: staging primitives

File: src/crate_stager/staging/__init__.py

Purpose
- Staging directory lifecycle, tree mirroring, manifest path rewriting and
  the scoped compile/execute process runner.

Functional requirements
- Must never delete outside the system temp root.
- Compile subprocesses must not inherit the caller's environment wholesale.
"""

from crate_stager.staging.build_dir import StagingDirectory
from crate_stager.staging.manifest import (
    PATH_LITERAL_PREFIXES,
    escape_base_dir,
    qualify_manifest_paths,
    qualify_manifest_paths_in_text,
)
from crate_stager.staging.mirror import mirror_tree
from crate_stager.staging.process_runner import (
    ProcessInvocation,
    build_script_path,
    compile_build_crate,
    compile_environment,
    run_build_script,
    run_invocation,
)

__all__ = [
    "PATH_LITERAL_PREFIXES",
    "ProcessInvocation",
    "StagingDirectory",
    "build_script_path",
    "compile_build_crate",
    "compile_environment",
    "escape_base_dir",
    "mirror_tree",
    "qualify_manifest_paths",
    "qualify_manifest_paths_in_text",
    "run_build_script",
    "run_invocation",
]
