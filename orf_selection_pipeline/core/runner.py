#!/usr/bin/env python3

"""
Stage execution with checkpoint sentinels.

A stage whose checkpoint exists is skipped. Otherwise its action runs and the
checkpoint is written only after the action returns; any failure aborts the
run with a StageError and leaves no checkpoint behind.
"""

import logging
import os
import shlex
import shutil
import subprocess
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .exceptions import PipelineError, StageError, ToolNotFoundError
from ..utils.performance_monitor import PerformanceMonitor


DEFAULT_TOOL_EXECUTABLES: Dict[str, str] = {
    "cluster": "cd-hit-est",
    "train": "seq_n_baseprobs_to_loglikelihood_vals.pl",
    "score": "score_CDS_likelihood_all_6_frames.pl",
    "index_gff3": "index_gff3_files_by_isoform.pl",
    "project": "gene_list_to_gff.pl",
    "remove_eclipsed": "remove_eclipsed_ORFs.pl",
    "gff3_to_bed": "gff3_file_to_bed.pl",
    "gff3_to_proteins": "gff3_file_to_proteins.pl",
}


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


class ToolResolver:
    """Map logical tool names to executable paths.

    Lookup order: explicit override, each search directory (and its bin/),
    then PATH.
    """

    def __init__(self, search_dirs: Optional[Iterable[str]] = None,
                 overrides: Optional[Dict[str, str]] = None,
                 executables: Optional[Dict[str, str]] = None):
        self.search_dirs = [d for d in (search_dirs or []) if d]
        self.overrides = dict(overrides or {})
        self.executables = dict(executables or DEFAULT_TOOL_EXECUTABLES)
        self._resolved: Dict[str, str] = {}

    def resolve(self, tool_name: str) -> str:
        """Return the executable path for `tool_name` or raise ToolNotFoundError."""
        if tool_name in self._resolved:
            return self._resolved[tool_name]

        executable = self.overrides.get(tool_name) or self.executables.get(tool_name, tool_name)
        path = self._locate(executable)
        if path is None:
            raise ToolNotFoundError(tool_name, executable)

        logging.debug(f"Resolved tool {tool_name} -> {path}")
        self._resolved[tool_name] = path
        return path

    def resolve_all(self, tool_names: Iterable[str]) -> Dict[str, str]:
        return {name: self.resolve(name) for name in tool_names}

    def _locate(self, executable: str) -> Optional[str]:
        if os.path.dirname(executable):
            return os.path.abspath(executable) if _is_executable(executable) else None

        for directory in self.search_dirs:
            for candidate_dir in (directory, os.path.join(directory, "bin")):
                candidate = os.path.join(candidate_dir, executable)
                if _is_executable(candidate):
                    return os.path.abspath(candidate)

        return shutil.which(executable)


class StageRunner:
    """Run pipeline stages idempotently using checkpoint files."""

    def __init__(self, resolver: ToolResolver, monitor: Optional[PerformanceMonitor] = None):
        self.resolver = resolver
        self.monitor = monitor or PerformanceMonitor()
        self.current_stage: Optional[str] = None
        self.executed_stages: List[str] = []
        self.skipped_stages: List[str] = []

    def run(self, stage_name: str, checkpoint: Optional[str], action: Callable[[], None]) -> bool:
        """
        Run `action` unless `checkpoint` exists.

        Args:
            stage_name: Name used in logs and errors
            checkpoint: Sentinel path, or None for stages that always run
            action: Callable performing the stage

        Returns:
            True if the stage executed, False if it was skipped
        """
        if checkpoint and os.path.exists(checkpoint):
            logging.info(f"Stage {stage_name} already complete ({checkpoint}), skipping")
            self.skipped_stages.append(stage_name)
            return False

        self.current_stage = stage_name
        try:
            with self.monitor.stage_context(stage_name):
                action()
        except PipelineError:
            raise
        except Exception as e:
            raise StageError(stage_name, str(e)) from e
        finally:
            self.current_stage = None

        if checkpoint:
            with open(checkpoint, 'w'):
                pass
        self.executed_stages.append(stage_name)
        return True

    def run_tool(self, tool_name: str, args: Sequence[str],
                 stdout_path: Optional[str] = None) -> None:
        """Run a resolved external tool with an explicit argument vector."""
        argv = [self.resolver.resolve(tool_name)] + [str(a) for a in args]
        self.run_command(argv, stdout_path)

    def run_command(self, argv: Sequence[str], stdout_path: Optional[str] = None) -> None:
        """Run a command, optionally redirecting stdout to a file; raise StageError on failure."""
        stage_name = self.current_stage or os.path.basename(argv[0])
        command = shlex.join(argv)
        if stdout_path:
            command += f" > {shlex.quote(stdout_path)}"
        logging.info(f"CMD: {command}")

        try:
            if stdout_path:
                with open(stdout_path, 'w') as out:
                    result = subprocess.run(argv, stdout=out)
            else:
                result = subprocess.run(argv)
        except OSError as e:
            raise StageError(stage_name, f"cannot execute: {e}", command=argv) from e

        if result.returncode != 0:
            raise StageError(stage_name, "external command exited with non-zero status",
                             command=argv, returncode=result.returncode)
