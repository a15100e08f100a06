"""
tools.py

Responsibility: every external process the pipeline runs (npm, node, tsc).

Commands run synchronously with captured output. A failing command becomes a
PipelineError carrying that output, except for the TypeScript compiler whose
per-file failures are reported to the caller instead.
"""

import shutil
import subprocess
from pathlib import Path

from .errors import PipelineError


def run(cmd: list[str], *, cwd: Path | None = None) -> str:
    """Run a command, returning its combined output.

    Raises:
        PipelineError: the command is missing or exits non-zero
    """
    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except subprocess.CalledProcessError as e:
        raise PipelineError(f"Command failed: {' '.join(cmd)}\n\n{e.stdout}") from e
    except OSError as e:
        raise PipelineError(f"Could not run {cmd[0]}: {e}") from e
    return result.stdout


def is_installed(program: str) -> bool:
    return shutil.which(program) is not None


class NpmTool:
    """npm and node invocations used while building the upstream tree."""

    def __init__(self, npm: str = "npm", node: str = "node"):
        self.npm = npm
        self.node = node

    def ci(self, cwd: Path) -> None:
        run([self.npm, "ci"], cwd=cwd)

    def install_global(self, package: str) -> None:
        run([self.npm, "install", "-g", package])

    def run_node(self, script: str, cwd: Path) -> None:
        run([self.node, script], cwd=cwd)


class TypeScriptCompiler:
    """Compile single TypeScript files to ES modules with ``tsc``."""

    def __init__(self, tsc: str = "tsc"):
        self.tsc = tsc

    def command(self, source: Path, out_dir: Path, *, jsx: bool = False) -> list[str]:
        cmd = [
            self.tsc,
            str(source),
            "--outDir",
            str(out_dir),
            "--declaration",
            "false",
            "--esModuleInterop",
            "--noEmitOnError",
            "false",
        ]
        if jsx:
            cmd += ["--jsx", "react"]
        return cmd

    def compile(self, source: Path, out_dir: Path, *, jsx: bool = False) -> bool:
        """Compile ``source`` into ``out_dir``.

        Returns:
            True if tsc succeeded, False otherwise. Output may still have been
            emitted on failure since emit-on-error is enabled.
        """
        try:
            run(self.command(source, out_dir, jsx=jsx))
        except PipelineError:
            return False
        return True
