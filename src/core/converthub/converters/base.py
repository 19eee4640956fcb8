from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Mapping


DEFAULT_TIMEOUT_S = 300.0
STDERR_TAIL = 500


class ToolError(RuntimeError):
    """Raised when an external conversion tool fails."""


def find_executable(*names: str) -> str | None:
    for name in names:
        path = shutil.which(name)
        if path:
            return path
    return None


def timeout_from(options: Mapping[str, Any]) -> float:
    value = options.get("timeout_s")
    if value is None:
        return DEFAULT_TIMEOUT_S
    return max(float(value), 0.0)


def run_tool(args: Sequence[str], *, timeout_s: float, cwd: Path | None = None) -> str:
    """Run *args* and return its stdout.

    The child process is killed and reaped on every exit path, including
    timeouts and interrupts of the calling thread.
    """
    try:
        process = subprocess.Popen(
            list(args),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
        )
    except FileNotFoundError as exc:
        raise ToolError(f"{args[0]} is not installed") from exc
    try:
        stdout, stderr = process.communicate(timeout=timeout_s)
    except subprocess.TimeoutExpired as exc:
        raise ToolError(f"{Path(args[0]).name} timed out after {timeout_s:g}s") from exc
    finally:
        if process.poll() is None:
            process.kill()
            process.communicate()
    if process.returncode != 0:
        detail = (stderr or stdout or "").strip()[-STDERR_TAIL:]
        raise ToolError(f"{Path(args[0]).name} exited with status {process.returncode}: {detail}")
    return stdout


__all__ = ["DEFAULT_TIMEOUT_S", "ToolError", "find_executable", "run_tool", "timeout_from"]
