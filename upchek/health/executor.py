"""Script executor — runs one health-check script to completion.

Each script is run directly (no shell) with stdout/stderr captured. Any exit
code is a valid CheckResult; only failures to invoke the script raise
``ExecutionError``.
"""

from __future__ import annotations

import logging
import os
import signal
import stat
import subprocess
from pathlib import Path
from typing import Protocol

from .errors import ExecutionError
from .models import CheckResult

logger = logging.getLogger(__name__)

# How often a running script re-checks the cancel signal.
_POLL_INTERVAL = 0.2


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


def is_executable(path: Path) -> bool:
    """True if ``path`` is a regular file with any execute bit set."""
    try:
        st = path.stat()
    except OSError:
        return False
    return stat.S_ISREG(st.st_mode) and bool(st.st_mode & 0o111)


def _kill_group(proc: subprocess.Popen) -> None:
    """Kill the script and anything it spawned (it leads its own session)."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_script(path: Path | str, cancel: CancelSignal | None = None) -> CheckResult:
    """Run ``path`` and return its CheckResult.

    Raises ExecutionError if the script cannot be stat'ed, is not executable,
    cannot be started, or ``cancel`` fires before it exits (the child is
    killed in that case).
    """
    path = Path(path)
    try:
        st = path.stat()
    except OSError as e:
        raise ExecutionError(f"failed to stat script {path}: {e}") from e
    if not st.st_mode & 0o111:
        raise ExecutionError(f"script is not executable: {path}")

    if cancel is not None and cancel.is_set():
        raise ExecutionError(f"cancelled before start: {path.name}")

    try:
        proc = subprocess.Popen(
            [str(path)],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            cwd=str(path.parent),
            env=os.environ.copy(),
            start_new_session=True,
        )
    except OSError as e:
        raise ExecutionError(f"failed to run script {path}: {e}") from e

    while True:
        try:
            stdout, stderr = proc.communicate(timeout=_POLL_INTERVAL)
            break
        except subprocess.TimeoutExpired:
            if cancel is not None and cancel.is_set():
                _kill_group(proc)
                proc.communicate()
                logger.warning("Killed script %s on cancel", path.name)
                raise ExecutionError(f"cancelled while running: {path.name}") from None

    return CheckResult(
        name=path.name,
        exit_code=proc.returncode,
        stdout=stdout,
        stderr=stderr,
    )
