"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import pytest

from upchek.health.models import CheckResult, TimestampedResult
from upchek.health.store import ResultStore

FIXED_TIME = datetime(2025, 3, 8, 1, 23, 30, tzinfo=timezone.utc)


def make_result(name: str, exit_code: int = 0, stdout: str = "", stderr: str = "") -> TimestampedResult:
    return TimestampedResult(
        result=CheckResult(name=name, exit_code=exit_code, stdout=stdout, stderr=stderr),
        last_run=FIXED_TIME,
    )


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    d = tmp_path / "scripts"
    d.mkdir()
    return d


@pytest.fixture
def write_script(scripts_dir: Path) -> Callable[..., Path]:
    """Write a shell script into scripts_dir (executable by default)."""

    def _write(name: str, body: str, executable: bool = True) -> Path:
        path = scripts_dir / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755 if executable else 0o644)
        return path

    return _write


@pytest.fixture
def store() -> ResultStore:
    return ResultStore(["peer"])
