"""Pydantic models for the /api/v1/results wire format."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from upchek.health.models import CheckResult, TimestampedResult


class ResultPayload(BaseModel):
    """One result as published by /api/v1/results.

    ``LastRun`` is the run start time in Unix seconds.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="Name")
    exit_code: int = Field(alias="ExitCode")
    stdout: str = Field(default="", alias="Stdout")
    stderr: str = Field(default="", alias="Stderr")
    last_run: float = Field(default=0.0, alias="LastRun", allow_inf_nan=False)

    @classmethod
    def from_result(cls, tr: TimestampedResult) -> "ResultPayload":
        return cls(
            name=tr.name,
            exit_code=tr.exit_code,
            stdout=tr.stdout,
            stderr=tr.stderr,
            last_run=tr.last_run.timestamp(),
        )

    def to_result(self) -> TimestampedResult:
        return TimestampedResult(
            result=CheckResult(
                name=self.name,
                exit_code=self.exit_code,
                stdout=self.stdout,
                stderr=self.stderr,
            ),
            last_run=datetime.fromtimestamp(self.last_run, tz=timezone.utc),
        )


results_adapter = TypeAdapter(list[ResultPayload])


def dump_results(results: tuple[TimestampedResult, ...] | list[TimestampedResult]) -> list[dict]:
    """Serialize results using the wire field names."""
    return [ResultPayload.from_result(r).model_dump(by_alias=True) for r in results]
