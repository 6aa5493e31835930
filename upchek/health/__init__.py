"""Health subsystem — script executor, result store, scheduler, derived status."""

from .errors import ExecutionError, FetchError, UpchekError
from .models import CheckResult, PeerState, Snapshot, TimestampedResult
from .status import DerivedStatus
from .store import ResultStore
