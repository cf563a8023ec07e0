"""FetchResult model - tagged outcome of fetching a JSON resource"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple


class FailureKind(str, Enum):
    """Kind of failure reported for a fetch or a sync step"""

    TIMEOUT = "timeout"
    HTTP = "http"
    NETWORK = "network"
    DECODE = "decode"
    IO = "io"


@dataclass(frozen=True)
class Attempt:
    """A single try at fetching an endpoint"""

    attempt_number: int
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    outcome: Optional[FailureKind] = None  # None means the attempt succeeded

    def __post_init__(self):
        if self.attempt_number < 1:
            raise ValueError("Attempt number must be >= 1")

    @property
    def succeeded(self) -> bool:
        return self.outcome is None


@dataclass(frozen=True)
class FetchFailure:
    """Failure details of a fetch"""

    kind: FailureKind
    message: str
    endpoint: str
    status_code: Optional[int] = None  # Set for HTTP failures
    attempts: int = 1

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class FetchResult:
    """Result of fetching a JSON resource.

    Exactly one of ``payload`` (success) or ``failure`` is meaningful,
    ``ok`` tells which.
    """

    payload: Any = None
    failure: Optional[FetchFailure] = None
    attempts: Tuple[Attempt, ...] = ()

    @classmethod
    def success(cls, payload: Any) -> "FetchResult":
        return cls(payload=payload)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        message: str,
        endpoint: str,
        status_code: Optional[int] = None,
    ) -> "FetchResult":
        return cls(
            failure=FetchFailure(
                kind=kind, message=message, endpoint=endpoint, status_code=status_code
            )
        )

    @property
    def ok(self) -> bool:
        """Check if the fetch succeeded"""
        return self.failure is None

    def with_attempts(self, attempts: Tuple[Attempt, ...]) -> "FetchResult":
        """Return a copy carrying the attempt history.

        Failures also get the attempt count recorded and appended to the
        message for diagnostics.
        """
        if self.failure is None:
            return replace(self, attempts=attempts)
        count = len(attempts)
        plural = "attempt" if count == 1 else "attempts"
        failure = replace(
            self.failure,
            message=f"{self.failure.message} (after {count} {plural})",
            attempts=count,
        )
        return replace(self, failure=failure, attempts=attempts)
