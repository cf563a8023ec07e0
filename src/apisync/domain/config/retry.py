"""Retry policy configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class RetryPolicy(BaseModel):
    """Retry policy for a resilient fetch.

    The delay between attempts is fixed: it does not grow and has no jitter.

    Attributes:
        max_attempts: Maximum number of attempts (1 = no retry)
        timeout: Deadline for a single attempt in seconds
        delay: Wait between attempts in seconds
    """

    max_attempts: int = Field(3, ge=1)
    timeout: float = Field(5.0, gt=0.0)
    delay: float = Field(1.0, ge=0.0)  # Allow 0 for immediate retry

    model_config = ConfigDict(frozen=True)
