"""Sync batch configuration model."""

from pydantic import BaseModel, Field

from apisync.domain.config.retry import RetryPolicy


def default_sync_policy() -> RetryPolicy:
    """Retry policy used for each source of a batch"""
    return RetryPolicy(max_attempts=3, timeout=4.0, delay=1.5)


class SyncConfig(BaseModel):
    """Configuration for a sync batch.

    Attributes:
        output_dir: Directory that source destinations are relative to
        retry: Retry policy applied to every source fetch
    """

    output_dir: str = "."
    retry: RetryPolicy = Field(default_factory=default_sync_policy)
