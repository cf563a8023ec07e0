"""Main application configuration model."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from apisync.domain.config.retry import RetryPolicy
from apisync.domain.config.source import SourceSpec
from apisync.domain.config.sync import SyncConfig


def default_sources() -> List[SourceSpec]:
    return [
        SourceSpec(
            name="users",
            endpoint="https://jsonplaceholder.typicode.com/users",
            destination="usuarios_sync.json",
        ),
        SourceSpec(
            name="posts",
            endpoint="https://jsonplaceholder.typicode.com/posts",
            destination="posts_sync.json",
        ),
    ]


class AppConfig(BaseModel):
    """Main application configuration.

    This is the root configuration model that aggregates all configuration sections.
    Validation is performed at load time to fail fast on configuration errors.

    Attributes:
        sources: Ordered source registry processed by `apisync sync`
        sync: Batch settings (output directory, per-source retry policy)
        retry: Retry policy for one-off fetches (`apisync fetch`)
    """

    sources: List[SourceSpec] = Field(default_factory=default_sources)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)

    model_config = ConfigDict(
        validate_assignment=True,  # Validate on attribute assignment
        extra="forbid",  # Reject unknown fields
        json_schema_extra={
            "example": {
                "sources": [
                    {
                        "name": "users",
                        "endpoint": "https://jsonplaceholder.typicode.com/users",
                        "destination": "usuarios_sync.json",
                    },
                ],
                "sync": {
                    "output_dir": "data",
                    "retry": {"max_attempts": 3, "timeout": 4.0, "delay": 1.5},
                },
                "retry": {"max_attempts": 3, "timeout": 5.0, "delay": 1.0},
            }
        },
    )

    @field_validator("sources")
    @classmethod
    def _unique_names(cls, sources: List[SourceSpec]) -> List[SourceSpec]:
        seen = set()
        for source in sources:
            if source.name in seen:
                raise ValueError(f"duplicate source name: {source.name}")
            seen.add(source.name)
        return sources
