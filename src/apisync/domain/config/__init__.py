"""Configuration models with Pydantic validation."""

from apisync.domain.config.app import AppConfig
from apisync.domain.config.retry import RetryPolicy
from apisync.domain.config.source import SourceSpec
from apisync.domain.config.sync import SyncConfig, default_sync_policy

__all__ = [
    "AppConfig",
    "RetryPolicy",
    "SourceSpec",
    "SyncConfig",
    "default_sync_policy",
]
