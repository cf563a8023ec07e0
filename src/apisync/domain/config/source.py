"""Source configuration model."""

from pathlib import PurePosixPath
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SourceSpec(BaseModel):
    """A remote JSON endpoint and where its records go.

    Attributes:
        name: Unique source name, also selects the record transform
        endpoint: HTTP(S) URL fetched with GET
        destination: File name, relative to the output directory
    """

    name: str = Field(..., min_length=1)
    endpoint: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("endpoint")
    @classmethod
    def _check_endpoint(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"endpoint must be an http(s) URL, got {value!r}")
        return value

    @field_validator("destination")
    @classmethod
    def _check_destination(cls, value: str) -> str:
        path = PurePosixPath(value.replace("\\", "/"))
        if path.is_absolute() or ".." in path.parts:
            raise ValueError(f"destination must be a relative path, got {value!r}")
        return value
