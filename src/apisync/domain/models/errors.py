"""Errors raised by the sync steps that follow a fetch"""

from apisync.domain.models.fetch_result import FailureKind


class SyncError(Exception):
    """Base class for source-level sync errors"""

    kind: FailureKind = FailureKind.IO


class TransformError(SyncError):
    """Payload could not be mapped to the normalized record shape"""

    kind = FailureKind.DECODE


class PersistenceError(SyncError):
    """Record set could not be written to its destination"""

    kind = FailureKind.IO
