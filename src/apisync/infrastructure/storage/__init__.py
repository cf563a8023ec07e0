"""Persistence sinks"""

from apisync.infrastructure.storage.json_sink import JsonFileSink

__all__ = ["JsonFileSink"]
