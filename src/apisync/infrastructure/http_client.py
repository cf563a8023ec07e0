"""Shared HTTP client utilities (requests + per-attempt deadline).

One call to ``HttpJsonClient.get_json`` is one attempt: a GET raced against a
deadline. Retrying is layered on top in ``apisync.infrastructure.retry``.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional, Tuple

import requests

from apisync.domain.models.fetch_result import FailureKind, FetchResult

logger = logging.getLogger(__name__)

WORKER_NAME = "apisync-fetch"
CHUNK_SIZE = 64 * 1024

# status code, reason phrase, body
RawResponse = Tuple[int, str, bytes]


class DeadlineExceeded(Exception):
    """The worker ran past the attempt deadline and gave up"""


class HttpJsonClient:
    """Fetches JSON documents with a hard deadline per request"""

    def __init__(self, session: Optional[requests.Session] = None):
        """Initialize client

        Args:
            session: requests session to use (creates one if None)
        """
        self.session = session or requests.Session()

    def get_json(self, endpoint: str, timeout: float) -> FetchResult:
        """GET ``endpoint`` and decode its JSON body within ``timeout`` seconds.

        The request runs on a daemon worker thread owned by this call, the
        caller waits for it at most ``timeout`` seconds. The worker streams
        the body and stops on its own once the deadline has passed or the
        caller has given up, so a timed-out attempt never keeps the process
        alive. Whatever it produces after the deadline is discarded.

        Args:
            endpoint: URL to fetch
            timeout: Deadline in seconds

        Returns:
            FetchResult with the decoded payload or the failure

        Raises:
            ValueError: If endpoint is empty or timeout is not positive
        """
        if not endpoint:
            raise ValueError("endpoint must not be empty")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        logger.debug(f"HTTP GET {endpoint} (timeout {timeout}s)")
        deadline = time.monotonic() + timeout
        abandoned = threading.Event()
        future: Future = Future()
        worker = threading.Thread(
            target=self._run,
            args=(future, endpoint, timeout, deadline, abandoned),
            name=WORKER_NAME,
            daemon=True,
        )
        worker.start()
        try:
            status_code, reason, body = future.result(timeout=timeout)
        except (FutureTimeoutError, DeadlineExceeded):
            abandoned.set()
            future.add_done_callback(_discard_late_response(endpoint))
            return FetchResult.failed(
                FailureKind.TIMEOUT,
                f"no response from {endpoint} within {timeout}s",
                endpoint,
            )
        except requests.exceptions.Timeout as e:
            return FetchResult.failed(
                FailureKind.TIMEOUT, f"request to {endpoint} timed out: {e}", endpoint
            )
        except requests.exceptions.RequestException as e:
            return FetchResult.failed(
                FailureKind.NETWORK, f"request to {endpoint} failed: {e}", endpoint
            )

        if not 200 <= status_code < 300:
            return FetchResult.failed(
                FailureKind.HTTP,
                f"HTTP {status_code} {reason}".rstrip(),
                endpoint,
                status_code=status_code,
            )

        try:
            payload = json.loads(body)
        except ValueError as e:
            return FetchResult.failed(
                FailureKind.DECODE, f"invalid JSON from {endpoint}: {e}", endpoint
            )
        return FetchResult.success(payload)

    def _run(
        self,
        future: Future,
        endpoint: str,
        timeout: float,
        deadline: float,
        abandoned: threading.Event,
    ) -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            result = self._request(endpoint, timeout, deadline, abandoned)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)

    def _request(
        self, endpoint: str, timeout: float, deadline: float, abandoned: threading.Event
    ) -> RawResponse:
        # The body is streamed so the download counts against the deadline too
        with self.session.get(endpoint, timeout=timeout, stream=True) as response:
            chunks = []
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if abandoned.is_set() or time.monotonic() > deadline:
                    raise DeadlineExceeded(f"{endpoint}: body not received within {timeout}s")
                chunks.append(chunk)
            return response.status_code, response.reason or "", b"".join(chunks)

    def close(self) -> None:
        self.session.close()


def _discard_late_response(endpoint: str):
    def _callback(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.debug(f"Discarding late error from {endpoint}: {exc}")
        else:
            logger.debug(f"Discarding late response from {endpoint}")

    return _callback
