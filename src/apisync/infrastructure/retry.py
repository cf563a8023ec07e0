"""Retry controller for resilient fetches, using tenacity.

Every failure kind is retried the same way: a fixed number of attempts with
a fixed wait in between. The last failure is returned to the caller with the
attempt count appended.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_fixed

from apisync.domain.config.retry import RetryPolicy
from apisync.domain.models.fetch_result import Attempt, FetchResult
from apisync.infrastructure.http_client import HttpJsonClient

logger = logging.getLogger(__name__)


def _is_failure(result: FetchResult) -> bool:
    return not result.ok


class RetryController:
    """Runs a fetch under a retry policy"""

    def __init__(
        self,
        client: Optional[HttpJsonClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize retry controller

        Args:
            client: Client performing single attempts (creates default if None)
            sleep: Function used to wait between attempts
        """
        self.client = client or HttpJsonClient()
        self.sleep = sleep

    def fetch(self, endpoint: str, policy: Optional[RetryPolicy] = None) -> FetchResult:
        """Fetch ``endpoint`` with up to ``policy.max_attempts`` attempts

        Args:
            endpoint: URL to fetch
            policy: Retry policy (defaults if None)

        Returns:
            The first successful FetchResult, or the last failure once the
            attempts are used up
        """
        policy = policy or RetryPolicy()
        attempts: List[Attempt] = []

        def _attempt() -> FetchResult:
            number = len(attempts) + 1
            started_at = datetime.now(timezone.utc)
            logger.info(f"Attempt {number}/{policy.max_attempts} for {endpoint}")
            result = self.client.get_json(endpoint, policy.timeout)
            outcome = None if result.ok else result.failure.kind
            attempts.append(Attempt(number, started_at=started_at, outcome=outcome))
            if not result.ok:
                logger.warning(f"Attempt {number} failed for {endpoint}: {result.failure}")
            return result

        def _before_sleep(retry_state: RetryCallState) -> None:
            logger.info(f"Waiting {policy.delay}s before retrying {endpoint}...")

        def _give_up(retry_state: RetryCallState) -> FetchResult:
            return retry_state.outcome.result()

        retrying = Retrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=wait_fixed(policy.delay),
            retry=retry_if_result(_is_failure),
            before_sleep=_before_sleep,
            retry_error_callback=_give_up,
            sleep=self.sleep,
        )
        result = retrying(_attempt).with_attempts(tuple(attempts))

        if result.ok:
            logger.info(f"Fetched {endpoint} in {len(attempts)} attempt(s)")
        else:
            logger.error(f"Giving up on {endpoint}: {result.failure}")
        return result


def fetch_with_retry(
    endpoint: str,
    policy: Optional[RetryPolicy] = None,
    client: Optional[HttpJsonClient] = None,
) -> FetchResult:
    """Fetch ``endpoint`` under ``policy`` with a default controller."""
    return RetryController(client=client).fetch(endpoint, policy)
