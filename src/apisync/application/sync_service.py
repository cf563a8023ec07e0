"""Service for synchronizing remote sources into local files"""

import logging
from typing import Callable, Optional, Sequence

from apisync.domain.config.retry import RetryPolicy
from apisync.domain.config.source import SourceSpec
from apisync.domain.config.sync import default_sync_policy
from apisync.domain.models.errors import SyncError
from apisync.domain.models.sync_report import SourceOutcome, SyncReport
from apisync.domain.transforms import Transform, get_transform
from apisync.infrastructure.retry import RetryController
from apisync.infrastructure.storage.json_sink import JsonFileSink

logger = logging.getLogger(__name__)


class SyncService:
    """Fetches, transforms and stores every source of a batch, one at a time"""

    def __init__(
        self,
        retry_controller: Optional[RetryController] = None,
        sink: Optional[JsonFileSink] = None,
        policy: Optional[RetryPolicy] = None,
        transform_lookup: Callable[[str], Transform] = get_transform,
    ):
        """Initialize sync service

        Args:
            retry_controller: Controller used for each fetch (creates default if None)
            sink: Persistence sink (writes to the current directory if None)
            policy: Retry policy per source (3 attempts, 4s timeout, 1.5s delay if None)
            transform_lookup: Maps a source name to its record transform
        """
        self.retry_controller = retry_controller or RetryController()
        self.sink = sink or JsonFileSink()
        self.policy = policy or default_sync_policy()
        self.transform_lookup = transform_lookup

    def run(
        self, sources: Sequence[SourceSpec], policy: Optional[RetryPolicy] = None
    ) -> SyncReport:
        """Synchronize every source in order.

        A failing source is logged and recorded, it never stops the batch.

        Args:
            sources: Ordered source registry
            policy: Retry policy overriding the service default for this run

        Returns:
            SyncReport with one outcome per source
        """
        sources = tuple(sources)
        policy = policy or self.policy
        report = SyncReport()

        logger.info(f"Starting sync of {len(sources)} source(s)")
        for i, source in enumerate(sources, 1):
            logger.info(f"--- Syncing source {i}/{len(sources)}: {source.name} ---")
            try:
                outcome = self._sync_source(source, policy)
            except SyncError as e:
                outcome = SourceOutcome(
                    source=source.name,
                    destination=source.destination,
                    succeeded=False,
                    error=f"{e.kind.value}: {e}",
                )
            except Exception as e:
                logger.error(f"Error syncing {source.name}: {e}", exc_info=True)
                outcome = SourceOutcome(
                    source=source.name,
                    destination=source.destination,
                    succeeded=False,
                    error=f"{type(e).__name__}: {e}",
                )
            if outcome.succeeded:
                logger.info(f"Source {source.name} synchronized ({outcome.records} records)")
            else:
                logger.error(f"Failed to sync {source.name}: {outcome.error}")
            report.outcomes.append(outcome)

        logger.info(f"Sync completed: {report.summary()}")
        return report

    def _sync_source(self, source: SourceSpec, policy: RetryPolicy) -> SourceOutcome:
        result = self.retry_controller.fetch(source.endpoint, policy)
        if not result.ok:
            return SourceOutcome(
                source=source.name,
                destination=source.destination,
                succeeded=False,
                error=str(result.failure),
                attempts=len(result.attempts),
            )

        logger.info(f"Transforming {source.name} payload")
        records = self.transform_lookup(source.name)(result.payload)
        self.sink.write(source.destination, records)
        return SourceOutcome(
            source=source.name,
            destination=source.destination,
            succeeded=True,
            records=len(records) if isinstance(records, (list, dict)) else 1,
            attempts=len(result.attempts),
        )
