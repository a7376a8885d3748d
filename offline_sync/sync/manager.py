"""Single-flight scheduling of orchestration runs with retry."""

import asyncio

import structlog

from offline_sync.sync.models import SyncRunReport
from offline_sync.sync.orchestrator import SyncOrchestrator
from offline_sync.utils.retry import backoff_delay

log = structlog.stdlib.get_logger()


class SyncManager:
    """
    Starts orchestration runs, at most one at a time.

    ``request_sync`` keeps an in-flight run instead of starting a second
    one. A run that ends in RETRY is attempted again after an exponential
    backoff, up to ``max_attempts`` attempts in total. Entity types that
    already synced are cheap no-ops on the next attempt because their
    cursors have moved.
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 60.0,
    ):
        """
        Initialize sync manager.

        Args:
            orchestrator: Orchestrator performing each run
            max_attempts: Attempts per requested sync, including the first
            base_delay: Initial delay in seconds before a retry
            max_delay: Maximum delay in seconds before a retry
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self._orchestrator = orchestrator
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._task: asyncio.Task[SyncRunReport] | None = None

    @property
    def is_syncing(self) -> bool:
        return self._task is not None and not self._task.done()

    def request_sync(self) -> asyncio.Task[SyncRunReport]:
        """
        Start a sync unless one is already running.

        Must be called from within a running event loop.

        Returns:
            The task of the in-flight sync, new or existing
        """
        if self.is_syncing:
            log.debug("sync_already_running")
            return self._task

        self._task = asyncio.create_task(self._run_with_retry(), name="offline-sync")
        log.info("sync_requested")
        return self._task

    async def sync(self) -> SyncRunReport:
        """Request a sync and wait for its final report."""
        return await self.request_sync()

    async def close(self) -> None:
        """Cancel the in-flight sync, if any, and wait for it to stop."""
        if not self.is_syncing:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            log.info("sync_task_cancelled")

    async def _run_with_retry(self) -> SyncRunReport:
        attempt = 1
        while True:
            report = await self._orchestrator.run()
            report.attempt = attempt

            if report.success:
                return report

            if attempt >= self._max_attempts:
                log.error(
                    "sync_attempts_exhausted",
                    attempts=self._max_attempts,
                    failed_entity_types=report.failed_entity_types,
                )
                return report

            delay = backoff_delay(attempt - 1, self._base_delay, self._max_delay)
            log.warning(
                "sync_retry_scheduled",
                attempt=attempt,
                max_attempts=self._max_attempts,
                delay_seconds=delay,
                failed_entity_types=report.failed_entity_types,
            )
            await asyncio.sleep(delay)
            attempt += 1
