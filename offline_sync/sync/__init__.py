"""Synchronization components for change list based incremental updates."""

from offline_sync.sync.manager import SyncManager
from offline_sync.sync.models import SyncRunReport, SyncState
from offline_sync.sync.orchestrator import (
    SearchContentsRepository,
    SyncOrchestrator,
    SyncSubscriber,
)
from offline_sync.sync.repositories import NewsRepository, TopicsRepository
from offline_sync.sync.synchronizer import (
    CatchResult,
    Syncable,
    SyncCancelledError,
    Synchronizer,
    change_list_sync,
    run_catching,
)

__all__ = [
    "CatchResult",
    "NewsRepository",
    "SearchContentsRepository",
    "SyncCancelledError",
    "SyncManager",
    "SyncOrchestrator",
    "SyncRunReport",
    "SyncState",
    "SyncSubscriber",
    "Syncable",
    "Synchronizer",
    "TopicsRepository",
    "change_list_sync",
    "run_catching",
]
