"""Data models for synchronization runs."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class SyncState(str, Enum):
    """Lifecycle of one orchestration run: IDLE -> RUNNING -> SUCCESS | RETRY."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    RETRY = "retry"

    @property
    def is_terminal(self) -> bool:
        return self in (SyncState.SUCCESS, SyncState.RETRY)


class SyncRunReport(BaseModel):
    """Report of one orchestration run across all entity types."""

    run_id: str = Field(..., description="Identifier bound to every log event of the run")
    state: SyncState = Field(default=SyncState.IDLE, description="Run state")
    results: dict[str, bool] = Field(
        default_factory=dict, description="Per entity type sync result"
    )
    attempt: int = Field(default=1, ge=1, description="Attempt number within a scheduled sync")
    search_index_rebuilt: bool = Field(
        default=False, description="True if the search index was rebuilt after the run"
    )
    start_time: datetime | None = Field(default=None, description="Run start timestamp")
    end_time: datetime | None = Field(default=None, description="Run end timestamp")
    duration_seconds: float = Field(default=0.0, ge=0.0, description="Run duration in seconds")

    @property
    def success(self) -> bool:
        """True only when the run finished and every entity type synced."""
        return self.state is SyncState.SUCCESS

    @property
    def failed_entity_types(self) -> list[str]:
        return [name for name, ok in self.results.items() if not ok]
