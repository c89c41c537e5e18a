"""Workflow state and result models."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class WorkflowState(str, Enum):
    """Lifecycle state of a quickstart run."""

    START = "start"
    PROVISIONED = "provisioned"  # Container created and made public
    SOURCE_WRITTEN = "source_written"  # Local sample file written
    UPLOADED = "uploaded"
    LISTED = "listed"
    DOWNLOADED = "downloaded"
    FAILED = "failed"  # A step raised; cleanup still runs
    CLEANED_UP = "cleaned_up"  # Terminal


@dataclass
class TempFileDescriptor:
    """A local scratch file and whether it currently exists on disk."""

    path: Path
    exists: bool = False


class WorkflowError(BaseModel):
    """The error that moved a run into FAILED."""

    kind: str = Field(
        description="provision, transfer, timeout, filesystem or unexpected"
    )
    message: str
    state: WorkflowState = Field(description="Last state reached before failing")


class WorkflowResult(BaseModel):
    """Outcome of a single quickstart run."""

    run_id: str
    container_name: str | None = None
    container_url: str | None = None
    blob_name: str | None = None
    states: list[WorkflowState] = Field(default_factory=list)
    listed_blobs: list[str] = Field(default_factory=list)
    error: WorkflowError | None = None
    cleanup_errors: list[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    @property
    def state(self) -> WorkflowState:
        """Current state, START if nothing happened yet."""
        return self.states[-1] if self.states else WorkflowState.START

    @property
    def succeeded(self) -> bool:
        return self.error is None and WorkflowState.DOWNLOADED in self.states

    @property
    def cleanup_failed(self) -> bool:
        return bool(self.cleanup_errors)
