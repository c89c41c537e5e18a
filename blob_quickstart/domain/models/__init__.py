"""Domain models."""

from blob_quickstart.domain.models.workflow import (
    TempFileDescriptor,
    WorkflowError,
    WorkflowResult,
    WorkflowState,
)

__all__ = [
    "TempFileDescriptor",
    "WorkflowError",
    "WorkflowResult",
    "WorkflowState",
]
