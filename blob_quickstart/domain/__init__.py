"""Domain layer - workflow models and errors."""

from blob_quickstart.domain.exceptions import (
    CleanupError,
    ConfigError,
    ProvisionError,
    QuickstartError,
    TransferError,
)
from blob_quickstart.domain.models import (
    TempFileDescriptor,
    WorkflowError,
    WorkflowResult,
    WorkflowState,
)

__all__ = [
    # Exceptions
    "QuickstartError",
    "ConfigError",
    "ProvisionError",
    "TransferError",
    "CleanupError",
    # Models
    "TempFileDescriptor",
    "WorkflowError",
    "WorkflowResult",
    "WorkflowState",
]
