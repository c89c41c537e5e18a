"""Application services."""

from blob_quickstart.application.services.provisioner import ContainerProvisioner
from blob_quickstart.application.services.temp_files import TempFileManager
from blob_quickstart.application.services.transfer import BlobTransfer
from blob_quickstart.application.services.workflow import QuickstartWorkflow

__all__ = [
    "BlobTransfer",
    "ContainerProvisioner",
    "QuickstartWorkflow",
    "TempFileManager",
]
