"""Abstract base class for container-scoped blob storage operations."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO


@dataclass(frozen=True)
class ContainerHandle:
    """A provisioned storage container."""

    name: str
    url: str


@dataclass(frozen=True)
class BlobHandle:
    """A single blob inside a container."""

    container: ContainerHandle
    name: str


@dataclass
class BlobDescriptor:
    """Listing entry for a stored blob."""

    name: str
    size_bytes: int
    last_modified: datetime | None = None
    etag: str = ""


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class StorageServiceError(Exception):
    """Raised by providers when the storage service rejects a call."""

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")


class BlobStorageBase(ABC):
    """Abstract base class for container-scoped blob storage.

    Implementations wrap a vendor SDK and translate its errors into
    StorageServiceError:
    - Azure Blob Storage (connection string)
    - MinIO / AWS S3 (connection URL)
    """

    @abstractmethod
    async def create_container(self, name: str) -> ContainerHandle:
        """Create a new container.

        Args:
            name: Container name. Must not already exist.

        Returns:
            Handle for the created container.

        Raises:
            StorageServiceError: If the service refuses the request.
        """

    @abstractmethod
    async def set_public_read(self, container: ContainerHandle) -> None:
        """Allow anonymous read access to the blobs of a container.

        Args:
            container: Target container.

        Raises:
            StorageServiceError: If the policy can't be applied.
        """

    @abstractmethod
    async def delete_container(self, container: ContainerHandle) -> bool:
        """Delete a container and every blob in it.

        Args:
            container: Container to delete.

        Returns:
            True if deleted, False if it didn't exist.

        Raises:
            StorageServiceError: If the delete fails for any other reason.
        """

    @abstractmethod
    async def container_exists(self, container: ContainerHandle) -> bool:
        """Check if a container exists."""

    @abstractmethod
    async def upload_blob(
        self,
        container: ContainerHandle,
        name: str,
        data: BinaryIO,
        length: int,
    ) -> BlobHandle:
        """Stream a file-like object into a new blob.

        Args:
            container: Target container.
            name: Blob name within the container.
            data: Readable binary stream positioned at the start.
            length: Number of bytes to read from the stream.

        Returns:
            Handle for the uploaded blob.

        Raises:
            StorageServiceError: If the upload fails.
        """

    @abstractmethod
    def list_blobs(self, container: ContainerHandle) -> AsyncIterator[BlobDescriptor]:
        """Lazily list every blob in a container.

        Args:
            container: Container to list.

        Yields:
            One descriptor per blob, in service-defined order.
        """
        ...

    @abstractmethod
    def download_blob(
        self,
        blob: BlobHandle,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob in chunks.

        Args:
            blob: Blob to read.
            chunk_size: Preferred size of each chunk in bytes.

        Yields:
            Chunks of blob content.
        """
        ...

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
