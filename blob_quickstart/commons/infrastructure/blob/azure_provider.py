"""Azure Blob Storage implementation of blob storage."""

import asyncio
import time
from collections.abc import AsyncIterator, Callable
from typing import Any, BinaryIO, TypeVar

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, PublicAccess

from blob_quickstart.commons.infrastructure.blob.base import (
    BlobDescriptor,
    BlobHandle,
    BlobStorageBase,
    ContainerHandle,
    HealthStatus,
    StorageServiceError,
)

T = TypeVar("T")

_END = object()


class AzureBlobStorage(BlobStorageBase):
    """Azure Blob Storage implementation.

    Uses the synchronous ``azure-storage-blob`` client and offloads every
    call to the default executor.
    """

    def __init__(self, service_client: BlobServiceClient) -> None:
        """Initialize with an already configured service client.

        Args:
            service_client: Azure blob service client.
        """
        self._service = service_client

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzureBlobStorage":
        """Build a provider from a storage account connection string.

        Raises:
            ValueError: If the connection string can't be parsed.
        """
        return cls(BlobServiceClient.from_connection_string(connection_string))

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        """Run a blocking SDK call in the executor, translating its errors."""
        loop = asyncio.get_event_loop()

        def _call() -> T:
            try:
                return fn(*args)
            except AzureError as e:
                raise StorageServiceError(operation, e.message or str(e)) from e

        return await loop.run_in_executor(None, _call)

    async def create_container(self, name: str) -> ContainerHandle:
        """Create a new container."""
        client = await self._run(
            "create_container", self._service.create_container, name
        )
        return ContainerHandle(name=name, url=client.url)

    async def set_public_read(self, container: ContainerHandle) -> None:
        """Make the container's blobs publicly readable."""
        client = self._service.get_container_client(container.name)

        def _set_policy() -> None:
            client.set_container_access_policy(
                signed_identifiers={},
                public_access=PublicAccess.BLOB,
            )

        await self._run("set_public_read", _set_policy)

    async def delete_container(self, container: ContainerHandle) -> bool:
        """Delete a container and the blobs it contains."""
        client = self._service.get_container_client(container.name)

        def _delete() -> bool:
            try:
                client.delete_container()
                return True
            except ResourceNotFoundError:
                return False

        return await self._run("delete_container", _delete)

    async def container_exists(self, container: ContainerHandle) -> bool:
        """Check if a container exists."""
        client = self._service.get_container_client(container.name)
        return await self._run("container_exists", client.exists)

    async def upload_blob(
        self,
        container: ContainerHandle,
        name: str,
        data: BinaryIO,
        length: int,
    ) -> BlobHandle:
        """Stream a file-like object into a new block blob."""
        client = self._service.get_container_client(container.name)

        def _upload() -> None:
            client.upload_blob(name=name, data=data, length=length, overwrite=False)

        await self._run("upload_blob", _upload)
        return BlobHandle(container=container, name=name)

    async def list_blobs(  # type: ignore[override]
        self, container: ContainerHandle
    ) -> AsyncIterator[BlobDescriptor]:
        """Lazily list blobs; pages are fetched as the iterator advances."""
        client = self._service.get_container_client(container.name)
        pages = iter(client.list_blobs())
        while True:
            item = await self._run("list_blobs", next, pages, _END)
            if item is _END:
                break
            yield BlobDescriptor(
                name=item.name,
                size_bytes=item.size or 0,
                last_modified=item.last_modified,
                etag=item.etag or "",
            )

    async def download_blob(  # type: ignore[override]
        self,
        blob: BlobHandle,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob chunk by chunk."""
        client = self._service.get_blob_client(blob.container.name, blob.name)
        downloader = await self._run(
            "download_blob", lambda: client.download_blob(max_concurrency=1)
        )
        chunks = iter(downloader.chunks())
        while True:
            chunk = await self._run("download_blob", next, chunks, _END)
            if chunk is _END:
                break
            # The SDK sizes chunks itself; re-slice to honour chunk_size.
            for offset in range(0, len(chunk), chunk_size):
                yield chunk[offset : offset + chunk_size]

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._run("health_check", self._service.get_account_information)
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=True,
                latency_ms=latency_ms,
                message="Azure Blob Storage is healthy",
                details={"account": self._service.account_name or ""},
            )
        except StorageServiceError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"Azure Blob Storage health check failed: {e.message}",
                details={"account": self._service.account_name or "", "error": e.message},
            )
