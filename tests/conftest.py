"""Shared fixtures: an in-memory blob storage provider with failure injection."""

import asyncio
import time
from collections.abc import AsyncIterator
from typing import BinaryIO

import pytest

from blob_quickstart.commons.infrastructure.blob.base import (
    BlobDescriptor,
    BlobHandle,
    BlobStorageBase,
    ContainerHandle,
    HealthStatus,
    StorageServiceError,
)


class InMemoryBlobStorage(BlobStorageBase):
    """Dict-backed provider that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.containers: dict[str, dict[str, bytes]] = {}
        self.public: set[str] = set()
        self.calls: list[str] = []
        self._failures: dict[str, str] = {}
        # Seconds create_container blocks a worker thread, like a real SDK call
        self.create_latency = 0.0

    def fail(self, operation: str, message: str = "injected failure") -> None:
        """Make every future call to ``operation`` raise StorageServiceError."""
        self._failures[operation] = message

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self._failures:
            raise StorageServiceError(operation, self._failures[operation])

    def _blobs(self, operation: str, container: ContainerHandle) -> dict[str, bytes]:
        if container.name not in self.containers:
            raise StorageServiceError(operation, "ContainerNotFound")
        return self.containers[container.name]

    async def create_container(self, name: str) -> ContainerHandle:
        if not self.create_latency:
            return self._create(name)

        def _create_later() -> ContainerHandle:
            time.sleep(self.create_latency)
            return self._create(name)

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _create_later)

    def _create(self, name: str) -> ContainerHandle:
        self._enter("create_container")
        if name in self.containers:
            raise StorageServiceError("create_container", "ContainerAlreadyExists")
        self.containers[name] = {}
        return ContainerHandle(name=name, url=f"memory://{name}")

    async def set_public_read(self, container: ContainerHandle) -> None:
        self._enter("set_public_read")
        self._blobs("set_public_read", container)
        self.public.add(container.name)

    async def delete_container(self, container: ContainerHandle) -> bool:
        self._enter("delete_container")
        self.public.discard(container.name)
        return self.containers.pop(container.name, None) is not None

    async def container_exists(self, container: ContainerHandle) -> bool:
        self._enter("container_exists")
        return container.name in self.containers

    async def upload_blob(
        self,
        container: ContainerHandle,
        name: str,
        data: BinaryIO,
        length: int,
    ) -> BlobHandle:
        self._enter("upload_blob")
        blobs = self._blobs("upload_blob", container)
        if name in blobs:
            raise StorageServiceError("upload_blob", "BlobAlreadyExists")
        blobs[name] = data.read(length)
        return BlobHandle(container=container, name=name)

    async def list_blobs(  # type: ignore[override]
        self, container: ContainerHandle
    ) -> AsyncIterator[BlobDescriptor]:
        self._enter("list_blobs")
        for name, content in list(self._blobs("list_blobs", container).items()):
            yield BlobDescriptor(name=name, size_bytes=len(content))

    async def download_blob(  # type: ignore[override]
        self, blob: BlobHandle, chunk_size: int = 8192
    ) -> AsyncIterator[bytes]:
        self._enter("download_blob")
        blobs = self._blobs("download_blob", blob.container)
        if blob.name not in blobs:
            raise StorageServiceError("download_blob", "BlobNotFound")
        content = blobs[blob.name]
        for offset in range(0, len(content), chunk_size):
            yield content[offset : offset + chunk_size]

    async def health_check(self) -> HealthStatus:
        return HealthStatus(healthy=True, latency_ms=0.0, message="in-memory")


@pytest.fixture
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def container(storage: InMemoryBlobStorage) -> ContainerHandle:
    storage.containers["quickstartblobs-test"] = {}
    return ContainerHandle(name="quickstartblobs-test", url="memory://quickstartblobs-test")
