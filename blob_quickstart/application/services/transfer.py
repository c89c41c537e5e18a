"""Upload, list and download of a single blob inside a container."""

import os
from collections.abc import AsyncIterator
from contextlib import aclosing
from pathlib import Path

from blob_quickstart.commons.infrastructure.blob.base import (
    BlobDescriptor,
    BlobHandle,
    BlobStorageBase,
    ContainerHandle,
    StorageServiceError,
)
from blob_quickstart.commons.telemetry import get_logger, timed
from blob_quickstart.domain.exceptions import TransferError


class BlobTransfer:
    """Moves file content between the local disk and a container.

    Handles:
    - Streaming a local file into a new blob
    - Lazily listing the blobs of a container
    - Streaming a blob into a local file

    Nothing is cached between calls, so a listing always reflects the
    service's current view of the container.
    """

    def __init__(self, storage: BlobStorageBase, chunk_size: int = 8192) -> None:
        """Initialize the transfer service.

        Args:
            storage: Blob storage provider.
            chunk_size: Download chunk size in bytes.
        """
        self._storage = storage
        self._chunk_size = chunk_size
        self._logger = get_logger(__name__)

    @timed
    async def upload(
        self,
        container: ContainerHandle,
        blob_name: str,
        source_path: Path,
    ) -> BlobHandle:
        """Stream a local file into a new blob.

        Args:
            container: Target container.
            blob_name: Name of the blob to create.
            source_path: Local file to read.

        Returns:
            Handle for the uploaded blob.

        Raises:
            TransferError: If the file can't be read or the service rejects
                the upload.
        """
        self._logger.debug(
            "Uploading blob",
            extra={"container": container.name, "blob": blob_name, "source": str(source_path)},
        )
        try:
            with source_path.open("rb") as f:
                length = os.fstat(f.fileno()).st_size
                blob = await self._storage.upload_blob(container, blob_name, f, length)
        except OSError as e:
            raise TransferError("upload", blob_name, str(e)) from e
        except StorageServiceError as e:
            raise TransferError("upload", blob_name, e.message) from e

        self._logger.info(
            "Blob uploaded",
            extra={"container": container.name, "blob": blob_name, "size_bytes": length},
        )
        return blob

    async def list_blobs(self, container: ContainerHandle) -> AsyncIterator[BlobDescriptor]:
        """Lazily list every blob currently in a container.

        The sequence is single-pass; call again to list again.

        Raises:
            TransferError: If the service fails while listing.
        """
        count = 0
        try:
            async for descriptor in self._storage.list_blobs(container):
                count += 1
                yield descriptor
        except StorageServiceError as e:
            raise TransferError("list", container.name, e.message) from e
        self._logger.debug(
            "Blobs listed", extra={"container": container.name, "count": count}
        )

    @timed
    async def download(self, blob: BlobHandle, destination_path: Path) -> None:
        """Stream a blob into a local file, overwriting it if present.

        Raises:
            TransferError: If the service fails or the file can't be written.
        """
        self._logger.debug(
            "Downloading blob",
            extra={"blob": blob.name, "destination": str(destination_path)},
        )
        written = 0
        try:
            async with aclosing(
                self._storage.download_blob(blob, self._chunk_size)
            ) as chunks:
                with destination_path.open("wb") as f:
                    async for chunk in chunks:
                        f.write(chunk)
                        written += len(chunk)
        except OSError as e:
            raise TransferError("download", blob.name, str(e)) from e
        except StorageServiceError as e:
            raise TransferError("download", blob.name, e.message) from e

        self._logger.info(
            "Blob downloaded",
            extra={"blob": blob.name, "destination": str(destination_path), "size_bytes": written},
        )
