"""Scoped provisioning of uniquely named storage containers."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

from blob_quickstart.commons.infrastructure.blob.base import (
    BlobStorageBase,
    ContainerHandle,
    StorageServiceError,
)
from blob_quickstart.commons.telemetry import get_logger
from blob_quickstart.domain.exceptions import CleanupError, ProvisionError


class ContainerProvisioner:
    """Creates public-read containers and guarantees their deletion.

    Every container name is the caller's prefix plus a fresh UUID. Names
    handed out by one provisioner are remembered and never reissued.
    """

    def __init__(self, storage: BlobStorageBase) -> None:
        self._storage = storage
        self._issued: set[str] = set()
        self._logger = get_logger(__name__)

    def _unique_name(self, name_prefix: str) -> str:
        name = f"{name_prefix}{uuid4()}"
        while name in self._issued:
            name = f"{name_prefix}{uuid4()}"
        self._issued.add(name)
        return name

    async def acquire(
        self,
        name_prefix: str,
        cleanup_errors: list[CleanupError] | None = None,
    ) -> ContainerHandle:
        """Create a uniquely named container with public blob read access.

        Args:
            name_prefix: Fixed prefix for the container name.
            cleanup_errors: Receives release failures for a container that
                was created after this call was cancelled.

        Returns:
            Handle for the new container.

        Raises:
            ProvisionError: If creation or the access policy fails. A
                container that was created before the policy failed is
                deleted before raising.
        """
        name = self._unique_name(name_prefix)
        self._logger.debug("Creating container", extra={"container": name})
        # The request keeps running if this task is cancelled mid-create
        pending = asyncio.ensure_future(self._storage.create_container(name))
        try:
            handle = await asyncio.shield(pending)
        except StorageServiceError as e:
            raise ProvisionError(name, e.message) from e
        except asyncio.CancelledError:
            errors = await self._discard(pending)
            if cleanup_errors is not None:
                cleanup_errors.extend(errors)
            raise

        try:
            await self._storage.set_public_read(handle)
        except StorageServiceError as e:
            self._logger.warning(
                "Setting access policy failed, removing container",
                extra={"container": name, "error": e.message},
            )
            errors = await self.release(handle)
            raise ProvisionError(name, e.message, errors) from e
        except BaseException:
            # Cancelled mid-policy: the caller never sees the handle
            errors = await self.release(handle)
            if cleanup_errors is not None:
                cleanup_errors.extend(errors)
            raise

        self._logger.info("Container provisioned", extra={"container": name})
        return handle

    async def _discard(
        self, pending: "asyncio.Future[ContainerHandle]"
    ) -> list[CleanupError]:
        """Wait for an abandoned create request and delete what it made."""
        try:
            handle = await pending
        except StorageServiceError:
            return []
        self._logger.warning(
            "Provisioning cancelled, removing container", extra={"container": handle.name}
        )
        return await self.release(handle)

    async def release(self, handle: ContainerHandle | None) -> list[CleanupError]:
        """Delete a container, reporting instead of raising on failure.

        Safe to call with None and safe to call more than once.

        Returns:
            Errors encountered; empty when the container is gone.
        """
        if handle is None:
            return []
        try:
            deleted = await self._storage.delete_container(handle)
        except StorageServiceError as e:
            self._logger.error(
                "Failed to delete container",
                extra={"container": handle.name, "error": e.message},
            )
            return [CleanupError(f"container '{handle.name}'", e.message)]

        if deleted:
            self._logger.info("Container deleted", extra={"container": handle.name})
        else:
            self._logger.debug("Container already gone", extra={"container": handle.name})
        return []

    @asynccontextmanager
    async def scoped(
        self,
        name_prefix: str,
        cleanup_errors: list[CleanupError] | None = None,
    ) -> AsyncIterator[ContainerHandle]:
        """Acquire a container for the duration of an ``async with`` block.

        The container is released on every exit path. Release failures are
        appended to ``cleanup_errors`` when given, otherwise only logged.
        """
        handle = await self.acquire(name_prefix, cleanup_errors)
        try:
            yield handle
        finally:
            errors = await self.release(handle)
            if cleanup_errors is not None:
                cleanup_errors.extend(errors)
