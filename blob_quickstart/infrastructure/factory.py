"""Infrastructure factory for creating service instances from configuration."""

from pathlib import Path
from typing import Any, cast

from blob_quickstart.application.services.workflow import (
    Confirm,
    Console,
    QuickstartWorkflow,
)
from blob_quickstart.commons.infrastructure.blob import (
    AzureBlobStorage,
    BlobStorageBase,
    MinioBlobStorage,
)
from blob_quickstart.commons.settings.models import Settings
from blob_quickstart.domain.exceptions import ConfigError


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    def get_blob_storage(self) -> BlobStorageBase:
        """Get blob storage instance.

        Returns:
            Configured blob storage provider.

        Raises:
            ConfigError: If the connection string is missing or can't be
                parsed by the selected provider.
        """
        if "blob_storage" not in self._instances:
            storage = self._settings.storage
            if not storage.connection_string:
                raise ConfigError(
                    storage.connection_string_env,
                    "environment variable is not set",
                )
            try:
                if storage.provider == "minio":
                    provider: BlobStorageBase = MinioBlobStorage.from_connection_string(
                        storage.connection_string
                    )
                else:
                    provider = AzureBlobStorage.from_connection_string(
                        storage.connection_string
                    )
            except ValueError as e:
                raise ConfigError(storage.connection_string_env, str(e)) from e
            self._instances["blob_storage"] = provider
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def create_workflow(
        self,
        *,
        temp_dir: Path | None = None,
        console: Console = print,
        confirm: Confirm = input,
    ) -> QuickstartWorkflow:
        """Create a workflow driver wired to the configured provider.

        Raises:
            ConfigError: If the storage provider can't be configured.
        """
        return QuickstartWorkflow(
            self.get_blob_storage(),
            self._settings.workflow,
            temp_dir=temp_dir,
            console=console,
            confirm=confirm,
        )
