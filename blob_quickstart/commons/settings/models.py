"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "blob-quickstart"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False


class StorageSettings(BaseModel):
    """Storage provider settings."""

    provider: Literal["azure", "minio"] = "azure"
    connection_string_env: str = "AZURE_STORAGE_CONNECTIONSTRING"
    # Filled once at startup from the variable named by connection_string_env
    connection_string: str | None = Field(default=None, exclude=True, repr=False)


class WorkflowSettings(BaseModel):
    """Quickstart workflow settings."""

    # uuid4 adds 36 characters; container names are capped at 63
    container_prefix: str = Field(
        default="quickstartblobs",
        pattern=r"^[a-z0-9][a-z0-9-]{2,26}$",
    )
    blob_name: str = Field(default="sample-blob", min_length=1, max_length=1024)
    sample_content: str = "Storage Blob Quickstart."
    download_chunk_size: int = Field(default=8192, ge=1)
    operation_timeout_seconds: float | None = Field(default=None, gt=0)
    pause_before_cleanup: bool = False


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "text"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


class Settings(BaseSettings):
    """Root settings container.

    Values come only from constructor arguments; SettingsLoader gathers
    files and environment variables.
    """

    app: AppSettings = Field(default_factory=AppSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    workflow: WorkflowSettings = Field(default_factory=WorkflowSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings,)
