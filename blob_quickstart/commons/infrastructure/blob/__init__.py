"""Blob storage abstractions and implementations."""

from blob_quickstart.commons.infrastructure.blob.azure_provider import AzureBlobStorage
from blob_quickstart.commons.infrastructure.blob.base import (
    BlobDescriptor,
    BlobHandle,
    BlobStorageBase,
    ContainerHandle,
    HealthStatus,
    StorageServiceError,
)
from blob_quickstart.commons.infrastructure.blob.minio_provider import MinioBlobStorage

__all__ = [
    # Base classes
    "BlobStorageBase",
    "BlobDescriptor",
    "BlobHandle",
    "ContainerHandle",
    "HealthStatus",
    # Implementations
    "AzureBlobStorage",
    "MinioBlobStorage",
    # Exceptions
    "StorageServiceError",
]
