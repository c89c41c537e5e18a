"""Domain exceptions for the blob storage quickstart."""


class QuickstartError(Exception):
    """Base exception for quickstart errors."""

    kind = "error"


class ConfigError(QuickstartError):
    """Raised when required configuration is missing or invalid."""

    kind = "config"

    def __init__(self, setting: str, reason: str) -> None:
        self.setting = setting
        self.reason = reason
        super().__init__(f"Configuration '{setting}' is not usable: {reason}")


class ProvisionError(QuickstartError):
    """Raised when a container can't be created or its policy can't be set."""

    kind = "provision"

    def __init__(
        self,
        container_name: str,
        reason: str,
        cleanup_errors: list["CleanupError"] | None = None,
    ) -> None:
        self.container_name = container_name
        self.reason = reason
        # Set when a half-provisioned container could not be removed
        self.cleanup_errors = cleanup_errors or []
        super().__init__(f"Provisioning container '{container_name}' failed: {reason}")


class TransferError(QuickstartError):
    """Raised when an upload, listing or download fails."""

    kind = "transfer"

    def __init__(self, operation: str, blob_name: str, reason: str) -> None:
        self.operation = operation
        self.blob_name = blob_name
        self.reason = reason
        super().__init__(f"{operation.capitalize()} of '{blob_name}' failed: {reason}")


class CleanupError(QuickstartError):
    """Describes a resource that couldn't be removed.

    Cleanup is best-effort: these are collected and reported, never raised
    over the error that triggered cleanup.
    """

    kind = "cleanup"

    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"Could not remove {resource}: {reason}")
