"""Local scratch files used as upload source and download target."""

import tempfile
import uuid
from collections.abc import Iterable
from pathlib import Path

from blob_quickstart.commons.telemetry import get_logger
from blob_quickstart.domain.exceptions import CleanupError
from blob_quickstart.domain.models import TempFileDescriptor

DOWNLOADED_MARKER = "_DOWNLOADED"


class TempFileManager:
    """Owns one scratch directory and the files created inside it."""

    def __init__(self, base_dir: Path | None = None, file_prefix: str = "QuickStart") -> None:
        """Initialize the manager.

        Args:
            base_dir: Where to create the scratch directory. Defaults to the
                system temp directory.
            file_prefix: Prefix for generated source file names.
        """
        self._base_dir = base_dir
        self._file_prefix = file_prefix
        self._directory: Path | None = None
        self._descriptors: list[TempFileDescriptor] = []
        self._logger = get_logger(__name__)

    @property
    def directory(self) -> Path | None:
        """Scratch directory, or None until the first file is created."""
        return self._directory

    @property
    def descriptors(self) -> list[TempFileDescriptor]:
        """Every file this manager knows about."""
        return list(self._descriptors)

    def _ensure_directory(self) -> Path:
        if self._directory is None:
            self._directory = Path(tempfile.mkdtemp(dir=self._base_dir))
            self._logger.debug(
                "Created scratch directory", extra={"directory": str(self._directory)}
            )
        return self._directory

    def create_source(self, content: str | bytes) -> TempFileDescriptor:
        """Write content to a uniquely named file in the scratch directory.

        Args:
            content: Text (written as UTF-8) or raw bytes.

        Returns:
            Descriptor of the written file.
        """
        directory = self._ensure_directory()
        path = directory / f"{self._file_prefix}{uuid.uuid4().hex[:12]}.txt"
        descriptor = self.track(path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        path.write_bytes(data)
        descriptor.exists = True
        self._logger.info(
            "Created temp file", extra={"path": str(path), "size_bytes": len(data)}
        )
        return descriptor

    def derive_destination_path(self, source: TempFileDescriptor) -> Path:
        """Sibling path with a marker before the extension.

        ``QuickStartab12.txt`` becomes ``QuickStartab12_DOWNLOADED.txt``.
        """
        path = source.path
        return path.with_name(f"{path.stem}{DOWNLOADED_MARKER}{path.suffix}")

    def track(self, path: Path) -> TempFileDescriptor:
        """Register a path so cleanup removes it."""
        for descriptor in self._descriptors:
            if descriptor.path == path:
                return descriptor
        descriptor = TempFileDescriptor(path=path, exists=path.exists())
        self._descriptors.append(descriptor)
        return descriptor

    def cleanup(
        self,
        descriptors: Iterable[TempFileDescriptor] | None = None,
        directory: Path | None = None,
    ) -> list[CleanupError]:
        """Delete files, then the scratch directory.

        Missing files and a missing directory are not errors, so this can be
        called repeatedly. Other failures are logged and returned.

        Args:
            descriptors: Files to delete. Defaults to every tracked file.
            directory: Directory to remove. Defaults to the scratch directory.

        Returns:
            One CleanupError per path that could not be removed.
        """
        targets = self._descriptors if descriptors is None else list(descriptors)
        directory = self._directory if directory is None else directory
        errors: list[CleanupError] = []

        for descriptor in targets:
            try:
                descriptor.path.unlink(missing_ok=True)
                descriptor.exists = False
            except OSError as e:
                self._logger.warning(
                    "Failed to delete temp file",
                    extra={"path": str(descriptor.path), "error": str(e)},
                )
                errors.append(CleanupError(f"file '{descriptor.path}'", str(e)))

        if directory is not None:
            try:
                directory.rmdir()
            except FileNotFoundError:
                pass
            except OSError as e:
                self._logger.warning(
                    "Failed to delete scratch directory",
                    extra={"directory": str(directory), "error": str(e)},
                )
                errors.append(CleanupError(f"directory '{directory}'", str(e)))

        if not errors:
            self._logger.info(
                "Local temp files removed",
                extra={"files": len(targets), "directory": str(directory)},
            )
        return errors
