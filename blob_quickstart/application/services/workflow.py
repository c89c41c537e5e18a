"""End-to-end quickstart run: provision, transfer, and always clean up."""

import asyncio
from collections.abc import Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from blob_quickstart.application.services.provisioner import ContainerProvisioner
from blob_quickstart.application.services.temp_files import TempFileManager
from blob_quickstart.application.services.transfer import BlobTransfer
from blob_quickstart.commons.infrastructure.blob.base import (
    BlobHandle,
    BlobStorageBase,
    ContainerHandle,
)
from blob_quickstart.commons.settings.models import WorkflowSettings
from blob_quickstart.commons.telemetry import LogContext, get_logger, set_correlation_id
from blob_quickstart.domain.exceptions import CleanupError, ProvisionError, QuickstartError
from blob_quickstart.domain.models import WorkflowError, WorkflowResult, WorkflowState

Console = Callable[[str], None]
Confirm = Callable[[str], str]

# Step failures that are reported and routed to cleanup instead of propagated
RECOVERABLE_ERRORS = (QuickstartError, OSError, TimeoutError)


@dataclass
class _Run:
    """Mutable bookkeeping for one run."""

    result: WorkflowResult
    temp_files: TempFileManager
    cleanup_errors: list[CleanupError] = field(default_factory=list)
    aborted: bool = False


class QuickstartWorkflow:
    """Drives one quickstart run through a linear state machine.

    START -> PROVISIONED -> SOURCE_WRITTEN -> UPLOADED -> LISTED -> DOWNLOADED
    -> CLEANED_UP, with FAILED reachable from any step before CLEANED_UP.
    The container and the local temp files are released by an exit stack,
    so cleanup is identical for success and failure.
    """

    def __init__(
        self,
        storage: BlobStorageBase,
        settings: WorkflowSettings,
        *,
        temp_dir: Path | None = None,
        console: Console = print,
        confirm: Confirm = input,
    ) -> None:
        """Initialize the workflow.

        Args:
            storage: Blob storage provider.
            settings: Workflow configuration.
            temp_dir: Parent for the scratch directory (system temp if None).
            console: Receives one human-readable line per step.
            confirm: Prompt used to pause before cleanup when enabled.
        """
        self._settings = settings
        self._provisioner = ContainerProvisioner(storage)
        self._transfer = BlobTransfer(storage, chunk_size=settings.download_chunk_size)
        self._temp_dir = temp_dir
        self._say = console
        self._confirm = confirm
        self._logger = get_logger(__name__)

    async def run(self) -> WorkflowResult:
        """Execute the full scenario once.

        Returns:
            The run's result. Step failures are recorded on it rather than
            raised; cleanup has always finished when this returns.
        """
        run = _Run(
            result=WorkflowResult(
                run_id=set_correlation_id(), states=[WorkflowState.START]
            ),
            temp_files=TempFileManager(base_dir=self._temp_dir),
        )

        with LogContext(run_id=run.result.run_id):
            self._logger.info("Starting quickstart run")
            try:
                async with AsyncExitStack() as stack:
                    stack.callback(self._remove_local_files, run)
                    try:
                        async with self._deadline():
                            container = await stack.enter_async_context(
                                self._provisioner.scoped(
                                    self._settings.container_prefix, run.cleanup_errors
                                )
                            )
                        stack.push_async_callback(self._before_container_release, run)
                        self._on_provisioned(run, container)
                        await self._transfer_steps(run, container)
                    except RECOVERABLE_ERRORS as e:
                        self._fail(run, e)
                    except BaseException as e:
                        run.aborted = True
                        self._fail(run, e)
                        raise
            finally:
                self._finish(run)

        return run.result

    def _deadline(self) -> asyncio.Timeout:
        return asyncio.timeout(self._settings.operation_timeout_seconds)

    def _advance(self, run: _Run, state: WorkflowState) -> None:
        self._logger.debug(
            "State transition",
            extra={"from_state": run.result.state.value, "to_state": state.value},
        )
        run.result.states.append(state)

    def _on_provisioned(self, run: _Run, container: ContainerHandle) -> None:
        run.result.container_name = container.name
        run.result.container_url = container.url
        self._say(f"Created container '{container.url}'.")
        self._say("Set the blob access policy to public read.")
        self._advance(run, WorkflowState.PROVISIONED)

    async def _transfer_steps(self, run: _Run, container: ContainerHandle) -> None:
        blob_name = self._settings.blob_name
        run.result.blob_name = blob_name

        source = run.temp_files.create_source(self._settings.sample_content)
        self._say(f"Created temp file = {source.path}.")
        self._advance(run, WorkflowState.SOURCE_WRITTEN)

        self._say(f"Uploading file to blob storage as blob '{blob_name}'.")
        async with self._deadline():
            blob: BlobHandle = await self._transfer.upload(container, blob_name, source.path)
        self._say("Uploaded successfully.")
        self._advance(run, WorkflowState.UPLOADED)

        self._say("Listing blobs in container.")
        async with self._deadline():
            async for descriptor in self._transfer.list_blobs(container):
                run.result.listed_blobs.append(descriptor.name)
                self._say(f"The blob name is '{descriptor.name}'.")
        self._say("Listed successfully.")
        self._advance(run, WorkflowState.LISTED)

        destination = run.temp_files.track(
            run.temp_files.derive_destination_path(source)
        )
        self._say(f"Downloading blob to file in the temp directory {destination.path}.")
        async with self._deadline():
            await self._transfer.download(blob, destination.path)
        destination.exists = True
        self._say("Downloaded successfully.")
        self._advance(run, WorkflowState.DOWNLOADED)

    def _fail(self, run: _Run, error: BaseException) -> None:
        if isinstance(error, QuickstartError):
            kind = error.kind
        elif isinstance(error, TimeoutError):
            kind = "timeout"
        elif isinstance(error, OSError):
            kind = "filesystem"
        else:
            kind = "unexpected"

        message = str(error) or type(error).__name__
        run.result.error = WorkflowError(kind=kind, message=message, state=run.result.state)
        if isinstance(error, ProvisionError):
            run.cleanup_errors.extend(error.cleanup_errors)

        self._logger.error(
            "Quickstart step failed",
            exc_info=error,
            extra={"error_kind": kind, "failed_in_state": run.result.state.value},
        )
        self._say(self._describe_failure(kind, message))
        self._advance(run, WorkflowState.FAILED)

    def _describe_failure(self, kind: str, message: str) -> str:
        if kind == "provision":
            return f"Could not prepare the container: {message}."
        if kind == "transfer":
            return f"Error returned from the service: {message}."
        if kind == "timeout":
            seconds = self._settings.operation_timeout_seconds
            return f"The storage service did not answer within {seconds} seconds."
        if kind == "filesystem":
            return f"Local file error: {message}."
        return f"Unexpected error: {message}."

    async def _before_container_release(self, run: _Run) -> None:
        if self._settings.pause_before_cleanup and not run.aborted:
            loop = asyncio.get_event_loop()
            try:
                await loop.run_in_executor(
                    None,
                    self._confirm,
                    "Press Enter to delete the sample files and example container.",
                )
            except EOFError:
                # Closed stdin counts as Enter
                pass
        self._say("Deleting the container and any blobs it contains.")

    def _remove_local_files(self, run: _Run) -> None:
        if run.temp_files.directory is None:
            return
        self._say("Deleting the local source file and local downloaded files.")
        run.cleanup_errors.extend(run.temp_files.cleanup())

    def _finish(self, run: _Run) -> None:
        result = run.result
        result.cleanup_errors = [str(e) for e in run.cleanup_errors]
        for problem in result.cleanup_errors:
            self._say(f"Cleanup problem: {problem}")
        self._advance(run, WorkflowState.CLEANED_UP)
        result.finished_at = datetime.now(UTC)
        self._logger.info(
            "Quickstart run finished",
            extra={
                "succeeded": result.succeeded,
                "error_kind": result.error.kind if result.error else None,
                "cleanup_errors": len(result.cleanup_errors),
            },
        )
