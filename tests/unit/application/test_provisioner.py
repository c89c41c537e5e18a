"""Unit tests for the container provisioner."""

import asyncio

import pytest

from blob_quickstart.application.services.provisioner import ContainerProvisioner
from blob_quickstart.domain.exceptions import CleanupError, ProvisionError


class TestAcquire:
    """Tests for ContainerProvisioner.acquire."""

    async def test_creates_public_container_with_prefix(self, storage):
        provisioner = ContainerProvisioner(storage)

        handle = await provisioner.acquire("quickstartblobs")

        assert handle.name.startswith("quickstartblobs")
        assert len(handle.name) == len("quickstartblobs") + 36  # UUID suffix
        assert handle.name in storage.containers
        assert handle.name in storage.public

    async def test_names_are_never_reused(self, storage):
        provisioner = ContainerProvisioner(storage)

        names = {(await provisioner.acquire("quickstartblobs")).name for _ in range(20)}

        assert len(names) == 20

    async def test_create_failure_raises_provision_error(self, storage):
        storage.fail("create_container", "AuthorizationFailure")
        provisioner = ContainerProvisioner(storage)

        with pytest.raises(ProvisionError) as exc_info:
            await provisioner.acquire("quickstartblobs")

        assert exc_info.value.reason == "AuthorizationFailure"
        assert exc_info.value.container_name.startswith("quickstartblobs")
        assert storage.containers == {}

    async def test_policy_failure_removes_created_container(self, storage):
        storage.fail("set_public_read", "PublicAccessNotPermitted")
        provisioner = ContainerProvisioner(storage)

        with pytest.raises(ProvisionError) as exc_info:
            await provisioner.acquire("quickstartblobs")

        assert storage.containers == {}
        assert exc_info.value.cleanup_errors == []
        assert storage.calls == ["create_container", "set_public_read", "delete_container"]

    async def test_policy_failure_reports_undeletable_container(self, storage):
        storage.fail("set_public_read", "PublicAccessNotPermitted")
        storage.fail("delete_container", "ServerBusy")
        provisioner = ContainerProvisioner(storage)

        with pytest.raises(ProvisionError) as exc_info:
            await provisioner.acquire("quickstartblobs")

        assert len(exc_info.value.cleanup_errors) == 1
        assert "ServerBusy" in str(exc_info.value.cleanup_errors[0])

    async def test_cancelled_create_still_removes_container(self, storage):
        storage.create_latency = 0.2
        provisioner = ContainerProvisioner(storage)
        errors: list[CleanupError] = []

        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await provisioner.acquire("quickstartblobs", errors)

        assert storage.calls == ["create_container", "delete_container"]
        assert storage.containers == {}
        assert errors == []

    async def test_cancelled_create_reports_undeletable_container(self, storage):
        storage.create_latency = 0.2
        storage.fail("delete_container", "ServerBusy")
        provisioner = ContainerProvisioner(storage)
        errors: list[CleanupError] = []

        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.05):
                await provisioner.acquire("quickstartblobs", errors)

        assert len(errors) == 1
        assert "ServerBusy" in errors[0].reason


class TestRelease:
    """Tests for ContainerProvisioner.release."""

    async def test_release_none_is_noop(self, storage):
        provisioner = ContainerProvisioner(storage)

        assert await provisioner.release(None) == []
        assert storage.calls == []

    async def test_release_deletes_container(self, storage):
        provisioner = ContainerProvisioner(storage)
        handle = await provisioner.acquire("quickstartblobs")

        errors = await provisioner.release(handle)

        assert errors == []
        assert handle.name not in storage.containers

    async def test_release_twice_is_safe(self, storage):
        provisioner = ContainerProvisioner(storage)
        handle = await provisioner.acquire("quickstartblobs")

        await provisioner.release(handle)
        errors = await provisioner.release(handle)

        assert errors == []

    async def test_release_failure_is_returned_not_raised(self, storage):
        provisioner = ContainerProvisioner(storage)
        handle = await provisioner.acquire("quickstartblobs")
        storage.fail("delete_container", "ServerBusy")

        errors = await provisioner.release(handle)

        assert len(errors) == 1
        assert isinstance(errors[0], CleanupError)
        assert errors[0].reason == "ServerBusy"
        assert handle.name in errors[0].resource


class TestScoped:
    """Tests for the scoped acquisition context manager."""

    async def test_releases_on_normal_exit(self, storage):
        provisioner = ContainerProvisioner(storage)

        async with provisioner.scoped("quickstartblobs") as handle:
            assert handle.name in storage.containers

        assert storage.containers == {}

    async def test_releases_when_body_raises(self, storage):
        provisioner = ContainerProvisioner(storage)

        with pytest.raises(RuntimeError):
            async with provisioner.scoped("quickstartblobs"):
                raise RuntimeError("boom")

        assert storage.containers == {}

    async def test_collects_release_errors(self, storage):
        provisioner = ContainerProvisioner(storage)
        errors: list[CleanupError] = []

        async with provisioner.scoped("quickstartblobs", errors):
            storage.fail("delete_container", "ServerBusy")

        assert len(errors) == 1
