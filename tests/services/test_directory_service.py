"""Tests for DirectoryService — browsing services, operations, dependencies."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from svcmap.infrastructure.provider import ProviderSession
from svcmap.services.directory import DirectoryService

if TYPE_CHECKING:
    from conftest import FakeProvider

SessionFactory = Callable[..., ProviderSession]


@pytest.fixture
def seeded(provider: FakeProvider) -> FakeProvider:
    provider.add_service("prod", "svc-a", ["checkout", "refund"], calls=["db"])
    provider.add_service("prod", "svc-b", [])
    provider.add_service("staging", "svc-a", ["checkout"])
    return provider


class TestListServices:
    @pytest.mark.asyncio
    async def test_all_environments(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).list_services()

        assert result.ok
        assert result.data["environments"] == ["prod", "staging"]
        assert result.data["count"] == 3
        assert result.data["items"][0] == {"environment": "prod", "service": "svc-a"}

    @pytest.mark.asyncio
    async def test_single_environment(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).list_services(environment="staging")

        assert result.data["count"] == 1
        assert result.data["items"] == [{"environment": "staging", "service": "svc-a"}]

    @pytest.mark.asyncio
    async def test_unknown_environment(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).list_services(environment="dev")

        assert not result.ok
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail["environments"] == ["prod", "staging"]

    @pytest.mark.asyncio
    async def test_missing_credentials(self, make_session: SessionFactory) -> None:
        async with make_session(api_key=None) as session:
            result = await DirectoryService(session).list_services()
        assert result.error is not None
        assert result.error.code == "MISSING_CREDENTIALS"


class TestListOperations:
    @pytest.mark.asyncio
    async def test_lists_operations(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).list_operations("svc-a")

        assert result.ok
        assert result.data["count"] == 2
        assert [item["name"] for item in result.data["items"]] == ["checkout", "refund"]
        assert result.data["items"][0] == {"type": "web", "name": "checkout", "service": "svc-a"}

    @pytest.mark.asyncio
    async def test_remote_failure(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        seeded.failures["svc-a"] = [502]
        async with make_session() as session:
            result = await DirectoryService(session).list_operations("svc-a")

        assert result.error is not None
        assert result.error.code == "REMOTE_CALL_FAILED"
        assert result.error.detail["status_text"] == "Bad Gateway"


class TestDependencies:
    @pytest.mark.asyncio
    async def test_renders_markdown(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).dependencies("svc-a", environment="staging")

        assert result.ok
        assert result.data["environment"] == "staging"
        assert result.data["calls"] == ["db"]
        assert "| db | Not called by any service |" in result.data["markdown"]
        assert "env=staging" in result.data["markdown"]

    @pytest.mark.asyncio
    async def test_unknown_service(
        self, seeded: FakeProvider, make_session: SessionFactory
    ) -> None:
        async with make_session() as session:
            result = await DirectoryService(session).dependencies("nope")

        assert result.error is not None
        assert result.error.detail["status_code"] == 404
