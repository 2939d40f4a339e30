"""Tests for BatchedCandidateScanner — batching, short-circuit, priority."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from svcmap.domain.types import RequestConfig
from svcmap.infrastructure.directory import ServiceDirectoryClient
from svcmap.infrastructure.errors import RemoteCallFailed
from svcmap.services.scanner import DEFAULT_BATCH_SIZE, BatchedCandidateScanner, batched

if TYPE_CHECKING:
    from conftest import FakeProvider


def _scanner(
    provider: FakeProvider, batch_size: int = DEFAULT_BATCH_SIZE
) -> BatchedCandidateScanner:
    directory = ServiceDirectoryClient(
        http_client=httpx.AsyncClient(transport=provider.transport())
    )
    return BatchedCandidateScanner(directory, batch_size=batch_size)


class TestBatched:
    def test_preserves_order(self) -> None:
        assert list(batched(["a", "b", "c", "d", "e"], 2)) == [["a", "b"], ["c", "d"], ["e"]]

    def test_empty(self) -> None:
        assert list(batched([], 25)) == []

    def test_rejects_zero(self) -> None:
        with pytest.raises(ValueError):
            list(batched(["a"], 0))

    def test_default_batch_size(self) -> None:
        assert DEFAULT_BATCH_SIZE == 25

    def test_scanner_rejects_zero_batch_size(self, provider: FakeProvider) -> None:
        with pytest.raises(ValueError):
            _scanner(provider, batch_size=0)


class TestResolve:
    @pytest.mark.asyncio
    async def test_short_circuits_after_matching_batch(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        for name in ("A", "B", "D"):
            provider.add_service("prod", name, ["other"])
        provider.add_service("prod", "C", ["checkout"])

        service = await _scanner(provider, batch_size=2).resolve_service_for_operation(
            "checkout", ["A", "B", "C", "D"], request_config
        )

        assert service == "C"
        assert "D" not in provider.operation_lookups()
        assert sorted(provider.operation_lookups()) == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_earlier_candidate_wins_regardless_of_timing(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        provider.add_service("prod", "A", ["checkout"])
        provider.add_service("prod", "B", ["checkout"])
        provider.delays["A"] = 0.05

        service = await _scanner(provider).resolve_service_for_operation(
            "checkout", ["A", "B"], request_config
        )

        assert service == "A"

    @pytest.mark.asyncio
    async def test_returns_reported_service_field(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        provider.operations["gateway"] = [
            {"type": "web", "name": "checkout", "service": "checkout-worker"}
        ]

        service = await _scanner(provider).resolve_service_for_operation(
            "checkout", ["gateway"], request_config
        )

        assert service == "checkout-worker"

    @pytest.mark.asyncio
    async def test_not_found_scans_every_candidate(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        names = [f"svc-{i}" for i in range(5)]
        for name in names:
            provider.add_service("prod", name, ["other"])

        service = await _scanner(provider, batch_size=2).resolve_service_for_operation(
            "checkout", names, request_config
        )

        assert service is None
        assert sorted(provider.operation_lookups()) == names

    @pytest.mark.asyncio
    async def test_no_candidates(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        service = await _scanner(provider).resolve_service_for_operation(
            "checkout", [], request_config
        )
        assert service is None
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_concurrency_bounded_by_batch_size(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        names = [f"svc-{i}" for i in range(7)]
        for name in names:
            provider.add_service("prod", name, [])
            provider.delays[name] = 0.01

        await _scanner(provider, batch_size=3).resolve_service_for_operation(
            "checkout", names, request_config
        )

        assert provider.max_in_flight == 3

    @pytest.mark.asyncio
    async def test_failure_in_batch_aborts_scan(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        for name in ("A", "B", "C"):
            provider.add_service("prod", name, ["other"])
        provider.add_service("prod", "D", ["checkout"])
        provider.failures["B"] = [500]

        with pytest.raises(RemoteCallFailed) as excinfo:
            await _scanner(provider, batch_size=2).resolve_service_for_operation(
                "checkout", ["A", "B", "C", "D"], request_config
            )

        assert excinfo.value.status_code == 500
        assert "C" not in provider.operation_lookups()
        assert "D" not in provider.operation_lookups()

    @pytest.mark.asyncio
    async def test_match_in_same_batch_as_failure_still_fails(
        self, provider: FakeProvider, request_config: RequestConfig
    ) -> None:
        provider.add_service("prod", "A", ["checkout"])
        provider.add_service("prod", "B", [])
        provider.failures["B"] = [503]

        with pytest.raises(RemoteCallFailed):
            await _scanner(provider).resolve_service_for_operation(
                "checkout", ["A", "B"], request_config
            )
