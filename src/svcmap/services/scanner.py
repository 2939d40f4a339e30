"""BatchedCandidateScanner — find which candidate service owns an operation.

Candidates are looked up in fixed-size, order-preserving batches. Batches
run strictly one after another; inside a batch every ``list_operations``
call is issued concurrently and awaited together. The batch's operation
lists are flattened back into candidate order before matching, so the
earliest candidate reporting the operation always wins, whatever order
the responses arrive in. The scan stops at the first batch with a match.

A failed lookup anywhere in a batch aborts the whole scan. There is no
per-candidate fault tolerance and no ranking beyond candidate order.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from svcmap.services.telemetry import trace_span

if TYPE_CHECKING:
    from svcmap.domain.types import RequestConfig
    from svcmap.infrastructure.directory import ServiceDirectoryClient

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 25


def batched(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    """Yield consecutive slices of *items* holding at most *size* elements."""
    if size < 1:
        msg = f"batch size must be at least 1, got {size}"
        raise ValueError(msg)
    for cursor in range(0, len(items), size):
        yield items[cursor : cursor + size]


class BatchedCandidateScanner:
    """Drives the directory client over a candidate list in batches."""

    def __init__(
        self,
        directory: ServiceDirectoryClient,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        if batch_size < 1:
            msg = f"batch size must be at least 1, got {batch_size}"
            raise ValueError(msg)
        self._directory = directory
        self.batch_size = batch_size

    async def resolve_service_for_operation(
        self,
        operation_name: str,
        candidate_services: Sequence[str],
        config: RequestConfig,
    ) -> str | None:
        """Return the service owning *operation_name*, or None if no candidate does.

        Raises:
            RemoteCallFailed: If any lookup in a processed batch fails.
        """
        for index, batch in enumerate(batched(candidate_services, self.batch_size)):
            with trace_span(f"batch[{index}]") as span:
                if span:
                    span.annotate("size", len(batch))
                logger.debug(
                    "Scanning batch %d (%d services) for %r", index, len(batch), operation_name
                )

                operation_lists = await asyncio.gather(
                    *(self._directory.list_operations(name, config) for name in batch)
                )

            for operations in operation_lists:
                for operation in operations:
                    if operation.name == operation_name:
                        logger.debug("Operation %r owned by %s", operation_name, operation.service)
                        return operation.service

        logger.debug("No candidate reports operation %r", operation_name)
        return None
