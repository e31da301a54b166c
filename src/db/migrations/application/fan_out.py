"""Run one operation against many tenants concurrently."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, TypeVar

if TYPE_CHECKING:
    from migrations.observability import MigrationHelperProbe

T = TypeVar("T")


async def for_all_tenants(
    tenants: Iterable[str],
    operation: Callable[[str], Awaitable[T]],
    probe: MigrationHelperProbe | None = None,
) -> list[T]:
    """Run ``operation(tenant)`` for every tenant and wait for all of them.

    Every tenant runs to completion even when another fails. If any failed,
    the earliest failure is raised afterwards; later failures are only
    reported to the probe. Results are returned in tenant order.
    """
    names = list(tenants)
    failures: list[BaseException] = []

    async def run(tenant: str) -> T:
        try:
            return await operation(tenant)
        except Exception as error:
            failures.append(error)
            if probe is not None:
                probe.tenant_operation_failed(tenant, error)
            raise

    results = await asyncio.gather(*(run(name) for name in names), return_exceptions=True)
    if failures:
        raise failures[0]
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
