"""State shared by the helpers for the length of one toolchain run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from migrations.domain.template_values import Clock, utc_now

if TYPE_CHECKING:
    from migrations.infrastructure.fixtures import FixtureStore


@dataclass
class ToolchainSession:
    """Run-scoped state threaded through the helpers.

    Attributes:
        fixtures: Fixture files of the seeds directory.
        demo_tenant: Schema name of the demo tenant.
        demo_table_order: Demo tables in snapshot order, once a restore has
            loaded it. Table additions and removals keep it current so the
            next backup sees them.
        clock: Source of "now" for placeholder resolution.
    """

    fixtures: FixtureStore
    demo_tenant: str = "demo"
    demo_table_order: list[str] | None = None
    clock: Clock = utc_now
