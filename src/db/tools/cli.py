"""Command line entry points for the database toolchain.

Usage:
    tenantdb-migrate            # apply pending migrations
    tenantdb-migrate --undo     # undo the latest migration
    tenantdb-wipe               # empty the database and the cache
    tenantdb-squash             # fold every migration into the fixtures

Configuration comes from TENANTDB_* environment variables and the
``.env`` / ``.env.<TENANTDB_ENV>`` files (see infrastructure.settings).
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable

from rich.console import Console
from sqlalchemy.ext.asyncio import AsyncEngine

from infrastructure.cache.store import CacheStore, create_redis_client
from infrastructure.database.engines import create_engine
from infrastructure.logging import configure_logging
from infrastructure.settings import (
    ToolchainSettings,
    get_database_settings,
    get_redis_settings,
    get_toolchain_settings,
)
from migrations.application.migration_helper import MigrationHelper
from migrations.application.runner import MigrationRunner
from migrations.application.session import ToolchainSession
from migrations.infrastructure.fixtures import FixtureStore
from shared_kernel.exceptions import MigrationError
from shared_kernel.observability_context import ObservationContext
from tools.observability import DefaultSquashProbe, DefaultWipeProbe
from tools.squash import SquashUtility
from tools.wipe import WipeUtility

console = Console(stderr=True)


@dataclass
class Toolchain:
    """Connections and settings for one command invocation."""

    engine: AsyncEngine
    cache: CacheStore
    settings: ToolchainSettings
    session: ToolchainSession
    observation: ObservationContext

    def runner(self) -> MigrationRunner:
        return MigrationRunner(
            self.engine,
            self.session,
            self.settings.versions_dir,
            cache=self.cache,
            tenants_cache_key=self.settings.tenants_cache_key,
            context=self.observation,
        )

    def wipe(self) -> WipeUtility:
        return WipeUtility(
            self.engine,
            self.settings,
            cache=self.cache,
            probe=DefaultWipeProbe().with_context(self.observation),
        )

    def squash(self) -> SquashUtility:
        return SquashUtility(
            self.engine,
            self.wipe(),
            self.runner,
            MigrationHelper(self.session),
            self.session.fixtures,
            self.settings.versions_dir,
            self.settings.bootstrap_migration,
            probe=DefaultSquashProbe().with_context(self.observation),
        )


@asynccontextmanager
async def open_toolchain(command: str) -> AsyncIterator[Toolchain]:
    """Create the engine and cache client, and dispose of them afterwards."""
    settings = get_toolchain_settings()
    engine = create_engine(get_database_settings())
    cache = CacheStore(create_redis_client(get_redis_settings()))
    try:
        yield Toolchain(
            engine=engine,
            cache=cache,
            settings=settings,
            session=ToolchainSession(
                fixtures=FixtureStore(settings.seeds_dir),
                demo_tenant=settings.demo_tenant,
            ),
            observation=ObservationContext(command=command),
        )
    finally:
        await cache.close()
        await engine.dispose()


async def run_migrate(undo: bool = False) -> None:
    async with open_toolchain("migrate") as toolchain:
        runner = toolchain.runner()
        if undo:
            name = await runner.downgrade()
            console.print(
                f"[green]✓[/green] Undid {name}" if name else "Nothing to undo"
            )
            return
        applied = await runner.upgrade()
        console.print(f"[green]✓[/green] Applied {len(applied)} migration(s)")


async def run_wipe() -> None:
    async with open_toolchain("wipe") as toolchain:
        await toolchain.wipe().wipe()
        console.print("[green]✓[/green] Database and cache wiped")


async def run_squash() -> None:
    async with open_toolchain("squash") as toolchain:
        deleted = await toolchain.squash().squash()
        console.print(
            f"[green]✓[/green] Squashed {len(deleted)} migration(s) into the fixtures"
        )


def _execute(command: Callable[[], Awaitable[None]], verbose: bool) -> int:
    configure_logging(logging.DEBUG if verbose else logging.INFO)
    try:
        asyncio.run(command())
    except MigrationError as error:
        console.print(f"[bold red]Error:[/bold red] {error}")
        return 1
    return 0


def _parser(prog: str, description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description=description)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug events"
    )
    return parser


def migrate_main(argv: list[str] | None = None) -> int:
    parser = _parser("tenantdb-migrate", "Apply or undo database migrations.")
    parser.add_argument(
        "--undo", action="store_true", help="Undo the most recent migration"
    )
    args = parser.parse_args(argv)
    return _execute(lambda: run_migrate(undo=args.undo), args.verbose)


def wipe_main(argv: list[str] | None = None) -> int:
    args = _parser("tenantdb-wipe", "Drop every schema and flush the cache.").parse_args(
        argv
    )
    return _execute(run_wipe, args.verbose)


def squash_main(argv: list[str] | None = None) -> int:
    args = _parser(
        "tenantdb-squash", "Fold every migration into the seed fixtures."
    ).parse_args(argv)
    return _execute(run_squash, args.verbose)


def migrate() -> None:
    sys.exit(migrate_main())


def wipe() -> None:
    sys.exit(wipe_main())


def squash() -> None:
    sys.exit(squash_main())
