"""Bootstrap the database from the fixture files.

Creates TenantInfo and one seeded schema per entry of ``seed-list.json``,
snapshots the demo tenant into DemoBackup, and registers every table of
``models/list.json`` in Template. Squash rewrites the fixtures so that this
migration alone rebuilds the current database.
"""

from migrations.domain.records import TemplateRecord
from migrations.infrastructure.demo_backup_repository import DemoBackupRepository
from migrations.infrastructure.template_repository import TemplateRepository
from tenancy.infrastructure.tenant_info_repository import TenantInfoRepository


async def up(context):
    transaction = context.transaction
    fixtures = context.fixtures
    tenants = fixtures.read_seed_list()

    await TenantInfoRepository(transaction).create_table()
    for tenant in tenants:
        await context.seeds.create_tenant(transaction, tenant)

    await DemoBackupRepository(transaction).create_table()
    await context.demo.backup(transaction)

    templates = TemplateRepository(transaction)
    await templates.create_table()
    await templates.add(
        *(
            TemplateRecord(
                table_name=entry.table_name,
                position=position,
                definition=fixtures.read_definition(entry.model_name),
                timestamps=entry.timestamps,
            )
            for position, entry in enumerate(fixtures.read_model_list(), start=1)
        )
    )

    if context.tenants is not None:
        registry = context.tenants
        names = [tenant.schema_name for tenant in tenants]
        context.after_commit(lambda: registry.replace(names))


async def down(context):
    transaction = context.transaction
    tenant_repository = TenantInfoRepository(transaction)

    await TemplateRepository(transaction).drop_table()
    await DemoBackupRepository(transaction).drop_table()
    for tenant in await tenant_repository.list_all():
        await context.seeds.drop_tenant(transaction, tenant)
    await tenant_repository.drop_table()

    if context.tenants is not None:
        registry = context.tenants
        context.after_commit(lambda: registry.replace([]))
