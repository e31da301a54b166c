"""Unit tests for MigrationHelper with mocked registries."""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from migrations.application.migration_helper import MigrationHelper
from migrations.domain.records import TemplateRecord
from migrations.ports.exceptions import InvalidUsageError

MODULE = "migrations.application.migration_helper"

PERMISSION = {
    "id": {"type": "{{TypeRef.UUID}}", "primaryKey": True},
    "name": {"type": "{{TypeRef.STRING}}", "allowNull": False},
}


@pytest.fixture
def templates():
    """Mock TemplateRepository instance with an existing registry."""
    repository = Mock()
    repository.exists = AsyncMock(return_value=True)
    repository.get = AsyncMock(return_value=None)
    repository.shift_positions = AsyncMock()
    repository.add = AsyncMock()
    repository.remove = AsyncMock()
    repository.update_definition = AsyncMock()
    return repository


@pytest.fixture
def demo_backups():
    """Mock DemoBackupRepository instance with an existing table."""
    repository = Mock()
    repository.exists = AsyncMock(return_value=True)
    return repository


@pytest.fixture
def probe():
    return Mock()


@pytest.fixture
def helper(session, probe, templates, demo_backups):
    """MigrationHelper whose registries are mocked."""
    with (
        patch(f"{MODULE}.TemplateRepository", return_value=templates),
        patch(f"{MODULE}.DemoBackupRepository", return_value=demo_backups),
    ):
        yield MigrationHelper(session, probe)


def role_record(position=3):
    return TemplateRecord(table_name="Role", position=position, definition={})


class TestProcessAttributes:
    """Tests for placeholder resolution."""

    def test_resolves_tenant_and_dates(self, helper, fixed_now):
        resolved = helper.process_attributes(
            {"schema": "{{TENANT}}", "start": "{{NEW_DATE}}"}, "acme"
        )

        assert resolved == {"schema": "acme", "start": fixed_now}

    def test_reads_definition_file(self, helper, fixture_store):
        fixture_store.write_definition("role", {"model": {"schema": "{{TENANT}}"}})

        assert helper.get_definition_from_file("role", "demo") == {
            "model": {"schema": "demo"}
        }


class TestAddTableToTenants:
    """Tests for add_table_to_tenants."""

    @pytest.mark.asyncio
    async def test_creates_table_in_every_tenant(self, helper, mock_transaction):
        handles = await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo", "acme"]
        )

        assert set(handles) == {"demo", "acme"}
        assert handles["acme"].schema == "acme"
        assert mock_transaction.run_sync.await_count == 2

    @pytest.mark.asyncio
    async def test_registers_after_anchor(self, helper, mock_transaction, templates):
        templates.get.return_value = role_record(position=3)

        await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo"], insert_after="Role"
        )

        templates.shift_positions.assert_awaited_once_with(after=3, delta=1)
        record = templates.add.await_args.args[0]
        assert record.table_name == "Permission"
        assert record.position == 4
        assert record.definition == PERMISSION

    @pytest.mark.asyncio
    async def test_no_anchor_registers_first(self, helper, mock_transaction, templates):
        await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo"]
        )

        templates.shift_positions.assert_awaited_once_with(after=0, delta=1)
        assert templates.add.await_args.args[0].position == 1

    @pytest.mark.asyncio
    async def test_unknown_anchor_raises_before_ddl(self, helper, mock_transaction):
        with pytest.raises(InvalidUsageError, match="unknown table 'Nope'"):
            await helper.add_table_to_tenants(
                mock_transaction, "Permission", PERMISSION, ["demo"], insert_after="Nope"
            )

        mock_transaction.run_sync.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_without_registry_only_creates(self, helper, mock_transaction, templates):
        templates.exists.return_value = False

        await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo"], insert_after="Role"
        )

        templates.get.assert_not_awaited()
        templates.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_splices_demo_table_order(
        self, helper, mock_transaction, session, templates
    ):
        templates.get.return_value = role_record()
        session.demo_table_order = ["Language", "Role", "User"]

        await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo"], insert_after="Role"
        )

        assert session.demo_table_order == ["Language", "Role", "Permission", "User"]

    @pytest.mark.asyncio
    async def test_demo_order_untouched_without_backup_table(
        self, helper, mock_transaction, session, demo_backups
    ):
        demo_backups.exists.return_value = False
        session.demo_table_order = ["Role"]

        await helper.add_table_to_tenants(
            mock_transaction, "Permission", PERMISSION, ["demo"]
        )

        assert session.demo_table_order == ["Role"]


class TestRemoveTableFromTenants:
    """Tests for remove_table_from_tenants."""

    @pytest.mark.asyncio
    async def test_drops_and_unregisters(
        self, helper, mock_transaction, session, templates, probe
    ):
        templates.get.return_value = role_record(position=2)
        session.demo_table_order = ["Language", "Role", "User"]

        await helper.remove_table_from_tenants(mock_transaction, "Role", ["demo", "acme"])

        assert mock_transaction.run_sync.await_count == 2
        templates.shift_positions.assert_awaited_once_with(after=2, delta=-1)
        templates.remove.assert_awaited_once_with("Role")
        assert session.demo_table_order == ["Language", "User"]
        probe.table_removed.assert_called_once_with("Role", ["demo", "acme"])

    @pytest.mark.asyncio
    async def test_unregistered_table_raises(self, helper, mock_transaction):
        with pytest.raises(InvalidUsageError, match="not registered"):
            await helper.remove_table_from_tenants(mock_transaction, "Ghost", ["demo"])

        mock_transaction.run_sync.assert_not_awaited()


class TestColumns:
    """Tests for add_column and remove_column."""

    @pytest.mark.asyncio
    async def test_add_column_updates_definition(
        self, helper, mock_transaction, templates
    ):
        templates.get.return_value = TemplateRecord(
            table_name="Language", position=1, definition={"id": {"type": "{{TypeRef.UUID}}"}}
        )
        attributes = {"type": "{{TypeRef.BOOLEAN}}", "defaultValue": False}

        await helper.add_column(
            mock_transaction, "Language", "rightToLeft", attributes, ["demo", "acme"]
        )

        assert mock_transaction.run_sync.await_count == 2
        templates.update_definition.assert_awaited_once_with(
            "Language",
            {"id": {"type": "{{TypeRef.UUID}}"}, "rightToLeft": attributes},
        )

    @pytest.mark.asyncio
    async def test_remove_column_updates_definition(
        self, helper, mock_transaction, templates
    ):
        templates.get.return_value = TemplateRecord(
            table_name="Language",
            position=1,
            definition={"id": {"type": "{{TypeRef.UUID}}"}, "rightToLeft": {}},
        )

        await helper.remove_column(mock_transaction, "Language", "rightToLeft", ["demo"])

        templates.update_definition.assert_awaited_once_with(
            "Language", {"id": {"type": "{{TypeRef.UUID}}"}}
        )

    @pytest.mark.asyncio
    async def test_add_column_to_unregistered_table_raises(self, helper, mock_transaction):
        with pytest.raises(InvalidUsageError):
            await helper.add_column(
                mock_transaction, "Ghost", "x", {"type": "{{TypeRef.STRING}}"}, ["demo"]
            )


class TestTranslations:
    """Tests for add_translations and remove_translations."""

    @staticmethod
    def tables(language_ids_by_tenant):
        translation_tables = {}

        async def get_table(transaction, table_name, tenant):
            handle = Mock()
            if table_name == "Language":
                handle.column_values = AsyncMock(return_value=language_ids_by_tenant[tenant])
                return handle
            handle.bulk_create = AsyncMock()
            handle.destroy_where_in = AsyncMock()
            translation_tables[tenant] = handle
            return handle

        return get_table, translation_tables

    @pytest.mark.asyncio
    async def test_uses_each_tenants_languages(self, helper, mock_transaction):
        get_table, translation_tables = self.tables({"demo": ["en"], "acme": ["fr", "de"]})
        tree = {"frontend-tenant": {"title": "Title"}}

        with patch.object(helper, "get_table", side_effect=get_table):
            await helper.add_translations(mock_transaction, tree, ["demo", "acme"])

        demo_rows = translation_tables["demo"].bulk_create.await_args.args[0]
        acme_rows = translation_tables["acme"].bulk_create.await_args.args[0]
        assert [row["languageId"] for row in demo_rows] == ["en"]
        assert sorted(row["languageId"] for row in acme_rows) == ["de", "fr"]
        assert demo_rows[0]["translationKey"] == "frontend-tenant.title"

    @pytest.mark.asyncio
    async def test_supplied_languages_skip_lookup(self, helper, mock_transaction):
        get_table, translation_tables = self.tables({})

        with patch.object(helper, "get_table", side_effect=get_table):
            await helper.add_translations(
                mock_transaction, {"a": "A"}, ["demo"], language_ids=["en"]
            )

        rows = translation_tables["demo"].bulk_create.await_args.args[0]
        assert [row["languageId"] for row in rows] == ["en"]

    @pytest.mark.asyncio
    async def test_remove_translations(self, helper, mock_transaction, probe):
        get_table, translation_tables = self.tables({})

        with patch.object(helper, "get_table", side_effect=get_table):
            await helper.remove_translations(mock_transaction, ["a.b"], ["demo"])

        translation_tables["demo"].destroy_where_in.assert_awaited_once_with(
            "translationKey", ["a.b"]
        )
        probe.translations_removed.assert_called_once_with(["a.b"], ["demo"])


class TestGetTable:
    """Tests for get_table."""

    @pytest.mark.asyncio
    async def test_uses_registry_definition(self, helper, mock_transaction, templates):
        templates.get.return_value = TemplateRecord(
            table_name="Role", position=1, definition=PERMISSION
        )

        handle = await helper.get_table(mock_transaction, "Role", "acme")

        assert handle.name == "Role"
        assert handle.schema == "acme"
        assert handle.column_names == ["id", "name"]

    @pytest.mark.asyncio
    async def test_missing_table_raises(self, helper, mock_transaction, templates):
        templates.exists.return_value = False

        with patch(f"{MODULE}.table_exists", AsyncMock(return_value=False)):
            with pytest.raises(InvalidUsageError, match="does not exist"):
                await helper.get_table(mock_transaction, "Ghost", "acme")
