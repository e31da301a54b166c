"""Rows survive the trip through DemoBackup JSON and back into typed values."""

from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import MetaData

from migrations.domain.definitions import TableDefinition
from migrations.domain.records import DemoBackupRecord
from migrations.domain.template_values import parse_template, substitute
from migrations.infrastructure import serialization
from migrations.infrastructure.demo_backup_repository import DemoBackupRepository
from migrations.infrastructure.schema_builder import build_table
from migrations.infrastructure.table_handle import coerce_row

EVERY_TYPE = {
    "id": {"type": "{{TypeRef.UUID}}", "primaryKey": True},
    "name": {"type": "{{TypeRef.STRING}}"},
    "bio": {"type": "{{TypeRef.TEXT}}"},
    "visits": {"type": "{{TypeRef.INTEGER}}"},
    "bytesUsed": {"type": "{{TypeRef.BIGINT}}"},
    "ratio": {"type": "{{TypeRef.FLOAT}}"},
    "balance": {"type": "{{TypeRef.DECIMAL}}"},
    "active": {"type": "{{TypeRef.BOOLEAN}}"},
    "startDate": {"type": "{{TypeRef.DATE}}"},
    "birthday": {"type": "{{TypeRef.DATEONLY}}"},
    "settings": {"type": "{{TypeRef.JSON}}"},
    "tags": {"type": "{{TypeRef.JSONB}}"},
}

ROWS = [
    {
        "id": "6f1c2a5e-3b7d-4e8f-9a0b-1c2d3e4f5a6b",
        "name": "Ada",
        "bio": "Écrit des programmes",
        "visits": 3,
        "bytesUsed": 2**40,
        "ratio": 0.25,
        "balance": Decimal("1234.50"),
        "active": True,
        "startDate": datetime(2020, 1, 1, 10, 30, tzinfo=UTC),
        "birthday": date(1990, 5, 17),
        "settings": {"theme": "dark", "lang": ["en", "fr"]},
        "tags": ["admin", {"level": 2}],
    },
    {
        "id": "0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d",
        "name": None,
        "bio": "",
        "visits": 0,
        "bytesUsed": 0,
        "ratio": 1.0,
        "balance": Decimal("-0.01"),
        "active": False,
        "startDate": datetime(2021, 6, 30, 23, 59, tzinfo=timezone(timedelta(hours=2))),
        "birthday": None,
        "settings": {},
        "tags": [],
    },
]


@pytest.fixture
def every_type_table():
    resolved = substitute(parse_template(EVERY_TYPE), "demo")
    return build_table(
        MetaData(), TableDefinition.from_attributes("Profile", resolved), "demo"
    )


def round_trip(table, rows):
    decoded = serialization.loads(serialization.dumps(rows))
    return [coerce_row(table, row) for row in decoded]


class TestSerializationRoundTrip:
    """Tests for restoring rows read back from their JSON form."""

    def test_every_column_type_round_trips(self, every_type_table):
        assert round_trip(every_type_table, ROWS) == ROWS

    def test_restored_values_keep_their_types(self, every_type_table):
        (row, _) = round_trip(every_type_table, ROWS)

        assert isinstance(row["balance"], Decimal)
        assert isinstance(row["startDate"], datetime)
        assert row["startDate"].tzinfo is not None
        assert type(row["birthday"]) is date
        assert isinstance(row["ratio"], float)

    def test_offsets_are_preserved(self, every_type_table):
        (_, row) = round_trip(every_type_table, ROWS)

        assert row["startDate"].utcoffset() == timedelta(hours=2)

    def test_second_trip_is_stable(self, every_type_table):
        once = round_trip(every_type_table, ROWS)

        assert round_trip(every_type_table, once) == once


class TestDemoBackupRepositoryRoundTrip:
    """Tests for storing a snapshot and reading it back."""

    @pytest.mark.asyncio
    async def test_stored_contents_restore_to_original_rows(
        self, every_type_table, mock_transaction
    ):
        record = DemoBackupRecord("Profile", 1, ROWS)
        repository = DemoBackupRepository(mock_transaction)

        await repository.replace_all([record])

        (stored,) = mock_transaction.execute.await_args_list[1].args[1]
        mock_transaction.execute.return_value = [
            SimpleNamespace(
                id=stored["id"],
                tableName=stored["tableName"],
                position=stored["position"],
                contents=stored["contents"],
            )
        ]
        (loaded,) = await repository.list_ordered()

        assert (loaded.id, loaded.table_name, loaded.position) == (
            record.id,
            "Profile",
            1,
        )
        assert [coerce_row(every_type_table, row) for row in loaded.rows] == ROWS
