"""Unit tests for the ordered table list."""

import pytest

from migrations.domain.model_list import ModelListEntry, pascal_to_kebab, splice_after


class TestPascalToKebab:
    """Tests for model names derived from table names."""

    @pytest.mark.parametrize(
        ("table_name", "model_name"),
        [
            ("UserHasRole", "user-has-role"),
            ("Language", "language"),
            ("TenantInfo", "tenant-info"),
            ("HTTPRequest", "http-request"),
        ],
    )
    def test_converts(self, table_name, model_name):
        assert pascal_to_kebab(table_name) == model_name


class TestModelListEntry:
    """Tests for list.json entries."""

    def test_reads_and_writes_fixture_shape(self):
        data = {"tableName": "UserHasRole", "modelName": "user-has-role", "timestamps": True}

        entry = ModelListEntry.from_dict(data)

        assert entry == ModelListEntry("UserHasRole", "user-has-role", True)
        assert entry.to_dict() == data

    def test_model_name_defaults_from_table_name(self):
        assert ModelListEntry.from_dict({"tableName": "DemoBackup"}).model_name == "demo-backup"


class TestSpliceAfter:
    """Tests for placing a table in the demo order."""

    def test_inserts_after_anchor(self):
        assert splice_after(["A", "B", "C"], "X", "B") == ["A", "B", "X", "C"]

    def test_none_inserts_first(self):
        assert splice_after(["A", "B"], "X", None) == ["X", "A", "B"]

    def test_unknown_anchor_inserts_first(self):
        assert splice_after(["A", "B"], "X", "Missing") == ["X", "A", "B"]

    def test_does_not_duplicate(self):
        assert splice_after(["X", "A", "B"], "X", "B") == ["A", "B", "X"]
