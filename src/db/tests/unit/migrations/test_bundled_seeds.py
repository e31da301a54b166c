"""Consistency checks for the fixture files shipped with the package."""

import pytest

from infrastructure.settings import ToolchainSettings
from migrations.domain.definitions import TIMESTAMP_COLUMNS, TableDefinition
from migrations.domain.template_values import parse_template, substitute
from migrations.infrastructure.fixtures import FixtureStore


@pytest.fixture(scope="module")
def bundled():
    return FixtureStore(ToolchainSettings().seeds_dir)


def test_demo_tenant_is_seeded(bundled):
    schemas = [tenant.schema_name for tenant in bundled.read_seed_list()]
    assert "demo" in schemas
    assert len(set(schemas)) == len(schemas)


def test_every_model_has_a_valid_definition(bundled, fixed_now):
    for entry in bundled.read_model_list():
        raw = bundled.read_definition(entry.model_name)
        resolved = substitute(parse_template(raw), "demo", lambda: fixed_now)

        definition = TableDefinition.from_attributes(
            entry.table_name, resolved, entry.timestamps
        )

        assert definition.columns, entry.table_name


def test_fixture_rows_only_use_defined_columns(bundled):
    entries = bundled.read_model_list()
    for tenant in bundled.read_seed_list():
        for entry in entries:
            rows = bundled.read_tenant_rows(tenant.schema_name, entry.model_name)
            if rows is None:
                continue
            allowed = set(bundled.read_definition(entry.model_name))
            if entry.timestamps:
                allowed.update(TIMESTAMP_COLUMNS)
            for row in rows:
                assert set(row) <= allowed, (tenant.schema_name, entry.table_name)
