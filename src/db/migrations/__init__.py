"""Migrations bounded context.

Schema-per-tenant migrations: the Template registry, the migration and seed
helpers, demo tenant snapshots, and the runner that applies migration
modules in order.
"""
