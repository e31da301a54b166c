"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
the toolchain's bounded contexts (tenancy, migrations, tools). Changes here
affect every context and should be carefully coordinated.
"""
