"""Tenancy domain layer."""
