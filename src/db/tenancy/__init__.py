"""Tenancy bounded context.

Tenant identity (TenantInfo), the cached tenant allow-list, and the
login-attempt counters that share the same cache store.
"""
