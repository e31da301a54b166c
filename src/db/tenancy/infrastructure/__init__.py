"""Tenancy infrastructure layer."""

from tenancy.infrastructure.models import TenantInfoModel
from tenancy.infrastructure.tenant_info_repository import TenantInfoRepository

__all__ = [
    "TenantInfoModel",
    "TenantInfoRepository",
]
