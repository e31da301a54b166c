"""Application services for the tenancy context."""

from tenancy.application.login_attempts import LoginAttemptTracker
from tenancy.application.tenant_registry import TenantRegistry

__all__ = [
    "LoginAttemptTracker",
    "TenantRegistry",
]
