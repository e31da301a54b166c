"""Domain probes for the tenancy context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantRegistryProbe(Protocol):
    """Domain probe for tenant allow-list cache maintenance."""

    def tenant_list_cached(self, tenants: list[str]) -> None:
        """Record that the cached tenant list was rewritten."""
        ...

    def tenant_list_cleared(self) -> None:
        """Record that the cached tenant list was removed."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRegistryProbe:
        """Create a new probe with observation context bound."""
        ...


class LoginAttemptProbe(Protocol):
    """Domain probe for login throttling."""

    def login_failure_recorded(self, email: str, attempts: int) -> None:
        """Record a failed login attempt."""
        ...

    def account_locked(self, email: str, attempts: int) -> None:
        """Record that an e-mail reached the attempts limit."""
        ...

    def with_context(self, context: ObservationContext) -> LoginAttemptProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantRegistryProbe:
    """Default implementation of TenantRegistryProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultTenantRegistryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRegistryProbe(logger=self._logger, context=context)

    def tenant_list_cached(self, tenants: list[str]) -> None:
        """Record that the cached tenant list was rewritten."""
        self._logger.info(
            "tenant_list_cached",
            tenants=tenants,
            count=len(tenants),
            **self._get_context_kwargs(),
        )

    def tenant_list_cleared(self) -> None:
        """Record that the cached tenant list was removed."""
        self._logger.info("tenant_list_cleared", **self._get_context_kwargs())


class DefaultLoginAttemptProbe:
    """Default implementation of LoginAttemptProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultLoginAttemptProbe:
        """Create a new probe with observation context bound."""
        return DefaultLoginAttemptProbe(logger=self._logger, context=context)

    def login_failure_recorded(self, email: str, attempts: int) -> None:
        """Record a failed login attempt."""
        self._logger.debug(
            "login_failure_recorded",
            email=email,
            attempts=attempts,
            **self._get_context_kwargs(),
        )

    def account_locked(self, email: str, attempts: int) -> None:
        """Record that an e-mail reached the attempts limit."""
        self._logger.warning(
            "account_locked",
            email=email,
            attempts=attempts,
            **self._get_context_kwargs(),
        )
