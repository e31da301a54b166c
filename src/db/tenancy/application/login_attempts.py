"""Failed-login counters kept in the cache store.

One counter per e-mail; every failure refreshes the counter's TTL to the
lockout duration, so an account unlocks once failures stop for that long.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tenancy.observability import DefaultLoginAttemptProbe, LoginAttemptProbe

if TYPE_CHECKING:
    from infrastructure.cache.store import CacheStore
    from infrastructure.settings import AccountSecuritySettings

_KEY_PREFIX = "login-attempts:"


class LoginAttemptTracker:
    """Counts failed logins per e-mail and reports lockouts."""

    def __init__(
        self,
        cache: CacheStore,
        settings: AccountSecuritySettings,
        probe: LoginAttemptProbe | None = None,
    ) -> None:
        self._cache = cache
        self._settings = settings
        self._probe = probe or DefaultLoginAttemptProbe()

    @staticmethod
    def _key(email: str) -> str:
        return f"{_KEY_PREFIX}{email.lower()}"

    async def attempts(self, email: str) -> int:
        """Return the number of recent failed attempts for ``email``."""
        value = await self._cache.get(self._key(email))
        return int(value) if value is not None else 0

    async def is_locked(self, email: str) -> bool:
        """Check whether ``email`` has reached the attempts limit."""
        return await self.attempts(email) >= self._settings.attempts_limit

    async def record_failure(self, email: str) -> int:
        """Count one failed attempt and return the new total."""
        key = self._key(email)
        attempts = await self._cache.increment(key)
        await self._cache.expire(key, self._settings.lockout_seconds)
        self._probe.login_failure_recorded(email, attempts)
        if attempts >= self._settings.attempts_limit:
            self._probe.account_locked(email, attempts)
        return attempts

    async def reset(self, email: str) -> None:
        """Clear the counter after a successful login."""
        await self._cache.delete(self._key(email))
