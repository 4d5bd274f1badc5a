from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx

from navsite.services.errors import StoreAuthExpiredError, StoreNetworkError, StoreNotConfiguredError

logger = logging.getLogger(__name__)

TENANT_TOKEN_PATH = "/auth/v3/tenant_access_token/internal"


class TenantTokenCache:
    """Cached tenant access token for one credential scope.

    The cache is a plain register: concurrent requests may both observe a stale
    value and both refresh it. The refreshed tokens are equivalent, so the last
    write wins without a lock.
    """

    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        base_url: str,
        app_id: str | None,
        app_secret: str | None,
        refresh_margin_seconds: float = 300.0,
        timeout_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._http = http
        self._url = f"{base_url.rstrip('/')}{TENANT_TOKEN_PATH}"
        self.app_id = app_id
        self._app_secret = app_secret
        self._refresh_margin_seconds = max(0.0, refresh_margin_seconds)
        self._timeout_seconds = timeout_seconds
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float | None = None

    async def get(self) -> str:
        if self._token is not None and self._expires_at is not None:
            if self._clock() < self._expires_at - self._refresh_margin_seconds:
                return self._token
        return await self.refresh()

    async def refresh(self) -> str:
        if not self.app_id or not self._app_secret:
            raise StoreNotConfiguredError("table store credentials are not configured")

        requested_at = self._clock()
        logger.info("refreshing tenant access token app_id=%s", self.app_id)
        try:
            response = await self._http.post(
                self._url,
                json={"app_id": self.app_id, "app_secret": self._app_secret},
                headers={"Content-Type": "application/json; charset=utf-8"},
                timeout=self._timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            raise StoreNetworkError("tenant token request timed out") from exc
        except httpx.HTTPError as exc:
            raise StoreNetworkError(f"tenant token request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise StoreAuthExpiredError(f"tenant token response is not JSON (status={response.status_code})") from exc

        if not isinstance(payload, dict):
            raise StoreAuthExpiredError(f"tenant token response is not an object (status={response.status_code})")

        token = payload.get("tenant_access_token")
        if response.status_code != 200 or payload.get("code") != 0 or not isinstance(token, str) or not token:
            message = payload.get("msg")
            raise StoreAuthExpiredError(f"tenant token request rejected: {message or response.status_code}")

        try:
            expires_in = float(payload.get("expire", 0))
        except (TypeError, ValueError):
            expires_in = 0.0

        self._token = token
        self._expires_at = requested_at + max(0.0, expires_in)
        return token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = None
