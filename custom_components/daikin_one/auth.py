"""Credential lifecycle for the Daikin One API."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from . import api
from .const import TOKEN_SAFETY_MARGIN
from .models import Credential

if TYPE_CHECKING:
    from collections.abc import Mapping

_LOGGER = logging.getLogger(__name__)


class CredentialManager:
    """Acquire, refresh and hand out the bearer token for one account."""

    def __init__(
        self,
        session: httpx.AsyncClient,
        email: str,
        password: str,
        safety_margin: float = TOKEN_SAFETY_MARGIN,
    ) -> None:
        """Initialize the manager without contacting the API."""
        self._session = session
        self._email = email
        self._password = password
        self._safety_margin = safety_margin
        self._credential: Credential | None = None

    @property
    def credential(self) -> Credential | None:
        """Return the current credential, if any."""
        return self._credential

    @property
    def has_credential(self) -> bool:
        """Return True once a login has succeeded."""
        return self._credential is not None

    async def async_authenticate(self) -> bool:
        """Log in with email and password.

        Returns:
            True on success. On failure the previous credential is kept.

        """
        try:
            data = await api.async_login(self._session, self._email, self._password)
        except api.DaikinApiAuthError as err:
            _LOGGER.warning("Authentication rejected for %s: %s", self._email, err)
            return False
        except api.DaikinApiClientError as err:
            _LOGGER.error("API error during authentication: %s", err)
            return False
        except httpx.HTTPError as err:
            _LOGGER.error("Connection error during authentication: %s", err)
            return False

        self._set_credential(data)
        _LOGGER.debug("Obtained new token, expires at %s", self._credential.expire_at)
        return True

    async def async_refresh(self) -> bool:
        """Refresh the access token, logging in again when that is impossible.

        Returns:
            True if a fresh credential is now held.

        """
        if self._credential is None or not self._credential.refresh_token:
            _LOGGER.debug("Cannot refresh token, getting a new one")
            return await self.async_authenticate()

        try:
            data = await api.async_refresh_token(
                self._session,
                self._email,
                self._credential.refresh_token,
            )
        except api.DaikinApiAuthError as err:
            _LOGGER.warning(
                "Refresh token rejected, attempting re-authentication: %s", err
            )
            return await self.async_authenticate()
        except api.DaikinApiClientError as err:
            _LOGGER.error("API error during token refresh: %s", err)
            return False
        except httpx.HTTPError as err:
            _LOGGER.error("Connection error during token refresh: %s", err)
            return False

        self._set_credential(data)
        _LOGGER.debug("Refreshed token, expires at %s", self._credential.expire_at)
        return True

    async def async_ensure_valid(self) -> str | None:
        """Return a usable access token, refreshing first if needed.

        Returns:
            The access token, or None if no unexpired credential could be
            obtained. Callers must not send the request in that case.

        """
        if self._credential is None or self._credential.is_expired(_utcnow()):
            await self.async_refresh()

        if self._credential is None or self._credential.is_expired(_utcnow()):
            return None
        return self._credential.access_token

    def _set_credential(self, data: Mapping[str, Any]) -> None:
        self._credential = Credential.from_token_response(
            data,
            self._safety_margin,
            _utcnow(),
        )


def _utcnow() -> datetime:
    return datetime.now(UTC)
