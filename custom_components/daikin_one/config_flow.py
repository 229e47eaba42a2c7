"""
Configuration flow for Daikin One integration.

This module handles account setup through Home Assistant's config flow and
the feature switches through its options flow.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import (
    ConfigEntry,
    ConfigFlow,
    ConfigFlowResult,
    OptionsFlow,
)
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD
from homeassistant.core import callback
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
    FEATURE_OPTIONS,
)

_LOGGER = logging.getLogger(__name__)


class DaikinOneConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Daikin One integration."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(config_entry: ConfigEntry) -> DaikinOneOptionsFlow:  # noqa: ARG004
        """Return the options flow for this handler."""
        return DaikinOneOptionsFlow()

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing email and password.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            email = user_input[CONF_EMAIL]
            password = user_input[CONF_PASSWORD]

            try:
                session = get_async_client(self.hass)
                await api.async_login(session, email, password)
                _LOGGER.info("Successfully authenticated with Daikin API")

            except api.DaikinApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except httpx.ConnectError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except httpx.TimeoutException:
                _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                errors["base"] = ERROR_TIMEOUT
            except api.DaikinApiClientError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during authentication (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                await self.async_set_unique_id(email.lower())
                self._abort_if_unique_id_configured()

                return self.async_create_entry(
                    title=f"Daikin One ({email})",
                    data={
                        CONF_EMAIL: email,
                        CONF_PASSWORD: password,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_EMAIL): str,
                    vol.Required(CONF_PASSWORD): str,
                }
            ),
            errors=errors,
        )


class DaikinOneOptionsFlow(OptionsFlow):
    """Choose which parts of each thermostat are exposed."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Show and store the feature switches."""
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        current = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(key, default=bool(current.get(key, False))): bool
                    for key in FEATURE_OPTIONS
                }
            ),
        )
