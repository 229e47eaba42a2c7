from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD, Platform
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady

from .api import create_session_client
from .const import DOMAIN, FEATURE_OPTIONS
from .coordinator import DaikinOneBridge

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = []


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Daikin One integration for entry %s", entry.entry_id)

    if CONF_EMAIL not in entry.data or CONF_PASSWORD not in entry.data:
        _LOGGER.error("Missing credentials in configuration for entry %s", entry.entry_id)
        return False

    session = create_session_client(hass)
    bridge = DaikinOneBridge(session, entry.data[CONF_EMAIL], entry.data[CONF_PASSWORD])

    await bridge.async_initialize()
    if not bridge.is_initialized:
        await bridge.async_shutdown()
        error_msg = f"Unable to initialize Daikin One bridge for {entry.data[CONF_EMAIL]}"
        raise ConfigEntryNotReady(error_msg)

    devices = bridge.get_device_list()
    _LOGGER.info("Daikin One bridge ready with %d devices", len(devices))

    options = {key: bool(entry.options.get(key, False)) for key in FEATURE_OPTIONS}
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "bridge": bridge,
        "options": options,
    }
    _LOGGER.debug("Stored bridge for entry %s with options %s", entry.entry_id, options)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        await bridge.async_shutdown()
        hass.data[DOMAIN].pop(entry.entry_id, None)
        return False

    _LOGGER.info("Successfully setup Daikin One integration for entry %s", entry.entry_id)
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Daikin One integration for entry %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        await entry_data["bridge"].async_shutdown()
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    _LOGGER.info("Successfully unloaded Daikin One integration for entry %s", entry.entry_id)
    return True
