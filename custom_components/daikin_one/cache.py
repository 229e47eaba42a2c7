"""In-memory cache of Daikin One devices and their last known state.

Reads replace a device's state wholesale, writes merge the fields they sent.
Every accessor is a pure function of the cache: nothing here does I/O. An
accessor returns None while a device has no state yet so callers can tell
"not ready" apart from a real zero.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import IntEnum
from typing import TYPE_CHECKING, Any, TypeVar

from .const import (
    AIR_QUALITY_LEVEL_RANGE,
    AIR_QUALITY_VALUE_RANGE,
    DENSITY_RANGE,
    HUMIDITY_RANGE,
    TEMPERATURE_RANGE,
)
from .models import (
    AirQualityLevel,
    DaikinDevice,
    DeviceState,
    EquipmentStatus,
    FanCirculateMode,
    TemperatureUnit,
    ThermostatMode,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

_LOGGER = logging.getLogger(__name__)

_E = TypeVar("_E", bound=IntEnum)

_HEATING_MODES = (
    ThermostatMode.HEAT,
    ThermostatMode.EMERGENCY_HEAT,
    ThermostatMode.AUTO,
)


def clamp(value: float, bounds: tuple[float, float]) -> float:
    """Clamp ``value`` into the inclusive ``bounds``."""
    low, high = bounds
    return min(max(value, low), high)


def _clamped(value: float | None, bounds: tuple[float, float]) -> float | None:
    if value is None:
        return None
    return clamp(value, bounds)


def _as_enum(enum_type: type[_E], value: Any) -> _E | None:  # noqa: ANN401
    if value is None:
        return None
    try:
        return enum_type(value)
    except ValueError:
        _LOGGER.debug("Unknown %s value: %s", enum_type.__name__, value)
        return None


class DeviceRegistry:
    """Device identities plus the state cache that backs every getter."""

    def __init__(self) -> None:
        self._devices: dict[str, DaikinDevice] = {}

    def set_devices(self, devices: Iterable[DaikinDevice]) -> None:
        """Replace the full set of known devices."""
        self._devices = {device.id: replace(device) for device in devices}
        _LOGGER.debug("Registered %d devices", len(self._devices))

    def get(self, device_id: str) -> DaikinDevice | None:
        """Return a copy of the device, or None if it is unknown."""
        device = self._devices.get(device_id)
        return replace(device) if device is not None else None

    def devices(self) -> list[DaikinDevice]:
        """Return copies of all devices in registry order."""
        return [replace(device) for device in self._devices.values()]

    def device_ids(self) -> list[str]:
        """Return the ids of all devices in registry order."""
        return list(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def __len__(self) -> int:
        return len(self._devices)

    def state(self, device_id: str) -> DeviceState | None:
        """Return the cached state of a device."""
        device = self._devices.get(device_id)
        return device.data if device is not None else None

    def has_data(self, device_id: str) -> bool:
        """Return True once a device has been read at least once."""
        return self.state(device_id) is not None

    def replace_state(self, device_id: str, state: DeviceState) -> bool:
        """Overwrite a device's state with an authoritative read."""
        device = self._devices.get(device_id)
        if device is None:
            _LOGGER.error("Cache replace for device that doesn't exist: %s", device_id)
            return False
        device.data = state
        _LOGGER.debug("Replaced cache for %s", device_id)
        return True

    def merge_state(self, device_id: str, update: Mapping[str, Any]) -> bool:
        """Shallow-merge vendor-keyed fields into a device's state.

        Returns:
            False, with an error logged and the cache untouched, when the
            device is unknown or has not been read yet.

        """
        device = self._devices.get(device_id)
        if device is None:
            _LOGGER.error("Cache update for device that doesn't exist: %s", device_id)
            return False
        if device.data is None:
            _LOGGER.error("Cache update for device without data: %s", device_id)
            return False
        device.data = device.data.merged(update)
        _LOGGER.debug("Updated cache for %s with %s", device_id, dict(update))
        return True

    def get_equipment_status(self, device_id: str) -> EquipmentStatus | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _as_enum(EquipmentStatus, state.equipment_status)

    def get_current_temperature(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.temp_indoor, TEMPERATURE_RANGE)

    def get_outdoor_temperature(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.temp_outdoor, TEMPERATURE_RANGE)

    def get_target_mode(self, device_id: str) -> ThermostatMode | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _as_enum(ThermostatMode, state.mode)

    def get_target_temperature(self, device_id: str) -> float | None:
        """Return the setpoint that matters for the current mode.

        Heating modes (including AUTO) report the heating setpoint, every
        other mode the cooling setpoint.
        """
        state = self.state(device_id)
        if state is None:
            return None
        if state.mode in _HEATING_MODES:
            return _clamped(state.hsp_active, TEMPERATURE_RANGE)
        return _clamped(state.csp_active, TEMPERATURE_RANGE)

    def get_heating_threshold(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.hsp_active, TEMPERATURE_RANGE)

    def get_cooling_threshold(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.csp_active, TEMPERATURE_RANGE)

    def get_current_humidity(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.hum_indoor, HUMIDITY_RANGE)

    def get_outdoor_humidity(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.hum_outdoor, HUMIDITY_RANGE)

    def get_target_humidity(self, device_id: str) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _clamped(state.hum_sp, HUMIDITY_RANGE)

    def get_air_quality_level(
        self, device_id: str, *, indoor: bool
    ) -> AirQualityLevel | None:
        state = self.state(device_id)
        if state is None:
            return None
        level = state.aq_indoor_level if indoor else state.aq_outdoor_level
        if level is None:
            return None
        return AirQualityLevel(int(clamp(level, AIR_QUALITY_LEVEL_RANGE)))

    def get_air_quality_value(self, device_id: str, *, indoor: bool) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        value = state.aq_indoor_value if indoor else state.aq_outdoor_value
        return _clamped(value, AIR_QUALITY_VALUE_RANGE)

    def get_ozone(self, device_id: str, *, indoor: bool) -> float | None:
        """Return ozone density; only the outdoor feed reports it."""
        state = self.state(device_id)
        if state is None:
            return None
        if indoor:
            return 0.0
        return _clamped(state.aq_outdoor_ozone, DENSITY_RANGE)

    def get_pm25_density(self, device_id: str, *, indoor: bool) -> float | None:
        state = self.state(device_id)
        if state is None:
            return None
        if indoor:
            return _clamped(state.aq_indoor_particles_value, DENSITY_RANGE)
        return _clamped(state.aq_outdoor_particles, DENSITY_RANGE)

    def get_voc_density(self, device_id: str, *, indoor: bool) -> float | None:
        """Return VOC density; only the indoor sensor reports it."""
        state = self.state(device_id)
        if state is None:
            return None
        if not indoor:
            return 0.0
        return _clamped(state.aq_indoor_voc_value, DENSITY_RANGE)

    def get_display_units(self, device_id: str) -> TemperatureUnit | None:
        state = self.state(device_id)
        if state is None:
            return None
        return _as_enum(TemperatureUnit, state.units)

    def get_schedule_state(self, device_id: str) -> bool | None:
        """Return True when the thermostat is following its schedule.

        That is: the schedule is enabled, not overridden, and the home is
        not in away mode.
        """
        state = self.state(device_id)
        if state is None:
            return None
        return (
            state.sched_override == 0
            and bool(state.sched_enabled)
            and not state.geofencing_away
        )

    def get_away_state(self, device_id: str) -> bool | None:
        state = self.state(device_id)
        if state is None:
            return None
        return bool(state.geofencing_away)

    def get_one_clean_fan_active(self, device_id: str) -> bool | None:
        state = self.state(device_id)
        if state is None:
            return None
        return bool(state.one_clean_fan_active)

    def get_circulate_fan_active(self, device_id: str) -> bool | None:
        state = self.state(device_id)
        if state is None:
            return None
        return (
            state.fan_circulate is not None
            and state.fan_circulate != FanCirculateMode.OFF
        )

    def get_circulate_fan_speed(self, device_id: str) -> int | None:
        state = self.state(device_id)
        if state is None:
            return None
        return state.fan_circulate_speed
