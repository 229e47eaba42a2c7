"""Data models for Daikin One integration."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timedelta
from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class ThermostatMode(IntEnum):
    """Operating mode reported and accepted by the thermostat."""

    OFF = 0
    HEAT = 1
    COOL = 2
    AUTO = 3
    EMERGENCY_HEAT = 4


class EquipmentStatus(IntEnum):
    """What the HVAC equipment is doing right now."""

    COOLING = 1
    OVERCOOL_DEHUMIDIFYING = 2
    HEATING = 3
    FAN = 4
    IDLE = 5


class FanCirculateMode(IntEnum):
    """Fan circulation setting."""

    OFF = 0
    ALWAYS_ON = 1
    SCHEDULE = 2


class TemperatureUnit(IntEnum):
    """Temperature display units."""

    FAHRENHEIT = 0
    CELSIUS = 1


class AirQualityLevel(IntEnum):
    """Air quality level, 0 is best."""

    GOOD = 0
    FAIR = 1
    INFERIOR = 2
    POOR = 3


@dataclass(frozen=True)
class Credential:
    """Bearer credential with an expiry already pulled in by a safety margin."""

    access_token: str
    refresh_token: str | None
    expire_at: datetime

    @classmethod
    def from_token_response(
        cls,
        data: Mapping[str, Any],
        safety_margin: float,
        now: datetime,
    ) -> Credential:
        """Build a credential from a login or token refresh response.

        Args:
            data: Response body with accessToken, accessTokenExpiresIn and
                optionally refreshToken.
            safety_margin: Seconds subtracted from the declared lifetime.
            now: Time the response was received.

        Returns:
            A new Credential.

        """
        lifetime = float(data["accessTokenExpiresIn"]) - safety_margin
        return cls(
            access_token=data["accessToken"],
            refresh_token=data.get("refreshToken") or None,
            expire_at=now + timedelta(seconds=lifetime),
        )

    def is_expired(self, now: datetime) -> bool:
        """Return True when the credential must not be used any more."""
        return now >= self.expire_at


def _key(name: str) -> Any:  # noqa: ANN401
    return field(default=None, metadata={"key": name})


@dataclass(frozen=True, slots=True)
class DeviceState:
    """Snapshot of everything the API reports for one thermostat.

    Attributes map one-to-one onto the vendor's camelCase keys. Keys this
    model does not name are preserved in ``extra``.
    """

    mode: int | None = _key("mode")
    equipment_status: int | None = _key("equipmentStatus")
    units: int | None = _key("units")

    temp_indoor: float | None = _key("tempIndoor")
    temp_outdoor: float | None = _key("tempOutdoor")

    hsp_home: float | None = _key("hspHome")
    csp_home: float | None = _key("cspHome")
    hsp_active: float | None = _key("hspActive")
    csp_active: float | None = _key("cspActive")
    hsp_sched: float | None = _key("hspSched")
    csp_sched: float | None = _key("cspSched")
    hsp_away: float | None = _key("hspAway")
    csp_away: float | None = _key("cspAway")

    hum_indoor: float | None = _key("humIndoor")
    hum_outdoor: float | None = _key("humOutdoor")
    hum_sp: float | None = _key("humSP")
    dehum_sp: float | None = _key("dehumSP")

    sched_enabled: bool | None = _key("schedEnabled")
    sched_override: int | None = _key("schedOverride")
    sched_override_duration: int | None = _key("schedOverrideDuration")
    geofencing_away: bool | None = _key("geofencingAway")
    geofencing_enabled: bool | None = _key("geofencingEnabled")

    fan_circulate: int | None = _key("fanCirculate")
    fan_circulate_speed: int | None = _key("fanCirculateSpeed")
    fan_circulate_active: bool | None = _key("fanCirculateActive")
    fan_circulate_duration: int | None = _key("fanCirculateDuration")

    one_clean_fan_active: bool | None = _key("oneCleanFanActive")
    one_clean_fan_speed: int | None = _key("oneCleanFanSpeed")
    one_clean_fan_duration: int | None = _key("oneCleanFanDuration")
    one_clean_particle_trigger: int | None = _key("oneCleanParticleTrigger")

    aq_indoor_available: bool | None = _key("aqIndoorAvailable")
    aq_outdoor_available: bool | None = _key("aqOutdoorAvailable")
    aq_indoor_level: int | None = _key("aqIndoorLevel")
    aq_outdoor_level: int | None = _key("aqOutdoorLevel")
    aq_indoor_value: int | None = _key("aqIndoorValue")
    aq_outdoor_value: int | None = _key("aqOutdoorValue")
    aq_indoor_particles_value: float | None = _key("aqIndoorParticlesValue")
    aq_outdoor_particles: float | None = _key("aqOutdoorParticles")
    aq_indoor_voc_value: float | None = _key("aqIndoorVOCValue")
    aq_indoor_voc_level: int | None = _key("aqIndoorVOCLevel")
    aq_indoor_particles_level: int | None = _key("aqIndoorParticlesLevel")
    aq_outdoor_ozone: float | None = _key("aqOutdoorOzone")

    mode_em_heat_available: bool | None = _key("modeEmHeatAvailable")

    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, document: Mapping[str, Any]) -> DeviceState:
        """Build a state from a full /deviceData document."""
        return cls().merged(document)

    def merged(self, update: Mapping[str, Any]) -> DeviceState:
        """Return a copy with vendor-keyed fields from ``update`` merged in."""
        changes: dict[str, Any] = {}
        extra = dict(self.extra)
        for key, value in update.items():
            name = _FIELD_BY_KEY.get(key)
            if name is None:
                extra[key] = value
            else:
                changes[name] = value
        return replace(self, extra=extra, **changes)


_FIELD_BY_KEY: dict[str, str] = {
    f.metadata["key"]: f.name for f in fields(DeviceState) if "key" in f.metadata
}


@dataclass(slots=True)
class DaikinDevice:
    """A thermostat known to the account.

    Attributes:
        id: Unique device identifier.
        name: User-assigned device name.
        model: Device model number.
        firmware_version: Firmware version at discovery time.
        data: Last known state, None until the first successful read.

    """

    id: str
    name: str
    model: str
    firmware_version: str
    data: DeviceState | None = None

    @classmethod
    def from_api(cls, item: Mapping[str, Any]) -> DaikinDevice:
        """Build a device from one entry of the /devices response."""
        return cls(
            id=str(item["id"]),
            name=str(item.get("name", "")),
            model=str(item.get("model", "")),
            firmware_version=str(item.get("firmwareVersion", "")),
        )


@dataclass(slots=True)
class PendingThreshold:
    """Heat/cool setpoints collected until both halves of an AUTO write exist."""

    heat: float | None = None
    cool: float | None = None

    @property
    def is_complete(self) -> bool:
        """Return True once both thresholds are known."""
        return self.heat is not None and self.cool is not None
