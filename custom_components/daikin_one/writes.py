"""Write intents and their translation into Daikin API payloads.

Each kind of change a caller can request is its own small dataclass. A single
translation step turns an intent into a ``WritePlan``: the fields sent
upstream plus the fields echoed into the cache (what was sent and what
follows from it deterministically).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .const import CIRCULATE_FAN_OFF_SPEED
from .models import (
    FanCirculateMode,
    PendingThreshold,
    TemperatureUnit,
    ThermostatMode,
)

if TYPE_CHECKING:
    from .models import DeviceState


class UnknownModeError(Exception):
    """The device reports a mode a setpoint write cannot be shaped for."""


@dataclass(frozen=True)
class SetMode:
    mode: ThermostatMode


@dataclass(frozen=True)
class SetTargetTemperature:
    target: float


@dataclass(frozen=True)
class SetThresholds:
    heat: float | None = None
    cool: float | None = None


@dataclass(frozen=True)
class SetTargetHumidity:
    humidity: float


@dataclass(frozen=True)
class SetOneCleanFan:
    active: bool


@dataclass(frozen=True)
class SetCirculateFan:
    active: bool


@dataclass(frozen=True)
class SetCirculateFanSpeed:
    speed: int


@dataclass(frozen=True)
class SetDisplayUnits:
    units: TemperatureUnit


@dataclass(frozen=True)
class SetScheduleState:
    enabled: bool


@dataclass(frozen=True)
class SetAwayState:
    away: bool
    resume_schedule: bool = False


SetpointIntent = SetTargetTemperature | SetThresholds

WriteIntent = (
    SetMode
    | SetTargetTemperature
    | SetThresholds
    | SetTargetHumidity
    | SetOneCleanFan
    | SetCirculateFan
    | SetCirculateFanSpeed
    | SetDisplayUnits
    | SetScheduleState
    | SetAwayState
)


@dataclass(frozen=True)
class WritePlan:
    """Fields to send upstream and fields to merge into the cache on success."""

    payload: dict[str, Any]
    cache_update: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.cache_update:
            object.__setattr__(self, "cache_update", dict(self.payload))


def build_payload(intent: WriteIntent) -> WritePlan:  # noqa: PLR0911
    """Translate a mode-independent intent into a write plan.

    Setpoint intents depend on the current mode and go through
    ``plan_setpoint_write`` instead.

    Raises:
        TypeError: For setpoint intents or anything that is not an intent.

    """
    if isinstance(intent, SetMode):
        return WritePlan({"mode": int(intent.mode)})

    if isinstance(intent, SetTargetHumidity):
        return WritePlan({"humSP": intent.humidity})

    if isinstance(intent, SetOneCleanFan):
        return WritePlan({"oneCleanFanActive": intent.active})

    if isinstance(intent, SetCirculateFan):
        mode = FanCirculateMode.ALWAYS_ON if intent.active else FanCirculateMode.OFF
        return WritePlan({"fanCirculate": int(mode)})

    if isinstance(intent, SetCirculateFanSpeed):
        if intent.speed == CIRCULATE_FAN_OFF_SPEED:
            return WritePlan(
                {"fanCirculate": int(FanCirculateMode.OFF), "fanCirculateSpeed": 1}
            )
        return WritePlan({"fanCirculateSpeed": intent.speed})

    if isinstance(intent, SetDisplayUnits):
        return WritePlan({"units": int(intent.units)})

    if isinstance(intent, SetScheduleState):
        # Turning the schedule on only works if one exists upstream.
        if intent.enabled:
            return WritePlan(
                {"geofencingAway": False, "schedOverride": 0, "schedEnabled": True}
            )
        return WritePlan({"schedEnabled": False})

    if isinstance(intent, SetAwayState):
        # Going away pauses the schedule upstream.
        if intent.away:
            return WritePlan({"geofencingAway": True})
        if intent.resume_schedule:
            return WritePlan({"geofencingAway": False, "schedEnabled": True})
        return WritePlan({"geofencingAway": False})

    error_msg = f"Cannot build a payload for {intent!r}"
    raise TypeError(error_msg)


def plan_setpoint_write(
    state: DeviceState,
    intent: SetpointIntent,
    pending: PendingThreshold,
) -> WritePlan | None:
    """Shape a setpoint write for the device's current mode.

    Args:
        state: Cached state of the device.
        intent: Requested target temperature or thresholds.
        pending: Thresholds collected so far for this device. Updated in
            place while in AUTO mode.

    Returns:
        The plan to send, or None when there is nothing to send yet (device
        off, value irrelevant to the mode, or half of an AUTO pair).

    Raises:
        UnknownModeError: If the cached mode is not one we can write for.

    """
    plan = _plan_for_mode(state, intent, pending)
    if plan is None:
        return None

    if state.sched_enabled:
        plan.payload["schedOverride"] = 1
        plan.cache_update["schedOverride"] = 1
    return plan


def _plan_for_mode(
    state: DeviceState,
    intent: SetpointIntent,
    pending: PendingThreshold,
) -> WritePlan | None:
    mode = state.mode

    if mode in (ThermostatMode.HEAT, ThermostatMode.EMERGENCY_HEAT):
        if not isinstance(intent, SetTargetTemperature):
            return None
        return WritePlan(
            {"hspHome": intent.target},
            {"hspHome": intent.target, "hspActive": intent.target},
        )

    if mode == ThermostatMode.COOL:
        if not isinstance(intent, SetTargetTemperature):
            return None
        return WritePlan(
            {"cspHome": intent.target},
            {"cspHome": intent.target, "cspActive": intent.target},
        )

    if mode == ThermostatMode.OFF:
        return None

    if mode == ThermostatMode.AUTO:
        if not isinstance(intent, SetThresholds):
            return None
        if intent.heat is not None:
            pending.heat = intent.heat
        if intent.cool is not None:
            pending.cool = intent.cool
        if not pending.is_complete:
            return None
        return WritePlan(
            {"hspHome": pending.heat, "cspHome": pending.cool},
            {
                "hspHome": pending.heat,
                "hspActive": pending.heat,
                "cspHome": pending.cool,
                "cspActive": pending.cool,
            },
        )

    error_msg = f"Device is in an unknown state: {mode}"
    raise UnknownModeError(error_msg)
