"""Bridge between the Daikin One cloud and local consumers.

The bridge owns the credential, the device cache, the refresh timer and the
listener table for one account. Consumers read from the cache through
``bridge.devices``, write through the ``async_set_*`` methods and subscribe to
changes with ``add_listener``. The cloud is polled on the bridge's own
schedule; ``update_now`` asks for fresher data without ever exceeding the
foreground poll rate.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import TYPE_CHECKING

import httpx

from . import api
from .auth import CredentialManager
from .cache import DeviceRegistry
from .const import (
    BACKGROUND_REFRESH_INTERVAL,
    FOREGROUND_REFRESH_INTERVAL,
    WRITE_SETTLE_DELAY,
)
from .listeners import ListenerRegistry
from .models import (
    DaikinDevice,
    DeviceState,
    PendingThreshold,
    TemperatureUnit,
    ThermostatMode,
)
from .scheduler import RefreshScheduler
from .writes import (
    SetAwayState,
    SetCirculateFan,
    SetCirculateFanSpeed,
    SetDisplayUnits,
    SetMode,
    SetOneCleanFan,
    SetScheduleState,
    SetTargetHumidity,
    SetTargetTemperature,
    SetThresholds,
    UnknownModeError,
    WritePlan,
    build_payload,
    plan_setpoint_write,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .writes import SetpointIntent, WriteIntent

_LOGGER = logging.getLogger(__name__)


class DaikinOneBridge:
    """Polling, caching and write coalescing for one Daikin One account."""

    def __init__(
        self,
        session: httpx.AsyncClient,
        email: str,
        password: str,
        *,
        foreground_interval: float = FOREGROUND_REFRESH_INTERVAL,
        background_interval: float = BACKGROUND_REFRESH_INTERVAL,
        write_settle_delay: float = WRITE_SETTLE_DELAY,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the bridge without contacting the API."""
        self._session = session
        self._credentials = CredentialManager(
            session,
            email,
            password,
            safety_margin=2 * background_interval,
        )
        self.devices = DeviceRegistry()
        self._listeners = ListenerRegistry()
        self._scheduler = RefreshScheduler(
            self.async_refresh_all,
            foreground_interval=foreground_interval,
            background_interval=background_interval,
            write_settle_delay=write_settle_delay,
            clock=clock,
        )
        self._initialized = False

        self._pending_thresholds: dict[str, PendingThreshold] = {}
        self._emergency_heat: dict[str, bool] = {}

        self._writes_in_flight: Counter[str] = Counter()
        self._write_seq = 0
        self._last_write_seq: dict[str, int] = {}

    @property
    def is_initialized(self) -> bool:
        """Return True once login, discovery and the first read succeeded."""
        return self._initialized

    @property
    def credentials(self) -> CredentialManager:
        """Return the credential manager."""
        return self._credentials

    @property
    def scheduler(self) -> RefreshScheduler:
        """Return the refresh scheduler."""
        return self._scheduler

    async def async_initialize(self) -> None:
        """Authenticate, discover devices and load their initial state.

        Does nothing if already initialized. On failure the bridge stays
        uninitialized and the call can simply be repeated.
        """
        if self._initialized:
            return

        access_token = await self._credentials.async_ensure_valid()
        if access_token is None:
            _LOGGER.error("Unable to retrieve token")
            return

        try:
            devices = await api.async_get_devices(self._session, access_token)
        except api.DaikinApiClientError as err:
            _LOGGER.error("Unable to retrieve devices: %s", err)
            return
        except httpx.HTTPError as err:
            _LOGGER.error("Connection error retrieving devices: %s", err)
            return

        if not devices:
            _LOGGER.info("No devices found")
            return

        self.devices.set_devices(devices)
        for device in devices:
            _LOGGER.debug("Device: %s [%s]", device.name, device.id)

        await self.async_refresh_all()
        _LOGGER.debug("Loaded initial data")
        self._initialized = True

    async def async_shutdown(self) -> None:
        """Stop polling."""
        self._scheduler.cancel()
        _LOGGER.debug("Bridge shut down")

    def get_device_list(self) -> list[DaikinDevice]:
        """Return all known devices with their cached state."""
        return self.devices.devices()

    def add_listener(
        self,
        device_id: str,
        callback: Callable[[], None],
    ) -> Callable[[], None]:
        """Register a change callback for a device.

        The callback is invoked right away when the device already has
        state, so it never waits for the next poll to initialize.

        Returns:
            A function that removes the callback again.

        """
        unregister = self._listeners.subscribe(device_id, callback)
        if self.devices.has_data(device_id):
            callback()
        return unregister

    def remove_listener(self, device_id: str, callback: Callable[[], None]) -> None:
        """Remove a change callback."""
        self._listeners.unsubscribe(device_id, callback)

    def update_now(self) -> None:
        """Ask for a refresh as soon as the poll limits allow."""
        self._scheduler.request_immediate()

    async def async_get_device_data(self, device_id: str) -> DeviceState | None:
        """Fetch a device's state straight from the API, bypassing the cache."""
        access_token = await self._credentials.async_ensure_valid()
        if access_token is None:
            _LOGGER.error("No token for request: %s", device_id)
            return None

        try:
            data = await api.async_get_device_data(
                self._session, access_token, device_id
            )
        except api.DaikinApiClientError as err:
            _LOGGER.error("Reading device %s failed: %s", device_id, err)
            return None
        except httpx.HTTPError as err:
            _LOGGER.error("Connection error reading device %s: %s", device_id, err)
            return None

        return DeviceState.from_api(data)

    async def async_refresh_all(self) -> None:
        """Read every device and replace its cached state.

        A device that cannot be read keeps its stale state. A device written
        to while the read was under way keeps its optimistic state. Listeners
        are notified once the fetched states are in the cache.
        """
        if self._writes_in_flight.total():
            _LOGGER.debug("Write in flight, deferring refresh")
            self._scheduler.clear_next_update()
            self._scheduler.schedule_passive(self._scheduler.write_settle_delay)
            return

        writes_before_read = self._write_seq
        _LOGGER.debug("Getting data")

        fetched: list[tuple[str, DeviceState]] = []
        for device_id in self.devices.device_ids():
            state = await self.async_get_device_data(device_id)
            if state is None:
                _LOGGER.error("Unable to retrieve data for %s", device_id)
                continue
            fetched.append((device_id, state))

        for device_id, state in fetched:
            if self._written_since(device_id, writes_before_read):
                _LOGGER.debug(
                    "Skipping stale read for %s, it was written meanwhile", device_id
                )
                continue
            if not self.devices.replace_state(device_id, state):
                continue
            if state.mode is not None:
                self._emergency_heat[device_id] = (
                    state.mode == ThermostatMode.EMERGENCY_HEAT
                )
            _LOGGER.debug("Notifying listeners for device %s", device_id)
            self._listeners.notify(device_id)

        _LOGGER.debug("Updated data for %d devices", len(fetched))
        self._scheduler.clear_next_update()
        self._scheduler.schedule_passive()

    def set_emergency_heat_enabled(self, device_id: str, enabled: bool) -> None:
        """Record whether HEAT requests should be sent as emergency heat."""
        self._emergency_heat[device_id] = enabled

    def is_emergency_heat_enabled(self, device_id: str) -> bool:
        """Return whether HEAT requests are sent as emergency heat."""
        return self._emergency_heat.get(device_id, False)

    def pending_thresholds(self, device_id: str) -> PendingThreshold | None:
        """Return the half-collected AUTO thresholds for a device, if any."""
        return self._pending_thresholds.get(device_id)

    async def async_set_target_temperature(
        self, device_id: str, target: float
    ) -> bool:
        """Set the setpoint for the current HEAT or COOL mode."""
        return await self._async_write_setpoint(
            device_id, SetTargetTemperature(target), "set_target_temperature"
        )

    async def async_set_heating_threshold(self, device_id: str, heat: float) -> bool:
        """Set the AUTO heating threshold; sent once the cooling half arrives."""
        return await self._async_write_setpoint(
            device_id, SetThresholds(heat=heat), "set_heating_threshold"
        )

    async def async_set_cooling_threshold(self, device_id: str, cool: float) -> bool:
        """Set the AUTO cooling threshold; sent once the heating half arrives."""
        return await self._async_write_setpoint(
            device_id, SetThresholds(cool=cool), "set_cooling_threshold"
        )

    async def async_set_thresholds(
        self, device_id: str, heat: float, cool: float
    ) -> bool:
        """Set both AUTO thresholds in one request."""
        return await self._async_write_setpoint(
            device_id, SetThresholds(heat=heat, cool=cool), "set_thresholds"
        )

    async def async_set_target_mode(
        self, device_id: str, mode: ThermostatMode
    ) -> bool:
        """Change the operating mode.

        The new mode is put into the cache before the request goes out so
        setpoint writes issued alongside it (a scene, say) are shaped for the
        new mode. It is rolled back if the request fails.
        """
        mode = ThermostatMode(mode)
        if mode == ThermostatMode.HEAT and self.is_emergency_heat_enabled(device_id):
            _LOGGER.debug("Emergency heat enabled for %s, using it for HEAT", device_id)
            mode = ThermostatMode.EMERGENCY_HEAT

        self._pending_thresholds.pop(device_id, None)
        plan = build_payload(SetMode(mode))
        previous = self.devices.state(device_id)
        if previous is not None:
            self.devices.merge_state(device_id, plan.cache_update)

        success = await self._async_write(device_id, plan, "set_target_mode")
        if not success and previous is not None:
            current = self.devices.state(device_id)
            if current is not None and current.mode == mode:
                self.devices.merge_state(device_id, {"mode": previous.mode})
        return success

    async def async_set_emergency_heat(self, device_id: str, enabled: bool) -> bool:
        """Switch between emergency heat and plain heat."""
        self.set_emergency_heat_enabled(device_id, enabled)
        mode = ThermostatMode.EMERGENCY_HEAT if enabled else ThermostatMode.HEAT
        return await self.async_set_target_mode(device_id, mode)

    async def async_set_target_humidity(self, device_id: str, humidity: float) -> bool:
        """Set the target indoor humidity."""
        return await self._async_write_intent(
            device_id, SetTargetHumidity(humidity), "set_target_humidity"
        )

    async def async_set_one_clean_fan_active(
        self, device_id: str, active: bool
    ) -> bool:
        """Turn the One Clean air cleaning cycle on or off."""
        return await self._async_write_intent(
            device_id, SetOneCleanFan(active), "set_one_clean_fan_active"
        )

    async def async_set_circulate_fan_active(
        self, device_id: str, active: bool
    ) -> bool:
        """Turn continuous fan circulation on or off."""
        return await self._async_write_intent(
            device_id, SetCirculateFan(active), "set_circulate_fan_active"
        )

    async def async_set_circulate_fan_speed(self, device_id: str, speed: int) -> bool:
        """Set the circulation speed; -1 turns circulation off."""
        return await self._async_write_intent(
            device_id, SetCirculateFanSpeed(speed), "set_circulate_fan_speed"
        )

    async def async_set_display_units(
        self, device_id: str, units: TemperatureUnit
    ) -> bool:
        """Set the temperature units shown on the thermostat."""
        return await self._async_write_intent(
            device_id, SetDisplayUnits(TemperatureUnit(units)), "set_display_units"
        )

    async def async_set_schedule_state(self, device_id: str, enabled: bool) -> bool:
        """Enable or disable the thermostat schedule."""
        return await self._async_write_intent(
            device_id, SetScheduleState(enabled), "set_schedule_state"
        )

    async def async_set_away_state(
        self,
        device_id: str,
        away: bool,
        *,
        resume_schedule: bool = False,
    ) -> bool:
        """Set away mode; leaving away can also re-enable the schedule."""
        return await self._async_write_intent(
            device_id,
            SetAwayState(away, resume_schedule=resume_schedule),
            "set_away_state",
        )

    async def _async_write_setpoint(
        self,
        device_id: str,
        intent: SetpointIntent,
        caller: str,
    ) -> bool:
        state = self.devices.state(device_id)
        if state is None:
            _LOGGER.error("Cannot %s - no data for device: %s", caller, device_id)
            return False

        pending = self._pending_thresholds.get(device_id) or PendingThreshold()
        try:
            plan = plan_setpoint_write(state, intent, pending)
        except UnknownModeError as err:
            _LOGGER.info("%s. Unable to %s (%s)", err, caller, device_id)
            return False

        if plan is None:
            if pending.heat is not None or pending.cool is not None:
                self._pending_thresholds[device_id] = pending
            _LOGGER.debug(
                "Nothing to send for %s on %s in mode %s", caller, device_id, state.mode
            )
            return True

        self._pending_thresholds.pop(device_id, None)
        return await self._async_write(device_id, plan, caller)

    async def _async_write_intent(
        self,
        device_id: str,
        intent: WriteIntent,
        caller: str,
    ) -> bool:
        self._pending_thresholds.pop(device_id, None)
        return await self._async_write(device_id, build_payload(intent), caller)

    async def _async_write(self, device_id: str, plan: WritePlan, caller: str) -> bool:
        _LOGGER.debug(
            "Writing data: %s -> device: %s; payload: %s",
            caller,
            device_id,
            plan.payload,
        )
        if device_id not in self.devices:
            _LOGGER.error("Cannot %s - unknown device: %s", caller, device_id)
            return False

        access_token = await self._credentials.async_ensure_valid()
        if access_token is None:
            _LOGGER.error("No token for write request: %s", device_id)
            return False

        self._writes_in_flight[device_id] += 1
        self._write_seq += 1
        self._last_write_seq[device_id] = self._write_seq
        try:
            await api.async_put_device_data(
                self._session, access_token, device_id, plan.payload
            )
        except api.DaikinApiClientError as err:
            _LOGGER.error(
                "Error in %s for device %s with payload %s: %s",
                caller,
                device_id,
                plan.payload,
                err,
            )
            return False
        except httpx.HTTPError as err:
            _LOGGER.error(
                "Connection error in %s for device %s with payload %s: %s",
                caller,
                device_id,
                plan.payload,
                err,
            )
            return False
        finally:
            self._writes_in_flight[device_id] -= 1
            if self._writes_in_flight[device_id] <= 0:
                del self._writes_in_flight[device_id]

        if self.devices.merge_state(device_id, plan.cache_update):
            self._listeners.notify(device_id)
        self._scheduler.schedule_passive(self._scheduler.write_settle_delay)
        return True

    def _written_since(self, device_id: str, write_seq: int) -> bool:
        if self._writes_in_flight[device_id]:
            return True
        return self._last_write_seq.get(device_id, 0) > write_seq
