"""Constants for the Daikin One integration.

This module contains the constants used throughout the integration,
including API endpoints, refresh timings, configuration keys and the
valid ranges applied to values read from the cache.
"""

DOMAIN = "daikin_one"

BASE_URL = "https://api.daikinskyport.com"
LOGIN_URL = f"{BASE_URL}/users/auth/login"
TOKEN_URL = f"{BASE_URL}/users/auth/token"
DEVICES_URL = f"{BASE_URL}/devices"
DEVICE_DATA_URL = f"{BASE_URL}/deviceData/{{device_id}}"

REQUEST_TIMEOUT = 10.0
REQUEST_RETRIES = 3
REQUEST_BACKOFF_FACTOR = 0.5

# The API returns pre-write data for up to 15 seconds after accepting a write.
WRITE_SETTLE_DELAY = 15.0
# Nobody is looking at the device, refresh for automations only.
BACKGROUND_REFRESH_INTERVAL = 180.0
# Somebody is looking at the device, refresh at most this often.
FOREGROUND_REFRESH_INTERVAL = 10.0
# Tokens are treated as expired this long before the server says they are.
TOKEN_SAFETY_MARGIN = 2 * BACKGROUND_REFRESH_INTERVAL

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

CONF_INCLUDE_DEVICE_NAME = "include_device_name"
CONF_ENABLE_EMERGENCY_HEAT_SWITCH = "enable_emergency_heat_switch"
CONF_ENABLE_ONE_CLEAN_FAN = "enable_one_clean_fan"
CONF_ENABLE_CIRCULATE_AIR_FAN = "enable_circulate_air_fan"
CONF_ENABLE_SCHEDULE_SWITCH = "enable_schedule_switch"
CONF_ENABLE_AWAY_SWITCH = "enable_away_switch"
CONF_IGNORE_INDOOR_AQI = "ignore_indoor_aqi"
CONF_IGNORE_OUTDOOR_AQI = "ignore_outdoor_aqi"
CONF_IGNORE_INDOOR_HUMIDITY_SENSOR = "ignore_indoor_humidity_sensor"
CONF_IGNORE_OUTDOOR_HUMIDITY_SENSOR = "ignore_outdoor_humidity_sensor"
CONF_IGNORE_THERMOSTAT = "ignore_thermostat"
CONF_IGNORE_OUTDOOR_TEMPERATURE = "ignore_outdoor_temperature"
CONF_AUTO_RESUME_SCHEDULE = "auto_resume_schedule"

FEATURE_OPTIONS = (
    CONF_INCLUDE_DEVICE_NAME,
    CONF_ENABLE_EMERGENCY_HEAT_SWITCH,
    CONF_ENABLE_ONE_CLEAN_FAN,
    CONF_ENABLE_CIRCULATE_AIR_FAN,
    CONF_ENABLE_SCHEDULE_SWITCH,
    CONF_ENABLE_AWAY_SWITCH,
    CONF_IGNORE_INDOOR_AQI,
    CONF_IGNORE_OUTDOOR_AQI,
    CONF_IGNORE_INDOOR_HUMIDITY_SENSOR,
    CONF_IGNORE_OUTDOOR_HUMIDITY_SENSOR,
    CONF_IGNORE_THERMOSTAT,
    CONF_IGNORE_OUTDOOR_TEMPERATURE,
    CONF_AUTO_RESUME_SCHEDULE,
)

TEMPERATURE_RANGE = (-270.0, 100.0)
HUMIDITY_RANGE = (0.0, 100.0)
AIR_QUALITY_VALUE_RANGE = (0, 500)
DENSITY_RANGE = (0.0, 1000.0)
AIR_QUALITY_LEVEL_RANGE = (0, 3)

# Circulate fan speed request that turns circulation off instead.
CIRCULATE_FAN_OFF_SPEED = -1
