"""Pytest configuration and fixtures for Daikin One tests."""

from typing import Any

import pytest

ACCESS_TOKEN = "access_token_value"
REFRESH_TOKEN = "refresh_token_value"
DEVICE_ID = "device1"
OTHER_DEVICE_ID = "device2"


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Fixture providing a hand-driven monotonic clock."""
    return FakeClock()


@pytest.fixture
def sample_token_response() -> dict[str, Any]:
    """Fixture providing a sample login/refresh API response."""
    return {
        "accessToken": ACCESS_TOKEN,
        "accessTokenExpiresIn": 3600,
        "refreshToken": REFRESH_TOKEN,
        "tokenType": "Bearer",
    }


@pytest.fixture
def sample_devices_response() -> list[dict[str, Any]]:
    """Fixture providing a sample /devices API response with two thermostats."""
    return [
        {
            "id": DEVICE_ID,
            "name": "Hallway",
            "model": "ONEPLUS",
            "firmwareVersion": "3.2.19",
        },
        {
            "id": OTHER_DEVICE_ID,
            "name": "Upstairs",
            "model": "ONEPLUS",
            "firmwareVersion": "3.2.19",
        },
    ]


@pytest.fixture
def sample_device_data() -> dict[str, Any]:
    """Fixture providing a sample /deviceData document for a heating thermostat."""
    return {
        "mode": 1,
        "equipmentStatus": 3,
        "units": 1,
        "tempIndoor": 20.5,
        "tempOutdoor": 4.0,
        "hspHome": 21.0,
        "cspHome": 25.0,
        "hspActive": 21.0,
        "cspActive": 25.0,
        "hspSched": 20.0,
        "cspSched": 26.0,
        "hspAway": 16.0,
        "cspAway": 29.0,
        "humIndoor": 41,
        "humOutdoor": 80,
        "humSP": 45,
        "schedEnabled": False,
        "schedOverride": 0,
        "geofencingAway": False,
        "fanCirculate": 0,
        "fanCirculateSpeed": 1,
        "oneCleanFanActive": False,
        "aqIndoorLevel": 0,
        "aqOutdoorLevel": 1,
        "aqIndoorValue": 12,
        "aqOutdoorValue": 48,
        "aqIndoorParticlesValue": 3.5,
        "aqOutdoorParticles": 9.0,
        "aqIndoorVOCValue": 140.0,
        "aqOutdoorOzone": 22.0,
        "ctSystemCapHeat": True,
    }
