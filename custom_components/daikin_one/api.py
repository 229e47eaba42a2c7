"""API client for the Daikin One cloud.

This module provides functions to interact with the Daikin Skyport API,
including authentication, token refresh, device discovery and reading and
writing thermostat data.
"""

import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    DEVICE_DATA_URL,
    DEVICES_URL,
    LOGIN_URL,
    REQUEST_BACKOFF_FACTOR,
    REQUEST_RETRIES,
    REQUEST_TIMEOUT,
    TOKEN_URL,
)
from .models import DaikinDevice

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class DaikinApiClientError(Exception):
    """Base exception for Daikin API client errors."""


class DaikinApiAuthError(DaikinApiClientError):
    """Exception raised for authentication errors."""


def create_headers(access_token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for Daikin API requests.

    Args:
        access_token: Optional bearer token to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def device_data_url(device_id: str) -> str:
    """Return the read/write URL for one device."""
    return DEVICE_DATA_URL.format(device_id=device_id)


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 400 or higher, False otherwise.

    """
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates an authentication error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 401 or 403, False otherwise.

    """
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def validate_response(response: httpx.Response) -> Any:  # noqa: ANN401
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON body, or an empty dict when the body is empty.

    Raises:
        DaikinApiAuthError: If the token or credentials were rejected.
        DaikinApiClientError: If any other HTTP error is returned, or the
            body is not valid JSON.

    """
    if is_http_error(response.status_code):
        if is_auth_error(response.status_code):
            auth_error = f"Authentication error: {response.status_code}"
            raise DaikinApiAuthError(auth_error)

        client_error = f"Request failed: {response.status_code}"
        raise DaikinApiClientError(client_error)

    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as err:
        decode_error = f"Invalid JSON in response: {response.status_code}"
        raise DaikinApiClientError(decode_error) from err


def extract_token_response(data: dict[str, Any]) -> dict[str, Any]:
    """Check that a login or refresh response carries a usable token.

    Args:
        data: API response data dictionary.

    Returns:
        The same dictionary.

    Raises:
        DaikinApiClientError: If the body is not an object, or accessToken or
            accessTokenExpiresIn is missing.

    """
    if not isinstance(data, dict):
        error_msg = f"Unexpected token response: {type(data).__name__}"
        raise DaikinApiClientError(error_msg)
    missing = [
        key for key in ("accessToken", "accessTokenExpiresIn") if not data.get(key)
    ]
    if missing:
        error_msg = f"Token response missing {', '.join(missing)}"
        raise DaikinApiClientError(error_msg)
    return data


def extract_devices(data: Any) -> list[DaikinDevice]:  # noqa: ANN401
    """Extract device list from API response.

    Args:
        data: API response body, a list of device descriptions.

    Returns:
        List of DaikinDevice objects.

    """
    if not isinstance(data, list):
        return []
    return [
        DaikinDevice.from_api(item)
        for item in data
        if isinstance(item, dict) and item.get("id")
    ]


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the Daikin API.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=REQUEST_TIMEOUT)
    retry = Retry(total=REQUEST_RETRIES, backoff_factor=REQUEST_BACKOFF_FACTOR)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_login(
    session: httpx.AsyncClient,
    email: str,
    password: str,
) -> dict[str, Any]:
    """Authenticate with the Daikin API using email and password.

    Returns:
        Token response with accessToken, accessTokenExpiresIn, refreshToken.

    Raises:
        DaikinApiAuthError: If the credentials are rejected.
        DaikinApiClientError: If the API request fails.

    """
    payload = {"email": email, "password": password}

    _LOGGER.debug("Authenticating with Daikin API")
    response = await session.post(LOGIN_URL, headers=create_headers(), json=payload)
    data = extract_token_response(validate_response(response))
    _LOGGER.debug("Successfully authenticated with Daikin API")
    return data


async def async_refresh_token(
    session: httpx.AsyncClient,
    email: str,
    refresh_token: str,
) -> dict[str, Any]:
    """Exchange a refresh token for a new access token.

    Raises:
        DaikinApiAuthError: If the refresh token is rejected.
        DaikinApiClientError: If the API request fails.

    """
    payload = {"email": email, "refreshToken": refresh_token}

    _LOGGER.debug("Refreshing token with Daikin API")
    response = await session.post(TOKEN_URL, headers=create_headers(), json=payload)
    data = extract_token_response(validate_response(response))
    _LOGGER.debug("Successfully refreshed token with Daikin API")
    return data


async def async_get_devices(
    session: httpx.AsyncClient,
    access_token: str,
) -> list[DaikinDevice]:
    """Fetch the thermostats registered to the account."""
    _LOGGER.debug("Fetching devices from Daikin API")
    response = await session.get(DEVICES_URL, headers=create_headers(access_token))
    devices = extract_devices(validate_response(response))
    _LOGGER.debug("Retrieved %d devices from Daikin API", len(devices))
    return devices


async def async_get_device_data(
    session: httpx.AsyncClient,
    access_token: str,
    device_id: str,
) -> dict[str, Any]:
    """Fetch the full data document for one thermostat."""
    response = await session.get(
        device_data_url(device_id),
        headers=create_headers(access_token),
    )
    data = validate_response(response)
    if not isinstance(data, dict):
        error_msg = f"Unexpected device data for {device_id}: {type(data).__name__}"
        raise DaikinApiClientError(error_msg)
    return data


async def async_put_device_data(
    session: httpx.AsyncClient,
    access_token: str,
    device_id: str,
    payload: dict[str, Any],
) -> Any:  # noqa: ANN401
    """Write a partial data document to one thermostat.

    Args:
        session: HTTP client session.
        access_token: Bearer token.
        device_id: Target device identifier.
        payload: Vendor-keyed fields to change.

    Returns:
        The parsed response body.

    Raises:
        DaikinApiAuthError: If the token is rejected.
        DaikinApiClientError: If the API request fails.

    """
    _LOGGER.debug("Sending update to device %s: %s", device_id, payload)
    response = await session.put(
        device_data_url(device_id),
        headers=create_headers(access_token),
        json=payload,
    )
    result = validate_response(response)
    _LOGGER.debug("Update result for device %s: %s", device_id, result)
    return result
