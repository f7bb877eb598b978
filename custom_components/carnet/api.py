"""CarNet REST API client.

This module provides an async client for the VW/Audi CarNet backend.
It handles the three authentication tokens, URL construction per brand and
country, response validation and the vehicle data and action endpoints.

Token handling:
- API access token (password grant), used for all data requests
- Identity token (password grant against the identity provider)
- Security token (identity token exchange), required for privileged actions

Each token is cached until its reported expiry and refreshed lazily.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
import json
import logging
import time
from typing import Any, Self
from urllib.parse import urlencode

import aiohttp
from yarl import URL

from .const import (
    ACTION_LOCK,
    ACTION_PREHEAT,
    ACTION_UNLOCK,
    AUTH_AUDI_VERS,
    BASE_URL_AUDI,
    BASE_URL_HOME_REGION,
    BASE_URL_VW,
    BRAND_AUDI,
    BRAND_VW,
    CONTENT_TYPE_CLIMATER,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_PREHEAT,
    CONTENT_TYPE_RLU,
    HEADER_APP,
    HEADER_APP_EREMOTE,
    HEADER_APP_MYAUDI,
    HEADER_CLIENT_ID,
    HEADER_CLIENT_ID_VALUE,
    HEADER_HOST,
    HEADER_SEC_TOKEN,
    HEADER_USER_AGENT,
    HEADER_VERS,
    HEADER_VERS_MYAUDI,
    HEADER_VERS_VALUE,
    ID_TOKEN_CLIENT_ID,
    ID_TOKEN_SCOPE,
    REQUEST_TIMEOUT,
    SEC_TOKEN_SCOPE,
    URI_CHARGER_STATUS,
    URI_CLIMATER_ACTION,
    URI_CLIMATER_STATUS,
    URI_CLIMATER_TIMER,
    URI_DESTINATIONS,
    URI_GET_TOKEN,
    URI_HISTORY,
    URI_HOME_REGION,
    URI_OPERATION_LIST,
    URI_POIS,
    URI_PREHEAT_ACTION,
    URI_RLU_ACTION,
    URI_RLU_HISTORY,
    URI_SEC_PIN_COMPLETE,
    URI_SEC_PIN_REQUEST,
    URI_STORED_POSITION,
    URI_TRIP_DATA,
    URI_VEHICLE_DATA,
    URI_VEHICLE_DETAILS,
    URI_VEHICLE_LIST,
    URI_VEHICLE_MGMT_INFO,
    URI_VEHICLE_POSITION,
    URI_VEHICLE_RIGHTS,
    URI_VEHICLE_STATUS,
    URI_VEHICLE_USERS,
    URL_GET_AUDI_TOKEN,
    URL_GET_SEC_TOKEN,
)
from .models import (
    CarNetActionResponse,
    CarNetApiErrorMessage,
    CarNetApiToken,
    CarNetHomeRegion,
    CarNetSecurityPinAuthInfo,
    CarNetServiceList,
    CarNetVehicleDetails,
    CarNetVehicleList,
    CarNetVehiclePosition,
    CarNetVehicleStatus,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_TOKEN_VALIDITY = 3600  # seconds, used when the API omits expires_in
HTTP_OK_CODES = (200, 201, 202)
HTTP_NO_CONTENT = 204
AUTH_ERRORS = ("invalid_grant", "invalid_client", "unauthorized_client", "access_denied")


@dataclass
class CarNetApiResult:
    """Outcome of a single HTTP exchange, attached to every CarNetError."""

    method: str = ""
    url: str = ""
    http_code: int = 0
    response: str = ""
    api_error: CarNetApiErrorMessage = field(default_factory=CarNetApiErrorMessage)

    def is_http_ok(self) -> bool:
        """Return True if the HTTP status signalled success."""
        return self.http_code in HTTP_OK_CODES


class CarNetError(Exception):
    """Base class for CarNet errors."""

    def __init__(self, message: str, api_result: CarNetApiResult | None = None) -> None:
        """Initialize error with an optional API result."""
        super().__init__(message)
        self.api_result = api_result or CarNetApiResult()


class CarNetConnectionError(CarNetError):
    """Raised when unable to reach the CarNet backend."""


class CarNetAuthenticationError(CarNetError):
    """Raised when authentication with the CarNet backend fails."""


class CarNetApiError(CarNetError):
    """Raised when the API returns an error."""


@dataclass
class CarNetAccountConfig:
    """Account and vehicle settings used to build requests."""

    user: str
    password: str
    brand: str = BRAND_AUDI
    country: str = "DE"
    vin: str = ""
    spin: str = ""
    home_region_url: str = ""
    user_id: str = ""


@dataclass
class CarNetToken:
    """A cached token with its expiry."""

    auth_type: str = ""
    access_token: str = ""
    id_token: str = ""
    refresh_token: str = ""
    scope: str = ""
    validity: int = 0
    issued_at: float = 0.0

    @classmethod
    def from_api_token(cls, token: CarNetApiToken) -> CarNetToken:
        """Build a cached token from an API token response."""
        return cls(
            auth_type=token.auth_type or "Bearer",
            access_token=token.access_token or "",
            id_token=token.id_token or "",
            refresh_token=token.refresh_token or "",
            scope=token.scope or "",
            validity=token.validity or DEFAULT_TOKEN_VALIDITY,
            issued_at=time.monotonic(),
        )

    @property
    def expires_at(self) -> float:
        """Monotonic time the token expires at."""
        return self.issued_at + self.validity

    def is_expired(self) -> bool:
        """Return True if the token is missing or past its expiry."""
        if not self.access_token and not self.id_token:
            return True
        return time.monotonic() >= self.expires_at


def build_post_data(data: dict[str, Any], as_json: bool) -> str:
    """Encode request data either as JSON or as a form body."""
    if as_json:
        return json.dumps(data)
    return urlencode(data)


def security_pin_hash(pin: str, challenge: str) -> str:
    """Hash the security PIN with the server challenge.

    Both PIN and challenge are hex strings; the hash is SHA-512 over the
    concatenated bytes, upper case hex encoded.
    """
    pin_bytes = bytes.fromhex(pin if len(pin) % 2 == 0 else "0" + pin)
    challenge_bytes = bytes.fromhex(challenge)
    return hashlib.sha512(pin_bytes + challenge_bytes).hexdigest().upper()


class CarNetApiClient:
    """Async REST API client for the CarNet backend."""

    def __init__(
        self,
        config: CarNetAccountConfig,
        session: aiohttp.ClientSession | None = None,
        timeout: int = REQUEST_TIMEOUT,
    ) -> None:
        """Initialize CarNet API client.

        Args:
            config: Account configuration
            session: Shared aiohttp session, a private one is created if None
            timeout: Request timeout in seconds
        """
        _LOGGER.debug(
            "Setting up CarNet API for brand %s (%s), user %s",
            config.brand,
            config.country,
            config.user,
        )
        self.config = config
        self.timeout = timeout
        self.session = session
        self._owns_session = session is None
        self.api_token = CarNetToken()
        self.id_token = CarNetToken()
        self.security_token = CarNetToken()

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Async context manager exit."""
        await self.disconnect()

    async def connect(self) -> None:
        """Create the HTTP session if needed and acquire all tokens.

        Raises:
            CarNetConnectionError: If the backend is not reachable
            CarNetAuthenticationError: If authentication fails
        """
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            )
            self._owns_session = True

        await self.refresh_tokens()

    async def disconnect(self) -> None:
        """Close the HTTP session if it is owned by this client."""
        if self.session and self._owns_session:
            await self.session.close()
        self.session = None

    def set_config(self, config: CarNetAccountConfig) -> None:
        """Replace the account configuration."""
        _LOGGER.debug(
            "Updating CarNet API config for brand %s (%s), user %s",
            config.brand,
            config.country,
            config.user,
        )
        self.config = config

    # -----------------------------------------------------------------
    # Tokens
    # -----------------------------------------------------------------

    async def refresh_tokens(self) -> None:
        """Make sure all three tokens are valid, requesting expired ones."""
        await self._create_access_token()
        await self._create_id_token()
        await self._create_security_token()

    async def _create_access_token(self) -> CarNetToken:
        if not self.api_token.is_expired():
            return self.api_token

        _LOGGER.debug("Requesting new access token")
        data = {
            "grant_type": "password",
            "username": self.config.user,
            "password": self.config.password,
        }
        text = await self._post(URI_GET_TOKEN, {}, data, as_json=False, auth=True)
        token = CarNetApiToken.from_dict(self._parse_json(text))
        if not token.access_token:
            raise CarNetAuthenticationError(
                "Authentication failed: Unable to get access token!"
            )
        self.api_token = CarNetToken.from_api_token(token)
        return self.api_token

    async def _create_id_token(self) -> CarNetToken:
        if not self.id_token.is_expired():
            return self.id_token

        _LOGGER.debug("Requesting new identity token")
        data = {
            "client_id": ID_TOKEN_CLIENT_ID,
            "scope": ID_TOKEN_SCOPE,
            "response_type": "token id_token",
            "grant_type": "password",
            "username": self.config.user,
            "password": self.config.password,
        }
        text = await self._post(URL_GET_AUDI_TOKEN, {}, data, as_json=False, auth=True)
        token = CarNetApiToken.from_dict(self._parse_json(text))
        if not token.id_token:
            raise CarNetAuthenticationError(
                "Authentication failed: Unable to get identity token!"
            )
        self.id_token = CarNetToken.from_api_token(token)
        return self.id_token

    async def _create_security_token(self) -> CarNetToken:
        if not self.security_token.is_expired():
            return self.security_token

        # The exchange needs a valid identity token
        id_token = await self._create_id_token()

        _LOGGER.debug("Requesting new security token")
        headers = {
            "User-Agent": HEADER_USER_AGENT,
            HEADER_VERS: HEADER_VERS_MYAUDI,
            HEADER_APP: HEADER_APP_MYAUDI,
            HEADER_CLIENT_ID: HEADER_CLIENT_ID_VALUE,
            HEADER_HOST: URL(URL_GET_SEC_TOKEN).host or "",
        }
        data = {
            "grant_type": "id_token",
            "token": id_token.id_token,
            "scope": SEC_TOKEN_SCOPE,
        }
        text = await self._post(URL_GET_SEC_TOKEN, headers, data, as_json=True, auth=True)
        token = CarNetApiToken.from_dict(self._parse_json(text))
        if not token.access_token:
            raise CarNetAuthenticationError(
                "Authentication failed: Unable to get security token!"
            )
        self.security_token = CarNetToken.from_api_token(token)
        return self.security_token

    async def _fill_app_headers(self, security_token: str = "") -> dict[str, str]:
        token = await self._create_access_token()
        headers = {
            "User-Agent": HEADER_USER_AGENT,
            HEADER_APP: HEADER_APP_EREMOTE,
            HEADER_VERS: HEADER_VERS_VALUE,
            "Authorization": f"{token.auth_type} {AUTH_AUDI_VERS} {token.access_token}",
            "Accept": CONTENT_TYPE_JSON,
        }
        if security_token:
            headers[HEADER_SEC_TOKEN] = security_token
        return headers

    async def _fill_mbb_headers(self) -> dict[str, str]:
        token = await self._create_security_token()
        return {
            "User-Agent": HEADER_USER_AGENT,
            HEADER_APP: HEADER_APP_MYAUDI,
            HEADER_VERS: HEADER_VERS_MYAUDI,
            "Authorization": f"Bearer {token.access_token}",
            "Accept": CONTENT_TYPE_JSON,
        }

    async def _get_action_security_token(self, vin: str, action: str) -> str:
        """Run the security PIN challenge for a privileged action.

        Returns:
            The action specific token for the x-mbbSecToken header, empty if
            the vehicle does not ask for the PIN

        Raises:
            CarNetError: If a challenge arrives and no security PIN is
                configured
        """
        headers = await self._fill_mbb_headers()
        text = await self._get(URI_SEC_PIN_REQUEST, headers, vin, action=action)
        info = CarNetSecurityPinAuthInfo.from_dict(self._parse_json(text))
        if not info.challenge:
            _LOGGER.debug("%s: No security PIN challenge for %s", vin, action)
            return ""
        if not self.config.spin:
            raise CarNetError(f"Security PIN required for {action}")
        if not info.security_token:
            raise CarNetApiError(f"Incomplete security PIN challenge for {action}")
        _LOGGER.debug(
            "Security PIN challenge for %s, remaining tries: %s",
            action,
            info.remaining_tries,
        )

        body = {
            "securityPinAuthentication": {
                "securityPin": {
                    "challenge": info.challenge,
                    "securityPinHash": security_pin_hash(self.config.spin, info.challenge),
                },
                "securityToken": info.security_token,
            }
        }
        text = await self._request(
            "POST",
            URI_SEC_PIN_COMPLETE,
            headers=headers,
            data=json.dumps(body),
            vin=vin,
        )
        token = self._parse_json(text).get("securityToken")
        if not token:
            raise CarNetAuthenticationError(f"Security PIN rejected for {action}")
        return str(token)

    # -----------------------------------------------------------------
    # Vehicle data
    # -----------------------------------------------------------------

    async def get_vehicles(self) -> CarNetVehicleList:
        """Get the VINs registered for the account."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_VEHICLE_LIST, headers)
        return CarNetVehicleList.from_dict(self._parse_json(text))

    async def get_vehicle_details(self, vin: str) -> CarNetVehicleDetails:
        """Get model and equipment details of a vehicle."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_VEHICLE_DETAILS, headers, vin)
        return CarNetVehicleDetails.from_dict(self._parse_json(text))

    async def get_vehicle_status(self, vin: str) -> CarNetVehicleStatus:
        """Get the stored vehicle data report."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_VEHICLE_STATUS, headers, vin)
        return CarNetVehicleStatus.from_dict(self._parse_json(text))

    async def get_vehicle_position(self, vin: str) -> CarNetVehiclePosition:
        """Get the current vehicle position."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_VEHICLE_POSITION, headers, vin)
        return CarNetVehiclePosition.from_dict(self._parse_json(text))

    async def get_stored_position(self, vin: str) -> CarNetVehiclePosition:
        """Get the last stored (parking) position."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_STORED_POSITION, headers, vin)
        return CarNetVehiclePosition.from_dict(self._parse_json(text))

    async def get_destinations(self, vin: str) -> dict[str, Any]:
        """Get destinations sent to the vehicle."""
        return await self._get_raw(URI_DESTINATIONS, vin)

    async def get_history(self, vin: str) -> dict[str, Any]:
        """Get the vehicle history."""
        return await self._get_raw(URI_HISTORY, vin)

    async def get_home_region_url(self, vin: str) -> str:
        """Get the base URL of the vehicle's home region."""
        headers = await self._fill_app_headers()
        text = await self._get(URI_HOME_REGION, headers, vin)
        region = CarNetHomeRegion.from_dict(self._parse_json(text))
        url = region.base_uri or BASE_URL_HOME_REGION
        _LOGGER.debug("Home region for %s: %s (%s)", vin, url, region.system_id)
        return url

    async def get_services(self, vin: str) -> CarNetServiceList:
        """Get the operation list (user role and enabled services)."""
        headers = await self._fill_mbb_headers()
        text = await self._get(URI_OPERATION_LIST, headers, vin)
        return CarNetServiceList.from_dict(self._parse_json(text))

    async def get_vehicle_management_info(self, vin: str) -> dict[str, Any]:
        """Get vehicle management information."""
        return await self._get_raw(URI_VEHICLE_MGMT_INFO, vin)

    async def get_vehicle_data(self, vin: str) -> dict[str, Any]:
        """Get portfolio vehicle data."""
        return await self._get_raw(URI_VEHICLE_DATA, vin)

    async def get_vehicle_rights(self, vin: str) -> dict[str, Any]:
        """Get the permissions of the current user."""
        return await self._get_raw(URI_VEHICLE_RIGHTS, vin)

    async def get_vehicle_users(self, vin: str) -> dict[str, Any]:
        """Get the users paired with the vehicle."""
        return await self._get_raw(URI_VEHICLE_USERS, vin)

    async def get_climater_timer(self, vin: str) -> dict[str, Any]:
        """Get departure timer settings."""
        return await self._get_raw(URI_CLIMATER_TIMER, vin)

    async def get_clima_status(self, vin: str) -> dict[str, Any]:
        """Get climatisation status."""
        return await self._get_raw(URI_CLIMATER_STATUS, vin)

    async def get_charger_status(self, vin: str) -> dict[str, Any]:
        """Get charger status."""
        return await self._get_raw(URI_CHARGER_STATUS, vin)

    async def get_trip_data(self, vin: str, trip_type: str) -> dict[str, Any]:
        """Get trip statistics, trip_type is "shortTerm" or "longTerm"."""
        return await self._get_raw(URI_TRIP_DATA, vin, trip_type=trip_type)

    async def get_pois(self, vin: str) -> dict[str, Any]:
        """Get points of interest stored for the vehicle."""
        return await self._get_raw(URI_POIS, vin)

    async def get_rlu_action_history(self, vin: str) -> dict[str, Any]:
        """Get the remote lock/unlock history."""
        return await self._get_raw(URI_RLU_HISTORY, vin)

    # -----------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------

    async def lock_door(self, vin: str, lock: bool) -> CarNetActionResponse:
        """Lock or unlock the vehicle."""
        sec_token = await self._get_action_security_token(
            vin, ACTION_LOCK if lock else ACTION_UNLOCK
        )
        headers = await self._fill_app_headers(sec_token)
        body = (
            '<?xml version="1.0" encoding= "UTF-8" ?>'
            '<rluAction xmlns="http://audi.de/connect/rlu">'
            f"<action>{'lock' if lock else 'unlock'}</action>"
            "</rluAction>"
        )
        _LOGGER.info("%s: %s vehicle", vin, "Locking" if lock else "Unlocking")
        text = await self._request(
            "POST",
            URI_RLU_ACTION,
            headers=headers,
            data=body,
            vin=vin,
            content_type=CONTENT_TYPE_RLU,
        )
        return CarNetActionResponse.from_dict(self._parse_json(text))

    async def clima_control(self, vin: str, start: bool) -> CarNetActionResponse:
        """Start or stop climatisation."""
        action = "startClimatisation" if start else "stopClimatisation"
        return await self._climater_action(vin, {"action": {"type": action}})

    async def control_window_heating(self, vin: str, start: bool) -> CarNetActionResponse:
        """Start or stop window heating."""
        action = "startWindowHeating" if start else "stopWindowHeating"
        return await self._climater_action(vin, {"action": {"type": action}})

    async def control_pre_heating(self, vin: str, start: bool) -> CarNetActionResponse:
        """Start or stop the auxiliary heater."""
        sec_token = await self._get_action_security_token(vin, ACTION_PREHEAT)
        headers = await self._fill_app_headers(sec_token)
        if start:
            body = {
                "performAction": {
                    "quickstart": {
                        "active": True,
                        "climatisationDuration": 30,
                        "startMode": "heating",
                    }
                }
            }
        else:
            body = {"performAction": {"quickstop": {"active": False}}}
        text = await self._request(
            "POST",
            URI_PREHEAT_ACTION,
            headers=headers,
            data=json.dumps(body),
            vin=vin,
            content_type=CONTENT_TYPE_PREHEAT,
        )
        return CarNetActionResponse.from_dict(self._parse_json(text))

    async def _climater_action(self, vin: str, body: dict) -> CarNetActionResponse:
        # Remote actions are only accepted with a valid security token
        await self._create_security_token()
        headers = await self._fill_app_headers()
        _LOGGER.debug("%s: climater action %s", vin, body)
        text = await self._request(
            "POST",
            URI_CLIMATER_ACTION,
            headers=headers,
            data=json.dumps(body),
            vin=vin,
            content_type=CONTENT_TYPE_CLIMATER,
        )
        return CarNetActionResponse.from_dict(self._parse_json(text))

    # -----------------------------------------------------------------
    # HTTP
    # -----------------------------------------------------------------

    async def _get_raw(self, uri: str, vin: str, **kwargs: str) -> dict[str, Any]:
        headers = await self._fill_app_headers()
        text = await self._get(uri, headers, vin, **kwargs)
        return self._parse_json(text)

    async def _get(
        self, uri: str, headers: dict[str, str], vin: str = "", **kwargs: str
    ) -> str:
        return await self._request("GET", uri, headers=headers, vin=vin, **kwargs)

    async def _post(
        self,
        uri: str,
        headers: dict[str, str],
        data: dict[str, Any],
        as_json: bool,
        vin: str = "",
        auth: bool = False,
    ) -> str:
        return await self._request(
            "POST",
            uri,
            headers=headers,
            data=build_post_data(data, as_json),
            vin=vin,
            auth=auth,
        )

    async def _request(
        self,
        method: str,
        uri: str,
        headers: dict[str, str] | None = None,
        data: str | None = None,
        vin: str = "",
        params: dict[str, str] | None = None,
        content_type: str | None = None,
        auth: bool = False,
        **kwargs: str,
    ) -> str:
        """Send a request and validate the response.

        Args:
            method: HTTP method
            uri: URI template, relative to the brand base URL or absolute
            headers: Request headers, empty values are skipped
            data: Request body
            vin: Vehicle identification number for the template
            params: Query parameters
            content_type: Explicit content type, derived from the body if None
            auth: True for token requests, API errors raise an authentication error
            **kwargs: Additional template values

        Returns:
            Response body with tabs and line breaks removed

        Raises:
            CarNetConnectionError: If the request fails on the transport level
            CarNetAuthenticationError: If authentication was rejected
            CarNetApiError: If the API reports an error
        """
        if not self.session:
            raise CarNetConnectionError("Not connected to CarNet")

        url = self.get_brand_url(uri, vin, params, **kwargs)
        api_result = CarNetApiResult(method=method, url=url)

        request_headers = {key: value for key, value in (headers or {}).items() if value}
        if data:
            if content_type is None:
                content_type = (
                    CONTENT_TYPE_JSON if data.startswith("{") else CONTENT_TYPE_FORM
                )
            request_headers["Content-Type"] = content_type

        _LOGGER.debug("HTTP %s %s, headers=%s", method, url, list(request_headers))

        try:
            async with self.session.request(
                method,
                url,
                headers=request_headers,
                data=data.encode("utf-8") if data else None,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                text = await response.text()
                api_result.http_code = response.status
        except TimeoutError as e:
            raise CarNetConnectionError(f"API call timed out: {e}", api_result) from e
        except aiohttp.ClientError as e:
            raise CarNetConnectionError(f"API call failed: {e}", api_result) from e

        text = text.replace("\t", "").replace("\r\n", "").strip()
        api_result.response = text
        _LOGGER.debug("HTTP response %d: %s", api_result.http_code, text[:500])

        # API errors are reported as JSON
        if '"error":' in text:
            try:
                api_result.api_error = CarNetApiErrorMessage.from_dict(json.loads(text))
            except json.JSONDecodeError:
                api_result.api_error = CarNetApiErrorMessage(
                    error="unknown", description=text
                )
            error = api_result.api_error
            if (
                auth
                or api_result.http_code == 401
                or error.error in AUTH_ERRORS
                or error.code == "gw.error.authorization"
            ):
                raise CarNetAuthenticationError(
                    f"Authentication failed ({error.code}, {error.error}): {error.description}",
                    api_result,
                )
            raise CarNetApiError(
                f"API call failed ({error.code}, {error.error}): {error.description}",
                api_result,
            )

        if api_result.http_code == 401:
            raise CarNetAuthenticationError("Authentication failed", api_result)
        if not api_result.is_http_ok():
            raise CarNetApiError(
                f"API call failed: HTTP {api_result.http_code}", api_result
            )
        if not text:
            raise CarNetApiError(
                "Invalid result received from API, maybe URL problem", api_result
            )
        return text

    def get_base_url(self) -> str:
        """Return the API base URL of the configured brand.

        Raises:
            CarNetError: If the brand is not supported
        """
        brand = self.config.brand.lower()
        if brand == BRAND_AUDI.lower():
            return BASE_URL_AUDI
        if brand in (BRAND_VW.lower(), "volkswagen"):
            return BASE_URL_VW
        raise CarNetError(f"Unknown brand for base URL: {self.config.brand}")

    def get_brand_url(
        self,
        uri_template: str,
        vin: str = "",
        params: dict[str, str] | None = None,
        **kwargs: str,
    ) -> str:
        """Build the request URL from a template.

        Relative templates are appended to the brand base URL, absolute ones
        are used as they are.
        """
        path = uri_template.format(
            brand=self.config.brand,
            country=self.config.country,
            vin=vin,
            home_region=self.config.home_region_url or BASE_URL_HOME_REGION,
            **kwargs,
        )
        url = path if "://" in uri_template or "://" in path else f"{self.get_base_url()}/{path}"
        if params:
            return str(URL(url).update_query(params))
        return url

    @staticmethod
    def _parse_json(text: str) -> dict[str, Any]:
        try:
            result = json.loads(text)
        except json.JSONDecodeError as e:
            raise CarNetApiError(f"Unable to process API result: {e}") from e
        if not isinstance(result, dict):
            raise CarNetApiError("Unexpected API result, expected an object")
        return result
