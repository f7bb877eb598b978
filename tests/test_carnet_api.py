"""Tests for the CarNet API client."""

from __future__ import annotations

import hashlib
import json
import time

import aiohttp
import pytest

from custom_components.carnet.api import (
    CarNetAccountConfig,
    CarNetApiClient,
    CarNetApiError,
    CarNetAuthenticationError,
    CarNetConnectionError,
    CarNetError,
    CarNetToken,
    build_post_data,
    security_pin_hash,
)
from custom_components.carnet.const import (
    BASE_URL_HOME_REGION,
    CONTENT_TYPE_FORM,
    CONTENT_TYPE_JSON,
    CONTENT_TYPE_RLU,
    HEADER_SEC_TOKEN,
    URI_HOME_REGION,
    URI_VEHICLE_STATUS,
    URL_GET_AUDI_TOKEN,
    URL_GET_SEC_TOKEN,
)
from custom_components.carnet.models import CarNetApiToken

from .common import FakeResponse, FakeSession

VIN = "WAUZZZF21LN046449"


def _valid_token(access_token: str = "", id_token: str = "") -> CarNetToken:
    return CarNetToken(
        auth_type="AudiAuth",
        access_token=access_token,
        id_token=id_token,
        validity=3600,
        issued_at=time.monotonic(),
    )


def _expired_token(access_token: str = "", id_token: str = "") -> CarNetToken:
    return CarNetToken(
        auth_type="AudiAuth",
        access_token=access_token,
        id_token=id_token,
        validity=10,
        issued_at=time.monotonic() - 20,
    )


def _logged_in_client(
    config: CarNetAccountConfig, session: FakeSession
) -> CarNetApiClient:
    client = CarNetApiClient(config, session=session)
    client.api_token = _valid_token(access_token="at")
    client.id_token = _valid_token(id_token="idt")
    client.security_token = _valid_token(access_token="sec")
    return client


def test_security_pin_hash() -> None:
    """Test the PIN hash is SHA-512 over PIN and challenge bytes."""
    expected = (
        hashlib.sha512(bytes.fromhex("1234") + bytes.fromhex("ABCDEF01"))
        .hexdigest()
        .upper()
    )
    assert security_pin_hash("1234", "ABCDEF01") == expected


def test_security_pin_hash_odd_length_pin() -> None:
    """Test an odd length PIN is padded with a leading zero."""
    assert security_pin_hash("123", "AB") == security_pin_hash("0123", "AB")


def test_build_post_data() -> None:
    """Test form and JSON encoding of request bodies."""
    data = {"username": "user@example.com", "scope": "a b"}
    assert build_post_data(data, as_json=False) == (
        "username=user%40example.com&scope=a+b"
    )
    assert json.loads(build_post_data(data, as_json=True)) == data


def test_token_expiry() -> None:
    """Test token validity handling."""
    assert CarNetToken().is_expired()

    token = CarNetToken.from_api_token(CarNetApiToken(access_token="at"))
    assert token.validity == 3600
    assert token.auth_type == "Bearer"
    assert not token.is_expired()

    expired = CarNetToken(access_token="at", validity=10, issued_at=time.monotonic() - 20)
    assert expired.is_expired()


def test_get_brand_url(carnet_config: CarNetAccountConfig) -> None:
    """Test URL templates are filled in and joined with the base URL."""
    client = CarNetApiClient(carnet_config)

    assert client.get_brand_url(URI_VEHICLE_STATUS, VIN) == (
        f"https://msg.audi.de/fs-car/bs/vsr/v1/Audi/DE/vehicles/{VIN}/status"
    )
    assert client.get_brand_url(URI_HOME_REGION, VIN) == (
        f"{BASE_URL_HOME_REGION}/cs/vds/v1/vehicles/{VIN}/homeRegion"
    )
    assert client.get_brand_url(URI_VEHICLE_STATUS, VIN, {"type": "x"}).endswith(
        "/status?type=x"
    )


def test_get_base_url_unknown_brand(carnet_config: CarNetAccountConfig) -> None:
    """Test an unsupported brand is rejected."""
    carnet_config.brand = "Skoda"
    client = CarNetApiClient(carnet_config)

    with pytest.raises(CarNetError):
        client.get_base_url()

    carnet_config.brand = "volkswagen"
    assert client.get_base_url() == "https://msg.volkswagen.de/fs-car"


@pytest.mark.asyncio
async def test_connect_requests_all_tokens(carnet_config: CarNetAccountConfig) -> None:
    """Test connect acquires access, identity and security token."""
    session = FakeSession(
        [
            FakeResponse(
                200, {"access_token": "at", "token_type": "AudiAuth", "expires_in": 3600}
            ),
            FakeResponse(200, {"id_token": "idt", "access_token": "x", "expires_in": 3600}),
            FakeResponse(200, {"access_token": "sec", "expires_in": 3600}),
            FakeResponse(200, {"userVehicles": {"vehicle": [VIN]}}),
        ]
    )
    client = CarNetApiClient(carnet_config, session=session)

    await client.connect()

    assert client.api_token.access_token == "at"
    assert client.id_token.id_token == "idt"
    assert client.security_token.access_token == "sec"

    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == "https://msg.audi.de/fs-car/core/auth/v1/Audi/DE/token"
    assert kwargs["headers"]["Content-Type"] == CONTENT_TYPE_FORM
    assert kwargs["data"] == (
        b"grant_type=password&username=user%40example.com&password=secret"
    )

    _, _, kwargs = session.calls[2]
    assert kwargs["headers"]["Content-Type"] == CONTENT_TYPE_JSON
    assert json.loads(kwargs["data"])["token"] == "idt"

    vehicles = await client.get_vehicles()
    assert vehicles.vehicles == [VIN]
    _, _, kwargs = session.calls[3]
    assert kwargs["headers"]["Authorization"] == "AudiAuth 1 at"
    # Cached tokens are not requested again
    assert len(session.calls) == 4


@pytest.mark.asyncio
async def test_connect_invalid_credentials(carnet_config: CarNetAccountConfig) -> None:
    """Test an OAuth error during login raises an authentication error."""
    session = FakeSession(
        [FakeResponse(400, {"error": "invalid_grant", "error_description": "bad"})]
    )
    client = CarNetApiClient(carnet_config, session=session)

    with pytest.raises(CarNetAuthenticationError) as err:
        await client.connect()
    assert err.value.api_result.api_error.error == "invalid_grant"
    assert err.value.api_result.http_code == 400


@pytest.mark.asyncio
async def test_connect_without_access_token(carnet_config: CarNetAccountConfig) -> None:
    """Test a token response without a token is an authentication error."""
    session = FakeSession([FakeResponse(200, {"token_type": "AudiAuth"})])
    client = CarNetApiClient(carnet_config, session=session)

    with pytest.raises(CarNetAuthenticationError):
        await client.connect()


@pytest.mark.asyncio
async def test_request_not_connected(carnet_config: CarNetAccountConfig) -> None:
    """Test requests fail without a session."""
    client = CarNetApiClient(carnet_config)
    client.api_token = _valid_token(access_token="at")

    with pytest.raises(CarNetConnectionError):
        await client.get_vehicles()


@pytest.mark.asyncio
async def test_response_whitespace_is_removed(carnet_config: CarNetAccountConfig) -> None:
    """Test tabs and line breaks are stripped from responses."""
    session = FakeSession(
        [FakeResponse(200, '{\t"userVehicles": {"vehicle": "WAU1"}}\r\n')]
    )
    client = _logged_in_client(carnet_config, session)

    vehicles = await client.get_vehicles()

    assert vehicles.vehicles == ["WAU1"]


@pytest.mark.asyncio
async def test_gateway_authorization_error(carnet_config: CarNetAccountConfig) -> None:
    """Test the gateway authorization error maps to an authentication error."""
    body = {"error": {"errorCode": "gw.error.authorization", "description": "denied"}}
    session = FakeSession([FakeResponse(403, body)])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetAuthenticationError):
        await client.get_vehicle_status(VIN)


@pytest.mark.asyncio
async def test_api_error_keeps_error_document(carnet_config: CarNetAccountConfig) -> None:
    """Test other API errors carry the parsed error document."""
    body = {
        "error": {
            "errorCode": "gw.error.validation",
            "description": "Service disabled (VSR.security.9007)",
            "details": {"reason": "privacy"},
        }
    }
    session = FakeSession([FakeResponse(400, body)])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetApiError) as err:
        await client.get_vehicle_status(VIN)

    error = err.value.api_result.api_error
    assert error.code == "gw.error.validation"
    assert error.reason == "privacy"
    assert err.value.api_result.http_code == 400


@pytest.mark.asyncio
async def test_no_content_raises_with_http_code(carnet_config: CarNetAccountConfig) -> None:
    """Test HTTP 204 raises an API error carrying the status code."""
    session = FakeSession([FakeResponse(204, "")])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetApiError) as err:
        await client.get_stored_position(VIN)
    assert err.value.api_result.http_code == 204


@pytest.mark.asyncio
async def test_unauthorized_without_body(carnet_config: CarNetAccountConfig) -> None:
    """Test HTTP 401 raises an authentication error."""
    session = FakeSession([FakeResponse(401, "")])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetAuthenticationError):
        await client.get_vehicles()


@pytest.mark.asyncio
async def test_invalid_json(carnet_config: CarNetAccountConfig) -> None:
    """Test a non JSON body is reported as API error."""
    session = FakeSession([FakeResponse(200, "<html>maintenance</html>")])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetApiError):
        await client.get_vehicles()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exception",
    [aiohttp.ClientConnectionError("refused"), TimeoutError()],
)
async def test_transport_errors(
    carnet_config: CarNetAccountConfig, exception: Exception
) -> None:
    """Test transport failures raise a connection error."""
    session = FakeSession([exception])
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetConnectionError):
        await client.get_vehicles()


@pytest.mark.asyncio
async def test_lock_door_runs_pin_challenge(carnet_config: CarNetAccountConfig) -> None:
    """Test locking answers the PIN challenge and sends the RLU request."""
    session = FakeSession(
        [
            FakeResponse(
                200,
                {
                    "securityPinAuthInfo": {
                        "securityToken": "challenge-token",
                        "securityPinTransmission": {
                            "challenge": "ABCDEF01",
                            "hashProcedureVersion": 1,
                        },
                        "remainingTries": 3,
                    }
                },
            ),
            FakeResponse(200, {"securityToken": "action-token"}),
            FakeResponse(202, {"rluActionResponse": {"requestId": 42, "vin": VIN}}),
        ]
    )
    client = _logged_in_client(carnet_config, session)

    response = await client.lock_door(VIN, True)

    assert response.request_id == "42"

    method, url, _ = session.calls[0]
    assert method == "GET"
    assert url.startswith(BASE_URL_HOME_REGION)
    assert "rlu_v1/operations/LOCK" in url

    _, _, kwargs = session.calls[1]
    pin = json.loads(kwargs["data"])["securityPinAuthentication"]
    assert pin["securityToken"] == "challenge-token"
    assert pin["securityPin"]["securityPinHash"] == security_pin_hash("1234", "ABCDEF01")

    _, url, kwargs = session.calls[2]
    assert url.endswith(f"/bs/rlu/v1/Audi/DE/vehicles/{VIN}/actions")
    assert kwargs["headers"][HEADER_SEC_TOKEN] == "action-token"
    assert kwargs["headers"]["Content-Type"] == CONTENT_TYPE_RLU
    assert b"<action>lock</action>" in kwargs["data"]


@pytest.mark.asyncio
async def test_lock_door_without_challenge(carnet_config: CarNetAccountConfig) -> None:
    """Test actions run without the action token if the vehicle sends no challenge."""
    carnet_config.spin = ""
    session = FakeSession(
        [
            FakeResponse(200, {"securityPinAuthInfo": {}}),
            FakeResponse(202, {"rluActionResponse": {"requestId": 43, "vin": VIN}}),
        ]
    )
    client = _logged_in_client(carnet_config, session)

    response = await client.lock_door(VIN, False)

    assert response.request_id == "43"
    assert len(session.calls) == 2
    _, url, kwargs = session.calls[1]
    assert url.endswith(f"/bs/rlu/v1/Audi/DE/vehicles/{VIN}/actions")
    assert HEADER_SEC_TOKEN not in kwargs["headers"]
    assert b"<action>unlock</action>" in kwargs["data"]


@pytest.mark.asyncio
async def test_lock_door_challenge_requires_pin(carnet_config: CarNetAccountConfig) -> None:
    """Test a challenge without a configured security PIN fails the action."""
    carnet_config.spin = ""
    session = FakeSession(
        [
            FakeResponse(
                200,
                {
                    "securityPinAuthInfo": {
                        "securityToken": "challenge-token",
                        "securityPinTransmission": {"challenge": "ABCDEF01"},
                    }
                },
            ),
        ]
    )
    client = _logged_in_client(carnet_config, session)

    with pytest.raises(CarNetError):
        await client.lock_door(VIN, False)
    # Only the challenge was requested
    assert len(session.calls) == 1
    assert "rlu_v1/operations/UNLOCK" in session.calls[0][1]


@pytest.mark.asyncio
async def test_clima_control(carnet_config: CarNetAccountConfig) -> None:
    """Test climatisation is started without a PIN challenge."""
    carnet_config.spin = ""
    session = FakeSession([FakeResponse(200, {"action": {"actionId": 7}})])
    client = _logged_in_client(carnet_config, session)

    response = await client.clima_control(VIN, True)

    assert response.request_id == "7"
    _, url, kwargs = session.calls[0]
    assert url.endswith("/climater/actions")
    assert json.loads(kwargs["data"]) == {"action": {"type": "startClimatisation"}}


@pytest.mark.asyncio
async def test_clima_control_refreshes_security_token(
    carnet_config: CarNetAccountConfig,
) -> None:
    """Test an expired security token is renewed before a climater action."""
    session = FakeSession(
        [
            FakeResponse(200, {"access_token": "sec2", "expires_in": 3600}),
            FakeResponse(200, {"action": {"actionId": 8}}),
        ]
    )
    client = _logged_in_client(carnet_config, session)
    client.security_token = _expired_token(access_token="sec")

    await client.control_window_heating(VIN, False)

    assert session.calls[0][1] == URL_GET_SEC_TOKEN
    assert json.loads(session.calls[0][2]["data"])["token"] == "idt"
    assert session.calls[1][1].endswith("/climater/actions")
    assert client.security_token.access_token == "sec2"


@pytest.mark.asyncio
async def test_refresh_only_expired_id_token(carnet_config: CarNetAccountConfig) -> None:
    """Test an expired identity token is renewed on its own."""
    session = FakeSession(
        [FakeResponse(200, {"id_token": "idt2", "access_token": "x", "expires_in": 3600})]
    )
    client = _logged_in_client(carnet_config, session)
    client.id_token = _expired_token(id_token="idt")

    await client.refresh_tokens()

    assert [(method, url) for method, url, _ in session.calls] == [
        ("POST", URL_GET_AUDI_TOKEN)
    ]
    assert client.id_token.id_token == "idt2"
    assert client.api_token.access_token == "at"
    assert client.security_token.access_token == "sec"


@pytest.mark.asyncio
async def test_refresh_security_token_uses_new_id_token(
    carnet_config: CarNetAccountConfig,
) -> None:
    """Test the security token exchange waits for a renewed identity token."""
    session = FakeSession(
        [
            FakeResponse(200, {"id_token": "idt2", "access_token": "x", "expires_in": 3600}),
            FakeResponse(200, {"access_token": "sec2", "expires_in": 3600}),
        ]
    )
    client = _logged_in_client(carnet_config, session)
    client.id_token = _expired_token(id_token="idt")
    client.security_token = _expired_token(access_token="sec")

    await client.refresh_tokens()

    assert [url for _, url, _ in session.calls] == [URL_GET_AUDI_TOKEN, URL_GET_SEC_TOKEN]
    assert json.loads(session.calls[1][2]["data"])["token"] == "idt2"
    assert client.security_token.access_token == "sec2"


@pytest.mark.asyncio
async def test_refresh_only_expired_access_token(
    carnet_config: CarNetAccountConfig,
) -> None:
    """Test an expired access token is renewed without touching the others."""
    session = FakeSession(
        [FakeResponse(200, {"access_token": "at2", "token_type": "AudiAuth"})]
    )
    client = _logged_in_client(carnet_config, session)
    client.api_token = _expired_token(access_token="at")

    await client.refresh_tokens()

    assert [(method, url) for method, url, _ in session.calls] == [
        ("POST", "https://msg.audi.de/fs-car/core/auth/v1/Audi/DE/token")
    ]
    assert client.api_token.access_token == "at2"
    assert client.id_token.id_token == "idt"
