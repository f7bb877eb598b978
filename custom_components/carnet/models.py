"""CarNet API data objects.

The CarNet backend answers with nested JSON documents. The classes in this
module map those documents to typed dataclasses. Flat objects are built by
``_from_dict_with_type_conversion``, which honours a ``key`` entry in the
field metadata when the JSON member name differs from the attribute name.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import logging
from typing import Any, TypeVar, get_args, get_type_hints

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _convert_value(value: Any, target_type: type) -> Any:
    """Convert a value to the target type.

    Raises:
        ValueError: If conversion fails
    """
    if isinstance(value, target_type):
        return value

    if target_type is bool:
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value)
    if target_type is float:
        return float(value)
    if target_type is int:
        # Decimal strings like "382.00" are common in CarNet responses
        return int(float(value))
    if target_type is str:
        return str(value)

    return value


def _from_dict_with_type_conversion(cls: type[T], data: dict | None) -> T:
    """Create dataclass instance from dict with proper type conversion.

    Args:
        cls: Dataclass type to create
        data: Dictionary with data from API

    Returns:
        Instance of the dataclass with properly typed fields
    """
    if not data:
        return cls()

    hints = get_type_hints(cls)
    filtered_data = {}

    for dc_field in fields(cls):  # type: ignore[arg-type]
        key = dc_field.metadata.get("key", dc_field.name)
        value = data.get(key)
        if value is None:
            continue

        type_args = get_args(hints[dc_field.name])
        actual_type = next((t for t in type_args if t is not type(None)), None)
        if actual_type is None:
            actual_type = hints[dc_field.name]

        try:
            filtered_data[dc_field.name] = _convert_value(value, actual_type)
        except (ValueError, TypeError) as e:
            _LOGGER.debug(
                "Failed to convert %s=%s to %s: %s", key, value, actual_type, e
            )

    return cls(**filtered_data)


@dataclass
class CarNetApiToken:
    """Token response of the OAuth endpoints.

    {"access_token": "64217P2j...", "token_type": "AudiAuth", "expires_in": 3600}
    """

    auth_type: str | None = field(default=None, metadata={"key": "token_type"})
    access_token: str | None = field(default=None, metadata={"key": "access_token"})
    id_token: str | None = field(default=None, metadata={"key": "id_token"})
    refresh_token: str | None = field(
        default=None, metadata={"key": "refresh_token"}
    )
    security_token: str | None = field(
        default=None, metadata={"key": "securityToken"}
    )
    validity: int | None = field(default=None, metadata={"key": "expires_in"})
    scope: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetApiToken:
        """Create token from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class CarNetApiErrorMessage:
    """Error document returned by the API.

    Two shapes are seen in the wild, the OAuth one
    ``{"error": "invalid_grant", "error_description": "..."}`` and the
    gateway one ``{"error": {"errorCode": "gw.error.authorization",
    "description": "...", "details": {"reason": "..."}}}``.
    """

    error: str = ""
    code: str = ""
    description: str = ""
    reason: str = ""

    @classmethod
    def from_dict(cls, data: dict | None) -> CarNetApiErrorMessage:
        """Create error message from API response dictionary."""
        if not data:
            return cls()

        error = data.get("error")
        if isinstance(error, dict):
            details = error.get("details") or {}
            return cls(
                error=str(error.get("errorCode", "")),
                code=str(error.get("errorCode", "")),
                description=str(error.get("description", "")),
                reason=str(details.get("reason", "")) if isinstance(details, dict) else "",
            )

        return cls(
            error=str(error or ""),
            code=str(data.get("code", "")),
            description=str(data.get("error_description", "")),
        )

    def is_error(self) -> bool:
        """Return True if the document described an error."""
        return bool(self.error or self.code)

    def __str__(self) -> str:
        return f"{self.error} ({self.code}): {self.description}"


@dataclass
class CarNetVehicleList:
    """{"userVehicles": {"vehicle": ["WAUZZZF21LN046449"]}}."""

    vehicles: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CarNetVehicleList:
        """Create vehicle list from API response dictionary."""
        user_vehicles = data.get("userVehicles") or {}
        vehicles = user_vehicles.get("vehicle") or []
        if isinstance(vehicles, str):
            vehicles = [vehicles]
        return cls(vehicles=[str(vin) for vin in vehicles])


@dataclass
class CarNetVehicleDetails:
    """Vehicle details from the carport data endpoint."""

    system_id: str | None = field(default=None, metadata={"key": "systemId"})
    request_id: str | None = field(default=None, metadata={"key": "requestId"})
    brand: str | None = None
    country: str | None = None
    vin: str | None = None
    model_code: str | None = field(default=None, metadata={"key": "modelCode"})
    model_name: str | None = field(default=None, metadata={"key": "modelName"})
    model_year: str | None = field(default=None, metadata={"key": "modelYear"})
    color: str | None = None
    country_code: str | None = field(default=None, metadata={"key": "countryCode"})
    engine: str | None = None
    mmi: str | None = None
    transmission: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetVehicleDetails:
        """Create details from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data.get("carportData"))


@dataclass
class CarNetStatusField:
    """A single value of the stored vehicle data report.

    {"id": "0x0101010002", "tsCarSentUtc": "2020-02-20T19:05:18Z",
     "milCarCaptured": 3944, "value": "3944", "unit": "km"}
    """

    id: str = ""
    ts_car_sent_utc: str | None = field(default=None, metadata={"key": "tsCarSentUtc"})
    ts_car_sent: str | None = field(default=None, metadata={"key": "tsCarSent"})
    ts_car_captured: str | None = field(
        default=None, metadata={"key": "tsCarCaptured"}
    )
    ts_tss_received_utc: str | None = field(
        default=None, metadata={"key": "tsTssReceivedUtc"}
    )
    mil_car_captured: int | None = field(
        default=None, metadata={"key": "milCarCaptured"}
    )
    mil_car_sent: int | None = field(default=None, metadata={"key": "milCarSent"})
    value: str | None = None
    unit: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetStatusField:
        """Create status field from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data)


@dataclass
class CarNetStatusData:
    """A block of status fields sharing a data id."""

    id: str = ""
    fields: list[CarNetStatusField] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CarNetStatusData:
        """Create status block from API response dictionary."""
        raw_fields = data.get("field") or []
        if isinstance(raw_fields, dict):
            raw_fields = [raw_fields]
        return cls(
            id=str(data.get("id", "")),
            fields=[CarNetStatusField.from_dict(f) for f in raw_fields],
        )


@dataclass
class CarNetVehicleStatus:
    """Stored vehicle data report (``StoredVehicleDataResponse``)."""

    vin: str = ""
    data: list[CarNetStatusData] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> CarNetVehicleStatus:
        """Create vehicle status from API response dictionary."""
        response = data.get("StoredVehicleDataResponse") or {}
        vehicle_data = response.get("vehicleData") or {}
        blocks = vehicle_data.get("data") or []
        if isinstance(blocks, dict):
            blocks = [blocks]
        return cls(
            vin=str(response.get("vin", "")),
            data=[CarNetStatusData.from_dict(block) for block in blocks],
        )

    def iter_fields(self):
        """Yield (data block, field) for every reported value."""
        for block in self.data:
            for status_field in block.fields:
                yield block, status_field


@dataclass
class CarNetVehiclePosition:
    """Vehicle position from the find car service.

    Coordinates are reported in micro degrees.
    """

    latitude_raw: int | None = None
    longitude_raw: int | None = None
    timestamp_car_sent: str | None = None
    timestamp_tss_received: str | None = None
    parking_time_utc: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetVehiclePosition:
        """Create position from API response dictionary."""
        response = data.get("findCarResponse") or data.get("storedPositionResponse") or {}
        position = response.get("Position") or response.get("position") or {}
        coordinate = position.get("carCoordinate") or {}
        return cls(
            latitude_raw=coordinate.get("latitude"),
            longitude_raw=coordinate.get("longitude"),
            timestamp_car_sent=position.get("timestampCarSent"),
            timestamp_tss_received=position.get("timestampTssReceived"),
            parking_time_utc=response.get("parkingTimeUTC"),
        )

    @property
    def latitude(self) -> float | None:
        """Latitude in degrees."""
        if self.latitude_raw is None:
            return None
        return int(self.latitude_raw) / 1000000.0

    @property
    def longitude(self) -> float | None:
        """Longitude in degrees."""
        if self.longitude_raw is None:
            return None
        return int(self.longitude_raw) / 1000000.0

    @property
    def car_sent_time(self) -> str | None:
        """Time the position was received by the backend."""
        return self.timestamp_tss_received

    @property
    def parking_time(self) -> str | None:
        """Time the vehicle was parked, if known."""
        return self.parking_time_utc


@dataclass
class CarNetHomeRegion:
    """{"homeRegion": {"baseUri": {"systemId": "ICTO-10487", "content": "https://..."}}}."""

    system_id: str | None = None
    base_uri: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetHomeRegion:
        """Create home region from API response dictionary."""
        region = data.get("homeRegion") or {}
        base_uri = region.get("baseUri") or {}
        return cls(system_id=base_uri.get("systemId"), base_uri=base_uri.get("content"))


@dataclass
class CarNetServiceList:
    """Operation list of the vehicle for the current user."""

    vin: str | None = None
    channel_client: str | None = field(default=None, metadata={"key": "channelClient"})
    user_id: str | None = field(default=None, metadata={"key": "userId"})
    role: str | None = None
    security_level: str | None = field(default=None, metadata={"key": "securityLevel"})
    status: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetServiceList:
        """Create operation list from API response dictionary."""
        return _from_dict_with_type_conversion(cls, data.get("operationList"))


@dataclass
class CarNetSecurityPinAuthInfo:
    """Challenge returned when a privileged action requires the security PIN."""

    security_token: str | None = None
    hash_procedure_version: int | None = None
    challenge: str | None = None
    remaining_tries: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetSecurityPinAuthInfo:
        """Create PIN challenge from API response dictionary."""
        info = data.get("securityPinAuthInfo") or {}
        transmission = info.get("securityPinTransmission") or {}
        return cls(
            security_token=info.get("securityToken"),
            hash_procedure_version=transmission.get("hashProcedureVersion"),
            challenge=transmission.get("challenge"),
            remaining_tries=info.get("remainingTries", transmission.get("remainingTries")),
        )


@dataclass
class CarNetActionResponse:
    """{"rluActionResponse": {"requestId": 29543257, "vin": "..."}}."""

    request_id: str | None = None
    vin: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CarNetActionResponse:
        """Create action response from API response dictionary."""
        response = data.get("rluActionResponse") or data.get("action") or {}
        request_id = response.get("requestId", response.get("actionId"))
        return cls(
            request_id=str(request_id) if request_id is not None else None,
            vin=response.get("vin"),
        )
