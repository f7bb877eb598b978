"""Constants for the CarNet integration."""

from __future__ import annotations

from typing import Final

DOMAIN: Final = "carnet"

CONF_BRAND: Final = "brand"
CONF_COUNTRY: Final = "country"
CONF_VIN: Final = "vin"
CONF_SPIN: Final = "spin"

DEFAULT_COUNTRY: Final = "DE"
DEFAULT_SCAN_INTERVAL: Final = 900  # 15 minutes
MIN_SCAN_INTERVAL: Final = 300

# Brands
BRAND_AUDI: Final = "Audi"
BRAND_VW: Final = "VW"
BRANDS: Final = [BRAND_AUDI, BRAND_VW]

# Base URLs, relative API templates are appended to these
BASE_URL_AUDI: Final = "https://msg.audi.de/fs-car"
BASE_URL_VW: Final = "https://msg.volkswagen.de/fs-car"
BASE_URL_HOME_REGION: Final = "https://mal-1a.prd.ece.vwg-connect.com/api"

# URI templates: {brand}, {country} and {vin} are filled in per request
URI_GET_TOKEN: Final = "core/auth/v1/{brand}/{country}/token"
URL_GET_AUDI_TOKEN: Final = "https://id.audi.com/v1/token"
URL_GET_SEC_TOKEN: Final = (
    "https://mbboauth-1d.prd.ece.vwg-connect.com/mbbcoauth/mobile/oauth2/v1/token"
)
URI_VEHICLE_LIST: Final = "usermanagement/users/v1/{brand}/{country}/vehicles"
URI_VEHICLE_DETAILS: Final = (
    "promoter/portfolio/v1/{brand}/{country}/vehicle/{vin}/carportdata"
)
URI_VEHICLE_STATUS: Final = "bs/vsr/v1/{brand}/{country}/vehicles/{vin}/status"
URI_VEHICLE_POSITION: Final = "bs/cf/v1/{brand}/{country}/vehicles/{vin}/position"
URI_STORED_POSITION: Final = (
    "bs/cf/v1/{brand}/{country}/vehicles/{vin}/storedPosition"
)
URI_DESTINATIONS: Final = (
    "destinationfeedservice/mydestinations/v1/{brand}/{country}/vehicles/{vin}/destinations"
)
URI_HISTORY: Final = "bs/dwap/v1/{brand}/{country}/vehicles/{vin}/history"
URI_VEHICLE_MGMT_INFO: Final = "vehicleMgmt/vehicledata/v2/{brand}/{country}/vehicles/{vin}"
URI_VEHICLE_DATA: Final = "promoter/portfolio/v1/{brand}/{country}/vehicle/{vin}/data"
URI_VEHICLE_RIGHTS: Final = "rolesrights/permissions/v1/{brand}/{country}/vehicles/{vin}/fetched-permissions"
URI_VEHICLE_USERS: Final = "bs/uic/v1/vin/{vin}/users"
URI_CLIMATER_TIMER: Final = "bs/departuretimer/v1/{brand}/{country}/vehicles/{vin}/timer"
URI_CLIMATER_STATUS: Final = "bs/climatisation/v1/{brand}/{country}/vehicles/{vin}/climater"
URI_CLIMATER_ACTION: Final = (
    "bs/climatisation/v1/{brand}/{country}/vehicles/{vin}/climater/actions"
)
URI_CHARGER_STATUS: Final = "bs/batterycharge/v1/{brand}/{country}/vehicles/{vin}/charger"
URI_TRIP_DATA: Final = "bs/tripstatistics/v1/{brand}/{country}/vehicles/{vin}/tripdata/{trip_type}"
URI_POIS: Final = "b2c/poinav/v1/{brand}/{country}/vehicles/{vin}/pois"
URI_RLU_HISTORY: Final = "bs/rlu/v1/{brand}/{country}/vehicles/{vin}/actions"
URI_RLU_ACTION: Final = "bs/rlu/v1/{brand}/{country}/vehicles/{vin}/actions"
URI_PREHEAT_ACTION: Final = "bs/rs/v1/{brand}/{country}/vehicles/{vin}/action"
URI_HOME_REGION: Final = BASE_URL_HOME_REGION + "/cs/vds/v1/vehicles/{vin}/homeRegion"
URI_OPERATION_LIST: Final = (
    "{home_region}/rolesrights/operationlist/v3/vehicles/{vin}"
)
URI_SEC_PIN_REQUEST: Final = (
    "{home_region}/rolesrights/authorization/v2/vehicles/{vin}/services/{action}/security-pin-auth-requested"
)
URI_SEC_PIN_COMPLETE: Final = (
    "{home_region}/rolesrights/authorization/v2/security-pin-auth-completed"
)

# Security token actions
ACTION_LOCK: Final = "rlu_v1/operations/LOCK"
ACTION_UNLOCK: Final = "rlu_v1/operations/UNLOCK"
ACTION_PREHEAT: Final = "rheating_v1/operations/P_QSACT"

# Request headers
HEADER_USER_AGENT: Final = "okhttp/3.7.0"
HEADER_APP: Final = "X-App-Name"
HEADER_APP_EREMOTE: Final = "eRemote"
HEADER_APP_MYAUDI: Final = "myAudi"
HEADER_VERS: Final = "X-App-Version"
HEADER_VERS_VALUE: Final = "1.0.0"
HEADER_VERS_MYAUDI: Final = "3.14.0"
HEADER_CLIENT_ID: Final = "X-Client-Id"
HEADER_CLIENT_ID_VALUE: Final = "77869e21-e30a-4a92-b016-48ab7d3db1d8"
HEADER_HOST: Final = "Host"
HEADER_SEC_TOKEN: Final = "x-mbbSecToken"
AUTH_AUDI_VERS: Final = "1"
CONTENT_TYPE_JSON: Final = "application/json"
CONTENT_TYPE_FORM: Final = "application/x-www-form-urlencoded"
CONTENT_TYPE_RLU: Final = "application/vnd.vwg.mbb.RemoteLockUnlock_v1_0_0+xml"
CONTENT_TYPE_CLIMATER: Final = "application/vnd.vwg.mbb.ClimaterAction_v1_0_0+json"
CONTENT_TYPE_PREHEAT: Final = "application/vnd.vwg.mbb.RemoteStandheizung_v2_0_0+json"

ID_TOKEN_CLIENT_ID: Final = "mmiconnect_android"
ID_TOKEN_SCOPE: Final = (
    "openid profile email mbb offline_access mbbuserid myaudi "
    "selfservice:read selfservice:write"
)
SEC_TOKEN_SCOPE: Final = "sc2:fal"

REQUEST_TIMEOUT: Final = 30  # seconds

# Channel groups
GROUP_GENERAL: Final = "general"
GROUP_STATUS: Final = "status"
GROUP_RANGE: Final = "range"
GROUP_MAINT: Final = "maintenance"
GROUP_DOORS: Final = "doors"
GROUP_WINDOWS: Final = "windows"
GROUP_TIRES: Final = "tires"
GROUP_LOCATION: Final = "location"

# Item types
ITEM_SWITCH: Final = "Switch"
ITEM_STRING: Final = "String"
ITEM_NUMBER: Final = "Number"

# Aggregated channels
CHANNEL_LOCKED: Final = "vehicleLocked"
CHANNEL_MAINT_REQUIRED: Final = "maintenanceRequired"
CHANNEL_TIRES_OK: Final = "tiresOk"
CHANNEL_WINDOWS_CLOSED: Final = "windowsClosed"

# Location channels
CHANNEL_LOCATION_GEO: Final = "position"
CHANNEL_STORED_POS: Final = "storedPosition"
CHANNEL_LOCATION_TIME: Final = "positionLastUpdate"
CHANNEL_LOCATION_PARK: Final = "parkingTime"

# Control channels
CONTROL_LOCK: Final = "lock"
CONTROL_CLIMA: Final = "climater"
CONTROL_WINHEAT: Final = "windowHeat"
CONTROL_PREHEAT: Final = "preHeater"

# API status handling
API_STATUS_CLASS_SECURITY: Final = "VSR.security"
API_STATUS_DISABLED: Final = "9007"
API_STATUS_MESSAGES: Final[dict[str, str]] = {
    "9000": "Vehicle status service is not available",
    "9001": "Service is not activated for this vehicle",
    "9003": "Service requires the primary user to be verified",
    "9004": "Vehicle is in guest mode, data is not available",
    "9005": "Vehicle status service is temporarily locked",
    "9006": "The vehicle has not been reachable for too long",
    "9007": "Status service is disabled, check data privacy settings in the MMI",
    "gw.error.authorization": "Authorization failed, check user and password",
    "gw.error.validation": "Request was rejected by the API (validation failed)",
}
