"""Internal constants shared across the library."""

USER_AGENT = "vinsync/1"

# Issue tracker REST endpoints (v2 API).
SEARCH_ENDPOINT = "/rest/api/2/search"
ISSUE_ENDPOINT = "/rest/api/2/issue/{issue_id}"
MYSELF_ENDPOINT = "/rest/api/2/myself"
MY_PERMISSIONS_ENDPOINT = "/rest/api/2/mypermissions"
FIELDS_ENDPOINT = "/rest/api/2/field"

# Telemetry provider lookup, keyed by VIN.
VEHICLE_ENDPOINT = "/vehicles/{vin}"

REQUIRED_PERMISSIONS: tuple[str, ...] = ("BROWSE_PROJECTS", "EDIT_ISSUES")

DEFAULT_PAGE_SIZE = 100
