"""
Fixed names used when talking to the IGC REST API.
"""

from typing import Dict, List

REST_ROOT = "/ibm/iis/igc-rest/v1"

EP_TYPES = f"{REST_ROOT}/types"
EP_ASSET = f"{REST_ROOT}/assets"
EP_SEARCH = f"{REST_ROOT}/search"
EP_LOGOUT = f"{REST_ROOT}/logout"
EP_BUNDLES = f"{REST_ROOT}/bundles"
EP_BUNDLE_ASSETS = f"{EP_BUNDLES}/assets"

JSON = "application/json"
XML = "application/xml"

# Searching this type matches any asset by id
CATCHALL_TYPE = "main_object"

# Types outside main_object that can still be looked up by id
ID_LOOKUP_TYPES: List[str] = ["classification", "label", "user", "group"]

# Types probed when opening a session
PROBE_TYPES: List[str] = [
    "category",
    "term",
    "information_governance_policy",
    "information_governance_rule",
]

PROPERTIES_TO_IGNORE = frozenset({
    "_id",
    "_type",
    "_name",
    "_url",
    "_context",
    "_expand",
})

MOD_CREATED_BY = "created_by"
MOD_CREATED_ON = "created_on"
MOD_MODIFIED_BY = "modified_by"
MOD_MODIFIED_ON = "modified_on"

MODIFICATION_PROPERTIES: List[str] = [
    MOD_CREATED_BY,
    MOD_CREATED_ON,
    MOD_MODIFIED_BY,
    MOD_MODIFIED_ON,
]

KIND_STRING = "string"
KIND_ENUM = "enum"

WORKFLOW_DRAFT = "workflowMode=draft"

# Types whose instances are searched under a different type name
_SEARCH_TYPE_OVERRIDES: Dict[str, str] = {
    "host_(engine)": "host",
}


def asset_type_for_search(asset_type: str) -> str:
    return _SEARCH_TYPE_OVERRIDES.get(asset_type, asset_type)
