"""Builders for ResourceKey resources."""

from __future__ import annotations

from typing import Any, Optional

from ..constants import REASON_AVAILABLE, REASON_CREATING, REASON_UNAVAILABLE
from ..models import ResourceKeyParameters, ResourceKeyPostParameters, ResourceKeyState
from ..models.common import drop_none
from ..utils.connection import extract_connection_details
from .common import diff_fields, late_init

# Bookkeeping and create-only fields; only the name of a key can be updated
_EXCLUDED_FIELDS = ("source", "source_ref", "source_selector", "parameters", "role")


def key_state(observed: dict[str, Any]) -> ResourceKeyState:
    return ResourceKeyState(observed.get("state") or "unknown")


def key_exists(observed: dict[str, Any]) -> bool:
    return key_state(observed) is not ResourceKeyState.REMOVED


def resource_key_state_reason(state: ResourceKeyState) -> str:
    if state is ResourceKeyState.ACTIVE:
        return REASON_AVAILABLE
    if state is ResourceKeyState.INACTIVE:
        return REASON_CREATING
    if state in (ResourceKeyState.REMOVED, ResourceKeyState.UNKNOWN):
        return REASON_UNAVAILABLE
    raise ValueError(f"unhandled resource key state {state}")


def _observed_role(observed: dict[str, Any]) -> Optional[str]:
    return observed.get("role") or (observed.get("credentials") or {}).get("iam_role_crn")


def late_initialize_resource_key(params: ResourceKeyParameters, observed: dict[str, Any]) -> bool:
    params.role, changed = late_init(params.role, _observed_role(observed))
    return changed


def generate_resource_key_parameters(observed: dict[str, Any]) -> ResourceKeyParameters:
    serviceid_crn = (observed.get("credentials") or {}).get("iam_serviceid_crn")
    return ResourceKeyParameters(
        name=observed.get("name") or "",
        source=observed.get("source_crn"),
        parameters=ResourceKeyPostParameters(serviceid_crn=serviceid_crn) if serviceid_crn else None,
        role=_observed_role(observed),
    )


def is_resource_key_up_to_date(params: ResourceKeyParameters, observed: dict[str, Any]) -> bool:
    """Only the name of a key is compared."""
    actual = generate_resource_key_parameters(observed)
    return not diff_fields(params, actual, exclude=_EXCLUDED_FIELDS)


def generate_create_resource_key_options(params: ResourceKeyParameters) -> dict[str, Any]:
    parameters = None
    if params.parameters is not None and params.parameters.serviceid_crn:
        parameters = {"serviceid_crn": params.parameters.serviceid_crn}
    return drop_none({
        "name": params.name,
        "source": params.source,
        "parameters": parameters,
        "role": params.role,
    })


def generate_update_resource_key_options(params: ResourceKeyParameters) -> dict[str, Any]:
    return {"name": params.name}


def get_resource_key_connection_details(
    templates: Optional[dict[str, str]], observed: dict[str, Any]
) -> dict[str, bytes]:
    """Connection details of a key, from its credentials."""
    return extract_connection_details(templates, observed.get("credentials"))


def generate_resource_key_observation(observed: dict[str, Any]) -> dict[str, Any]:
    """Build ``status.atProvider`` from an observed key. Credentials are never copied."""
    return drop_none({
        "accountId": observed.get("account_id"),
        "createdAt": observed.get("created_at"),
        "createdBy": observed.get("created_by"),
        "crn": observed.get("crn"),
        "deletedAt": observed.get("deleted_at"),
        "deletedBy": observed.get("deleted_by"),
        "guid": observed.get("guid"),
        "iamCompatible": observed.get("iam_compatible"),
        "id": observed.get("id"),
        "migrated": observed.get("migrated"),
        "resourceGroupId": observed.get("resource_group_id"),
        "resourceInstanceUrl": observed.get("resource_instance_url"),
        "sourceCrn": observed.get("source_crn"),
        "state": observed.get("state"),
        "updatedAt": observed.get("updated_at"),
        "updatedBy": observed.get("updated_by"),
        "url": observed.get("url"),
    })
