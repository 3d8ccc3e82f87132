"""Builders for ResourceInstance resources."""

from __future__ import annotations

from typing import Any

from ..constants import REASON_AVAILABLE, REASON_CREATING, REASON_UNAVAILABLE
from ..exceptions import LookupFailedError
from ..models import ResourceInstanceParameters, ResourceInstanceState
from ..models.common import drop_none
from ..services.ibmcloud.base import CloudClient
from .common import diff_fields, is_empty, late_init
from .lookups import (
    generate_target,
    get_resource_group_id,
    get_resource_group_name,
    get_resource_instance_tags,
    get_resource_plan_id,
    get_resource_plan_name,
    get_service_name,
)

# States in which the instance is considered to exist
EXISTING_STATES = frozenset({
    ResourceInstanceState.ACTIVE,
    ResourceInstanceState.INACTIVE,
    ResourceInstanceState.PROVISIONING,
})

_OBSERVATION_KEYS = (
    "id",
    "guid",
    "crn",
    "url",
    "account_id",
    "resource_group_id",
    "resource_group_crn",
    "resource_id",
    "resource_plan_id",
    "target_crn",
    "state",
    "type",
    "sub_type",
    "locked",
    "last_operation",
    "dashboard_url",
    "plan_history",
    "resource_aliases_url",
    "resource_bindings_url",
    "resource_keys_url",
    "created_at",
    "created_by",
    "updated_at",
    "updated_by",
    "deleted_at",
    "deleted_by",
    "scheduled_reclaim_at",
    "scheduled_reclaim_by",
    "restored_at",
    "restored_by",
    "migrated",
    "extensions",
)


# Fields the update request cannot change
_CREATE_ONLY_FIELDS = ("entity_lock", "target", "service_name", "resource_group_name")


def _camel(key: str) -> str:
    head, *rest = key.split("_")
    return head + "".join(part.capitalize() for part in rest)


def instance_state(observed: dict[str, Any]) -> ResourceInstanceState:
    return ResourceInstanceState(observed.get("state") or "unknown")


def instance_exists(observed: dict[str, Any]) -> bool:
    return instance_state(observed) in EXISTING_STATES


def resource_instance_state_reason(state: ResourceInstanceState) -> str:
    """Map a resource instance state to a Ready condition reason."""
    if state is ResourceInstanceState.ACTIVE:
        return REASON_AVAILABLE
    if state in (ResourceInstanceState.INACTIVE, ResourceInstanceState.PROVISIONING):
        return REASON_CREATING
    if state in (
        ResourceInstanceState.REMOVED,
        ResourceInstanceState.PENDING_RECLAMATION,
        ResourceInstanceState.FAILED,
        ResourceInstanceState.UNKNOWN,
    ):
        return REASON_UNAVAILABLE
    raise ValueError(f"unhandled resource instance state {state}")


def late_initialize_resource_instance(
    client: CloudClient,
    params: ResourceInstanceParameters,
    observed: dict[str, Any],
) -> bool:
    """Fill unset parameters from the observed instance.

    Tags and the resource group name need a lookup; lookup errors propagate.

    Returns:
        True if any parameter was written
    """
    changed = False

    if params.tags is None:
        tags = get_resource_instance_tags(client, observed.get("crn") or "")
        params.tags, c = late_init(params.tags, tags)
        changed |= c

    if is_empty(params.resource_group_name) and observed.get("resource_group_id"):
        name = get_resource_group_name(client, observed["resource_group_id"])
        params.resource_group_name, c = late_init(params.resource_group_name, name)
        changed |= c

    params.allow_cleanup, c = late_init(params.allow_cleanup, observed.get("allow_cleanup"))
    changed |= c
    params.parameters, c = late_init(params.parameters, observed.get("parameters"))
    changed |= c

    return changed


def generate_resource_instance_parameters(
    client: CloudClient, observed: dict[str, Any]
) -> ResourceInstanceParameters:
    """Build the desired state that the observed instance corresponds to."""
    service_name = get_service_name(observed)
    plan_name = ""
    if observed.get("resource_plan_id"):
        plan_name = get_resource_plan_name(client, service_name, observed["resource_plan_id"])
    group_name = ""
    if observed.get("resource_group_id"):
        group_name = get_resource_group_name(client, observed["resource_group_id"])

    return ResourceInstanceParameters(
        name=observed.get("name") or "",
        target=generate_target(observed),
        resource_group_name=group_name,
        service_name=service_name,
        resource_plan_name=plan_name,
        tags=get_resource_instance_tags(client, observed.get("crn") or ""),
        allow_cleanup=observed.get("allow_cleanup"),
        parameters=observed.get("parameters"),
    )


def is_resource_instance_up_to_date(
    client: CloudClient,
    params: ResourceInstanceParameters,
    observed: dict[str, Any],
) -> bool:
    actual = generate_resource_instance_parameters(client, observed)
    return not diff_fields(params, actual, exclude=_CREATE_ONLY_FIELDS, unordered=("tags",))


def _plan_id(client: CloudClient, params: ResourceInstanceParameters) -> str:
    try:
        return get_resource_plan_id(client, params.service_name, params.resource_plan_name)
    except LookupFailedError as e:
        raise LookupFailedError(f"error getting resource plan ID: {e}") from e


def generate_create_resource_instance_options(
    client: CloudClient, params: ResourceInstanceParameters
) -> dict[str, Any]:
    """Build the create request, resolving the resource group and plan ids."""
    try:
        group_id = get_resource_group_id(client, params.resource_group_name)
    except LookupFailedError as e:
        raise LookupFailedError(f"error getting resource group ID: {e}") from e

    return drop_none({
        "name": params.name,
        "target": params.target,
        "resource_group": group_id,
        "resource_plan_id": _plan_id(client, params),
        "tags": params.tags,
        "allow_cleanup": params.allow_cleanup,
        "parameters": params.parameters,
        "entity_lock": params.entity_lock,
    })


def generate_update_resource_instance_options(
    client: CloudClient, params: ResourceInstanceParameters
) -> dict[str, Any]:
    """Build the update request. Tags are reconciled separately."""
    return drop_none({
        "name": params.name,
        "parameters": params.parameters,
        "resource_plan_id": _plan_id(client, params),
        "allow_cleanup": params.allow_cleanup,
    })


def generate_resource_instance_observation(observed: dict[str, Any]) -> dict[str, Any]:
    """Build ``status.atProvider`` from an observed instance."""
    return drop_none({_camel(key): observed.get(key) for key in _OBSERVATION_KEYS})
