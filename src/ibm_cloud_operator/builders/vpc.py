"""Builders for VPC resources."""

from __future__ import annotations

from typing import Any

from ..constants import REASON_AVAILABLE, REASON_CREATING, REASON_DELETING, REASON_UNAVAILABLE
from ..models import ResourceGroupIdentity, VPCParameters, VPCState
from ..models.common import drop_none
from .common import generate_reference, is_empty, late_init, ref_id

_REFERENCE_KEYS = ("crn", "href", "id", "name")


def vpc_state_reason(status: str | None) -> str:
    """Map a VPC or subnet lifecycle state to a Ready condition reason."""
    state = VPCState(status or "unknown")
    if state is VPCState.AVAILABLE:
        return REASON_AVAILABLE
    if state is VPCState.PENDING:
        return REASON_CREATING
    if state is VPCState.DELETING:
        return REASON_DELETING
    if state in (VPCState.FAILED, VPCState.UNKNOWN):
        return REASON_UNAVAILABLE
    raise ValueError(f"unhandled VPC state {state}")


def late_initialize_vpc(params: VPCParameters, observed: dict[str, Any]) -> bool:
    """Fill unset VPC parameters from the observed VPC.

    Returns:
        True if any parameter was written
    """
    changed = False

    params.name, name_changed = late_init(params.name, observed.get("name"))
    changed |= name_changed

    group_id = ref_id(observed, "resource_group")
    if not is_empty(group_id):
        if params.resource_group is None:
            params.resource_group = ResourceGroupIdentity(id=group_id)
            changed = True
        elif is_empty(params.resource_group.id):
            params.resource_group.id = group_id
            changed = True

    return changed


def is_vpc_up_to_date(params: VPCParameters, observed: dict[str, Any]) -> bool:
    """Only the name of a VPC can be changed after creation. An unset name is never sent."""
    if is_empty(params.name):
        return True
    return params.name == observed.get("name")


def generate_create_vpc_options(params: VPCParameters) -> dict[str, Any]:
    return drop_none({
        "name": params.name or None,
        "address_prefix_management": params.address_prefix_management,
        "classic_access": params.classic_access,
        "resource_group": (
            params.resource_group.to_request()
            if params.resource_group and not params.resource_group.is_empty()
            else None
        ),
    })


def generate_update_vpc_options(params: VPCParameters) -> dict[str, Any]:
    return {"name": params.name}


def generate_vpc_observation(observed: dict[str, Any]) -> dict[str, Any]:
    """Build ``status.atProvider`` from an observed VPC."""
    cse_source_ips = []
    for item in observed.get("cse_source_ips") or []:
        cse_source_ips.append(drop_none({
            "ip": (item.get("ip") or {}).get("address"),
            "zone": generate_reference(item.get("zone"), ("href", "name")),
        }))

    return drop_none({
        "classicAccess": observed.get("classic_access"),
        "createdAt": observed.get("created_at"),
        "crn": observed.get("crn"),
        "cseSourceIps": cse_source_ips or None,
        "defaultNetworkAcl": generate_reference(observed.get("default_network_acl"), _REFERENCE_KEYS),
        "defaultRoutingTable": generate_reference(
            observed.get("default_routing_table"), ("href", "id", "name", "resource_type")
        ),
        "defaultSecurityGroup": generate_reference(observed.get("default_security_group"), _REFERENCE_KEYS),
        "href": observed.get("href"),
        "id": observed.get("id"),
        "name": observed.get("name"),
        "resourceGroup": generate_reference(observed.get("resource_group"), ("href", "id", "name")),
        "status": observed.get("status"),
    })
