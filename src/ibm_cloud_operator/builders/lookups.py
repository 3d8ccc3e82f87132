"""Secondary lookups used by the ResourceInstance builders.

Resource instances are described by human-readable names (resource group,
plan, service) while the resource controller works with ids. These helpers
translate between the two through the resource manager, global catalog and
global tagging APIs.
"""

from __future__ import annotations

from typing import Any, Optional

from ..exceptions import LookupFailedError
from ..services.ibmcloud.base import CloudClient

# crn:v1:<cloud>:<ctype>:<service>:<location>:<scope>:<instance>:<type>:<resource>
_CRN_SEGMENTS = 10
_CRN_SERVICE = 4
_CRN_LOCATION = 5


def get_resource_group_id(client: CloudClient, name: str) -> str:
    """Return the id of the resource group called ``name``."""
    try:
        groups = client.list_resource_groups()
    except Exception as e:
        raise LookupFailedError(f"could not find resource group id: {e}") from e
    for group in groups:
        if group.get("name") == name and group.get("id"):
            return group["id"]
    raise LookupFailedError("could not find resource group id")


def get_resource_group_name(client: CloudClient, group_id: str) -> str:
    """Return the name of the resource group with id ``group_id``."""
    try:
        groups = client.list_resource_groups()
    except Exception as e:
        raise LookupFailedError(f"could not find resource group name: {e}") from e
    for group in groups:
        if group.get("id") == group_id and group.get("name"):
            return group["name"]
    raise LookupFailedError("could not find resource group name")


def _service_plans(client: CloudClient, service_name: str) -> list[dict[str, Any]]:
    try:
        entries = client.search_catalog(service_name)
    except Exception as e:
        raise LookupFailedError(f"service not found in catalog: {e}") from e
    if not entries:
        raise LookupFailedError("service not found in catalog")

    ui = (entries[0].get("metadata") or {}).get("ui") or {}
    offering_id = ui.get("primary_offering_id") or entries[0].get("id")
    if not offering_id:
        raise LookupFailedError("service not found in catalog")

    try:
        return client.get_catalog_children(offering_id)
    except Exception as e:
        raise LookupFailedError(f"service not found in catalog: {e}") from e


def get_resource_plan_id(client: CloudClient, service_name: str, plan_name: str) -> str:
    """Return the catalog id of plan ``plan_name`` of service ``service_name``."""
    for plan in _service_plans(client, service_name):
        if plan.get("name") == plan_name and plan.get("id"):
            return plan["id"]
    raise LookupFailedError("could not find plan ID for plan name")


def get_resource_plan_name(client: CloudClient, service_name: str, plan_id: str) -> str:
    """Return the name of the plan with catalog id ``plan_id``."""
    for plan in _service_plans(client, service_name):
        if plan.get("id") == plan_id and plan.get("name"):
            return plan["name"]
    raise LookupFailedError("could not find plan name for plan id")


def get_resource_instance_tags(client: CloudClient, crn: str) -> Optional[list[str]]:
    """Return the user tags attached to ``crn``, or None if there are none."""
    try:
        tags = client.list_tags(crn)
    except Exception as e:
        raise LookupFailedError(f"could not get tags: {e}") from e
    return list(tags) if tags else None


def tags_diff(desired: Optional[list[str]], actual: Optional[list[str]]) -> tuple[list[str], list[str]]:
    """Return ``(to_attach, to_detach)``, each in the order of its source list."""
    desired = desired or []
    actual = actual or []
    to_attach = [t for t in desired if t not in actual]
    to_detach = [t for t in actual if t not in desired]
    return to_attach, to_detach


def update_resource_instance_tags(client: CloudClient, crn: str, desired: Optional[list[str]]) -> bool:
    """Attach and detach tags so ``crn`` carries exactly ``desired``.

    Returns:
        True if any tag was attached or detached
    """
    actual = get_resource_instance_tags(client, crn)
    to_attach, to_detach = tags_diff(desired, actual)
    try:
        if to_attach:
            client.attach_tags(crn, to_attach)
        if to_detach:
            client.detach_tags(crn, to_detach)
    except Exception as e:
        raise LookupFailedError(f"could not update tags: {e}") from e
    return bool(to_attach or to_detach)


def parse_crn(crn: Optional[str]) -> Optional[list[str]]:
    """Split a CRN into its segments, or return None if it is not a CRN."""
    if not crn:
        return None
    segments = crn.split(":")
    if len(segments) != _CRN_SEGMENTS or segments[0] != "crn":
        return None
    return segments


def get_service_name(observed: dict[str, Any]) -> str:
    """Service name of a resource instance, taken from its CRN."""
    segments = parse_crn(observed.get("crn"))
    return segments[_CRN_SERVICE] if segments else ""


def generate_target(observed: dict[str, Any]) -> str:
    """Deployment target (location) of a resource instance, taken from its CRN."""
    segments = parse_crn(observed.get("crn"))
    return segments[_CRN_LOCATION] if segments else ""
