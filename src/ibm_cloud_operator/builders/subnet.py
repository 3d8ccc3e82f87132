"""Builders for Subnet resources.

Every function here works on the active prototype of ``SubnetParameters``
only. The prototype of the other strategy does not exist, so it can be
neither read nor written.
"""

from __future__ import annotations

from typing import Any, Optional

from ..models import (
    IdentityByID,
    ResourceGroupIdentity,
    SubnetByCIDR,
    SubnetByTotalCount,
    SubnetParameters,
    SubnetStrategy,
    VPCIdentity,
    ZoneIdentity,
)
from ..models.common import drop_none
from .common import diff_fields, generate_reference, is_empty, late_init, ref_id

# Fields that cannot change once the subnet exists
IMMUTABLE_FIELDS = (
    "ip_version",
    "vpc",
    "zone",
    "resource_group",
    "total_ipv4_address_count",
    "ipv4_cidr_block",
)

# Prototype attribute -> VPC API key, for identities that can be patched
PATCHABLE_IDENTITIES = (
    ("network_acl", "network_acl"),
    ("public_gateway", "public_gateway"),
    ("routing_table", "routing_table"),
)

_REFERENCE_KEYS = ("crn", "href", "id", "name")


def _late_init_identity(
    current: Optional[IdentityByID], observed_id: Optional[str]
) -> tuple[Optional[IdentityByID], bool]:
    if is_empty(observed_id):
        return current, False
    if current is None:
        return IdentityByID(id=observed_id), True
    if is_empty(current.id):
        current.id = observed_id
        return current, True
    return current, False


def late_initialize_subnet(params: SubnetParameters, observed: dict[str, Any]) -> bool:
    """Fill unset fields of the active subnet prototype from the observed subnet.

    Returns:
        True if any field was written
    """
    proto = params.prototype
    changed = False

    proto.ip_version, c = late_init(proto.ip_version, observed.get("ip_version"))
    changed |= c
    proto.name, c = late_init(proto.name, observed.get("name"))
    changed |= c

    for attr, key in PATCHABLE_IDENTITIES:
        value, c = _late_init_identity(getattr(proto, attr), ref_id(observed, key))
        setattr(proto, attr, value)
        changed |= c

    group_id = ref_id(observed, "resource_group")
    if not is_empty(group_id):
        if proto.resource_group is None:
            proto.resource_group = ResourceGroupIdentity(id=group_id)
            changed = True
        elif is_empty(proto.resource_group.id):
            proto.resource_group.id = group_id
            changed = True

    vpc_id = ref_id(observed, "vpc")
    if is_empty(proto.vpc.id) and not is_empty(vpc_id):
        proto.vpc.id = vpc_id
        changed = True

    zone_name = (observed.get("zone") or {}).get("name")
    if not is_empty(zone_name):
        if proto.zone is None:
            proto.zone = ZoneIdentity(name=zone_name)
            changed = True
        elif is_empty(proto.zone.name):
            proto.zone.name = zone_name
            changed = True

    if isinstance(proto, SubnetByTotalCount):
        proto.total_ipv4_address_count, c = late_init(
            proto.total_ipv4_address_count, observed.get("total_ipv4_address_count")
        )
        changed |= c
    else:
        proto.ipv4_cidr_block, c = late_init(proto.ipv4_cidr_block, observed.get("ipv4_cidr_block"))
        changed |= c

    return changed


def _observed_identity(observed: dict[str, Any], key: str) -> Optional[IdentityByID]:
    observed_id = ref_id(observed, key)
    return None if observed_id is None else IdentityByID(id=observed_id)


def generate_subnet_parameters(strategy: SubnetStrategy, observed: dict[str, Any]) -> SubnetParameters:
    """Build the desired state that the observed subnet corresponds to.

    Args:
        strategy: Prototype to build, normally the strategy of the desired state
        observed: Subnet as returned by the VPC API
    """
    group_id = ref_id(observed, "resource_group")
    zone_name = (observed.get("zone") or {}).get("name")
    common = {
        "vpc": VPCIdentity(id=ref_id(observed, "vpc")),
        "ip_version": observed.get("ip_version"),
        "name": observed.get("name"),
        "network_acl": _observed_identity(observed, "network_acl"),
        "public_gateway": _observed_identity(observed, "public_gateway"),
        "resource_group": None if group_id is None else ResourceGroupIdentity(id=group_id),
        "routing_table": _observed_identity(observed, "routing_table"),
        "zone": None if zone_name is None else ZoneIdentity(name=zone_name),
    }
    if strategy is SubnetStrategy.BY_TOTAL_COUNT:
        proto = SubnetByTotalCount(total_ipv4_address_count=observed.get("total_ipv4_address_count"), **common)
    else:
        proto = SubnetByCIDR(ipv4_cidr_block=observed.get("ipv4_cidr_block"), **common)
    return SubnetParameters(prototype=proto)


def is_subnet_up_to_date(params: SubnetParameters, observed: dict[str, Any]) -> bool:
    """Return True if the observed subnet matches the patchable desired fields."""
    actual = generate_subnet_parameters(params.strategy, observed)
    excluded = IMMUTABLE_FIELDS
    if is_empty(params.prototype.name):
        # An unset name is never patched
        excluded += ("name",)
    return not diff_fields(params.prototype, actual.prototype, exclude=excluded)


def build_subnet_patch(params: SubnetParameters, observed: dict[str, Any]) -> dict[str, Any]:
    """Build the minimal merge patch converging the observed subnet to the desired state.

    Identities are always sent by id. An identity that is desired empty but
    observed set is cleared with an empty object.
    """
    proto = params.prototype
    patch: dict[str, Any] = {}

    if not is_empty(proto.name) and proto.name != observed.get("name"):
        patch["name"] = proto.name

    for attr, key in PATCHABLE_IDENTITIES:
        desired = getattr(proto, attr)
        desired_id = None if is_empty(desired) else desired.id
        actual_id = ref_id(observed, key)
        if is_empty(desired_id) and is_empty(actual_id):
            continue
        if desired_id == actual_id:
            continue
        patch[key] = {} if is_empty(desired_id) else {"id": desired_id}

    return patch


def _identity_request(identity: Optional[IdentityByID]) -> Optional[dict[str, Any]]:
    if identity is None or identity.is_empty():
        return None
    return {"id": identity.id}


def generate_create_subnet_options(params: SubnetParameters) -> dict[str, Any]:
    """Build the subnet prototype sent to the create call."""
    proto = params.prototype
    body = drop_none({
        "ip_version": proto.ip_version,
        "name": proto.name or None,
        "network_acl": _identity_request(proto.network_acl),
        "public_gateway": _identity_request(proto.public_gateway),
        "resource_group": (
            proto.resource_group.to_request()
            if proto.resource_group and not proto.resource_group.is_empty()
            else None
        ),
        "routing_table": _identity_request(proto.routing_table),
        "vpc": {"id": proto.vpc.id} if proto.vpc.id else None,
        "zone": {"name": proto.zone.name} if proto.zone and proto.zone.name else None,
    })
    if isinstance(proto, SubnetByTotalCount):
        if proto.total_ipv4_address_count is not None:
            body["total_ipv4_address_count"] = proto.total_ipv4_address_count
    elif proto.ipv4_cidr_block:
        body["ipv4_cidr_block"] = proto.ipv4_cidr_block
    return body


def generate_subnet_observation(observed: dict[str, Any]) -> dict[str, Any]:
    """Build ``status.atProvider`` from an observed subnet."""
    return drop_none({
        "availableIpv4AddressCount": observed.get("available_ipv4_address_count"),
        "createdAt": observed.get("created_at"),
        "crn": observed.get("crn"),
        "href": observed.get("href"),
        "id": observed.get("id"),
        "ipVersion": observed.get("ip_version"),
        "ipv4CIDRBlock": observed.get("ipv4_cidr_block"),
        "name": observed.get("name"),
        "networkACL": generate_reference(observed.get("network_acl"), _REFERENCE_KEYS),
        "publicGateway": generate_reference(
            observed.get("public_gateway"), ("crn", "href", "id", "name", "resource_type")
        ),
        "resourceGroup": generate_reference(observed.get("resource_group"), ("href", "id", "name")),
        "routingTable": generate_reference(
            observed.get("routing_table"), ("href", "id", "name", "resource_type")
        ),
        "status": observed.get("status"),
        "totalIpv4AddressCount": observed.get("total_ipv4_address_count"),
        "vpc": generate_reference(observed.get("vpc"), _REFERENCE_KEYS),
        "zone": generate_reference(observed.get("zone"), ("href", "name")),
    })
