"""Typed desired-state parameters for the managed resource kinds."""

from .common import (
    IdentityByID,
    IdentityRepresentation,
    ResourceGroupIdentity,
    ResourceInstanceState,
    ResourceKeyState,
    VPCIdentity,
    VPCState,
    ZoneIdentity,
)
from .resource_instance import ResourceInstanceParameters
from .resource_key import ResourceKeyParameters, ResourceKeyPostParameters
from .subnet import SubnetByCIDR, SubnetByTotalCount, SubnetParameters, SubnetStrategy
from .topic import ConfigCreate, TopicParameters
from .vpc import VPCParameters

__all__ = [
    "IdentityByID",
    "IdentityRepresentation",
    "ResourceGroupIdentity",
    "VPCIdentity",
    "ZoneIdentity",
    "VPCState",
    "ResourceInstanceState",
    "ResourceKeyState",
    "VPCParameters",
    "SubnetParameters",
    "SubnetByTotalCount",
    "SubnetByCIDR",
    "SubnetStrategy",
    "ResourceInstanceParameters",
    "ResourceKeyParameters",
    "ResourceKeyPostParameters",
    "TopicParameters",
    "ConfigCreate",
]
