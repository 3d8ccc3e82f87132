"""Subnet desired state.

A subnet is created either from a total address count or from an explicit
CIDR block. ``SubnetParameters`` holds exactly one of the two prototypes, so
the inactive branch cannot be populated by accident.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from .common import IdentityByID, ResourceGroupIdentity, VPCIdentity, ZoneIdentity, drop_none


class SubnetStrategy(str, Enum):
    """How the subnet's address range is chosen; also the forProvider key of each branch."""

    BY_TOTAL_COUNT = "byTotalCount"
    BY_CIDR = "byCIDR"


@dataclass
class _SubnetPrototypeBase:
    vpc: VPCIdentity = field(default_factory=VPCIdentity)
    ip_version: Optional[str] = None
    name: Optional[str] = None
    network_acl: Optional[IdentityByID] = None
    public_gateway: Optional[IdentityByID] = None
    resource_group: Optional[ResourceGroupIdentity] = None
    routing_table: Optional[IdentityByID] = None
    zone: Optional[ZoneIdentity] = None

    @staticmethod
    def _common_from_spec(data: dict[str, Any]) -> dict[str, Any]:
        return {
            "vpc": VPCIdentity.from_spec(data.get("vpc")),
            "ip_version": data.get("ipVersion"),
            "name": data.get("name"),
            "network_acl": IdentityByID.from_spec(data.get("networkACL")),
            "public_gateway": IdentityByID.from_spec(data.get("publicGateway")),
            "resource_group": ResourceGroupIdentity.from_spec(data.get("resourceGroup")),
            "routing_table": IdentityByID.from_spec(data.get("routingTable")),
            "zone": ZoneIdentity.from_spec(data.get("zone")),
        }

    def _common_to_spec(self) -> dict[str, Any]:
        return {
            "vpc": self.vpc.to_spec(),
            "ipVersion": self.ip_version,
            "name": self.name,
            "networkACL": self.network_acl.to_spec() if self.network_acl else None,
            "publicGateway": self.public_gateway.to_spec() if self.public_gateway else None,
            "resourceGroup": self.resource_group.to_spec() if self.resource_group else None,
            "routingTable": self.routing_table.to_spec() if self.routing_table else None,
            "zone": self.zone.to_spec() if self.zone else None,
        }


@dataclass
class SubnetByTotalCount(_SubnetPrototypeBase):
    """Subnet whose CIDR block is allocated from a total address count."""

    strategy: ClassVar[SubnetStrategy] = SubnetStrategy.BY_TOTAL_COUNT

    total_ipv4_address_count: Optional[int] = None

    @classmethod
    def from_spec(cls, data: dict[str, Any]) -> "SubnetByTotalCount":
        return cls(
            total_ipv4_address_count=data.get("totalIpv4AddressCount"),
            **cls._common_from_spec(data),
        )

    def to_spec(self) -> dict[str, Any]:
        result = self._common_to_spec()
        result["totalIpv4AddressCount"] = self.total_ipv4_address_count
        return drop_none(result)


@dataclass
class SubnetByCIDR(_SubnetPrototypeBase):
    """Subnet with an explicit IPv4 CIDR block."""

    strategy: ClassVar[SubnetStrategy] = SubnetStrategy.BY_CIDR

    ipv4_cidr_block: Optional[str] = None

    @classmethod
    def from_spec(cls, data: dict[str, Any]) -> "SubnetByCIDR":
        return cls(
            ipv4_cidr_block=data.get("ipv4CIDRBlock"),
            **cls._common_from_spec(data),
        )

    def to_spec(self) -> dict[str, Any]:
        result = self._common_to_spec()
        result["ipv4CIDRBlock"] = self.ipv4_cidr_block
        return drop_none(result)


SubnetPrototype = Union[SubnetByTotalCount, SubnetByCIDR]

_PROTOTYPES: dict[SubnetStrategy, type] = {
    SubnetStrategy.BY_TOTAL_COUNT: SubnetByTotalCount,
    SubnetStrategy.BY_CIDR: SubnetByCIDR,
}


@dataclass
class SubnetParameters:
    """Desired state of a subnet (``spec.forProvider``)."""

    prototype: SubnetPrototype

    @property
    def strategy(self) -> SubnetStrategy:
        return self.prototype.strategy

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "SubnetParameters":
        """Build parameters from ``spec.forProvider``.

        Raises:
            ValueError: Unless exactly one of ``byTotalCount`` and ``byCIDR`` is set
        """
        data = data or {}
        present = [s for s in SubnetStrategy if data.get(s.value) is not None]
        if len(present) != 1:
            raise ValueError("exactly one of byTotalCount or byCIDR must be set")
        strategy = present[0]
        return cls(prototype=_PROTOTYPES[strategy].from_spec(data[strategy.value]))

    def to_spec(self) -> dict[str, Any]:
        return {self.strategy.value: self.prototype.to_spec()}
