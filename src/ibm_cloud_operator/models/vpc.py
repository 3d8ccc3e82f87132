"""VPC desired state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .common import ResourceGroupIdentity, drop_none


@dataclass
class VPCParameters:
    """Desired state of a VPC (``spec.forProvider``)."""

    address_prefix_management: Optional[str] = None
    classic_access: Optional[bool] = None
    name: Optional[str] = None
    resource_group: Optional[ResourceGroupIdentity] = None

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "VPCParameters":
        data = data or {}
        return cls(
            address_prefix_management=data.get("addressPrefixManagement"),
            classic_access=data.get("classicAccess"),
            name=data.get("name"),
            resource_group=ResourceGroupIdentity.from_spec(data.get("resourceGroup")),
        )

    def to_spec(self) -> dict[str, Any]:
        return drop_none({
            "addressPrefixManagement": self.address_prefix_management,
            "classicAccess": self.classic_access,
            "name": self.name,
            "resourceGroup": self.resource_group.to_spec() if self.resource_group else None,
        })
