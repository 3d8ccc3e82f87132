"""Identity value objects and lifecycle state enums shared by several kinds."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..utils.references import Reference, Selector


class IdentityRepresentation(str, Enum):
    """Wire shape used when sending a resource group identity to the cloud API."""

    BY_ID = "ById"
    GENERIC = "Generic"


@dataclass
class IdentityByID:
    """Reference to a network ACL, public gateway or routing table by id."""

    id: str = ""

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["IdentityByID"]:
        if data is None:
            return None
        return cls(id=data.get("id") or "")

    def to_spec(self) -> dict[str, Any]:
        return {"id": self.id}

    def is_empty(self) -> bool:
        return not self.id


@dataclass
class ZoneIdentity:
    """Reference to a zone by name."""

    name: str = ""

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["ZoneIdentity"]:
        if data is None:
            return None
        return cls(name=data.get("name") or "")

    def to_spec(self) -> dict[str, Any]:
        return {"name": self.name}

    def is_empty(self) -> bool:
        return not self.name


@dataclass
class ResourceGroupIdentity:
    """A resource group identity with an explicit wire representation.

    The VPC API accepts either a generic resource group identity or a
    by-id identity; both carry only the id. ``representation`` records which
    one was asked for so it can be chosen once, when the request is built.
    """

    id: str = ""
    representation: IdentityRepresentation = IdentityRepresentation.BY_ID

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["ResourceGroupIdentity"]:
        if data is None:
            return None
        by_id = data.get("isByID", True)
        return cls(
            id=data.get("id") or "",
            representation=IdentityRepresentation.BY_ID if by_id else IdentityRepresentation.GENERIC,
        )

    def to_spec(self) -> dict[str, Any]:
        return {"id": self.id, "isByID": self.representation is IdentityRepresentation.BY_ID}

    def is_empty(self) -> bool:
        return not self.id

    def to_request(self) -> dict[str, Any]:
        # Both wire shapes serialize to {"id": ...}
        return {"id": self.id}


@dataclass
class VPCIdentity:
    """The VPC a subnet belongs to, by id or by reference to a VPC resource."""

    id: Optional[str] = None
    vpc_ref: Optional[Reference] = None
    vpc_selector: Optional[Selector] = None

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "VPCIdentity":
        data = data or {}
        return cls(
            id=data.get("id"),
            vpc_ref=Reference.from_spec(data.get("vpcRef")),
            vpc_selector=Selector.from_spec(data.get("vpcSelector")),
        )

    def to_spec(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.id is not None:
            result["id"] = self.id
        if self.vpc_ref is not None:
            result["vpcRef"] = self.vpc_ref.to_spec()
        if self.vpc_selector is not None:
            result["vpcSelector"] = self.vpc_selector.to_spec()
        return result


class _LifecycleState(str, Enum):
    @classmethod
    def _missing_(cls, value: object) -> "_LifecycleState":
        return cls.UNKNOWN  # type: ignore[attr-defined]


class VPCState(_LifecycleState):
    """Lifecycle states reported for VPCs and subnets."""

    AVAILABLE = "available"
    PENDING = "pending"
    DELETING = "deleting"
    FAILED = "failed"
    UNKNOWN = "unknown"


class ResourceInstanceState(_LifecycleState):
    """Lifecycle states reported by the resource controller for instances."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    PROVISIONING = "provisioning"
    REMOVED = "removed"
    PENDING_RECLAMATION = "pending_reclamation"
    FAILED = "failed"
    UNKNOWN = "unknown"


class ResourceKeyState(_LifecycleState):
    """Lifecycle states reported by the resource controller for keys."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    REMOVED = "removed"
    UNKNOWN = "unknown"


def optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    return None if value is None else str(value)


def drop_none(data: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}
