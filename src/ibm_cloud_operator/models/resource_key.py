"""ResourceKey desired state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..utils.references import Reference, Selector
from .common import drop_none


@dataclass
class ResourceKeyPostParameters:
    """Extra parameters sent when the key is created."""

    serviceid_crn: str = ""

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["ResourceKeyPostParameters"]:
        if data is None:
            return None
        return cls(serviceid_crn=data.get("serviceidCrn") or "")

    def to_spec(self) -> dict[str, Any]:
        return {"serviceidCrn": self.serviceid_crn} if self.serviceid_crn else {}


@dataclass
class ResourceKeyParameters:
    """Desired state of a resource key (``spec.forProvider``)."""

    name: str = ""
    source: Optional[str] = None
    source_ref: Optional[Reference] = None
    source_selector: Optional[Selector] = None
    parameters: Optional[ResourceKeyPostParameters] = None
    role: Optional[str] = None

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "ResourceKeyParameters":
        data = data or {}
        return cls(
            name=data.get("name") or "",
            source=data.get("source"),
            source_ref=Reference.from_spec(data.get("sourceRef")),
            source_selector=Selector.from_spec(data.get("sourceSelector")),
            parameters=ResourceKeyPostParameters.from_spec(data.get("parameters")),
            role=data.get("role"),
        )

    def to_spec(self) -> dict[str, Any]:
        return drop_none({
            "name": self.name,
            "source": self.source,
            "sourceRef": self.source_ref.to_spec() if self.source_ref else None,
            "sourceSelector": self.source_selector.to_spec() if self.source_selector else None,
            "parameters": self.parameters.to_spec() if self.parameters else None,
            "role": self.role,
        })
