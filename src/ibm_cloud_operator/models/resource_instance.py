"""ResourceInstance desired state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .common import drop_none


@dataclass
class ResourceInstanceParameters:
    """Desired state of a resource instance (``spec.forProvider``)."""

    name: str = ""
    target: str = ""
    resource_group_name: str = ""
    service_name: str = ""
    resource_plan_name: str = ""
    tags: Optional[list[str]] = None
    allow_cleanup: Optional[bool] = None
    parameters: Optional[dict[str, Any]] = None
    entity_lock: Optional[str] = None

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "ResourceInstanceParameters":
        data = data or {}
        tags = data.get("tags")
        parameters = data.get("parameters")
        return cls(
            name=data.get("name") or "",
            target=data.get("target") or "",
            resource_group_name=data.get("resourceGroupName") or "",
            service_name=data.get("serviceName") or "",
            resource_plan_name=data.get("resourcePlanName") or "",
            tags=list(tags) if tags is not None else None,
            allow_cleanup=data.get("allowCleanup"),
            parameters=dict(parameters) if parameters is not None else None,
            entity_lock=data.get("entityLock"),
        )

    def to_spec(self) -> dict[str, Any]:
        return drop_none({
            "name": self.name,
            "target": self.target,
            "resourceGroupName": self.resource_group_name,
            "serviceName": self.service_name,
            "resourcePlanName": self.resource_plan_name,
            "tags": list(self.tags) if self.tags is not None else None,
            "allowCleanup": self.allow_cleanup,
            "parameters": self.parameters,
            "entityLock": self.entity_lock,
        })
