"""Topic desired state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..utils.references import Reference, Selector
from .common import drop_none


@dataclass
class ConfigCreate:
    """A single topic configuration entry."""

    name: str = ""
    value: str = ""

    @classmethod
    def from_spec(cls, data: dict[str, Any]) -> "ConfigCreate":
        return cls(name=data.get("name") or "", value=str(data.get("value") or ""))

    def to_spec(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class TopicParameters:
    """Desired state of an Event Streams topic (``spec.forProvider``)."""

    name: str = ""
    kafka_admin_url: Optional[str] = None
    kafka_admin_url_ref: Optional[Reference] = None
    kafka_admin_url_selector: Optional[Selector] = None
    partitions: Optional[int] = None
    partition_count: Optional[int] = None
    configs: Optional[list[ConfigCreate]] = None

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> "TopicParameters":
        data = data or {}
        configs = data.get("configs")
        return cls(
            name=data.get("name") or "",
            kafka_admin_url=data.get("kafkaAdminUrl"),
            kafka_admin_url_ref=Reference.from_spec(data.get("kafkaAdminUrlRef")),
            kafka_admin_url_selector=Selector.from_spec(data.get("kafkaAdminUrlSelector")),
            partitions=data.get("partitions"),
            partition_count=data.get("partitionCount"),
            configs=[ConfigCreate.from_spec(c) for c in configs] if configs is not None else None,
        )

    def to_spec(self) -> dict[str, Any]:
        return drop_none({
            "name": self.name,
            "kafkaAdminUrl": self.kafka_admin_url,
            "kafkaAdminUrlRef": self.kafka_admin_url_ref.to_spec() if self.kafka_admin_url_ref else None,
            "kafkaAdminUrlSelector": (
                self.kafka_admin_url_selector.to_spec() if self.kafka_admin_url_selector else None
            ),
            "partitions": self.partitions,
            "partitionCount": self.partition_count,
            "configs": [c.to_spec() for c in self.configs] if self.configs is not None else None,
        })

    def config_map(self) -> dict[str, str]:
        """Configs as a name to value mapping."""
        return {c.name: c.value for c in self.configs or []}
