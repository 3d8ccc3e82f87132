"""Builders for Event Streams Topic resources."""

from __future__ import annotations

from typing import Any, Optional

from ..models import ConfigCreate, TopicParameters
from ..models.common import drop_none
from .common import diff_fields, late_init

# Topic configs managed by the operator
KNOWN_CONFIGS = (
    "cleanup.policy",
    "retention.bytes",
    "retention.ms",
    "segment.bytes",
    "segment.index.bytes",
    "segment.ms",
)

# Resolution bookkeeping, create-only fields, and fields compared separately
_EXCLUDED_FIELDS = (
    "kafka_admin_url",
    "kafka_admin_url_ref",
    "kafka_admin_url_selector",
    "partitions",
    "partition_count",
    "configs",
)


def _observed_configs(observed: dict[str, Any]) -> dict[str, str]:
    configs = observed.get("configs") or {}
    return {name: str(value) for name, value in configs.items() if value is not None and value != ""}


def late_initialize_topic(params: TopicParameters, observed: dict[str, Any]) -> bool:
    """Fill unset topic parameters from the observed topic.

    Configs in forProvider always win; known configs missing from forProvider
    are appended from the observed topic.

    Returns:
        True if any parameter was written
    """
    changed = False

    if params.partitions is None:
        source = params.partition_count if params.partition_count is not None else observed.get("partitions")
        params.partitions, c = late_init(params.partitions, source)
        changed |= c

    params.partition_count, c = late_init(params.partition_count, observed.get("partitions"))
    changed |= c

    observed_configs = _observed_configs(observed)
    desired_names = {c.name for c in params.configs or []}
    missing = [
        ConfigCreate(name=name, value=observed_configs[name])
        for name in KNOWN_CONFIGS
        if name not in desired_names and name in observed_configs
    ]
    if missing:
        params.configs = list(params.configs or []) + missing
        changed = True

    return changed


def generate_topic_parameters(observed: dict[str, Any]) -> TopicParameters:
    observed_configs = _observed_configs(observed)
    configs = [ConfigCreate(name=n, value=observed_configs[n]) for n in KNOWN_CONFIGS if n in observed_configs]
    return TopicParameters(
        name=observed.get("name") or "",
        partitions=observed.get("partitions"),
        partition_count=observed.get("partitions"),
        configs=configs or None,
    )


def _partitions_to_add(params: TopicParameters, observed: dict[str, Any]) -> Optional[int]:
    current: Optional[int] = observed.get("partitions")
    if params.partition_count is not None and (current is None or params.partition_count > current):
        return params.partition_count
    return None


def _configs_match(params: TopicParameters, observed: dict[str, Any]) -> bool:
    observed_configs = _observed_configs(observed)
    return all(observed_configs.get(name) == value for name, value in params.config_map().items())


def is_topic_up_to_date(params: TopicParameters, observed: dict[str, Any]) -> bool:
    """A partition count at or below the observed one is up to date, since partitions only grow."""
    actual = generate_topic_parameters(observed)
    if diff_fields(params, actual, exclude=_EXCLUDED_FIELDS):
        return False
    if _partitions_to_add(params, observed) is not None:
        return False
    return _configs_match(params, observed)


def generate_create_topic_options(params: TopicParameters) -> dict[str, Any]:
    return drop_none({
        "name": params.name,
        "partitions": params.partitions,
        "partition_count": params.partition_count,
        "configs": [c.to_spec() for c in params.configs] if params.configs else None,
    })


def generate_update_topic_options(params: TopicParameters, observed: dict[str, Any]) -> dict[str, Any]:
    """Build the topic update request.

    The partition count can only grow; a smaller desired count is ignored.
    """
    body: dict[str, Any] = {}
    new_count = _partitions_to_add(params, observed)
    if new_count is not None:
        body["new_total_partition_count"] = new_count

    observed_configs = _observed_configs(observed)
    configs = [
        {"name": name, "value": value, "reset_to_default": False}
        for name, value in params.config_map().items()
        if observed_configs.get(name) != value
    ]
    if configs:
        body["configs"] = configs
    return body


def generate_topic_observation(observed: dict[str, Any]) -> dict[str, Any]:
    """Build ``status.atProvider`` from an observed topic."""
    configs = observed.get("configs") or {}
    observed_configs = drop_none({
        "cleanupPolicy": configs.get("cleanup.policy"),
        "minInsyncReplicas": configs.get("min.insync.replicas"),
        "retentionBytes": configs.get("retention.bytes"),
        "retentionMs": configs.get("retention.ms"),
        "segmentBytes": configs.get("segment.bytes"),
        "segmentIndexBytes": configs.get("segment.index.bytes"),
        "segmentMs": configs.get("segment.ms"),
    })
    assignments = []
    for item in observed.get("replicaAssignments") or []:
        assignments.append(drop_none({
            "id": item.get("id"),
            "brokers": drop_none({"replicas": (item.get("brokers") or {}).get("replicas")}) or None,
        }))

    return drop_none({
        "cleanupPolicy": observed.get("cleanupPolicy"),
        "configs": observed_configs or None,
        "replicaAssignments": assignments or None,
        "replicationFactor": observed.get("replicationFactor"),
        "retentionMs": observed.get("retentionMs"),
    })
