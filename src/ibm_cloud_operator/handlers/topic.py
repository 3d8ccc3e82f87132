"""Handler for Event Streams Topic CRD."""

from __future__ import annotations

import json
import os
from typing import Any, Optional

import kopf

from ..builders.topic import (
    generate_create_topic_options,
    generate_topic_observation,
    generate_update_topic_options,
    is_topic_up_to_date,
    late_initialize_topic,
)
from ..constants import (
    API_GROUP_VERSION,
    KAFKA_ADMIN_URL_KEY,
    KIND_TOPIC,
    PLURAL_RESOURCE_KEY,
    PLURAL_TOPIC,
    REASON_AVAILABLE,
)
from ..exceptions import OperatorError, ReferenceNotFoundError, ResolutionPendingError
from ..models import TopicParameters
from ..services.ibmcloud import CloudClient
from ..utils.references import connection_secret_ref
from ..utils.secrets import read_secret_data
from .base import ExternalObservation, ManagedResourceHandler
from .shared import get_core_client


def _admin_url(params: TopicParameters) -> str:
    if not params.kafka_admin_url:
        raise OperatorError("kafkaAdminUrl is not set")
    return params.kafka_admin_url


class TopicHandler(ManagedResourceHandler):
    """Handler for Topic resources. The external name is the topic name."""

    plural = PLURAL_TOPIC

    def __init__(self):
        """Initialize topic handler."""
        super().__init__(KIND_TOPIC)

    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> TopicParameters:
        return TopicParameters.from_spec(for_provider)

    def resolve_references(self, api: Any, params: TopicParameters, meta: dict[str, Any]) -> bool:
        """Resolve ``kafkaAdminUrl`` from the connection secret of a ResourceKey.

        The reference yields the secret location; the URL itself is read from
        the secret's ``kafka_admin_url`` key.
        """
        ref, selector = params.kafka_admin_url_ref, params.kafka_admin_url_selector
        if ref is None and selector is None:
            return False
        if params.kafka_admin_url and selector is None:
            return False

        result = self.resolve_field(
            api,
            meta,
            PLURAL_RESOURCE_KEY,
            "spec.forProvider.kafkaAdminUrl",
            None,
            ref,
            selector,
            connection_secret_ref,
        )
        secret_ref = json.loads(result.value)
        try:
            data = read_secret_data(get_core_client(), secret_ref["namespace"], secret_ref["name"])
        except ValueError as e:
            raise ResolutionPendingError(f"spec.forProvider.kafkaAdminUrl: {e}") from e
        if KAFKA_ADMIN_URL_KEY not in data:
            raise ReferenceNotFoundError(f"{KAFKA_ADMIN_URL_KEY}: key not found")

        url = data[KAFKA_ADMIN_URL_KEY]
        changed = url != params.kafka_admin_url or result.reference != ref
        params.kafka_admin_url = url
        params.kafka_admin_url_ref = result.reference
        return changed

    def fetch(self, cloud: CloudClient, params: TopicParameters, external_name: str) -> Optional[dict[str, Any]]:
        return cloud.get_topic(_admin_url(params), external_name)

    def late_initialize(self, cloud: CloudClient, params: TopicParameters, resource: dict[str, Any]) -> bool:
        return late_initialize_topic(params, resource)

    def is_up_to_date(self, cloud: CloudClient, params: TopicParameters, resource: dict[str, Any]) -> bool:
        return is_topic_up_to_date(params, resource)

    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        return generate_topic_observation(resource)

    def ready_reason(self, resource: dict[str, Any]) -> str:
        return REASON_AVAILABLE

    def create(self, cloud: CloudClient, params: TopicParameters) -> str:
        cloud.create_topic(_admin_url(params), generate_create_topic_options(params))
        return params.name

    def update(
        self, cloud: CloudClient, params: TopicParameters, external_name: str, observed: ExternalObservation
    ) -> bool:
        admin_url = _admin_url(params)
        # Partition growth is computed against a fresh read
        current = cloud.get_topic(admin_url, external_name)
        body = generate_update_topic_options(params, current)
        if not body:
            return False
        cloud.update_topic(admin_url, external_name, body)
        return True

    def delete_external(self, cloud: CloudClient, params: TopicParameters, external_name: str) -> None:
        cloud.delete_topic(_admin_url(params), external_name)


# Global handler instance
_handler = TopicHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_TOPIC)
@kopf.on.update(API_GROUP_VERSION, KIND_TOPIC)
@kopf.on.resume(API_GROUP_VERSION, KIND_TOPIC)
@kopf.timer(API_GROUP_VERSION, KIND_TOPIC, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_topic(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Topic resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_TOPIC)
def handle_topic_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Topic resource deletion."""
    _handler.delete(spec, meta, status, patch)
