"""Handler for ResourceKey CRD."""

from __future__ import annotations

import os
from typing import Any, Optional

import kopf

from ..builders.resource_key import (
    generate_create_resource_key_options,
    generate_resource_key_observation,
    generate_update_resource_key_options,
    get_resource_key_connection_details,
    is_resource_key_up_to_date,
    key_exists,
    key_state,
    late_initialize_resource_key,
    resource_key_state_reason,
)
from ..constants import API_GROUP_VERSION, KIND_RESOURCE_KEY, PLURAL_RESOURCE_INSTANCE, PLURAL_RESOURCE_KEY
from ..exceptions import OperatorError
from ..models import ResourceKeyParameters
from ..services.ibmcloud import CloudClient
from ..utils.references import external_id_from_status
from .base import ExternalObservation, ManagedResourceHandler


class ResourceKeyHandler(ManagedResourceHandler):
    """Handler for ResourceKey resources. The external name is the key id."""

    plural = PLURAL_RESOURCE_KEY

    def __init__(self):
        """Initialize resource key handler."""
        super().__init__(KIND_RESOURCE_KEY)

    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> ResourceKeyParameters:
        return ResourceKeyParameters.from_spec(for_provider)

    def resolve_references(self, api: Any, params: ResourceKeyParameters, meta: dict[str, Any]) -> bool:
        """Resolve ``source`` from a ResourceInstance resource."""
        result = self.resolve_field(
            api,
            meta,
            PLURAL_RESOURCE_INSTANCE,
            "spec.forProvider.source",
            params.source,
            params.source_ref,
            params.source_selector,
            external_id_from_status,
        )
        changed = result.value != (params.source or "") or result.reference != params.source_ref
        params.source = result.value or params.source
        params.source_ref = result.reference
        return changed

    def fetch(self, cloud: CloudClient, params: ResourceKeyParameters, external_name: str) -> Optional[dict[str, Any]]:
        key = cloud.get_resource_key(external_name)
        return key if key_exists(key) else None

    def late_initialize(self, cloud: CloudClient, params: ResourceKeyParameters, resource: dict[str, Any]) -> bool:
        return late_initialize_resource_key(params, resource)

    def is_up_to_date(self, cloud: CloudClient, params: ResourceKeyParameters, resource: dict[str, Any]) -> bool:
        return is_resource_key_up_to_date(params, resource)

    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        return generate_resource_key_observation(resource)

    def ready_reason(self, resource: dict[str, Any]) -> str:
        return resource_key_state_reason(key_state(resource))

    def connection_details(self, spec: dict[str, Any], resource: dict[str, Any]) -> dict[str, bytes]:
        return get_resource_key_connection_details(spec.get("connectionTemplates"), resource)

    def create(self, cloud: CloudClient, params: ResourceKeyParameters) -> str:
        created = cloud.create_resource_key(generate_create_resource_key_options(params))
        if not created.get("id"):
            raise OperatorError("create response has no id")
        return created["id"]

    def update(
        self, cloud: CloudClient, params: ResourceKeyParameters, external_name: str, observed: ExternalObservation
    ) -> bool:
        cloud.update_resource_key(external_name, generate_update_resource_key_options(params))
        return True

    def delete_external(self, cloud: CloudClient, params: ResourceKeyParameters, external_name: str) -> None:
        cloud.delete_resource_key(external_name)


# Global handler instance
_handler = ResourceKeyHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_RESOURCE_KEY)
@kopf.on.update(API_GROUP_VERSION, KIND_RESOURCE_KEY)
@kopf.on.resume(API_GROUP_VERSION, KIND_RESOURCE_KEY)
@kopf.timer(API_GROUP_VERSION, KIND_RESOURCE_KEY, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_resource_key(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ResourceKey resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_RESOURCE_KEY)
def handle_resource_key_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ResourceKey resource deletion."""
    _handler.delete(spec, meta, status, patch)
