"""Handler for ResourceInstance CRD."""

from __future__ import annotations

import os
from typing import Any, Optional

import kopf

from ..builders.lookups import update_resource_instance_tags
from ..builders.resource_instance import (
    generate_create_resource_instance_options,
    generate_resource_instance_observation,
    generate_update_resource_instance_options,
    instance_exists,
    instance_state,
    is_resource_instance_up_to_date,
    late_initialize_resource_instance,
    resource_instance_state_reason,
)
from ..constants import API_GROUP_VERSION, KIND_RESOURCE_INSTANCE, PLURAL_RESOURCE_INSTANCE
from ..exceptions import OperatorError
from ..models import ResourceInstanceParameters
from ..services.ibmcloud import CloudClient
from .base import ExternalObservation, ManagedResourceHandler


class ResourceInstanceHandler(ManagedResourceHandler):
    """Handler for ResourceInstance resources. The external name is the instance id."""

    plural = PLURAL_RESOURCE_INSTANCE

    def __init__(self):
        """Initialize resource instance handler."""
        super().__init__(KIND_RESOURCE_INSTANCE)

    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> ResourceInstanceParameters:
        return ResourceInstanceParameters.from_spec(for_provider)

    def fetch(
        self, cloud: CloudClient, params: ResourceInstanceParameters, external_name: str
    ) -> Optional[dict[str, Any]]:
        instance = cloud.get_resource_instance(external_name)
        # Removed, reclaimed and failed instances count as absent
        return instance if instance_exists(instance) else None

    def late_initialize(
        self, cloud: CloudClient, params: ResourceInstanceParameters, resource: dict[str, Any]
    ) -> bool:
        return late_initialize_resource_instance(cloud, params, resource)

    def is_up_to_date(
        self, cloud: CloudClient, params: ResourceInstanceParameters, resource: dict[str, Any]
    ) -> bool:
        return is_resource_instance_up_to_date(cloud, params, resource)

    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        return generate_resource_instance_observation(resource)

    def ready_reason(self, resource: dict[str, Any]) -> str:
        return resource_instance_state_reason(instance_state(resource))

    def create(self, cloud: CloudClient, params: ResourceInstanceParameters) -> str:
        created = cloud.create_resource_instance(generate_create_resource_instance_options(cloud, params))
        if not created.get("id"):
            raise OperatorError("create response has no id")
        return created["id"]

    def update(
        self,
        cloud: CloudClient,
        params: ResourceInstanceParameters,
        external_name: str,
        observed: ExternalObservation,
    ) -> bool:
        cloud.update_resource_instance(external_name, generate_update_resource_instance_options(cloud, params))
        update_resource_instance_tags(cloud, observed.resource.get("crn") or "", params.tags)
        return True

    def delete_external(self, cloud: CloudClient, params: ResourceInstanceParameters, external_name: str) -> None:
        cloud.delete_resource_instance(external_name)


# Global handler instance
_handler = ResourceInstanceHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_RESOURCE_INSTANCE)
@kopf.on.update(API_GROUP_VERSION, KIND_RESOURCE_INSTANCE)
@kopf.on.resume(API_GROUP_VERSION, KIND_RESOURCE_INSTANCE)
@kopf.timer(
    API_GROUP_VERSION,
    KIND_RESOURCE_INSTANCE,
    interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")),
)
def handle_resource_instance(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ResourceInstance resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_RESOURCE_INSTANCE)
def handle_resource_instance_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ResourceInstance resource deletion."""
    _handler.delete(spec, meta, status, patch)
