"""Handler for Subnet CRD."""

from __future__ import annotations

import os
from typing import Any, Optional

import kopf

from ..builders.common import find_by_crn
from ..builders.subnet import (
    build_subnet_patch,
    generate_create_subnet_options,
    generate_subnet_observation,
    is_subnet_up_to_date,
    late_initialize_subnet,
)
from ..builders.vpc import vpc_state_reason
from ..constants import API_GROUP_VERSION, KIND_SUBNET, PLURAL_SUBNET, PLURAL_VPC
from ..exceptions import OperatorError, ResourceNotFoundError
from ..models import SubnetParameters
from ..services.ibmcloud import CloudClient
from ..utils.references import external_id_from_status
from .base import ExternalObservation, ManagedResourceHandler


class SubnetHandler(ManagedResourceHandler):
    """Handler for Subnet resources. The external name is the subnet CRN."""

    plural = PLURAL_SUBNET

    def __init__(self):
        """Initialize subnet handler."""
        super().__init__(KIND_SUBNET)

    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> SubnetParameters:
        return SubnetParameters.from_spec(for_provider)

    def resolve_references(self, api: Any, params: SubnetParameters, meta: dict[str, Any]) -> bool:
        """Resolve the VPC id of the active prototype from a VPC resource."""
        vpc = params.prototype.vpc
        result = self.resolve_field(
            api,
            meta,
            PLURAL_VPC,
            f"spec.forProvider.{params.strategy.value}",
            vpc.id,
            vpc.vpc_ref,
            vpc.vpc_selector,
            external_id_from_status,
        )
        changed = result.value != (vpc.id or "") or result.reference != vpc.vpc_ref
        vpc.id = result.value or vpc.id
        vpc.vpc_ref = result.reference
        return changed

    def fetch(self, cloud: CloudClient, params: SubnetParameters, external_name: str) -> Optional[dict[str, Any]]:
        return find_by_crn(cloud.list_subnets(), external_name)

    def late_initialize(self, cloud: CloudClient, params: SubnetParameters, resource: dict[str, Any]) -> bool:
        return late_initialize_subnet(params, resource)

    def is_up_to_date(self, cloud: CloudClient, params: SubnetParameters, resource: dict[str, Any]) -> bool:
        return is_subnet_up_to_date(params, resource)

    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        return generate_subnet_observation(resource)

    def ready_reason(self, resource: dict[str, Any]) -> str:
        return vpc_state_reason(resource.get("status"))

    def create(self, cloud: CloudClient, params: SubnetParameters) -> str:
        created = cloud.create_subnet(generate_create_subnet_options(params))
        if not created.get("crn"):
            raise OperatorError("create response has no CRN")
        return created["crn"]

    def update(
        self, cloud: CloudClient, params: SubnetParameters, external_name: str, observed: ExternalObservation
    ) -> bool:
        subnet_patch = build_subnet_patch(params, observed.resource)
        if not subnet_patch:
            return False
        cloud.update_subnet(observed.resource["id"], subnet_patch)
        return True

    def delete_external(self, cloud: CloudClient, params: SubnetParameters, external_name: str) -> None:
        subnet = find_by_crn(cloud.list_subnets(), external_name)
        if subnet is None:
            raise ResourceNotFoundError(f"Subnet {external_name} not found")
        cloud.delete_subnet(subnet["id"])


# Global handler instance
_handler = SubnetHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_SUBNET)
@kopf.on.update(API_GROUP_VERSION, KIND_SUBNET)
@kopf.on.resume(API_GROUP_VERSION, KIND_SUBNET)
@kopf.timer(API_GROUP_VERSION, KIND_SUBNET, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_subnet(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Subnet resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_SUBNET)
def handle_subnet_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Subnet resource deletion."""
    _handler.delete(spec, meta, status, patch)
