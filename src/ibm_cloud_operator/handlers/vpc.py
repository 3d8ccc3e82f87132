"""Handler for VPC CRD."""

from __future__ import annotations

import os
from typing import Any, Optional

import kopf

from ..builders.common import find_by_crn
from ..builders.vpc import (
    generate_create_vpc_options,
    generate_update_vpc_options,
    generate_vpc_observation,
    is_vpc_up_to_date,
    late_initialize_vpc,
    vpc_state_reason,
)
from ..constants import API_GROUP_VERSION, KIND_VPC, PLURAL_VPC
from ..exceptions import OperatorError, ResourceNotFoundError
from ..models import VPCParameters
from ..services.ibmcloud import CloudClient
from .base import ExternalObservation, ManagedResourceHandler


class VPCHandler(ManagedResourceHandler):
    """Handler for VPC resources. The external name is the VPC CRN."""

    plural = PLURAL_VPC

    def __init__(self):
        """Initialize VPC handler."""
        super().__init__(KIND_VPC)

    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> VPCParameters:
        return VPCParameters.from_spec(for_provider)

    def fetch(self, cloud: CloudClient, params: VPCParameters, external_name: str) -> Optional[dict[str, Any]]:
        return find_by_crn(cloud.list_vpcs(), external_name)

    def late_initialize(self, cloud: CloudClient, params: VPCParameters, resource: dict[str, Any]) -> bool:
        return late_initialize_vpc(params, resource)

    def is_up_to_date(self, cloud: CloudClient, params: VPCParameters, resource: dict[str, Any]) -> bool:
        return is_vpc_up_to_date(params, resource)

    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        return generate_vpc_observation(resource)

    def ready_reason(self, resource: dict[str, Any]) -> str:
        return vpc_state_reason(resource.get("status"))

    def create(self, cloud: CloudClient, params: VPCParameters) -> str:
        created = cloud.create_vpc(generate_create_vpc_options(params))
        if not created.get("crn"):
            raise OperatorError("create response has no CRN")
        return created["crn"]

    def update(
        self, cloud: CloudClient, params: VPCParameters, external_name: str, observed: ExternalObservation
    ) -> bool:
        cloud.update_vpc(observed.resource["id"], generate_update_vpc_options(params))
        return True

    def delete_external(self, cloud: CloudClient, params: VPCParameters, external_name: str) -> None:
        vpc = find_by_crn(cloud.list_vpcs(), external_name)
        if vpc is None:
            raise ResourceNotFoundError(f"VPC {external_name} not found")
        cloud.delete_vpc(vpc["id"])


# Global handler instance
_handler = VPCHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_VPC)
@kopf.on.update(API_GROUP_VERSION, KIND_VPC)
@kopf.on.resume(API_GROUP_VERSION, KIND_VPC)
@kopf.timer(API_GROUP_VERSION, KIND_VPC, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_vpc(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle VPC resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_VPC)
def handle_vpc_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle VPC resource deletion."""
    _handler.delete(spec, meta, status, patch)
