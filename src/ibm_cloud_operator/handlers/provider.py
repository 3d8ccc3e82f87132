"""Handler for ProviderConfig CRD."""

from __future__ import annotations

from typing import Any

import kopf

from .. import metrics
from ..builders.provider import create_client_from_provider_config
from ..constants import API_GROUP_VERSION, KIND_PROVIDER_CONFIG
from ..tracing import trace_span
from ..utils.cache import invalidate_object
from ..utils.conditions import set_auth_valid_condition, set_ready_condition
from ..utils.errors import sanitize_exception
from ..utils.events import emit_validate_succeeded
from .base import BaseHandler
from .shared import get_core_client


class ProviderConfigHandler(BaseHandler):
    """Handler for ProviderConfig resources."""

    def __init__(self):
        """Initialize provider config handler."""
        super().__init__(KIND_PROVIDER_CONFIG)

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile ProviderConfig resource."""
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")

        with trace_span("reconcile_provider_config", kind=KIND_PROVIDER_CONFIG, attributes={"provider.name": name}):
            secret_ref = (spec.get("credentials") or {}).get("secretRef") or {}
            if not secret_ref.get("name"):
                self.handle_validation_error(meta, "credentials.secretRef.name is required")

            emit_validate_succeeded(meta)

            # Dependent resources must see the new status
            invalidate_object(KIND_PROVIDER_CONFIG, namespace, name)

            conditions = list(status.get("conditions", []))
            generation = meta.get("generation")

            with trace_span("create_client", kind=KIND_PROVIDER_CONFIG):
                try:
                    create_client_from_provider_config(spec, meta, get_core_client())
                    auth_valid = True
                    auth_message = "IAM access token is valid"
                except Exception as e:
                    auth_valid = False
                    sanitized_error = sanitize_exception(e)
                    auth_message = f"Authentication failed: {sanitized_error}"
                    metrics.error_total.labels(kind=KIND_PROVIDER_CONFIG, error_type=type(e).__name__).inc()
                    self.log_error(meta, f"Failed to create client: {sanitized_error}", error=e, reason="AuthFailed")

            conditions = set_auth_valid_condition(conditions, auth_valid, auth_message, generation)
            ready_message = "ProviderConfig is ready" if auth_valid else "ProviderConfig is not ready"
            conditions = set_ready_condition(conditions, auth_valid, ready_message, generation)

            status_data = {
                "region": spec.get("region"),
                "conditions": conditions,
            }
            self.update_resource_status(patch, meta, auth_valid, status_data)

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle ProviderConfig resource deletion."""
        self.log_info(meta, "ProviderConfig is being deleted", event="deletion", reason="Deletion")
        invalidate_object(KIND_PROVIDER_CONFIG, meta.get("namespace", "default"), meta.get("name", ""))
        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = ProviderConfigHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
def handle_provider_config(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ProviderConfig resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_PROVIDER_CONFIG)
def handle_provider_config_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ProviderConfig resource deletion."""
    _handler.delete(spec, meta, patch)
