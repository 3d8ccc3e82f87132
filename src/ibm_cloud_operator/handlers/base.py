"""Base handler classes with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

import kopf
import requests
from kubernetes import client

from .. import metrics
from ..builders.provider import create_client_from_provider_config
from ..constants import (
    ANNOTATION_EXTERNAL_NAME,
    API_GROUP_VERSION,
    COND_PROVIDER_NOT_READY,
    CONTROLLER_NAME,
    DELETION_POLICY_DELETE,
    DELETION_POLICY_ORPHAN,
    FINALIZER,
    REASON_AVAILABLE,
)
from ..exceptions import (
    OperatorError,
    ReferenceResolutionError,
    ResolutionPendingError,
    ResourceNotFoundError,
)
from ..logging import log_resource_event
from ..services.ibmcloud import (
    CloudClient,
    IBMCloudAPIError,
    is_resource_gone,
    is_resource_inactive,
    is_resource_not_found,
    is_resource_pending_reclamation,
)
from ..tracing import trace_span
from ..utils.conditions import (
    get_condition,
    set_creating_condition,
    set_deleting_condition,
    set_provider_not_ready_condition,
    set_ready_condition_from_reason,
    set_synced_condition,
    update_condition,
)
from ..utils.context import new_correlation_id, with_correlation_id
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_external_created,
    emit_external_deleted,
    emit_external_updated,
    emit_late_initialized,
    emit_reconcile_failed,
    emit_reconcile_started,
    emit_reference_pending,
    emit_validate_failed,
    emit_validate_succeeded,
)
from ..utils.references import Reference, ResolutionResult, Selector, resolve
from ..utils.secrets import delete_secret, write_connection_secret
from .shared import (
    get_core_client,
    get_k8s_client,
    get_managed_resource,
    get_provider_config_with_cache,
    list_managed_resources,
    patch_external_name,
)

# Seconds before kopf retries a cycle that is waiting on something
RETRY_DELAY = 30

# Delete errors meaning the external resource no longer needs removing
_ALREADY_GONE = (
    is_resource_not_found,
    is_resource_gone,
    is_resource_inactive,
    is_resource_pending_reclamation,
)

# Errors that abort a reconciliation cycle and are reported on the Synced condition
CYCLE_ERRORS = (
    OperatorError,
    IBMCloudAPIError,
    requests.RequestException,
    client.exceptions.ApiException,
    KeyError,
    ValueError,
)


@contextmanager
def wrap_errors(message: str) -> Iterator[None]:
    """Re-raise cycle errors as ``OperatorError`` prefixed with a static context string."""
    try:
        yield
    except CYCLE_ERRORS as e:
        raise OperatorError(f"{message}: {e}") from e


def get_external_name(meta: dict[str, Any]) -> str:
    """Return the external-name annotation, or an empty string."""
    return (meta.get("annotations") or {}).get(ANNOTATION_EXTERNAL_NAME) or ""


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "ProviderConfig", "Subnet")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(self, level: int, meta: dict[str, Any], message: str, event: str, reason: str, **kwargs: Any) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            event: Event type (default: "info")
            reason: Reason for the event (default: "Info")
            **kwargs: Additional fields to include in the log
        """
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def handle_provider_not_found(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error_msg: str,
    ) -> None:
        """Record a missing ProviderConfig and retry later.

        Raises:
            kopf.TemporaryError: Always raises to trigger retry
        """
        self.log_error(meta, error_msg, reason="ProviderNotFound")
        conditions = set_provider_not_ready_condition(list(status.get("conditions", [])), error_msg)
        emit_reconcile_failed(meta, error_msg)
        metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })
        raise kopf.TemporaryError(error_msg, delay=RETRY_DELAY)

    def handle_provider_not_ready(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        provider_name: str,
        error_msg: str,
    ) -> None:
        """Handle provider not ready error consistently.

        Raises:
            kopf.TemporaryError: Always raises to trigger retry
        """
        self.log_warning(meta, error_msg, reason="ProviderNotReady", provider=provider_name)
        conditions = set_provider_not_ready_condition(list(status.get("conditions", [])), error_msg)
        emit_reconcile_failed(meta, error_msg)
        metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })
        raise kopf.TemporaryError(error_msg, delay=RETRY_DELAY)

    def handle_validation_error(
        self,
        meta: dict[str, Any],
        error_msg: str,
    ) -> None:
        """Handle validation error consistently.

        Raises:
            ValueError: Always raises with the error message
        """
        self.log_error(meta, error_msg, reason="ValidationFailed")
        emit_validate_failed(meta, error_msg)
        metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
        raise ValueError(error_msg)

    def handle_reconciliation_error(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error: Exception,
        condition_fn: Callable[[list[dict[str, Any]], str], list[dict[str, Any]]] | None = None,
        condition_msg: str | None = None,
    ) -> None:
        """Handle reconciliation error consistently.

        Args:
            meta: Kubernetes resource metadata
            status: Resource status
            patch: Kopf patch object
            error: Exception that occurred
            condition_fn: Optional function to set condition (takes conditions list and message)
            condition_msg: Optional message for condition (if condition_fn is provided)
        """
        sanitized_error = sanitize_exception(error)
        error_type = type(error).__name__

        self.log_error(meta, f"Reconciliation failed: {sanitized_error}", error=error, reason="ReconciliationFailed")
        emit_reconcile_failed(meta, f"Reconciliation failed: {sanitized_error}")
        metrics.error_total.labels(kind=self.kind, error_type=error_type).inc()
        metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()

        status_update: dict[str, Any] = {
            "observedGeneration": meta.get("generation", 0),
        }

        if condition_fn is not None and condition_msg is not None:
            conditions = list(status.get("conditions", []))
            status_update["conditions"] = condition_fn(conditions, condition_msg)

        patch.status.update(status_update)

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Ensure finalizer is present in metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
            patch.metadata["finalizers"] = finalizers

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove finalizer from metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers if finalizers else None

    def reconcile_with_metrics(
        self,
        meta: dict[str, Any],
        reconcile_fn: Callable[[], None],
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Args:
            meta: Kubernetes resource metadata
            reconcile_fn: Function to execute for reconciliation
        """
        emit_reconcile_started(meta)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        with with_correlation_id(new_correlation_id(self.kind, meta)):
            try:
                reconcile_fn()
                metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
            except Exception as e:
                sanitized_error = sanitize_exception(e)
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
                emit_reconcile_failed(meta, f"Reconciliation failed: {sanitized_error}")
                metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

    def update_resource_status(
        self,
        patch: kopf.Patch,
        meta: dict[str, Any],
        ready: bool,
        status_data: dict[str, Any] | None = None,
    ) -> None:
        """Update resource status with common fields.

        Args:
            patch: Kopf patch object
            meta: Kubernetes resource metadata
            ready: Whether the resource is ready
            status_data: Additional status data to include
        """
        status_update = {
            "observedGeneration": meta.get("generation", 0),
            **(status_data or {}),
        }

        if ready:
            metrics.resource_status_total.labels(kind=self.kind, status="ready").inc()
        else:
            metrics.resource_status_total.labels(kind=self.kind, status="not_ready").inc()

        patch.status.update(status_update)


@dataclass
class ExternalObservation:
    """What one observe step learned about the external resource."""

    exists: bool
    up_to_date: bool = True
    late_init_changed: bool = False
    resource: dict[str, Any] = field(default_factory=dict)
    observation: dict[str, Any] = field(default_factory=dict)
    ready_reason: str = REASON_AVAILABLE
    connection_details: dict[str, bytes] = field(default_factory=dict)


class ManagedResourceHandler(BaseHandler, ABC):
    """Observe, create, update and delete cycle shared by all managed cloud resources.

    Subclasses describe a kind through the hooks below; this class owns the
    order of the steps, error wrapping, conditions, events and metrics.

    Hooks:
        parse_parameters: ``spec.forProvider`` -> typed parameters
        resolve_references: fill cross-resource references; returns True if changed
        fetch: get the external resource, or None if it does not exist
        late_initialize / is_up_to_date / generate_observation / ready_reason
        connection_details: optional, defaults to none
        create: create the external resource and return its external name
        update: converge an existing resource; returns True if a request was sent
        delete_external: delete the external resource
    """

    plural: str = ""

    # ------------------------------------------------------------------ hooks
    @abstractmethod
    def parse_parameters(self, for_provider: Optional[dict[str, Any]]) -> Any:
        raise NotImplementedError

    def resolve_references(self, api: Any, params: Any, meta: dict[str, Any]) -> bool:
        return False

    @abstractmethod
    def fetch(self, cloud: CloudClient, params: Any, external_name: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def late_initialize(self, cloud: CloudClient, params: Any, resource: dict[str, Any]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_up_to_date(self, cloud: CloudClient, params: Any, resource: dict[str, Any]) -> bool:
        raise NotImplementedError

    @abstractmethod
    def generate_observation(self, resource: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def ready_reason(self, resource: dict[str, Any]) -> str:
        raise NotImplementedError

    def connection_details(self, spec: dict[str, Any], resource: dict[str, Any]) -> dict[str, bytes]:
        return {}

    @abstractmethod
    def create(self, cloud: CloudClient, params: Any) -> str:
        raise NotImplementedError

    @abstractmethod
    def update(self, cloud: CloudClient, params: Any, external_name: str, observed: ExternalObservation) -> bool:
        """Converge an existing resource; return False if there was nothing to send."""
        raise NotImplementedError

    @abstractmethod
    def delete_external(self, cloud: CloudClient, params: Any, external_name: str) -> None:
        raise NotImplementedError

    # ---------------------------------------------------------------- helpers
    def get_cloud_client(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> CloudClient:
        """Build the cloud client from the referenced ProviderConfig.

        Raises:
            kopf.TemporaryError: If the ProviderConfig is missing or not ready
        """
        namespace = meta.get("namespace", "default")
        provider_ref = spec.get("providerConfigRef") or {}
        provider_name = provider_ref.get("name")
        if not provider_name:
            self.handle_validation_error(meta, "providerConfigRef.name is required")

        provider_ns = provider_ref.get("namespace", namespace)
        api = get_k8s_client()
        try:
            provider_obj = get_provider_config_with_cache(api, provider_name, provider_ns)
        except client.exceptions.ApiException as e:
            if e.status == 404:
                error_msg = f"ProviderConfig {provider_name} not found in namespace {provider_ns}"
                self.handle_provider_not_found(meta, status, patch, error_msg)
            raise

        provider_conditions = (provider_obj.get("status") or {}).get("conditions", [])
        provider_ready = any(
            cond.get("type") == "Ready" and cond.get("status") == "True" for cond in provider_conditions
        )
        if not provider_ready:
            self.handle_provider_not_ready(
                meta, status, patch, provider_name, f"ProviderConfig {provider_name} is not ready"
            )

        return create_client_from_provider_config(
            provider_obj.get("spec", {}), provider_obj.get("metadata", {}), get_core_client()
        )

    def resolve_field(
        self,
        api: Any,
        meta: dict[str, Any],
        plural: str,
        field_path: str,
        current: Optional[str],
        reference: Optional[Reference],
        selector: Optional[Selector],
        extract: Callable[[dict[str, Any]], str],
    ) -> ResolutionResult:
        """Resolve one reference field against resources in the same namespace.

        Errors keep their type and are prefixed with ``field_path``.
        """
        namespace = meta.get("namespace", "default")
        try:
            return resolve(
                current,
                reference,
                selector,
                get_candidate=lambda name: get_managed_resource(api, plural, namespace, name),
                list_candidates=lambda: list_managed_resources(api, plural, namespace),
                extract=extract,
            )
        except (ReferenceResolutionError, ResolutionPendingError) as e:
            raise type(e)(f"{field_path}: {e}") from e

    def _owner_references(self, meta: dict[str, Any]) -> list[dict[str, Any]]:
        return [{
            "apiVersion": API_GROUP_VERSION,
            "kind": self.kind,
            "name": meta.get("name"),
            "uid": meta.get("uid"),
            "controller": True,
            "blockOwnerDeletion": True,
        }]

    def _publish_connection_details(
        self, spec: dict[str, Any], meta: dict[str, Any], details: dict[str, bytes]
    ) -> None:
        secret_ref = spec.get("writeConnectionSecretToRef") or {}
        if not details or not secret_ref.get("name"):
            return
        namespace = meta.get("namespace", "default")
        secret_ns = secret_ref.get("namespace") or namespace
        with wrap_errors("cannot publish connection details"):
            write_connection_secret(
                get_core_client(),
                secret_ns,
                secret_ref["name"],
                details,
                owner_references=self._owner_references(meta) if secret_ns == namespace else None,
            )

    def _remove_foreign_connection_secret(self, spec: dict[str, Any], meta: dict[str, Any]) -> None:
        # Secrets outside the resource namespace carry no owner reference
        secret_ref = spec.get("writeConnectionSecretToRef") or {}
        namespace = meta.get("namespace", "default")
        secret_ns = secret_ref.get("namespace") or namespace
        if not secret_ref.get("name") or secret_ns == namespace:
            return
        with wrap_errors("cannot delete connection secret"):
            delete_secret(get_core_client(), secret_ns, secret_ref["name"])

    def _fail_sync(self, meta: dict[str, Any], status: dict[str, Any], patch: kopf.Patch, error: Exception) -> None:
        message = sanitize_exception(error)
        generation = meta.get("generation")
        self.handle_reconciliation_error(
            meta,
            status,
            patch,
            error,
            condition_fn=lambda conditions, msg: set_synced_condition(conditions, False, msg, generation),
            condition_msg=message,
        )
        raise kopf.TemporaryError(message, delay=RETRY_DELAY) from error

    # ------------------------------------------------------------------ cycle
    def observe(
        self,
        cloud: CloudClient,
        params: Any,
        external_name: str,
        spec: dict[str, Any],
    ) -> ExternalObservation:
        """Fetch the external resource, late-initialize, compare and extract connection details."""
        if not external_name:
            return ExternalObservation(exists=False)

        try:
            resource = self.fetch(cloud, params, external_name)
        except ResourceNotFoundError:
            resource = None
        except IBMCloudAPIError as e:
            if not (is_resource_not_found(e) or is_resource_inactive(e)):
                raise
            resource = None

        if resource is None:
            return ExternalObservation(exists=False)

        with wrap_errors("cannot late-initialize parameters"):
            changed = self.late_initialize(cloud, params, resource)
        with wrap_errors("error generating observation"):
            observation = self.generate_observation(resource)
            reason = self.ready_reason(resource)
        with wrap_errors("cannot determine if resource is up to date"):
            up_to_date = self.is_up_to_date(cloud, params, resource)
        with wrap_errors("error getting connection details"):
            details = self.connection_details(spec, resource)

        return ExternalObservation(
            exists=True,
            up_to_date=up_to_date,
            late_init_changed=changed,
            resource=resource,
            observation=observation,
            ready_reason=reason,
            connection_details=details,
        )

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Run one observe/create/update cycle."""
        name = meta.get("name", "unknown")
        generation = meta.get("generation")

        with trace_span(f"reconcile_{self.kind.lower()}", kind=self.kind, attributes={"resource.name": name}):
            try:
                params = self.parse_parameters(spec.get("forProvider"))
            except ValueError as e:
                self.handle_validation_error(meta, str(e))
            emit_validate_succeeded(meta)

            cloud = self.get_cloud_client(spec, meta, status, patch)
            conditions = list(status.get("conditions", []))
            if get_condition(conditions, COND_PROVIDER_NOT_READY) is not None:
                conditions = update_condition(
                    conditions, COND_PROVIDER_NOT_READY, "False", "ProviderReady", "ProviderConfig is ready"
                )

            api = get_k8s_client()
            try:
                with trace_span("resolve_references", kind=self.kind):
                    references_changed = self.resolve_references(api, params, meta)
            except ResolutionPendingError as e:
                self.log_info(meta, str(e), reason="ReferencePending")
                emit_reference_pending(meta, str(e))
                raise kopf.TemporaryError(str(e), delay=RETRY_DELAY) from e
            except CYCLE_ERRORS as e:
                self._fail_sync(meta, status, patch, e)

            external_name = get_external_name(meta)
            try:
                with trace_span("observe", kind=self.kind):
                    observed = self.observe(cloud, params, external_name, spec)
            except CYCLE_ERRORS as e:
                self._fail_sync(meta, status, patch, e)

            if observed.late_init_changed:
                metrics.late_init_total.labels(kind=self.kind).inc()
                emit_late_initialized(meta)
                self.log_info(meta, "Late-initialized parameters", reason="LateInitialized")
            if references_changed or observed.late_init_changed:
                patch.spec["forProvider"] = params.to_spec()

            if not observed.exists:
                self._create(api, cloud, params, meta, status, patch, conditions)
                return

            if not observed.up_to_date:
                try:
                    with trace_span("update", kind=self.kind), wrap_errors(f"could not update a {self.kind}"):
                        sent = self.update(cloud, params, external_name, observed)
                except OperatorError as e:
                    metrics.cloud_operations_total.labels(kind=self.kind, operation="update", result="failed").inc()
                    self._fail_sync(meta, status, patch, e)
                if sent:
                    metrics.drift_detected_total.labels(kind=self.kind, resource_type=self.plural).inc()
                    metrics.cloud_operations_total.labels(kind=self.kind, operation="update", result="success").inc()
                    self.log_info(meta, f"Updated drifted {self.kind} {external_name}", reason="DriftDetected")
                    emit_external_updated(meta, self.kind, external_name)
                else:
                    self.log_info(
                        meta, f"{self.kind} {external_name} differs but has nothing to update", reason="NoUpdate"
                    )

            try:
                self._publish_connection_details(spec, meta, observed.connection_details)
            except OperatorError as e:
                self._fail_sync(meta, status, patch, e)

            conditions = set_ready_condition_from_reason(conditions, observed.ready_reason, generation)
            conditions = set_synced_condition(conditions, True, "Reconciliation succeeded", generation)
            self.update_resource_status(
                patch,
                meta,
                observed.ready_reason == REASON_AVAILABLE,
                {"atProvider": observed.observation, "conditions": conditions},
            )

    def _create(
        self,
        api: Any,
        cloud: CloudClient,
        params: Any,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        conditions: list[dict[str, Any]],
    ) -> None:
        generation = meta.get("generation")
        try:
            with trace_span("create", kind=self.kind), wrap_errors(f"could not create a {self.kind}"):
                external_name = self.create(cloud, params)
        except OperatorError as e:
            metrics.cloud_operations_total.labels(kind=self.kind, operation="create", result="failed").inc()
            self._fail_sync(meta, status, patch, e)
        metrics.cloud_operations_total.labels(kind=self.kind, operation="create", result="success").inc()

        try:
            with wrap_errors("cannot update custom resource"):
                patch_external_name(api, self.plural, meta, ANNOTATION_EXTERNAL_NAME, external_name)
        except OperatorError as e:
            self._fail_sync(meta, status, patch, e)

        emit_external_created(meta, self.kind, external_name)
        self.log_info(meta, f"Created {self.kind} {external_name}", reason="Created", external_name=external_name)

        conditions = set_creating_condition(conditions, observed_generation=generation)
        conditions = set_synced_condition(conditions, True, "Reconciliation succeeded", generation)
        self.update_resource_status(patch, meta, False, {"conditions": conditions})

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Delete the external resource according to the deletion policy."""
        name = meta.get("name", "unknown")
        external_name = get_external_name(meta)
        deletion_policy = spec.get("deletionPolicy", DELETION_POLICY_DELETE)

        self.log_info(
            meta,
            f"{self.kind} {name} is being deleted",
            event="deletion",
            reason="Deletion",
            deletion_policy=deletion_policy,
        )

        if not external_name or deletion_policy == DELETION_POLICY_ORPHAN:
            self.log_info(meta, f"Not deleting external resource of {name}", reason="Orphaned")
            self.remove_finalizer(meta, patch)
            return

        conditions = set_deleting_condition(list(status.get("conditions", [])), observed_generation=meta.get("generation"))
        patch.status["conditions"] = conditions

        try:
            params = self.parse_parameters(spec.get("forProvider"))
        except ValueError as e:
            self.handle_validation_error(meta, str(e))
        cloud = self.get_cloud_client(spec, meta, status, patch)

        with trace_span(f"delete_{self.kind.lower()}", kind=self.kind, attributes={"resource.name": name}):
            try:
                self.delete_external(cloud, params, external_name)
            except ResourceNotFoundError:
                self.log_info(meta, f"{self.kind} {external_name} is already gone", reason="AlreadyDeleted")
            except IBMCloudAPIError as e:
                if not any(check(e) for check in _ALREADY_GONE):
                    metrics.cloud_operations_total.labels(kind=self.kind, operation="delete", result="failed").inc()
                    message = f"could not delete a {self.kind}: {sanitize_exception(e)}"
                    self.log_error(meta, message, error=e, reason="DeletionFailed")
                    raise kopf.TemporaryError(message, delay=RETRY_DELAY) from e
                self.log_info(meta, f"{self.kind} {external_name} is already gone", reason="AlreadyDeleted")
            else:
                metrics.cloud_operations_total.labels(kind=self.kind, operation="delete", result="success").inc()
                emit_external_deleted(meta, self.kind, external_name)

        self._remove_foreign_connection_secret(spec, meta)
        self.remove_finalizer(meta, patch)
