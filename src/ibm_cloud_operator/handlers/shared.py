"""Shared utilities for handlers."""

from __future__ import annotations

import time
from typing import Any

from kubernetes import client, config

from .. import metrics
from ..constants import API_GROUP, API_VERSION, KIND_PROVIDER_CONFIG, PLURAL_PROVIDER_CONFIG
from ..exceptions import ResourceNotFoundError
from ..utils.cache import get_cached_object, make_cache_key, set_cached_object
from ..utils.rate_limit import handle_rate_limit_error, rate_limit_k8s


def _load_config() -> None:
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client.

    Returns:
        CustomObjectsApi instance
    """
    _load_config()
    return client.CustomObjectsApi()


def get_core_client() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client, used for secrets."""
    _load_config()
    return client.CoreV1Api()


def get_provider_config_with_cache(
    api: Any,
    provider_name: str,
    provider_ns: str,
) -> dict[str, Any]:
    """Get ProviderConfig with caching.

    Args:
        api: Kubernetes CustomObjectsApi instance
        provider_name: Name of the ProviderConfig
        provider_ns: Namespace of the ProviderConfig

    Returns:
        ProviderConfig object

    Raises:
        client.exceptions.ApiException: If the ProviderConfig is not found or on API error
    """
    cache_key = make_cache_key(KIND_PROVIDER_CONFIG, provider_ns, provider_name)
    cached_provider = get_cached_object(cache_key)

    if cached_provider is not None:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="cache_hit").inc()
        return cached_provider

    attempt = 0
    while True:
        start_time = time.time()
        try:
            provider_obj = rate_limit_k8s(api.get_namespaced_custom_object)(
                group=API_GROUP,
                version=API_VERSION,
                namespace=provider_ns,
                plural=PLURAL_PROVIDER_CONFIG,
                name=provider_name,
            )
            metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="success").inc()
            set_cached_object(cache_key, provider_obj)
            return provider_obj
        except Exception as e:
            metrics.api_call_total.labels(api_type="k8s", operation="get_provider_config", result="error").inc()
            if handle_rate_limit_error(e, attempt=attempt):
                attempt += 1
                continue
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation="get_provider_config").observe(duration)


def get_managed_resource(api: Any, plural: str, namespace: str, name: str) -> dict[str, Any]:
    """Get a managed resource of this operator. Never cached.

    Raises:
        ResourceNotFoundError: If the resource does not exist
    """
    try:
        obj = rate_limit_k8s(api.get_namespaced_custom_object)(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=plural,
            name=name,
        )
    except client.exceptions.ApiException as e:
        metrics.api_call_total.labels(api_type="k8s", operation=f"get_{plural}", result="error").inc()
        if e.status == 404:
            raise ResourceNotFoundError(f"{plural} {namespace}/{name} not found") from e
        raise
    metrics.api_call_total.labels(api_type="k8s", operation=f"get_{plural}", result="success").inc()
    return obj


def list_managed_resources(api: Any, plural: str, namespace: str) -> list[dict[str, Any]]:
    """List managed resources of one kind in a namespace. Never cached."""
    result = rate_limit_k8s(api.list_namespaced_custom_object)(
        group=API_GROUP,
        version=API_VERSION,
        namespace=namespace,
        plural=plural,
    )
    metrics.api_call_total.labels(api_type="k8s", operation=f"list_{plural}", result="success").inc()
    return result.get("items", [])


def patch_external_name(api: Any, plural: str, meta: dict[str, Any], annotation: str, value: str) -> None:
    """Write the external-name annotation directly, outside of the kopf patch."""
    rate_limit_k8s(api.patch_namespaced_custom_object)(
        group=API_GROUP,
        version=API_VERSION,
        namespace=meta.get("namespace", "default"),
        plural=plural,
        name=meta.get("name"),
        body={"metadata": {"annotations": {annotation: value}}},
    )
