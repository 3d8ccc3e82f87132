"""Utility functions for the IBM Cloud Operator."""

from .cache import get_cached_object, invalidate_cache, invalidate_object, make_cache_key, set_cached_object
from .conditions import set_provider_not_ready_condition, set_synced_condition, update_condition
from .connection import extract_connection_details
from .context import get_context_dict, get_correlation_id, with_correlation_id
from .events import emit_event
from .rate_limit import handle_rate_limit_error, rate_limit_ibmcloud, rate_limit_k8s
from .references import Reference, ResolutionResult, Selector, resolve
from .secrets import get_secret_value, read_secret_data, write_connection_secret

__all__ = [
    "update_condition",
    "set_synced_condition",
    "set_provider_not_ready_condition",
    "emit_event",
    "get_secret_value",
    "read_secret_data",
    "write_connection_secret",
    "extract_connection_details",
    "Reference",
    "Selector",
    "ResolutionResult",
    "resolve",
    "get_cached_object",
    "set_cached_object",
    "invalidate_cache",
    "invalidate_object",
    "make_cache_key",
    "rate_limit_k8s",
    "rate_limit_ibmcloud",
    "handle_rate_limit_error",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
]
