"""Rate limiting utilities for Kubernetes and IBM Cloud API calls."""

from __future__ import annotations

import os
import time
from functools import wraps
from typing import Any, Callable, TypeVar

from .. import metrics

_F = TypeVar("_F", bound=Callable[..., Any])

_K8S_RATE_LIMIT_PER_SECOND = float(os.getenv("K8S_RATE_LIMIT_PER_SECOND", "10.0"))
_IBMCLOUD_RATE_LIMIT_PER_SECOND = float(os.getenv("IBMCLOUD_RATE_LIMIT_PER_SECOND", "5.0"))

# Last call time per API type
_last_call_times: dict[str, float] = {"k8s": 0.0, "ibmcloud": 0.0}


def _throttle(api_type: str, per_second: float) -> None:
    min_interval = 1.0 / per_second
    elapsed = time.time() - _last_call_times[api_type]
    if elapsed < min_interval:
        time.sleep(min_interval - elapsed)
    _last_call_times[api_type] = time.time()


def rate_limit_k8s(func: _F) -> _F:
    """Decorator to rate limit Kubernetes API calls."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        _throttle("k8s", _K8S_RATE_LIMIT_PER_SECOND)
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def rate_limit_ibmcloud(func: _F) -> _F:
    """Decorator to rate limit IBM Cloud API calls."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        _throttle("ibmcloud", _IBMCLOUD_RATE_LIMIT_PER_SECOND)
        return func(*args, **kwargs)

    return wrapper  # type: ignore


def _status_of(e: Exception) -> int | None:
    status = getattr(e, "status", None)
    if status is None:
        status = getattr(e, "status_code", None)
    return status


def handle_rate_limit_error(e: Exception, api_type: str = "k8s", attempt: int = 0, max_retries: int = 3) -> bool:
    """Check if an API exception is a rate limit error and back off.

    Works with kubernetes ``ApiException`` (``status``) and
    ``IBMCloudAPIError`` (``status_code``). The attempt count belongs to the
    caller, so concurrent workers never share a retry budget.

    Args:
        e: API exception
        api_type: API the call was made against, used for metrics
        attempt: Number of retries the caller has already made
        max_retries: Maximum number of retries

    Returns:
        True if the caller should retry, False otherwise
    """
    status = _status_of(e)
    if not (status == 429 or (status == 503 and "rate limit" in str(e).lower())):
        return False
    metrics.rate_limit_hits_total.labels(api_type=api_type).inc()
    if attempt >= max_retries:
        return False
    # Exponential backoff: 1s, 2s, 4s
    time.sleep(2 ** attempt)
    return True
