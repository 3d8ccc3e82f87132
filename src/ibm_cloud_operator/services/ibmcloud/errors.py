"""IBM Cloud API errors and their classification."""

from __future__ import annotations

from typing import Any, Optional

ERR_NOT_FOUND = "Not Found"
ERR_NOT_FOUND_2 = "not_found"
ERR_FAILED_TO_FIND = "Failed to find"
ERR_UNABLE_TO_GET = "unable to get"
ERR_GONE = "Gone"
ERR_REMOVED_INVALID = "The resource instance is removed/invalid"
ERR_PENDING_RECLAMATION = "Instance is pending reclamation"


class IBMCloudAPIError(Exception):
    """A non-2xx response from an IBM Cloud API."""

    def __init__(self, status_code: int, message: str, errors: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


def _status(err: Exception) -> Optional[int]:
    return getattr(err, "status_code", None)


def is_resource_not_found(err: Exception) -> bool:
    """Return True if the error says the target resource does not exist."""
    if _status(err) == 404:
        return True
    text = str(err).lower()
    return any(
        marker.lower() in text
        for marker in (ERR_NOT_FOUND, ERR_FAILED_TO_FIND, ERR_UNABLE_TO_GET, ERR_NOT_FOUND_2)
    )


def is_resource_gone(err: Exception) -> bool:
    """Return True if the resource was already deleted."""
    if _status(err) in (404, 410):
        return True
    text = str(err)
    return ERR_GONE in text or ERR_NOT_FOUND in text


def is_resource_inactive(err: Exception) -> bool:
    """Return True if the resource instance is removed or invalid."""
    return ERR_REMOVED_INVALID in str(err)


def is_resource_pending_reclamation(err: Exception) -> bool:
    """Return True if the instance is already being deleted."""
    text = str(err)
    return ERR_PENDING_RECLAMATION in text or ERR_NOT_FOUND in text
