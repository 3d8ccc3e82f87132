"""IBM Cloud REST client."""

from .base import CloudClient
from .client import ClientOptions, IBMCloudClient
from .errors import (
    IBMCloudAPIError,
    is_resource_gone,
    is_resource_inactive,
    is_resource_not_found,
    is_resource_pending_reclamation,
)

__all__ = [
    "CloudClient",
    "ClientOptions",
    "IBMCloudClient",
    "IBMCloudAPIError",
    "is_resource_gone",
    "is_resource_inactive",
    "is_resource_not_found",
    "is_resource_pending_reclamation",
]
