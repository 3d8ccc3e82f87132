"""Exception types raised by the reconciliation engine."""

from __future__ import annotations


class OperatorError(Exception):
    """Base class for operator errors."""


class ResourceNotFoundError(OperatorError):
    """The external cloud resource does not exist (any more)."""


class ReferenceResolutionError(OperatorError):
    """A cross-resource reference could not be resolved."""


class ReferenceNotFoundError(ReferenceResolutionError):
    """The referenced resource, or any resource matching a selector, does not exist."""


class AmbiguousReferenceError(ReferenceResolutionError):
    """A selector matched more than one candidate resource."""


class ResolutionPendingError(OperatorError):
    """A referenced resource exists but has not produced the value yet.

    Callers should retry on the next reconciliation cycle.
    """


class LookupFailedError(OperatorError):
    """A secondary lookup (resource group, plan, tags) failed."""


class ConnectionDetailsError(OperatorError):
    """Connection details could not be extracted from the credentials."""


class AuthenticationError(OperatorError):
    """Provider credentials are missing or malformed."""
