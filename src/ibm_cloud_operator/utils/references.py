"""Cross-resource reference and selector resolution.

A field that points at another custom resource can be given three ways: as a
literal value, as a ``Reference`` naming the other resource, or as a
``Selector`` whose labels must match exactly one candidate. ``resolve`` turns
whichever was given into the concrete value the cloud API needs. Candidate
lists are fetched fresh on every call.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..exceptions import (
    AmbiguousReferenceError,
    ReferenceNotFoundError,
    ResolutionPendingError,
    ResourceNotFoundError,
)


@dataclass
class Reference:
    """A direct pointer to another resource by name."""

    name: str

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["Reference"]:
        if not data or not data.get("name"):
            return None
        return cls(name=data["name"])

    def to_spec(self) -> dict[str, Any]:
        return {"name": self.name}


@dataclass
class Selector:
    """A label selector that must match exactly one resource."""

    match_labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_spec(cls, data: Optional[dict[str, Any]]) -> Optional["Selector"]:
        if data is None:
            return None
        return cls(match_labels=dict(data.get("matchLabels") or {}))

    def to_spec(self) -> dict[str, Any]:
        return {"matchLabels": dict(self.match_labels)}

    def matches(self, labels: Optional[dict[str, str]]) -> bool:
        """Return True if every selector label is present with the same value."""
        labels = labels or {}
        return all(labels.get(key) == value for key, value in self.match_labels.items())


@dataclass
class ResolutionResult:
    """The resolved value and the reference it was resolved through."""

    value: str
    reference: Optional[Reference]


def resolve(
    current_value: Optional[str],
    reference: Optional[Reference],
    selector: Optional[Selector],
    get_candidate: Callable[[str], dict[str, Any]],
    list_candidates: Callable[[], list[dict[str, Any]]],
    extract: Callable[[dict[str, Any]], str],
) -> ResolutionResult:
    """Resolve a reference or selector into a concrete value.

    Args:
        current_value: Value already present in the desired state, if any
        reference: Direct reference to another resource
        selector: Label selector matching exactly one other resource
        get_candidate: Fetches a resource by name; raises ResourceNotFoundError
        list_candidates: Lists all candidate resources
        extract: Extracts the wanted value from a resource

    Returns:
        The resolved value and the reference that produced it. When a selector
        was used, the reference names the single matching resource.

    Raises:
        ReferenceNotFoundError: The referenced resource does not exist, or the
            selector matched nothing
        AmbiguousReferenceError: The selector matched more than one resource
        ResolutionPendingError: The target exists but has not produced a value yet
    """
    if current_value and selector is None:
        return ResolutionResult(value=current_value, reference=reference)

    if reference is None and selector is None:
        return ResolutionResult(value=current_value or "", reference=None)

    if reference is not None:
        try:
            candidate = get_candidate(reference.name)
        except ResourceNotFoundError as e:
            raise ReferenceNotFoundError(f"cannot resolve referenced resource {reference.name}: {e}") from e
        resolved_reference = reference
    else:
        matched = [c for c in list_candidates() if selector.matches(c.get("metadata", {}).get("labels"))]
        if not matched:
            raise ReferenceNotFoundError(f"no resources match selector {selector.match_labels}")
        if len(matched) > 1:
            names = sorted(c.get("metadata", {}).get("name", "") for c in matched)
            raise AmbiguousReferenceError(
                f"selector {selector.match_labels} matches {len(matched)} resources: {', '.join(names)}"
            )
        candidate = matched[0]
        resolved_reference = Reference(name=candidate.get("metadata", {}).get("name", ""))

    value = extract(candidate)
    if not value:
        raise ResolutionPendingError(f"referenced resource {resolved_reference.name} has no value yet")

    return ResolutionResult(value=value, reference=resolved_reference)


def external_id_from_status(resource: dict[str, Any]) -> str:
    """Extract the generated cloud id (``status.atProvider.id``) of a managed resource."""
    return ((resource.get("status") or {}).get("atProvider") or {}).get("id") or ""


def connection_secret_ref(resource: dict[str, Any]) -> str:
    """Extract ``{"namespace", "name"}`` of a resource's connection secret as JSON.

    The namespace defaults to the resource's own namespace.
    """
    secret_ref = (resource.get("spec") or {}).get("writeConnectionSecretToRef") or {}
    if not secret_ref.get("name"):
        return ""
    namespace = secret_ref.get("namespace") or (resource.get("metadata") or {}).get("namespace", "default")
    return json.dumps({"namespace": namespace, "name": secret_ref["name"]})
