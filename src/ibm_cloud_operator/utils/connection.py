"""Connection-detail extraction for credentials returned by the cloud API."""

from __future__ import annotations

import json
from typing import Any, Optional

import jinja2

from ..exceptions import ConnectionDetailsError

# Credential fields always present in a flattened connection secret, keyed by
# output name and holding the API field they come from.
STANDARD_CREDENTIAL_KEYS = {
    "apikey": "apikey",
    "iamApikeyDescription": "iam_apikey_description",
    "iamApikeyName": "iam_apikey_name",
    "iamRoleCrn": "iam_role_crn",
    "iamServiceidCrn": "iam_serviceid_crn",
}

_environment = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
_environment.filters["json"] = json.dumps


def stringify(value: Any) -> str:
    """Render a credential leaf value as a secret string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return "%d" % value
    if isinstance(value, float):
        return "%f" % value
    return str(value)


def flatten(value: Any, prefix: str = "") -> dict[str, str]:
    """Flatten nested mappings and lists into dotted-path keys.

    List items become ``.N`` path segments, e.g. ``hosts.0.hostname``.
    """
    result: dict[str, str] = {}
    if isinstance(value, dict):
        for key, item in value.items():
            result.update(flatten(item, f"{prefix}.{key}" if prefix else str(key)))
    elif isinstance(value, list):
        for idx, item in enumerate(value):
            result.update(flatten(item, f"{prefix}.{idx}" if prefix else str(idx)))
    elif prefix:
        result[prefix] = stringify(value)
    return result


def flatten_credentials(credentials: dict[str, Any]) -> dict[str, str]:
    """Flatten a credentials object, always emitting the standard IAM keys."""
    result = {out: stringify(credentials.get(src)) for out, src in STANDARD_CREDENTIAL_KEYS.items()}
    properties = {k: v for k, v in credentials.items() if k not in STANDARD_CREDENTIAL_KEYS.values()}
    result.update(flatten(properties))
    return result


def render_connection_templates(templates: dict[str, str], credentials: dict[str, Any]) -> dict[str, str]:
    """Render each template against the credentials object.

    Raises:
        ConnectionDetailsError: A template is malformed or refers to a missing field
    """
    rendered: dict[str, str] = {}
    for key, source in templates.items():
        try:
            rendered[key] = _environment.from_string(source).render(**credentials)
        except jinja2.TemplateError as e:
            raise ConnectionDetailsError(f"cannot render connection template {key}: {e}") from e
    return rendered


def extract_connection_details(
    templates: Optional[dict[str, str]],
    credentials: Optional[dict[str, Any]],
) -> dict[str, bytes]:
    """Build the secret-ready connection details for a credentials object.

    Template mode is used whenever templates are given (even an empty mapping);
    otherwise the credentials are flattened.

    Args:
        templates: Output key to template source
        credentials: Credentials object as returned by the cloud API

    Returns:
        Mapping of key to raw bytes; empty when there are no credentials
    """
    if not credentials:
        return {}
    if templates is not None:
        values = render_connection_templates(templates, credentials)
    else:
        values = flatten_credentials(credentials)
    return {key: value.encode("utf-8") for key, value in values.items()}
