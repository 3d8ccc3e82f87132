"""Builder for IBM Cloud clients from ProviderConfig resources."""

from __future__ import annotations

from typing import Any, Optional

from kubernetes import client

from ..constants import ACCESS_TOKEN_KEY
from ..exceptions import AuthenticationError
from ..services.ibmcloud.client import ClientOptions, IBMCloudClient
from ..utils.secrets import get_secret_value


def parse_bearer_token(value: str) -> str:
    """Extract the token from an ``"Bearer <token>"`` string.

    Raises:
        AuthenticationError: If the value is not exactly two space-separated parts
    """
    parts = value.strip().split(" ")
    if len(parts) != 2 or not parts[1]:
        raise AuthenticationError("error parsing IAM access token")
    return parts[1]


def create_client_from_provider_config(
    spec: dict[str, Any],
    meta: dict[str, Any],
    core_api: Optional[client.CoreV1Api] = None,
) -> IBMCloudClient:
    """Create an IBM Cloud client from a ProviderConfig spec.

    Args:
        spec: ProviderConfig spec
        meta: ProviderConfig metadata
        core_api: CoreV1Api used to read the credentials secret

    Returns:
        Client authenticated with the IAM access token from the secret

    Raises:
        ValueError: If the credentials secret reference is missing
        AuthenticationError: If the token is missing or malformed
    """
    secret_ref = (spec.get("credentials") or {}).get("secretRef") or {}
    secret_name = secret_ref.get("name")
    if not secret_name:
        raise ValueError("credentials.secretRef.name is required")

    namespace = secret_ref.get("namespace") or meta.get("namespace", "default")
    key = secret_ref.get("key") or ACCESS_TOKEN_KEY

    api = core_api or client.CoreV1Api()
    try:
        raw_token = get_secret_value(api, namespace, secret_name, key)
    except KeyError as e:
        raise AuthenticationError("IAM access token key not found in provider config secret") from e

    options = ClientOptions(endpoints=dict(spec.get("endpoints") or {}))
    if spec.get("region"):
        options.region = spec["region"]

    return IBMCloudClient(parse_bearer_token(raw_token), options)
