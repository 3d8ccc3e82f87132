"""Builders: field mapping, late initialization and comparison per resource kind."""

from .provider import create_client_from_provider_config, parse_bearer_token

__all__ = ["create_client_from_provider_config", "parse_bearer_token"]
