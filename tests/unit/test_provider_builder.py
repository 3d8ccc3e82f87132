"""Tests for provider builder."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest

from ibm_cloud_operator.builders.provider import (
    create_client_from_provider_config,
    parse_bearer_token,
)
from ibm_cloud_operator.exceptions import AuthenticationError


class TestParseBearerToken:
    """Test cases for parse_bearer_token function."""

    def test_valid_token(self):
        """Test extracting the token."""
        assert parse_bearer_token("Bearer eyJhbGciOi") == "eyJhbGciOi"

    def test_surrounding_whitespace(self):
        """Test trailing newlines from secret files are ignored."""
        assert parse_bearer_token("Bearer abc\n") == "abc"

    @pytest.mark.parametrize("value", ["eyJhbGciOi", "Bearer", "Bearer a b", ""])
    def test_malformed_token(self, value):
        """Test values that are not exactly two parts."""
        with pytest.raises(AuthenticationError, match="error parsing IAM access token"):
            parse_bearer_token(value)


class TestCreateClientFromProviderConfig:
    """Test cases for create_client_from_provider_config function."""

    @patch("ibm_cloud_operator.builders.provider.get_secret_value")
    def test_create_client_success(self, mock_get_secret):
        """Test successfully creating a client."""
        mock_api = Mock()
        mock_get_secret.return_value = "Bearer tok123"
        spec = {
            "region": "eu-de",
            "credentials": {"secretRef": {"name": "ibm-creds"}},
            "endpoints": {"vpc": "https://private.{region}.iaas.cloud.ibm.com/v1"},
        }

        result = create_client_from_provider_config(spec, {"namespace": "crossplane"}, mock_api)

        mock_get_secret.assert_called_once_with(mock_api, "crossplane", "ibm-creds", "access_token")
        assert result.session.headers["Authorization"] == "Bearer tok123"
        assert result.options.region == "eu-de"
        assert result._endpoint("vpc") == "https://private.eu-de.iaas.cloud.ibm.com/v1"

    @patch("ibm_cloud_operator.builders.provider.get_secret_value")
    def test_explicit_namespace_and_key(self, mock_get_secret):
        """Test the secret namespace and key can be set."""
        mock_get_secret.return_value = "Bearer tok"
        spec = {"credentials": {"secretRef": {"name": "creds", "namespace": "system", "key": "token"}}}

        result = create_client_from_provider_config(spec, {"namespace": "default"}, Mock())

        assert mock_get_secret.call_args[0][1:] == ("system", "creds", "token")
        assert result.options.region == "us-south"

    def test_missing_secret_ref(self):
        """Test error when the credentials secret is not referenced."""
        with pytest.raises(ValueError, match="credentials.secretRef.name is required"):
            create_client_from_provider_config({"credentials": {}}, {"namespace": "default"}, Mock())

    @patch("ibm_cloud_operator.builders.provider.get_secret_value")
    def test_missing_token_key(self, mock_get_secret):
        """Test error when the secret lacks the token key."""
        mock_get_secret.side_effect = KeyError("access_token")
        spec = {"credentials": {"secretRef": {"name": "creds"}}}

        with pytest.raises(AuthenticationError, match="IAM access token key not found"):
            create_client_from_provider_config(spec, {"namespace": "default"}, Mock())

    @patch("ibm_cloud_operator.builders.provider.get_secret_value")
    def test_missing_secret(self, mock_get_secret):
        """Test a missing secret propagates."""
        mock_get_secret.side_effect = ValueError("Secret 'creds' not found in namespace 'default'")
        spec = {"credentials": {"secretRef": {"name": "creds"}}}

        with pytest.raises(ValueError, match="not found"):
            create_client_from_provider_config(spec, {"namespace": "default"}, Mock())

    @patch("ibm_cloud_operator.builders.provider.get_secret_value")
    def test_malformed_token(self, mock_get_secret):
        """Test a token without the Bearer prefix is rejected."""
        mock_get_secret.return_value = "tok123"
        spec = {"credentials": {"secretRef": {"name": "creds"}}}

        with pytest.raises(AuthenticationError):
            create_client_from_provider_config(spec, {"namespace": "default"}, Mock())
