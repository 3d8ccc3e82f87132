"""Tests for connection detail extraction."""

from __future__ import annotations

import pytest

from ibm_cloud_operator.exceptions import ConnectionDetailsError
from ibm_cloud_operator.utils.connection import (
    extract_connection_details,
    flatten,
    flatten_credentials,
    stringify,
)

CREDENTIALS = {
    "apikey": "k3y",
    "iam_apikey_description": "Auto-generated",
    "iam_apikey_name": "es-key",
    "iam_role_crn": "crn:v1:bluemix:public:iam::::serviceRole:Writer",
    "iam_serviceid_crn": "crn:v1:bluemix:public:iam-identity::a/abc::serviceid:ServiceId-1",
    "kafka_admin_url": "https://admin.eventstreams.example.com",
    "kafka_brokers_sasl": ["broker-0:9093", "broker-1:9093"],
    "connection": {"port": 9093, "tls": True},
}


class TestStringify:
    """Test cases for stringify."""

    def test_scalars(self):
        """Test leaf values are rendered as strings."""
        assert stringify(None) == ""
        assert stringify(True) == "true"
        assert stringify(False) == "false"
        assert stringify(9093) == "9093"
        assert stringify(1.5) == "1.500000"
        assert stringify("x") == "x"


class TestFlatten:
    """Test cases for flatten and flatten_credentials."""

    def test_nested_paths(self):
        """Test nested mappings and lists become dotted paths."""
        result = flatten({"hosts": [{"hostname": "h0"}, {"hostname": "h1"}], "port": 1})

        assert result == {"hosts.0.hostname": "h0", "hosts.1.hostname": "h1", "port": "1"}

    def test_standard_keys_always_present(self):
        """Test the IAM keys are emitted even when missing."""
        result = flatten_credentials({"url": "https://x"})

        assert result["apikey"] == ""
        assert result["iamRoleCrn"] == ""
        assert result["url"] == "https://x"

    def test_credentials(self):
        """Test flattening a full credentials object."""
        result = flatten_credentials(CREDENTIALS)

        assert result["apikey"] == "k3y"
        assert result["iamApikeyName"] == "es-key"
        assert result["kafka_brokers_sasl.1"] == "broker-1:9093"
        assert result["connection.tls"] == "true"
        assert "iam_apikey_name" not in result


class TestExtractConnectionDetails:
    """Test cases for extract_connection_details."""

    def test_flatten_mode(self):
        """Test flattening is used without templates."""
        result = extract_connection_details(None, CREDENTIALS)

        assert result["kafka_admin_url"] == b"https://admin.eventstreams.example.com"
        assert result["apikey"] == b"k3y"

    def test_template_mode(self):
        """Test templates are rendered against the credentials."""
        templates = {
            "bootstrap": "{{ kafka_brokers_sasl | join(',') }}",
            "url": "{{ kafka_admin_url }}",
        }

        result = extract_connection_details(templates, CREDENTIALS)

        assert result == {
            "bootstrap": b"broker-0:9093,broker-1:9093",
            "url": b"https://admin.eventstreams.example.com",
        }

    def test_json_filter(self):
        """Test the json filter renders nested values."""
        result = extract_connection_details({"conn": "{{ connection | json }}"}, CREDENTIALS)

        assert result["conn"] == b'{"port": 9093, "tls": true}'

    def test_empty_templates(self):
        """Test an empty template mapping yields no keys."""
        assert extract_connection_details({}, CREDENTIALS) == {}

    def test_no_credentials(self):
        """Test missing credentials yield no details."""
        assert extract_connection_details(None, None) == {}
        assert extract_connection_details({"a": "{{ apikey }}"}, {}) == {}

    def test_missing_field(self):
        """Test a template referencing a missing field fails."""
        with pytest.raises(ConnectionDetailsError, match="password"):
            extract_connection_details({"password": "{{ nope }}"}, CREDENTIALS)

    def test_malformed_template(self):
        """Test a malformed template fails."""
        with pytest.raises(ConnectionDetailsError):
            extract_connection_details({"bad": "{{ apikey "}, CREDENTIALS)
