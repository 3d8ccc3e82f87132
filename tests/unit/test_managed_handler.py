"""Tests for the managed resource reconciliation cycle."""

from __future__ import annotations

from contextlib import ExitStack
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import kopf
import pytest
from kubernetes.client.exceptions import ApiException

from ibm_cloud_operator.constants import ANNOTATION_EXTERNAL_NAME, FINALIZER
from ibm_cloud_operator.handlers.base import ManagedResourceHandler
from ibm_cloud_operator.handlers.resource_instance import ResourceInstanceHandler
from ibm_cloud_operator.handlers.resource_key import ResourceKeyHandler
from ibm_cloud_operator.handlers.subnet import SubnetHandler
from ibm_cloud_operator.handlers.topic import TopicHandler
from ibm_cloud_operator.handlers.vpc import VPCHandler
from ibm_cloud_operator.services.ibmcloud.errors import IBMCloudAPIError
from ibm_cloud_operator.utils.conditions import get_condition

READY_PROVIDER = {
    "metadata": {"name": "ibm", "namespace": "apps"},
    "spec": {"region": "us-south", "credentials": {"secretRef": {"name": "ibm-token"}}},
    "status": {"conditions": [{"type": "Ready", "status": "True"}]},
}

_BASE = "ibm_cloud_operator.handlers.base"
_EMITTERS = (
    "emit_validate_succeeded",
    "emit_validate_failed",
    "emit_reconcile_failed",
    "emit_reference_pending",
    "emit_late_initialized",
    "emit_external_created",
    "emit_external_updated",
    "emit_external_deleted",
)


@pytest.fixture
def env():
    """Patch the Kubernetes side of the cycle and hand back a mocked cloud client."""
    cloud = MagicMock()
    with ExitStack() as stack:
        mocks = {
            name: stack.enter_context(patch(f"{_BASE}.{name}"))
            for name in (
                "metrics",
                "get_k8s_client",
                "get_core_client",
                "get_provider_config_with_cache",
                "get_managed_resource",
                "list_managed_resources",
                "create_client_from_provider_config",
                "patch_external_name",
                "write_connection_secret",
                "delete_secret",
            ) + _EMITTERS
        }
        mocks["get_provider_config_with_cache"].return_value = READY_PROVIDER
        mocks["create_client_from_provider_config"].return_value = cloud
        yield SimpleNamespace(cloud=cloud, **mocks)


def _meta(external_name=None, **extra):
    meta = {"name": "main", "namespace": "apps", "uid": "uid-1", "generation": 2, **extra}
    if external_name:
        meta["annotations"] = {ANNOTATION_EXTERNAL_NAME: external_name}
    return meta


def _spec(for_provider, **extra):
    return {"providerConfigRef": {"name": "ibm"}, "forProvider": for_provider, **extra}


OBSERVED_VPC = {
    "crn": "crn:v1:bluemix:public:is:us-south:a/acc::vpc:r006-1",
    "id": "r006-1",
    "name": "main",
    "status": "available",
    "resource_group": {"id": "rg1"},
}


class TestVPCCycle:
    """Test cases for the VPC reconciliation cycle."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = VPCHandler()

    def test_creates_when_no_external_name(self, env):
        """Test that a resource without external name is created and annotated."""
        env.cloud.create_vpc.return_value = {"crn": OBSERVED_VPC["crn"]}
        meta = _meta()
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({"name": "main"}), meta, {}, patch_obj)

        env.cloud.list_vpcs.assert_not_called()
        env.cloud.create_vpc.assert_called_once_with({"name": "main"})
        env.patch_external_name.assert_called_once_with(
            env.get_k8s_client.return_value, "vpcs", meta, ANNOTATION_EXTERNAL_NAME, OBSERVED_VPC["crn"]
        )
        env.emit_external_created.assert_called_once_with(meta, "VPC", OBSERVED_VPC["crn"])
        ready = get_condition(patch_obj.status["conditions"], "Ready")
        assert ready["status"] == "False"
        assert ready["reason"] == "Creating"
        assert get_condition(patch_obj.status["conditions"], "Synced")["status"] == "True"

    def test_up_to_date_resource_is_available(self, env):
        """Test that an observed, up-to-date VPC is reported as available."""
        env.cloud.list_vpcs.return_value = [OBSERVED_VPC]
        patch_obj = kopf.Patch()

        self.handler.reconcile(
            _spec({"name": "main", "resourceGroup": {"id": "rg1"}}),
            _meta(OBSERVED_VPC["crn"]),
            {},
            patch_obj,
        )

        env.cloud.create_vpc.assert_not_called()
        env.cloud.update_vpc.assert_not_called()
        ready = get_condition(patch_obj.status["conditions"], "Ready")
        assert ready["status"] == "True"
        assert ready["reason"] == "Available"
        assert ready["observedGeneration"] == 2
        assert patch_obj.status["atProvider"]["id"] == "r006-1"
        assert patch_obj.status["observedGeneration"] == 2
        assert "forProvider" not in patch_obj.spec
        env.metrics.resource_status_total.labels.assert_called_with(kind="VPC", status="ready")

    def test_pending_resource_is_not_ready(self, env):
        """Test that a pending VPC is reported as creating."""
        env.cloud.list_vpcs.return_value = [{**OBSERVED_VPC, "status": "pending"}]
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({"name": "main"}), _meta(OBSERVED_VPC["crn"]), {}, patch_obj)

        assert get_condition(patch_obj.status["conditions"], "Ready")["reason"] == "Creating"
        env.metrics.resource_status_total.labels.assert_called_with(kind="VPC", status="not_ready")

    def test_drift_triggers_update(self, env):
        """Test that a changed name is converged."""
        env.cloud.list_vpcs.return_value = [{**OBSERVED_VPC, "name": "old"}]
        meta = _meta(OBSERVED_VPC["crn"])
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({"name": "main", "resourceGroup": {"id": "rg1"}}), meta, {}, patch_obj)

        env.cloud.update_vpc.assert_called_once_with("r006-1", {"name": "main"})
        env.emit_external_updated.assert_called_once_with(meta, "VPC", OBSERVED_VPC["crn"])
        env.metrics.drift_detected_total.labels.assert_called_with(kind="VPC", resource_type="vpcs")

    def test_late_initialization_patches_spec(self, env):
        """Test that unset parameters are written back to forProvider."""
        env.cloud.list_vpcs.return_value = [OBSERVED_VPC]
        meta = _meta(OBSERVED_VPC["crn"])
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({}), meta, {}, patch_obj)

        assert patch_obj.spec["forProvider"] == {"name": "main", "resourceGroup": {"id": "rg1", "isByID": True}}
        env.emit_late_initialized.assert_called_once_with(meta)
        env.cloud.update_vpc.assert_not_called()

    def test_observed_not_found_is_recreated(self, env):
        """Test that a 404 while observing leads to a create."""
        env.cloud.list_vpcs.side_effect = IBMCloudAPIError(404, "Not Found")
        env.cloud.create_vpc.return_value = {"crn": "crn:new"}
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({"name": "main"}), _meta("crn:gone"), {}, patch_obj)

        env.cloud.create_vpc.assert_called_once()

    def test_observe_error_fails_sync(self, env):
        """Test that an observe failure is reported on the Synced condition."""
        env.cloud.list_vpcs.side_effect = IBMCloudAPIError(500, "internal error")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            self.handler.reconcile(_spec({"name": "main"}), _meta(OBSERVED_VPC["crn"]), {}, patch_obj)

        synced = get_condition(patch_obj.status["conditions"], "Synced")
        assert synced["status"] == "False"
        assert "internal error" in synced["message"]
        env.cloud.create_vpc.assert_not_called()

    def test_create_error_fails_sync(self, env):
        """Test that a failed create is reported and nothing is annotated."""
        env.cloud.create_vpc.side_effect = IBMCloudAPIError(400, "quota exceeded")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            self.handler.reconcile(_spec({"name": "main"}), _meta(), {}, patch_obj)

        synced = get_condition(patch_obj.status["conditions"], "Synced")
        assert synced["message"] == "could not create a VPC: quota exceeded"
        env.patch_external_name.assert_not_called()
        env.metrics.cloud_operations_total.labels.assert_called_with(
            kind="VPC", operation="create", result="failed"
        )

    def test_create_without_crn_fails_sync(self, env):
        """Test that a create response without CRN is an error."""
        env.cloud.create_vpc.return_value = {}

        with pytest.raises(kopf.TemporaryError, match="create response has no CRN"):
            self.handler.reconcile(_spec({"name": "main"}), _meta(), {}, kopf.Patch())

    def test_provider_not_found(self, env):
        """Test that a missing ProviderConfig is retried."""
        env.get_provider_config_with_cache.side_effect = ApiException(status=404)
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError, match="ProviderConfig ibm not found in namespace apps"):
            self.handler.reconcile(_spec({"name": "main"}), _meta(), {}, patch_obj)

        assert get_condition(patch_obj.status["conditions"], "ProviderNotReady")["status"] == "True"
        env.create_client_from_provider_config.assert_not_called()

    def test_provider_not_ready(self, env):
        """Test that a ProviderConfig which is not ready is retried."""
        env.get_provider_config_with_cache.return_value = {
            **READY_PROVIDER,
            "status": {"conditions": [{"type": "Ready", "status": "False"}]},
        }

        with pytest.raises(kopf.TemporaryError, match="ProviderConfig ibm is not ready"):
            self.handler.reconcile(_spec({"name": "main"}), _meta(), {}, kopf.Patch())

        env.cloud.create_vpc.assert_not_called()

    def test_provider_ready_clears_condition(self, env):
        """Test that ProviderNotReady is set to False once the provider is ready."""
        env.cloud.list_vpcs.return_value = [OBSERVED_VPC]
        status = {"conditions": [{"type": "ProviderNotReady", "status": "True"}]}
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec({"name": "main"}), _meta(OBSERVED_VPC["crn"]), status, patch_obj)

        assert get_condition(patch_obj.status["conditions"], "ProviderNotReady")["status"] == "False"

    def test_missing_provider_ref(self, env):
        """Test that a missing providerConfigRef is a validation error."""
        with pytest.raises(ValueError, match="providerConfigRef.name is required"):
            self.handler.reconcile({"forProvider": {"name": "main"}}, _meta(), {}, kopf.Patch())


class TestVPCDelete:
    """Test cases for VPC deletion."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = VPCHandler()

    def test_delete(self, env):
        """Test that the external VPC is deleted and the finalizer removed."""
        env.cloud.list_vpcs.return_value = [OBSERVED_VPC]
        meta = _meta(OBSERVED_VPC["crn"], finalizers=[FINALIZER])
        patch_obj = kopf.Patch()

        self.handler.delete(_spec({"name": "main"}), meta, {}, patch_obj)

        env.cloud.delete_vpc.assert_called_once_with("r006-1")
        env.emit_external_deleted.assert_called_once_with(meta, "VPC", OBSERVED_VPC["crn"])
        assert get_condition(patch_obj.status["conditions"], "Ready")["reason"] == "Deleting"
        assert patch_obj.metadata["finalizers"] is None

    def test_delete_orphan(self, env):
        """Test that the Orphan policy leaves the external resource alone."""
        meta = _meta(OBSERVED_VPC["crn"], finalizers=[FINALIZER])
        patch_obj = kopf.Patch()

        self.handler.delete(_spec({"name": "main"}, deletionPolicy="Orphan"), meta, {}, patch_obj)

        env.create_client_from_provider_config.assert_not_called()
        assert patch_obj.metadata["finalizers"] is None

    def test_delete_without_external_name(self, env):
        """Test that a resource that was never created only drops its finalizer."""
        patch_obj = kopf.Patch()

        self.handler.delete(_spec({"name": "main"}), _meta(finalizers=[FINALIZER]), {}, patch_obj)

        env.cloud.delete_vpc.assert_not_called()
        assert patch_obj.metadata["finalizers"] is None

    def test_delete_already_gone(self, env):
        """Test that a VPC missing from the listing counts as deleted."""
        env.cloud.list_vpcs.return_value = []
        patch_obj = kopf.Patch()

        self.handler.delete(
            _spec({"name": "main"}), _meta(OBSERVED_VPC["crn"], finalizers=[FINALIZER]), {}, patch_obj
        )

        env.cloud.delete_vpc.assert_not_called()
        env.emit_external_deleted.assert_not_called()
        assert patch_obj.metadata["finalizers"] is None

    def test_delete_error_keeps_finalizer(self, env):
        """Test that other delete errors are retried with the finalizer kept."""
        env.cloud.list_vpcs.return_value = [OBSERVED_VPC]
        env.cloud.delete_vpc.side_effect = IBMCloudAPIError(409, "conflict: subnets attached")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError, match="could not delete a VPC"):
            self.handler.delete(
                _spec({"name": "main"}), _meta(OBSERVED_VPC["crn"], finalizers=[FINALIZER]), {}, patch_obj
            )

        assert "finalizers" not in patch_obj.metadata


class TestSubnetCycle:
    """Test cases for subnet specific behaviour."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = SubnetHandler()
        self.for_provider = {
            "byTotalCount": {
                "name": "edge",
                "vpc": {"vpcRef": {"name": "main"}},
                "zone": {"name": "us-south-1"},
                "totalIpv4AddressCount": 256,
            }
        }

    def test_vpc_reference_resolved_before_create(self, env):
        """Test that the VPC id is resolved from the referenced VPC resource."""
        env.get_managed_resource.return_value = {
            "metadata": {"name": "main"},
            "status": {"atProvider": {"id": "r006-vpc"}},
        }
        env.cloud.create_subnet.return_value = {"crn": "crn:subnet"}
        patch_obj = kopf.Patch()

        self.handler.reconcile(_spec(self.for_provider), _meta(), {}, patch_obj)

        env.get_managed_resource.assert_called_once_with(env.get_k8s_client.return_value, "vpcs", "apps", "main")
        body = env.cloud.create_subnet.call_args[0][0]
        assert body["vpc"] == {"id": "r006-vpc"}
        assert body["total_ipv4_address_count"] == 256
        assert patch_obj.spec["forProvider"]["byTotalCount"]["vpc"] == {
            "id": "r006-vpc",
            "vpcRef": {"name": "main"},
        }

    def test_vpc_reference_pending(self, env):
        """Test that a referenced VPC without id yet is retried."""
        env.get_managed_resource.return_value = {"metadata": {"name": "main"}}

        with pytest.raises(kopf.TemporaryError, match="spec.forProvider.byTotalCount"):
            self.handler.reconcile(_spec(self.for_provider), _meta(), {}, kopf.Patch())

        env.emit_reference_pending.assert_called_once()
        env.cloud.create_subnet.assert_not_called()

    def test_missing_vpc_reference_fails_sync(self, env):
        """Test that a missing referenced VPC is reported on the Synced condition."""
        from ibm_cloud_operator.exceptions import ResourceNotFoundError

        env.get_managed_resource.side_effect = ResourceNotFoundError("vpcs apps/main not found")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            self.handler.reconcile(_spec(self.for_provider), _meta(), {}, patch_obj)

        synced = get_condition(patch_obj.status["conditions"], "Synced")
        assert synced["status"] == "False"
        assert "cannot resolve referenced resource main" in synced["message"]

    def test_both_strategies_rejected(self, env):
        """Test that a subnet with both prototypes fails validation."""
        for_provider = {"byTotalCount": {"totalIpv4AddressCount": 256}, "byCIDR": {"ipv4CIDRBlock": "10.0.0.0/24"}}

        with pytest.raises(ValueError, match="exactly one of byTotalCount or byCIDR"):
            self.handler.reconcile(_spec(for_provider), _meta(), {}, kopf.Patch())

        env.emit_validate_failed.assert_called_once()

    def test_drift_sends_minimal_patch(self, env):
        """Test that only the changed identity is patched."""
        for_provider = {
            "byCIDR": {
                "name": "edge",
                "vpc": {"id": "r006-vpc"},
                "ipv4CIDRBlock": "10.0.0.0/24",
                "networkACL": {"id": "acl2"},
            }
        }
        env.cloud.list_subnets.return_value = [{
            "crn": "crn:subnet",
            "id": "0717-sub",
            "name": "edge",
            "status": "available",
            "vpc": {"id": "r006-vpc"},
            "ipv4_cidr_block": "10.0.0.0/24",
            "network_acl": {"id": "acl1"},
        }]

        self.handler.reconcile(_spec(for_provider), _meta("crn:subnet"), {}, kopf.Patch())

        env.cloud.update_subnet.assert_called_once_with("0717-sub", {"network_acl": {"id": "acl2"}})

    def test_empty_patch_is_not_counted_as_update(self, env):
        """Test that a difference with nothing to send issues no update, event or drift metric."""
        for_provider = {"byCIDR": {"name": "edge", "vpc": {"id": "r006-vpc"}, "ipv4CIDRBlock": "10.0.0.0/24"}}
        env.cloud.list_subnets.return_value = [{
            "crn": "crn:subnet",
            "id": "0717-sub",
            "name": "edge",
            "status": "available",
            "vpc": {"id": "r006-vpc"},
            "ipv4_cidr_block": "10.0.0.0/24",
        }]
        patch_obj = kopf.Patch()

        with patch.object(SubnetHandler, "is_up_to_date", return_value=False):
            self.handler.reconcile(_spec(for_provider), _meta("crn:subnet"), {}, patch_obj)

        env.cloud.update_subnet.assert_not_called()
        env.emit_external_updated.assert_not_called()
        env.metrics.drift_detected_total.labels.assert_not_called()
        assert get_condition(patch_obj.status["conditions"], "Synced")["status"] == "True"


class TestTopicCycle:
    """Test cases for topic specific behaviour."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = TopicHandler()

    @patch("ibm_cloud_operator.handlers.topic.get_core_client")
    @patch("ibm_cloud_operator.handlers.topic.read_secret_data")
    def test_admin_url_resolved_from_key_secret(self, mock_read, mock_core, env):
        """Test that the admin URL is read from the referenced key's connection secret."""
        env.get_managed_resource.return_value = {
            "metadata": {"name": "es-key", "namespace": "apps"},
            "spec": {"writeConnectionSecretToRef": {"name": "es-creds"}},
        }
        mock_read.return_value = {"kafka_admin_url": "https://admin.example"}
        env.cloud.get_topic.return_value = {
            "name": "orders",
            "partitions": 1,
            "configs": {"retention.ms": "86400000"},
        }
        patch_obj = kopf.Patch()

        self.handler.reconcile(
            _spec({"name": "orders", "kafkaAdminUrlRef": {"name": "es-key"}}),
            _meta("orders"),
            {},
            patch_obj,
        )

        mock_read.assert_called_once_with(mock_core.return_value, "apps", "es-creds")
        env.cloud.get_topic.assert_called_once_with("https://admin.example", "orders")
        for_provider = patch_obj.spec["forProvider"]
        assert for_provider["kafkaAdminUrl"] == "https://admin.example"
        assert for_provider["partitions"] == 1
        assert for_provider["configs"] == [{"name": "retention.ms", "value": "86400000"}]
        assert get_condition(patch_obj.status["conditions"], "Ready")["reason"] == "Available"
        env.cloud.update_topic.assert_not_called()

    @patch("ibm_cloud_operator.handlers.topic.get_core_client")
    @patch("ibm_cloud_operator.handlers.topic.read_secret_data")
    def test_admin_url_key_missing(self, mock_read, mock_core, env):
        """Test that a connection secret without the admin URL fails the cycle."""
        env.get_managed_resource.return_value = {
            "metadata": {"name": "es-key", "namespace": "apps"},
            "spec": {"writeConnectionSecretToRef": {"name": "es-creds"}},
        }
        mock_read.return_value = {"apikey": "x"}
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError, match="kafka_admin_url: key not found"):
            self.handler.reconcile(
                _spec({"name": "orders", "kafkaAdminUrlRef": {"name": "es-key"}}), _meta(), {}, patch_obj
            )

        assert get_condition(patch_obj.status["conditions"], "Synced")["status"] == "False"

    @patch("ibm_cloud_operator.handlers.topic.get_core_client")
    @patch("ibm_cloud_operator.handlers.topic.read_secret_data")
    def test_admin_url_secret_not_written_yet(self, mock_read, mock_core, env):
        """Test that a connection secret that does not exist yet is retried."""
        env.get_managed_resource.return_value = {
            "metadata": {"name": "es-key", "namespace": "apps"},
            "spec": {"writeConnectionSecretToRef": {"name": "es-creds"}},
        }
        mock_read.side_effect = ValueError("Secret 'es-creds' not found in namespace 'apps'")

        with pytest.raises(kopf.TemporaryError):
            self.handler.reconcile(
                _spec({"name": "orders", "kafkaAdminUrlRef": {"name": "es-key"}}), _meta(), {}, kopf.Patch()
            )

        env.emit_reference_pending.assert_called_once()

    def test_create_uses_topic_name_as_external_name(self, env):
        """Test that a created topic is annotated with its name."""
        patch_obj = kopf.Patch()

        self.handler.reconcile(
            _spec({"name": "orders", "kafkaAdminUrl": "https://admin.example", "partitions": 3}),
            _meta(),
            {},
            patch_obj,
        )

        env.cloud.create_topic.assert_called_once_with("https://admin.example", {"name": "orders", "partitions": 3})
        assert env.patch_external_name.call_args[0][4] == "orders"

    def test_missing_admin_url(self, env):
        """Test that a topic without admin URL fails the cycle."""
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError, match="kafkaAdminUrl is not set"):
            self.handler.reconcile(_spec({"name": "orders"}), _meta("orders"), {}, patch_obj)


class TestResourceKeyCycle:
    """Test cases for resource key specific behaviour."""

    def setup_method(self):
        """Set up test fixtures."""
        self.handler = ResourceKeyHandler()
        self.observed = {
            "id": "key-id",
            "name": "es-key",
            "state": "active",
            "role": "Writer",
            "source_crn": "crn:instance",
            "credentials": {"apikey": "s3cr3t", "kafka_admin_url": "https://admin.example"},
        }

    def test_connection_details_published(self, env):
        """Test that key credentials are written to the connection secret."""
        env.cloud.get_resource_key.return_value = self.observed
        meta = _meta("key-id")

        self.handler.reconcile(
            _spec(
                {"name": "es-key", "source": "guid-1", "role": "Writer"},
                writeConnectionSecretToRef={"name": "es-creds"},
            ),
            meta,
            {},
            kopf.Patch(),
        )

        args, kwargs = env.write_connection_secret.call_args
        assert args[1:3] == ("apps", "es-creds")
        assert args[3]["apikey"] == b"s3cr3t"
        assert args[3]["kafka_admin_url"] == b"https://admin.example"
        owner = kwargs["owner_references"][0]
        assert owner["kind"] == "ResourceKey"
        assert owner["uid"] == "uid-1"

    def test_secret_in_other_namespace_has_no_owner(self, env):
        """Test that no owner reference is set across namespaces."""
        env.cloud.get_resource_key.return_value = self.observed

        self.handler.reconcile(
            _spec(
                {"name": "es-key", "source": "guid-1", "role": "Writer"},
                writeConnectionSecretToRef={"name": "es-creds", "namespace": "shared"},
            ),
            _meta("key-id"),
            {},
            kopf.Patch(),
        )

        args, kwargs = env.write_connection_secret.call_args
        assert args[1] == "shared"
        assert kwargs["owner_references"] is None

    def test_no_secret_ref_publishes_nothing(self, env):
        """Test that nothing is written without writeConnectionSecretToRef."""
        env.cloud.get_resource_key.return_value = self.observed

        self.handler.reconcile(
            _spec({"name": "es-key", "source": "guid-1", "role": "Writer"}), _meta("key-id"), {}, kopf.Patch()
        )

        env.write_connection_secret.assert_not_called()

    def test_removed_key_is_recreated(self, env):
        """Test that a removed key counts as absent."""
        env.cloud.get_resource_key.return_value = {**self.observed, "state": "removed"}
        env.cloud.create_resource_key.return_value = {"id": "key-2"}

        self.handler.reconcile(
            _spec({"name": "es-key", "source": "guid-1", "role": "Writer"}), _meta("key-id"), {}, kopf.Patch()
        )

        env.cloud.create_resource_key.assert_called_once_with({"name": "es-key", "source": "guid-1", "role": "Writer"})
        assert env.patch_external_name.call_args[0][4] == "key-2"

    def test_delete_removes_secret_in_other_namespace(self, env):
        """Test that a connection secret without owner is deleted with the key."""
        self.handler.delete(
            _spec(
                {"name": "es-key", "source": "guid-1"},
                writeConnectionSecretToRef={"name": "es-creds", "namespace": "shared"},
            ),
            _meta("key-id", finalizers=[FINALIZER]),
            {},
            kopf.Patch(),
        )

        env.cloud.delete_resource_key.assert_called_once_with("key-id")
        env.delete_secret.assert_called_once_with(env.get_core_client.return_value, "shared", "es-creds")

    def test_delete_leaves_owned_secret_to_garbage_collection(self, env):
        """Test that a same-namespace connection secret is not deleted directly."""
        self.handler.delete(
            _spec({"name": "es-key", "source": "guid-1"}, writeConnectionSecretToRef={"name": "es-creds"}),
            _meta("key-id", finalizers=[FINALIZER]),
            {},
            kopf.Patch(),
        )

        env.delete_secret.assert_not_called()


class TestResourceInstanceDelete:
    """Test cases for resource instance deletion."""

    def test_pending_reclamation_counts_as_deleted(self, env):
        """Test that an instance already pending reclamation is not retried."""
        env.cloud.delete_resource_instance.side_effect = IBMCloudAPIError(
            400, "Instance is pending reclamation"
        )
        patch_obj = kopf.Patch()

        ResourceInstanceHandler().delete(
            _spec({"name": "es"}), _meta("guid-1", finalizers=[FINALIZER]), {}, patch_obj
        )

        env.cloud.delete_resource_instance.assert_called_once_with("guid-1")
        assert patch_obj.metadata["finalizers"] is None

    def test_removed_instance_counts_as_deleted(self, env):
        """Test that a removed instance releases the finalizer."""
        env.cloud.delete_resource_instance.side_effect = IBMCloudAPIError(
            400, "The resource instance is removed/invalid"
        )
        patch_obj = kopf.Patch()

        ResourceInstanceHandler().delete(
            _spec({"name": "es"}), _meta("guid-1", finalizers=[FINALIZER]), {}, patch_obj
        )

        assert patch_obj.metadata["finalizers"] is None
        env.emit_external_deleted.assert_not_called()


class TestManagedResourceHandlerHooks:
    """Test cases for the hook contract of managed resource handlers."""

    def test_missing_hook_fails_on_instantiation(self):
        """Test that a handler without an update hook cannot be created."""

        class IncompleteHandler(ManagedResourceHandler):
            def parse_parameters(self, for_provider):
                return for_provider

            def fetch(self, cloud, params, external_name):
                return None

            def late_initialize(self, cloud, params, resource):
                return False

            def is_up_to_date(self, cloud, params, resource):
                return True

            def generate_observation(self, resource):
                return {}

            def ready_reason(self, resource):
                return "Available"

            def create(self, cloud, params):
                return "id"

            def delete_external(self, cloud, params, external_name):
                pass

        with pytest.raises(TypeError, match="update"):
            IncompleteHandler("Widget")

    def test_optional_hooks_have_defaults(self):
        """Test that reference resolution and connection details are optional."""
        handler = VPCHandler()

        assert handler.resolve_references(None, None, {}) is False
        assert handler.connection_details({}, {}) == {}
