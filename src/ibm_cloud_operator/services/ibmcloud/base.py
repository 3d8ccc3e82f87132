"""Cloud client interface consumed by the builders and handlers."""

from __future__ import annotations

from typing import Any, Protocol


class CloudClient(Protocol):
    """Protocol defining the IBM Cloud operations the operator uses."""

    # VPC infrastructure
    def list_vpcs(self) -> list[dict[str, Any]]:
        """List all VPCs in the region."""
        ...

    def create_vpc(self, body: dict[str, Any]) -> dict[str, Any]:
        """Create a VPC."""
        ...

    def update_vpc(self, vpc_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply a merge patch to a VPC."""
        ...

    def delete_vpc(self, vpc_id: str) -> None:
        """Delete a VPC."""
        ...

    def list_subnets(self) -> list[dict[str, Any]]:
        """List all subnets in the region."""
        ...

    def create_subnet(self, body: dict[str, Any]) -> dict[str, Any]:
        """Create a subnet from a subnet prototype."""
        ...

    def update_subnet(self, subnet_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Apply a merge patch to a subnet."""
        ...

    def delete_subnet(self, subnet_id: str) -> None:
        """Delete a subnet."""
        ...

    # Resource controller
    def get_resource_instance(self, instance_id: str) -> dict[str, Any]:
        """Get a resource instance."""
        ...

    def create_resource_instance(self, body: dict[str, Any]) -> dict[str, Any]:
        """Provision a resource instance."""
        ...

    def update_resource_instance(self, instance_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Update a resource instance."""
        ...

    def delete_resource_instance(self, instance_id: str) -> None:
        """Delete a resource instance."""
        ...

    def get_resource_key(self, key_id: str) -> dict[str, Any]:
        """Get a resource key, credentials included."""
        ...

    def create_resource_key(self, body: dict[str, Any]) -> dict[str, Any]:
        """Create a resource key."""
        ...

    def update_resource_key(self, key_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """Update a resource key."""
        ...

    def delete_resource_key(self, key_id: str) -> None:
        """Delete a resource key."""
        ...

    # Resource manager, catalog and tagging
    def list_resource_groups(self) -> list[dict[str, Any]]:
        """List the account's resource groups."""
        ...

    def search_catalog(self, query: str) -> list[dict[str, Any]]:
        """Search global catalog entries."""
        ...

    def get_catalog_children(self, entry_id: str) -> list[dict[str, Any]]:
        """List all child entries (plans, deployments) of a catalog entry."""
        ...

    def list_tags(self, crn: str) -> list[str]:
        """List the user tags attached to a resource."""
        ...

    def attach_tags(self, crn: str, tag_names: list[str]) -> None:
        """Attach user tags to a resource."""
        ...

    def detach_tags(self, crn: str, tag_names: list[str]) -> None:
        """Detach user tags from a resource."""
        ...

    # Event Streams admin
    def get_topic(self, admin_url: str, name: str) -> dict[str, Any]:
        """Get a topic's details."""
        ...

    def create_topic(self, admin_url: str, body: dict[str, Any]) -> None:
        """Create a topic."""
        ...

    def update_topic(self, admin_url: str, name: str, body: dict[str, Any]) -> None:
        """Update a topic's partitions and configs."""
        ...

    def delete_topic(self, admin_url: str, name: str) -> None:
        """Delete a topic."""
        ...
