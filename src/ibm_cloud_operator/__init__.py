"""Kubernetes operator for IBM Cloud VPC, resource controller and Event Streams resources."""

__version__ = "0.1.0"
