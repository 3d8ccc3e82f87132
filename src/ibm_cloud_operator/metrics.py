"""Prometheus metrics for the IBM Cloud Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "ibm_cloud_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "ibm_cloud_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# External resource operations (create/update/delete against IBM Cloud)
cloud_operations_total = Counter(
    "ibm_cloud_operator_cloud_operations_total",
    "Total number of IBM Cloud resource operations",
    ["kind", "operation", "result"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "ibm_cloud_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "resource_type"],
)

late_init_total = Counter(
    "ibm_cloud_operator_late_init_total",
    "Total number of desired-state late initializations",
    ["kind"],
)

# API call metrics
api_call_total = Counter(
    "ibm_cloud_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "ibm_cloud_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

rate_limit_hits_total = Counter(
    "ibm_cloud_operator_rate_limit_hits_total",
    "Total number of rate limit hits",
    ["api_type"],
)

# Error and status metrics
error_total = Counter(
    "ibm_cloud_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "ibm_cloud_operator_resource_status_total",
    "Resource readiness observations",
    ["kind", "status"],
)
