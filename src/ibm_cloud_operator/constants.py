"""Constants for the IBM Cloud Operator."""

API_GROUP = "ibmcloud.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

CONTROLLER_NAME = "ibm-cloud-operator"

# Resource kinds
KIND_PROVIDER_CONFIG = "ProviderConfig"
KIND_VPC = "VPC"
KIND_SUBNET = "Subnet"
KIND_RESOURCE_INSTANCE = "ResourceInstance"
KIND_RESOURCE_KEY = "ResourceKey"
KIND_TOPIC = "Topic"

# Plural names used with the CustomObjectsApi
PLURAL_PROVIDER_CONFIG = "providerconfigs"
PLURAL_VPC = "vpcs"
PLURAL_SUBNET = "subnets"
PLURAL_RESOURCE_INSTANCE = "resourceinstances"
PLURAL_RESOURCE_KEY = "resourcekeys"
PLURAL_TOPIC = "topics"

# Labels and annotations
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
LABEL_RESOURCE_KIND = f"{API_GROUP}/resource-kind"
ANNOTATION_EXTERNAL_NAME = f"{API_GROUP}/external-name"

# Finalizer
FINALIZER = f"{API_GROUP}/finalizer"

# Field manager for server-side apply
FIELD_MANAGER = "ibm-cloud-operator"

# Deletion policies
DELETION_POLICY_DELETE = "Delete"
DELETION_POLICY_ORPHAN = "Orphan"

# Condition types
COND_READY = "Ready"
COND_SYNCED = "Synced"
COND_AUTH_VALID = "AuthValid"
COND_PROVIDER_NOT_READY = "ProviderNotReady"

# Ready condition reasons
REASON_AVAILABLE = "Available"
REASON_CREATING = "Creating"
REASON_DELETING = "Deleting"
REASON_UNAVAILABLE = "Unavailable"

# Synced condition reasons
REASON_RECONCILE_SUCCESS = "ReconcileSuccess"
REASON_RECONCILE_ERROR = "ReconcileError"

# Event reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_CREATED_EXTERNAL = "CreatedExternalResource"
EVENT_REASON_UPDATED_EXTERNAL = "UpdatedExternalResource"
EVENT_REASON_DELETED_EXTERNAL = "DeletedExternalResource"
EVENT_REASON_LATE_INITIALIZED = "LateInitialized"
EVENT_REASON_REFERENCE_PENDING = "ReferencePending"

# Provider config secret keys
ACCESS_TOKEN_KEY = "access_token"

# Secret key holding the Event Streams admin URL in a ResourceKey connection secret
KAFKA_ADMIN_URL_KEY = "kafka_admin_url"
