"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import provider  # noqa: F401
from . import resource_instance  # noqa: F401
from . import resource_key  # noqa: F401
from . import subnet  # noqa: F401
from . import topic  # noqa: F401
from . import vpc  # noqa: F401
