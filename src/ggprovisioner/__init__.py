"""
Greengrass Provisioner: device identity and credential provisioning for AWS IoT.
"""

__version__ = "1.0.0"

from .errors import ProvisionerError, ThingConflictError, CredentialCacheError
from .identity import IdentityProvisioner, ProvisioningContext

__all__ = [
    "__version__",
    "ProvisionerError",
    "ThingConflictError",
    "CredentialCacheError",
    "IdentityProvisioner",
    "ProvisioningContext",
]
