"""
Greengrass Identity Module

Identity and credential provisioning against the AWS IoT registry:
- Thing create-or-resolve
- Key/certificate create-or-reuse with a local credential cache
- Idempotent policies and principal attachments
- Role alias create-or-replace
- Memoized endpoint resolution

Every step is safe to re-run against a registry that already holds partial
state from an earlier run. The registry is authoritative; the local cache is
only trusted while the certificate it names still exists remotely.
"""

from .context import ProvisioningContext
from .endpoints import EndpointResolver
from .store import CredentialStore
from .things import ThingRegistry
from .vault import CredentialVault
from .policies import PolicyManager
from .role_aliases import RoleAliasManager
from .provisioner import IdentityProvisioner
from .models import (
    KeysAndCertificate,
    KeyPair,
    ThingIdentity,
    RoleAliasDescriptor,
    CreateThingOutcome,
    ThingStatus,
    CredentialLoadResult,
    CredentialSource,
    ProvisioningResult,
)

__all__ = [
    "ProvisioningContext",
    "EndpointResolver",
    "CredentialStore",
    "ThingRegistry",
    "CredentialVault",
    "PolicyManager",
    "RoleAliasManager",
    "IdentityProvisioner",
    "KeysAndCertificate",
    "KeyPair",
    "ThingIdentity",
    "RoleAliasDescriptor",
    "CreateThingOutcome",
    "ThingStatus",
    "CredentialLoadResult",
    "CredentialSource",
    "ProvisioningResult",
]
