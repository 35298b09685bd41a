"""
Identity Provisioner - End-to-End Flow

Runs the provisioning steps for one identity, in order:
1. Create or resolve the thing
2. Reuse or issue its key pair and certificate
3. Ensure the policy exists and attach it to the certificate
4. Attach the certificate to the thing
5. (core only, optional) Bind a service role through a role alias

Each step is individually idempotent, so the whole flow can be re-run after a
partial failure. Fatal errors abort the flow and propagate; nothing is rolled
back.
"""

from dataclasses import replace
from typing import Optional

from ..logging import get_logger
from .context import ProvisioningContext
from .endpoints import EndpointResolver
from .models import ProvisioningResult
from .naming import core_policy_name, core_thing_name
from .policies import PolicyDocument, PolicyManager, default_greengrass_policy_document
from .role_aliases import RoleAliasManager
from .things import ThingRegistry
from .vault import CredentialVault

logger = get_logger(__name__)


def core_role_alias_name(group_id: str) -> str:
    return f"{group_id}_Core_RoleAlias"


class IdentityProvisioner:
    """Provisions Greengrass cores and devices against one registry."""

    def __init__(
        self,
        context: ProvisioningContext,
        endpoints: Optional[EndpointResolver] = None,
    ):
        self.context = context
        self.settings = context.settings
        self.endpoints = endpoints or EndpointResolver(context)
        self.things = ThingRegistry(context)
        self.vault = CredentialVault(context)
        self.policies = PolicyManager(context)
        self.role_aliases = RoleAliasManager(context)

    def provision_core(
        self,
        group_id: str,
        thing_name: Optional[str] = None,
        policy_name: Optional[str] = None,
        policy_document: Optional[PolicyDocument] = None,
        service_role_arn: Optional[str] = None,
        role_alias_name: Optional[str] = None,
    ) -> ProvisioningResult:
        """
        Provision the core device of a group.

        Args:
            group_id: Group the core belongs to; also names its key files
            thing_name: Core thing name (default: <group_id>_Core)
            policy_name: Core policy name (default: <group_id>_Core_Policy)
            policy_document: Used only if the policy does not exist yet
            service_role_arn: If set, bind it through a role alias
            role_alias_name: Alias name (default: <group_id>_Core_RoleAlias)
        """
        result = self._provision(
            group_id=group_id,
            sub_name=self.settings.CORE_SUB_NAME,
            thing_name=thing_name or core_thing_name(group_id),
            policy_name=policy_name or core_policy_name(group_id),
            policy_document=policy_document,
        )

        if service_role_arn:
            alias = self.role_aliases.ensure_role_alias(
                service_role_arn,
                role_alias_name or core_role_alias_name(group_id),
            )
            result = replace(result, role_alias=alias)

        if result.credentials.bootstrap_required:
            logger.warning(
                f"Core credentials for group [{group_id}] were regenerated; "
                "redistribute the bootstrap artifacts to the core device"
            )
        return result

    def provision_device(
        self,
        group_id: str,
        device_thing_name: str,
        policy_name: str,
        policy_document: Optional[PolicyDocument] = None,
    ) -> ProvisioningResult:
        """
        Provision a device of a group. The thing name is also the credential
        sub-name, so its key files are named with the device prefix removed.
        """
        return self._provision(
            group_id=group_id,
            sub_name=device_thing_name,
            thing_name=device_thing_name,
            policy_name=policy_name,
            policy_document=policy_document,
        )

    def _provision(
        self,
        group_id: str,
        sub_name: str,
        thing_name: str,
        policy_name: str,
        policy_document: Optional[PolicyDocument],
    ) -> ProvisioningResult:
        logger.info(f"Provisioning [{thing_name}] in group [{group_id}]")

        thing = self.things.resolve(thing_name)

        loaded = self.vault.load_or_issue(group_id, sub_name)
        certificate_arn = loaded.credentials.certificate_arn

        self.policies.ensure_policy(policy_name, policy_document or default_greengrass_policy_document())
        self.policies.attach_policy_to_certificate(policy_name, certificate_arn)
        self.policies.attach_certificate_to_thing(thing_name, certificate_arn)

        return ProvisioningResult(
            group_id=group_id,
            sub_name=sub_name,
            thing=thing,
            credentials=loaded,
            policy_name=policy_name,
            endpoint=self.endpoints.get_endpoint(),
        )

