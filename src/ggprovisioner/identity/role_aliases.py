"""
Role Alias Manager

Create-or-replace of a role alias bound to a service role. An existing alias
is deleted and created again rather than updated, so there is a short window
in which the alias does not exist. Only a single writer per alias is
supported; a second already-exists on the retry propagates.
"""

from botocore.exceptions import ClientError

from ..logging import get_logger
from ..utils.aws import is_already_exists
from .context import ProvisioningContext
from .models import RoleAliasDescriptor

logger = get_logger(__name__)


class RoleAliasManager:
    """Registry operations on role aliases."""

    def __init__(self, context: ProvisioningContext):
        self.iot = context.iot

    def ensure_role_alias(self, service_role_arn: str, alias_name: str) -> RoleAliasDescriptor:
        """
        Bind alias_name to service_role_arn, replacing any existing alias.

        Raises:
            ClientError: any failure other than the first already-exists
        """
        replaced = False
        try:
            response = self.iot.create_role_alias(roleAlias=alias_name, roleArn=service_role_arn)
        except ClientError as e:
            if not is_already_exists(e):
                raise
            logger.info(f"Role alias [{alias_name}] already exists, deleting it so it can be recreated")
            self.iot.delete_role_alias(roleAlias=alias_name)
            replaced = True
            response = self.iot.create_role_alias(roleAlias=alias_name, roleArn=service_role_arn)

        logger.info(f"Role alias [{alias_name}] bound to [{service_role_arn}]")
        return RoleAliasDescriptor(
            role_alias=response.get("roleAlias", alias_name),
            role_alias_arn=response.get("roleAliasArn"),
            role_arn=service_role_arn,
            replaced=replaced,
        )
