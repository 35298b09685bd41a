"""
Policy Manager

Idempotent policy creation and the attach calls that wire a certificate to a
policy and to a thing.

Policies are identified by name only. An existing policy is left untouched
even if its document differs from the one requested.
"""

import json
from typing import Any, Dict, Union

from botocore.exceptions import ClientError

from ..logging import get_logger
from ..utils.aws import is_not_found
from .context import ProvisioningContext
from .models import Policy

logger = get_logger(__name__)

PolicyDocument = Union[str, Dict[str, Any]]


def allow_all_policy_document(*actions: str) -> Dict[str, Any]:
    """Policy document allowing the given actions on every resource."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": list(actions),
                "Resource": ["*"],
            }
        ],
    }


def default_greengrass_policy_document() -> Dict[str, Any]:
    """Document used for core and device policies when the caller supplies none."""
    return allow_all_policy_document("iot:*", "greengrass:*")


class PolicyManager:
    """Registry operations on policies and principal attachments."""

    def __init__(self, context: ProvisioningContext):
        self.iot = context.iot

    def policy_exists(self, name: str) -> bool:
        try:
            self.iot.get_policy(policyName=name)
        except ClientError as e:
            if is_not_found(e):
                return False
            raise
        return True

    def ensure_policy(self, name: str, document: PolicyDocument) -> bool:
        """
        Create the policy unless one with this name already exists.

        Returns:
            True if the policy was created by this call
        """
        if self.policy_exists(name):
            logger.debug(f"Policy [{name}] already exists, not creating it")
            return False

        if not isinstance(document, str):
            document = json.dumps(document)
        policy = Policy(name=name, document=document)

        self.iot.create_policy(policyName=policy.name, policyDocument=policy.document)
        logger.info(f"Created policy [{policy.name}]")
        return True

    def attach_policy_to_certificate(self, policy_name: str, certificate_arn: str):
        """Attach a policy to a certificate. Not checked for prior attachment."""
        self.iot.attach_policy(policyName=policy_name, target=certificate_arn)
        logger.info(f"Attached policy [{policy_name}] to certificate [{certificate_arn}]")

    def attach_certificate_to_thing(self, thing_name: str, certificate_arn: str):
        """Attach a certificate to a thing as its principal. Not checked for prior attachment."""
        self.iot.attach_thing_principal(thingName=thing_name, principal=certificate_arn)
        logger.info(f"Attached certificate [{certificate_arn}] to thing [{thing_name}]")
