"""
Thing Registry Client

Create-or-resolve of named things, plus read-only lookups.
"""

from typing import Optional

from botocore.exceptions import ClientError

from ..errors import ThingConflictError
from ..logging import get_logger
from ..utils.aws import error_message, is_already_exists, is_not_found
from .context import ProvisioningContext
from .models import CreateThingOutcome, ThingIdentity

logger = get_logger(__name__)

# Message fragments the registry uses when a thing exists with other tags/attributes
ATTRIBUTE_CONFLICT_MARKERS = (
    "with different tags",
    "with different attributes",
)


def is_attribute_conflict(err: ClientError) -> bool:
    """
    True when an already-exists error is the recoverable tag/attribute mismatch.

    The registry exposes no structured field for this, only the message text.
    """
    if not is_already_exists(err):
        return False
    message = error_message(err).lower()
    return any(marker in message for marker in ATTRIBUTE_CONFLICT_MARKERS)


class ThingRegistry:
    """Registry operations on things."""

    def __init__(self, context: ProvisioningContext):
        self.iot = context.iot

    def create_thing(self, name: str) -> CreateThingOutcome:
        """
        Attempt to create a thing and report what happened.

        Returns:
            CREATED with the new arn, EXISTS_WITH_CONFLICT with the arn of the
            existing thing, or FATAL with the registry error as cause.

        Raises:
            ClientError: any failure other than already-exists
        """
        try:
            response = self.iot.create_thing(thingName=name)
        except ClientError as e:
            if not is_already_exists(e):
                raise
            if is_attribute_conflict(e):
                logger.info(
                    f"The thing [{name}] already exists with different tags/attributes "
                    "(e.g. immutable or other attributes)"
                )
                return CreateThingOutcome.exists_with_conflict(name, self._describe_arn(name))
            return CreateThingOutcome.fatal(name, e)

        return CreateThingOutcome.created(name, response["thingArn"])

    def create_or_get_thing(self, name: str) -> str:
        """
        Return the arn of the named thing, creating it if needed.

        Raises:
            ThingConflictError: the thing exists for a reason we cannot reconcile
        """
        outcome = self.create_thing(name)
        if not outcome.ok:
            raise ThingConflictError(name, error_message(outcome.cause)) from outcome.cause
        return outcome.thing_arn

    def resolve(self, name: str) -> ThingIdentity:
        return ThingIdentity(name=name, arn=self.create_or_get_thing(name))

    def get_thing_arn(self, name: str) -> Optional[str]:
        """Arn of the named thing, or None if it does not exist."""
        try:
            return self._describe_arn(name)
        except ClientError as e:
            if is_not_found(e):
                return None
            raise

    def get_thing_principal(self, name: str) -> Optional[str]:
        """First principal attached to the thing, or None if none are attached."""
        response = self.iot.list_thing_principals(thingName=name)
        principals = response.get("principals") or []
        if not principals:
            return None
        return principals[0]

    def _describe_arn(self, name: str) -> str:
        return self.iot.describe_thing(thingName=name)["thingArn"]
