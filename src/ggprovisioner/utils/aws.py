"""
AWS helpers shared by the identity components.

Registry failures arrive as botocore ``ClientError`` instances; the modelled
exception classes on ``client.exceptions`` are subclasses of it, so callers
classify on the error code rather than on the class.
"""

from typing import Any, Optional

import boto3
from botocore.exceptions import ClientError

RESOURCE_NOT_FOUND = "ResourceNotFoundException"
RESOURCE_ALREADY_EXISTS = "ResourceAlreadyExistsException"


def error_code(err: ClientError) -> str:
    """Return the registry error code carried by a ClientError."""
    return err.response.get("Error", {}).get("Code", "")


def error_message(err: ClientError) -> str:
    """Return the registry error message carried by a ClientError."""
    return err.response.get("Error", {}).get("Message", "") or str(err)


def is_not_found(err: ClientError) -> bool:
    return error_code(err) == RESOURCE_NOT_FOUND


def is_already_exists(err: ClientError) -> bool:
    return error_code(err) == RESOURCE_ALREADY_EXISTS


def create_iot_client(
    region_name: Optional[str] = None,
    profile_name: Optional[str] = None,
) -> Any:
    """Build a boto3 IoT client, falling back to the default credential chain."""
    session = boto3.session.Session(profile_name=profile_name, region_name=region_name)
    return session.client("iot")
