"""
Provisioning Context

Explicit bundle of the collaborators every identity component needs: the
registry client and the settings. Components receive it in their
constructor instead of reaching for module-level globals.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from ..logging import get_logger
from ..utils.aws import create_iot_client
from ..utils.config import ProvisionerSettings

logger = get_logger(__name__)


@dataclass
class ProvisioningContext:
    """Registry client plus settings, shared by one provisioning flow."""
    iot: Any
    settings: ProvisionerSettings = field(default_factory=ProvisionerSettings)

    @classmethod
    def from_settings(cls, settings: Optional[ProvisionerSettings] = None) -> "ProvisioningContext":
        """Validate settings and build a boto3 IoT client from them."""
        settings = (settings or ProvisionerSettings()).ensure_valid()
        iot = create_iot_client(
            region_name=settings.AWS_REGION,
            profile_name=settings.AWS_PROFILE,
        )
        logger.debug(f"Created IoT client for region {iot.meta.region_name}")
        return cls(iot=iot, settings=settings)
