"""
Endpoint Resolver

Resolves the registry's data-plane and credential-provider addresses.

Each address is fetched with one describe_endpoint call and kept on the
resolver for its lifetime. There is no lock: if two threads race on the
first call both fetch, the first value stored wins and the other is
discarded.
"""

from typing import Optional

from ..logging import get_logger
from .context import ProvisioningContext

logger = get_logger(__name__)


class EndpointResolver:
    """Memoized lookup of the registry endpoints."""

    def __init__(self, context: ProvisioningContext):
        self.iot = context.iot
        self.data_endpoint_type = context.settings.DATA_ENDPOINT_TYPE
        self.credential_provider_endpoint_type = context.settings.CREDENTIAL_PROVIDER_ENDPOINT_TYPE
        self._endpoint: Optional[str] = None
        self._credential_provider_endpoint: Optional[str] = None

    def get_endpoint(self) -> str:
        """Default data-plane address."""
        if self._endpoint is None:
            address = self._describe(self.data_endpoint_type)
            if self._endpoint is None:
                self._endpoint = address
        return self._endpoint

    def get_credential_provider_endpoint(self) -> str:
        """Address devices use to trade their certificate for role credentials."""
        if self._credential_provider_endpoint is None:
            address = self._describe(self.credential_provider_endpoint_type)
            if self._credential_provider_endpoint is None:
                self._credential_provider_endpoint = address
        return self._credential_provider_endpoint

    def _describe(self, endpoint_type: Optional[str]) -> str:
        if endpoint_type:
            response = self.iot.describe_endpoint(endpointType=endpoint_type)
        else:
            response = self.iot.describe_endpoint()
        address = response["endpointAddress"]
        logger.info(f"Resolved {endpoint_type or 'default'} endpoint: {address}")
        return address
