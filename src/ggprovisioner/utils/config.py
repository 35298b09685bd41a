"""
Provisioner Configuration Module

Provides centralized configuration management with:
- Environment variable loading (GGP_ prefix)
- Type validation via Pydantic
- Development overrides via .env file

Environment Variable Naming Convention:
- All variables use the GGP_ prefix (e.g., GGP_AWS_REGION, GGP_BUILD_DIR)
- Standard AWS variables (AWS_PROFILE, AWS_DEFAULT_REGION) are still honoured
  by boto3 when the GGP_ equivalents are left unset
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..errors import ConfigValidationError


class ProvisionerSettings(BaseSettings):
    """
    Provisioner settings.

    Usage:
        from ggprovisioner.utils.config import ProvisionerSettings

        context = ProvisioningContext.from_settings(ProvisionerSettings())
    """
    model_config = SettingsConfigDict(
        env_prefix='GGP_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # ==========================================================================
    # GENERAL
    # ==========================================================================
    ENVIRONMENT: str = Field(default="development", description="Runtime environment: development, staging, production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # ==========================================================================
    # AWS
    # ==========================================================================
    AWS_REGION: Optional[str] = Field(default=None, description="Region of the IoT registry (None = boto3 default chain)")
    AWS_PROFILE: Optional[str] = Field(default=None, description="Named credentials profile (None = boto3 default chain)")
    DATA_ENDPOINT_TYPE: Optional[str] = Field(default=None, description="Endpoint type for the data plane (None = registry default)")
    CREDENTIAL_PROVIDER_ENDPOINT_TYPE: str = Field(default="iot:CredentialProvider", description="Endpoint type for the credential provider")

    # ==========================================================================
    # PATHS
    # ==========================================================================
    CREDENTIALS_DIR: Path = Field(default=Path("credentials"), description="Root of the local credential cache")
    BUILD_DIR: Path = Field(default=Path("build"), description="Output directory for device key and certificate files")
    PRIVATE_KEY_FILE_MODE: int = Field(default=0o600, description="Permission bits for written private key files")

    # ==========================================================================
    # GREENGRASS NAMING
    # ==========================================================================
    CORE_SUB_NAME: str = Field(default="core", description="Sub-name that identifies the group's core device")
    DEVICE_PREFIX: str = Field(default="GGD_", description="Reserved prefix of Greengrass device sub-names")

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def validate_config(self) -> List[str]:
        """
        Validate configuration for use.

        Returns:
            List of configuration issues (empty when valid)
        """
        issues = []

        if not self.CORE_SUB_NAME:
            issues.append("GGP_CORE_SUB_NAME must not be empty")
        if self.DEVICE_PREFIX and self.CORE_SUB_NAME.startswith(self.DEVICE_PREFIX):
            issues.append("GGP_CORE_SUB_NAME must not start with GGP_DEVICE_PREFIX")
        if self.CREDENTIALS_DIR == self.BUILD_DIR:
            issues.append("GGP_CREDENTIALS_DIR and GGP_BUILD_DIR must differ")
        if self.PRIVATE_KEY_FILE_MODE & 0o077:
            issues.append("GGP_PRIVATE_KEY_FILE_MODE grants group/other access to private keys")
        if self.LOG_LEVEL.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            issues.append(f"Unknown GGP_LOG_LEVEL: {self.LOG_LEVEL}")

        return issues

    def ensure_valid(self) -> "ProvisionerSettings":
        """Raise ConfigValidationError if validate_config() reports anything."""
        issues = self.validate_config()
        if issues:
            raise ConfigValidationError(issues)
        return self

