from pathlib import Path
from unittest.mock import patch

import pytest

from ggprovisioner.errors import ConfigValidationError
from ggprovisioner.identity.context import ProvisioningContext
from ggprovisioner.utils.config import ProvisionerSettings


def test_defaults():
    settings = ProvisionerSettings()

    assert settings.CREDENTIALS_DIR == Path("credentials")
    assert settings.BUILD_DIR == Path("build")
    assert settings.CORE_SUB_NAME == "core"
    assert settings.DEVICE_PREFIX == "GGD_"
    assert settings.CREDENTIAL_PROVIDER_ENDPOINT_TYPE == "iot:CredentialProvider"
    assert settings.DATA_ENDPOINT_TYPE is None
    assert settings.validate_config() == []


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GGP_AWS_REGION", "eu-west-1")
    monkeypatch.setenv("GGP_BUILD_DIR", "/tmp/out")
    monkeypatch.setenv("GGP_ENVIRONMENT", "production")

    settings = ProvisionerSettings()

    assert settings.AWS_REGION == "eu-west-1"
    assert settings.BUILD_DIR == Path("/tmp/out")
    assert settings.is_production()


def test_validate_config_reports_issues():
    settings = ProvisionerSettings(
        CORE_SUB_NAME="GGD_core",
        CREDENTIALS_DIR=Path("same"),
        BUILD_DIR=Path("same"),
        PRIVATE_KEY_FILE_MODE=0o644,
        LOG_LEVEL="chatty",
    )

    issues = settings.validate_config()

    assert len(issues) == 4
    with pytest.raises(ConfigValidationError) as exc_info:
        settings.ensure_valid()
    assert exc_info.value.issues == issues


def test_context_from_settings_builds_client():
    settings = ProvisionerSettings(AWS_REGION="eu-west-1", AWS_PROFILE="provisioning")

    with patch("ggprovisioner.identity.context.create_iot_client") as create_client:
        context = ProvisioningContext.from_settings(settings)

    create_client.assert_called_once_with(region_name="eu-west-1", profile_name="provisioning")
    assert context.iot is create_client.return_value
    assert context.settings is settings


def test_context_from_invalid_settings_raises():
    with pytest.raises(ConfigValidationError):
        ProvisioningContext.from_settings(ProvisionerSettings(CORE_SUB_NAME=""))
