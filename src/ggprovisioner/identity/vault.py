"""
Credential Vault - Key and Certificate Lifecycle

Hands out a key pair and certificate for an identity, reusing the cached
material while its certificate still exists in the registry and issuing new
material otherwise.

New material is written to three places:
- the credential cache entry (so the next run can reuse it)
- <build_dir>/<device>.pem.key (private key, owner-only)
- <build_dir>/<device>.pem.crt (certificate)

The registry never returns a private key after issuance, so a credential
whose cache entry is lost can only be replaced, never recovered.
"""

from pathlib import Path
from typing import Optional, Tuple

from botocore.exceptions import ClientError

from ..logging import get_logger
from ..utils.aws import is_not_found
from ..utils.files import atomic_write, ensure_directory
from .context import ProvisioningContext
from .models import CredentialLoadResult, CredentialSource, KeysAndCertificate
from .naming import device_file_name
from .store import CredentialStore

logger = get_logger(__name__)


class CredentialVault:
    """
    Create-or-reuse of device credentials.

    The cache is advisory and the registry is authoritative: a cached entry
    is only returned after describe_certificate confirms it still exists.
    """

    def __init__(self, context: ProvisioningContext, store: Optional[CredentialStore] = None):
        self.iot = context.iot
        self.settings = context.settings
        self.store = store or CredentialStore(context.settings.CREDENTIALS_DIR)
        self.build_dir = Path(context.settings.BUILD_DIR)

    def certificate_exists(self, certificate_id: str) -> bool:
        """
        Check whether a certificate is still registered.

        ResourceNotFoundException is the expected negative answer; every other
        registry error propagates.
        """
        try:
            self.iot.describe_certificate(certificateId=certificate_id)
        except ClientError as e:
            if is_not_found(e):
                return False
            raise
        return True

    def is_core(self, sub_name: str) -> bool:
        return sub_name == self.settings.CORE_SUB_NAME

    def device_name(self, group_id: str, sub_name: str) -> str:
        return device_file_name(
            group_id,
            sub_name,
            core_sub_name=self.settings.CORE_SUB_NAME,
            prefix=self.settings.DEVICE_PREFIX,
        )

    def output_paths(self, group_id: str, sub_name: str) -> Tuple[Path, Path]:
        """(private key path, certificate path) for an identity."""
        device_name = self.device_name(group_id, sub_name)
        return (
            self.build_dir / ".".join([device_name, "pem", "key"]),
            self.build_dir / ".".join([device_name, "pem", "crt"]),
        )

    def load_or_issue(self, group_id: str, sub_name: str) -> CredentialLoadResult:
        """
        Return valid credentials for (group_id, sub_name).

        Returns:
            CredentialLoadResult; bootstrap_required is True when the core's
            credentials had to be issued afresh.
        """
        log_extra = {"group_id": group_id, "sub_name": sub_name}
        self.store.ensure_directory(group_id)

        if self.store.exists(group_id, sub_name):
            logger.info("- Attempting to reuse existing keys.", extra=log_extra)
            cached = self.store.load(group_id, sub_name)

            if self.certificate_exists(cached.certificate_id):
                logger.info(
                    f"- Reusing existing keys (certificate {cached.certificate_id}).",
                    extra=log_extra,
                )
                return CredentialLoadResult(credentials=cached, source=CredentialSource.CACHE)

            logger.warning(
                f"- Existing certificate {cached.certificate_id} is not in AWS IoT. It may have been deleted.",
                extra=log_extra,
            )

        is_core = self.is_core(sub_name)
        if is_core:
            logger.warning(
                "- Keys not found, creating new keys. If you have an existing deployment for this "
                "group you'll need to re-run the bootstrap script since the core certificate ARN will change.",
                extra=log_extra,
            )
        else:
            logger.info("- Keys not found, creating new keys.", extra=log_extra)

        credentials = self._issue()
        self.store.save(group_id, sub_name, credentials)
        self._write_device_files(group_id, sub_name, credentials)
        self._log_fingerprint(credentials)

        return CredentialLoadResult(
            credentials=credentials,
            source=CredentialSource.ISSUED,
            bootstrap_required=is_core,
        )

    def create_or_load_keys_and_certificate(self, group_id: str, sub_name: str) -> KeysAndCertificate:
        """Credentials for (group_id, sub_name), without the load metadata."""
        return self.load_or_issue(group_id, sub_name).credentials

    def _issue(self) -> KeysAndCertificate:
        response = self.iot.create_keys_and_certificate(setAsActive=True)
        credentials = KeysAndCertificate.from_response(response)
        logger.info(f"Issued certificate {credentials.certificate_id}")
        return credentials

    def _log_fingerprint(self, credentials: KeysAndCertificate):
        # Only called once the material is on disk
        try:
            fingerprint = credentials.fingerprint()
        except ValueError as e:
            logger.warning(f"Certificate {credentials.certificate_id} PEM could not be parsed: {e}")
            return
        logger.info(f"Certificate {credentials.certificate_id} sha256 fingerprint {fingerprint}")

    def _write_device_files(self, group_id: str, sub_name: str, credentials: KeysAndCertificate):
        private_key_path, certificate_path = self.output_paths(group_id, sub_name)
        ensure_directory(self.build_dir)

        atomic_write(
            private_key_path,
            credentials.key_pair.private_key.encode(),
            mode=self.settings.PRIVATE_KEY_FILE_MODE,
        )
        logger.info(f"Device private key written to [{private_key_path}]")

        atomic_write(certificate_path, credentials.certificate_pem.encode())
        logger.info(f"Device public signed certificate written to [{certificate_path}]")
