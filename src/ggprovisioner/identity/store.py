"""
Local Credential Store

Keeps issued credentials on disk so later runs can reuse them:

    <credentials_dir>/<group_id>/<sub_name>.createKeysAndCertificate.serialized

Entries are JSON documents shaped like the registry's
CreateKeysAndCertificate response plus a ``schemaVersion`` field. The store
is advisory only; the vault decides whether an entry is still valid remotely.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..errors import CredentialCacheCorruptError, CredentialCacheVersionError
from ..logging import get_logger
from ..utils.files import atomic_write, ensure_directory
from .models import CACHE_SCHEMA_VERSION, CredentialCacheEntry, KeysAndCertificate

logger = get_logger(__name__)

CACHE_FILE_SUFFIX = ".createKeysAndCertificate.serialized"


class CredentialStore:
    """Reads and writes serialized credentials under a cache root."""

    def __init__(self, root: Union[str, Path] = "credentials"):
        self.root = Path(root)

    def directory_for(self, group_id: str) -> Path:
        return self.root / group_id

    def path_for(self, group_id: str, sub_name: str) -> Path:
        return self.directory_for(group_id) / f"{sub_name}{CACHE_FILE_SUFFIX}"

    def ensure_directory(self, group_id: str) -> Path:
        return ensure_directory(self.directory_for(group_id))

    def exists(self, group_id: str, sub_name: str) -> bool:
        return self.path_for(group_id, sub_name).is_file()

    def load(self, group_id: str, sub_name: str) -> KeysAndCertificate:
        """
        Deserialize a cache entry.

        Raises:
            FileNotFoundError: no entry for this identity
            CredentialCacheCorruptError: the entry is not a valid credential
            CredentialCacheVersionError: the entry was written by a newer format
        """
        path = self.path_for(group_id, sub_name)
        raw = path.read_bytes()

        try:
            data = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise CredentialCacheCorruptError(str(path), "not UTF-8 text") from e
        except json.JSONDecodeError as e:
            raise CredentialCacheCorruptError(str(path), f"invalid JSON ({e.msg})") from e
        if not isinstance(data, dict):
            raise CredentialCacheCorruptError(str(path), "expected a JSON object")

        version = data.get("schemaVersion", CACHE_SCHEMA_VERSION)
        if not isinstance(version, int) or version > CACHE_SCHEMA_VERSION:
            raise CredentialCacheVersionError(str(path), version, CACHE_SCHEMA_VERSION)

        try:
            entry = CredentialCacheEntry.model_validate(data)
        except ValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            raise CredentialCacheCorruptError(str(path), f"invalid fields: {', '.join(fields)}") from e

        return entry.to_credentials()

    def save(self, group_id: str, sub_name: str, credentials: KeysAndCertificate) -> Path:
        """Serialize credentials to the entry for this identity, replacing any previous one."""
        path = self.path_for(group_id, sub_name)
        entry = CredentialCacheEntry.from_credentials(credentials)
        atomic_write(path, entry.model_dump_json(by_alias=True, indent=2))
        logger.debug(f"Cached credentials for certificate {credentials.certificate_id} at {path}")
        return path
