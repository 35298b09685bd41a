"""
Identity Models

Data carried between the provisioning components: registry identities,
issued credentials, and the explicit outcomes of the create-or-reuse steps.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# Version written into every credential cache entry
CACHE_SCHEMA_VERSION = 1


class ThingIdentity(BaseModel):
    """A named identity record in the registry."""
    model_config = ConfigDict(frozen=True)

    name: str
    arn: str


class KeyPair(BaseModel):
    """
    PEM-encoded key pair as returned by CreateKeysAndCertificate.

    Written with the boto3 spelling (PublicKey); entries serialized with
    lower-camel keys (publicKey) are read as well.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    public_key: str = Field(
        alias="PublicKey",
        validation_alias=AliasChoices("PublicKey", "publicKey", "public_key"),
    )
    private_key: str = Field(
        alias="PrivateKey",
        validation_alias=AliasChoices("PrivateKey", "privateKey", "private_key"),
        repr=False,
    )


class KeysAndCertificate(BaseModel):
    """
    An issued device certificate with its key pair.

    Immutable once issued. The registry never returns the private key again,
    so this object (and its cache entry) is the only copy.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    certificate_id: str = Field(alias="certificateId")
    certificate_arn: str = Field(alias="certificateArn")
    certificate_pem: str = Field(alias="certificatePem", repr=False)
    key_pair: KeyPair = Field(alias="keyPair")

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "KeysAndCertificate":
        """Build from a boto3 create_keys_and_certificate response."""
        return cls.model_validate(response)

    def load_certificate(self) -> x509.Certificate:
        return x509.load_pem_x509_certificate(self.certificate_pem.encode())

    def fingerprint(self) -> str:
        """SHA-256 fingerprint of the DER certificate, hex encoded."""
        der = self.load_certificate().public_bytes(serialization.Encoding.DER)
        return hashlib.sha256(der).hexdigest()


class CredentialCacheEntry(BaseModel):
    """On-disk form of a cached credential."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_version: int = Field(default=CACHE_SCHEMA_VERSION, alias="schemaVersion")
    certificate_id: str = Field(alias="certificateId")
    certificate_arn: str = Field(alias="certificateArn")
    certificate_pem: str = Field(alias="certificatePem")
    key_pair: KeyPair = Field(alias="keyPair")

    @classmethod
    def from_credentials(cls, credentials: KeysAndCertificate) -> "CredentialCacheEntry":
        return cls(
            certificate_id=credentials.certificate_id,
            certificate_arn=credentials.certificate_arn,
            certificate_pem=credentials.certificate_pem,
            key_pair=credentials.key_pair,
        )

    def to_credentials(self) -> KeysAndCertificate:
        return KeysAndCertificate(
            certificate_id=self.certificate_id,
            certificate_arn=self.certificate_arn,
            certificate_pem=self.certificate_pem,
            key_pair=self.key_pair,
        )


class Policy(BaseModel):
    """An access policy; the name is the idempotency key."""
    model_config = ConfigDict(frozen=True)

    name: str
    document: str


class RoleAliasDescriptor(BaseModel):
    """A role alias bound to a service role."""
    model_config = ConfigDict(frozen=True)

    role_alias: str
    role_alias_arn: Optional[str] = None
    role_arn: str
    replaced: bool = False


# === Outcomes ===

class ThingStatus(str, Enum):
    CREATED = "created"
    EXISTS_WITH_CONFLICT = "exists_with_conflict"
    FATAL = "fatal"


@dataclass(frozen=True)
class CreateThingOutcome:
    """Result of a thing creation attempt."""
    thing_name: str
    status: ThingStatus
    thing_arn: Optional[str] = None
    cause: Optional[Exception] = None

    @classmethod
    def created(cls, thing_name: str, thing_arn: str) -> "CreateThingOutcome":
        return cls(thing_name, ThingStatus.CREATED, thing_arn=thing_arn)

    @classmethod
    def exists_with_conflict(cls, thing_name: str, thing_arn: str) -> "CreateThingOutcome":
        return cls(thing_name, ThingStatus.EXISTS_WITH_CONFLICT, thing_arn=thing_arn)

    @classmethod
    def fatal(cls, thing_name: str, cause: Exception) -> "CreateThingOutcome":
        return cls(thing_name, ThingStatus.FATAL, cause=cause)

    @property
    def ok(self) -> bool:
        return self.status is not ThingStatus.FATAL


class CredentialSource(str, Enum):
    CACHE = "cache"
    ISSUED = "issued"


@dataclass(frozen=True)
class CredentialLoadResult:
    """
    Credentials handed back by the vault.

    bootstrap_required is set when the core's material was regenerated: any
    device already bootstrapped with the old certificate must be re-bootstrapped.
    """
    credentials: KeysAndCertificate
    source: CredentialSource
    bootstrap_required: bool = False

    @property
    def reused(self) -> bool:
        return self.source is CredentialSource.CACHE


@dataclass(frozen=True)
class ProvisioningResult:
    """Everything produced by one end-to-end provisioning flow."""
    group_id: str
    sub_name: str
    thing: ThingIdentity
    credentials: CredentialLoadResult
    policy_name: str
    endpoint: str
    role_alias: Optional[RoleAliasDescriptor] = None
