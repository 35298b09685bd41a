"""
Pytest configuration and fixtures.

This file ensures proper path setup for imports and provides an in-memory
stand-in for the IoT registry that fails the way boto3 does (ClientError
with an error code).
"""

import sys
import uuid
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ggprovisioner.identity.context import ProvisioningContext  # noqa: E402
from ggprovisioner.utils.config import ProvisionerSettings  # noqa: E402

ACCOUNT = "123456789012"
REGION = "us-east-1"
DATA_ENDPOINT = "a1b2c3d4e5f6g7-ats.iot.us-east-1.amazonaws.com"
CREDENTIAL_PROVIDER_ENDPOINT = "c1d2e3f4g5h6i7.credentials.iot.us-east-1.amazonaws.com"


def client_error(code: str, message: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def generate_self_signed(common_name: str = "test-device"):
    """Return (certificate_pem, public_key_pem, private_key_pem)."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(datetime.utcnow() - timedelta(minutes=1))
        .not_valid_after(datetime.utcnow() + timedelta(days=365))
        .sign(key, hashes.SHA256())
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    return cert_pem, public_pem, private_pem


class FakeIotRegistry:
    """
    In-memory subset of the boto3 IoT client.

    Every call is recorded in ``calls`` by operation name. ``fail_next`` makes
    the next call to an operation raise the given exception instead.
    """

    def __init__(self, material):
        self.material = material
        self.things = {}
        self.certificates = {}
        self.policies = {}
        self.role_aliases = {}
        self.thing_principals = {}
        self.policy_attachments = []
        self.calls = []
        self._failures = {}

    # --- test helpers ---

    def count(self, operation: str) -> int:
        return self.calls.count(operation)

    def fail_next(self, operation: str, error: Exception):
        self._failures.setdefault(operation, []).append(error)

    def _record(self, operation: str):
        self.calls.append(operation)
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    # --- things ---

    def create_thing(self, thingName, attributePayload=None):
        self._record("create_thing")
        attributes = (attributePayload or {}).get("attributes", {})
        existing = self.things.get(thingName)
        if existing is not None:
            if existing["attributes"] == attributes:
                return {"thingName": thingName, "thingArn": existing["arn"], "thingId": existing["id"]}
            raise client_error(
                "ResourceAlreadyExistsException",
                f"Thing {thingName} already exists in account with different tags",
                "CreateThing",
            )
        thing = {
            "arn": f"arn:aws:iot:{REGION}:{ACCOUNT}:thing/{thingName}",
            "id": str(uuid.uuid4()),
            "attributes": attributes,
        }
        self.things[thingName] = thing
        return {"thingName": thingName, "thingArn": thing["arn"], "thingId": thing["id"]}

    def describe_thing(self, thingName):
        self._record("describe_thing")
        thing = self.things.get(thingName)
        if thing is None:
            raise client_error("ResourceNotFoundException", f"Thing {thingName} cannot be found", "DescribeThing")
        return {"thingName": thingName, "thingArn": thing["arn"], "thingId": thing["id"]}

    def list_thing_principals(self, thingName):
        self._record("list_thing_principals")
        if thingName not in self.things:
            raise client_error("ResourceNotFoundException", f"Thing {thingName} cannot be found", "ListThingPrincipals")
        return {"principals": list(self.thing_principals.get(thingName, []))}

    def attach_thing_principal(self, thingName, principal):
        self._record("attach_thing_principal")
        self.thing_principals.setdefault(thingName, []).append(principal)
        return {}

    # --- certificates ---

    def create_keys_and_certificate(self, setAsActive=False):
        self._record("create_keys_and_certificate")
        cert_pem, public_pem, private_pem = self.material
        certificate_id = uuid.uuid4().hex + uuid.uuid4().hex
        arn = f"arn:aws:iot:{REGION}:{ACCOUNT}:cert/{certificate_id}"
        self.certificates[certificate_id] = {"arn": arn, "status": "ACTIVE" if setAsActive else "INACTIVE"}
        return {
            "certificateArn": arn,
            "certificateId": certificate_id,
            "certificatePem": cert_pem,
            "keyPair": {"PublicKey": public_pem, "PrivateKey": private_pem},
            "ResponseMetadata": {"HTTPStatusCode": 200},
        }

    def describe_certificate(self, certificateId):
        self._record("describe_certificate")
        certificate = self.certificates.get(certificateId)
        if certificate is None:
            raise client_error(
                "ResourceNotFoundException",
                f"The certificate {certificateId} does not exist",
                "DescribeCertificate",
            )
        return {"certificateDescription": {"certificateId": certificateId, "certificateArn": certificate["arn"]}}

    # --- policies ---

    def get_policy(self, policyName):
        self._record("get_policy")
        if policyName not in self.policies:
            raise client_error("ResourceNotFoundException", f"Policy {policyName} not found", "GetPolicy")
        return {"policyName": policyName, "policyDocument": self.policies[policyName]}

    def create_policy(self, policyName, policyDocument):
        self._record("create_policy")
        if policyName in self.policies:
            raise client_error("ResourceAlreadyExistsException", f"Policy {policyName} already exists", "CreatePolicy")
        self.policies[policyName] = policyDocument
        return {"policyName": policyName, "policyArn": f"arn:aws:iot:{REGION}:{ACCOUNT}:policy/{policyName}"}

    def attach_policy(self, policyName, target):
        self._record("attach_policy")
        self.policy_attachments.append((policyName, target))
        return {}

    # --- endpoints ---

    def describe_endpoint(self, endpointType=None):
        self._record("describe_endpoint")
        if endpointType == "iot:CredentialProvider":
            return {"endpointAddress": CREDENTIAL_PROVIDER_ENDPOINT}
        return {"endpointAddress": DATA_ENDPOINT}

    # --- role aliases ---

    def create_role_alias(self, roleAlias, roleArn):
        self._record("create_role_alias")
        if roleAlias in self.role_aliases:
            raise client_error(
                "ResourceAlreadyExistsException",
                f"Role alias {roleAlias} already exists",
                "CreateRoleAlias",
            )
        self.role_aliases[roleAlias] = roleArn
        return {
            "roleAlias": roleAlias,
            "roleAliasArn": f"arn:aws:iot:{REGION}:{ACCOUNT}:rolealias/{roleAlias}",
        }

    def delete_role_alias(self, roleAlias):
        self._record("delete_role_alias")
        if roleAlias not in self.role_aliases:
            raise client_error("ResourceNotFoundException", f"Role alias {roleAlias} not found", "DeleteRoleAlias")
        del self.role_aliases[roleAlias]
        return {}


@pytest.fixture(scope="session")
def certificate_material():
    return generate_self_signed()


@pytest.fixture
def registry(certificate_material):
    return FakeIotRegistry(certificate_material)


@pytest.fixture
def settings(tmp_path):
    return ProvisionerSettings(
        CREDENTIALS_DIR=tmp_path / "credentials",
        BUILD_DIR=tmp_path / "build",
    )


@pytest.fixture
def context(registry, settings):
    return ProvisioningContext(iot=registry, settings=settings)
