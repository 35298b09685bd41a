"""
Greengrass Provisioner Error Taxonomy.

All provisioning errors include:
- Machine-readable error codes
- Structured details (never key material)
- Request ID correlation for tracing

Error Code Naming Convention:
- GGP_<COMPONENT>_<SPECIFIC>
- Components: THING, CACHE, CONFIG

Errors raised by the remote registry itself (botocore ``ClientError`` and
``BotoCoreError``) are NOT wrapped. They propagate to the caller unchanged.

Security:
- NEVER include private keys or certificate PEMs in error messages
- Errors should be safe to log
"""

from typing import Any, Dict, Optional


class ProvisionerError(Exception):
    """Base exception for all provisioner errors.

    All provisioner errors include:
    - code: Machine-readable error code (e.g., GGP_CACHE_CORRUPT)
    - message: Human-readable description
    - details: Structured metadata (NEVER include key material)
    - request_id: Optional correlation ID for distributed tracing
    """

    def __init__(
        self,
        message: str,
        code: str = "GGP_INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.request_id = request_id

    def __str__(self) -> str:
        parts = [f"[{self.code}] {self.message}"]
        if self.request_id:
            parts.append(f"(request_id: {self.request_id})")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "request_id": self.request_id,
        }


# =============================================================================
# Thing Registry Errors (GGP_THING_*)
# =============================================================================


class ThingError(ProvisionerError):
    """Base class for thing registry errors."""

    pass


class ThingConflictError(ThingError):
    """Raised when a thing already exists for a reason that cannot be reconciled.

    This is the unsupported-operation case: the registry reports the name is
    taken, but not because of a tag/attribute mismatch we know how to recover
    from.
    """

    def __init__(
        self,
        thing_name: str,
        reason: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Thing '{thing_name}' already exists and cannot be reused: {reason}",
            code="GGP_THING_UNSUPPORTED_CONFLICT",
            details={"thing_name": thing_name},
            request_id=request_id,
        )
        self.thing_name = thing_name


# =============================================================================
# Credential Cache Errors (GGP_CACHE_*)
# =============================================================================


class CredentialCacheError(ProvisionerError):
    """Base class for local credential cache errors."""

    pass


class CredentialCacheCorruptError(CredentialCacheError):
    """Raised when a cache entry cannot be decoded."""

    def __init__(
        self,
        path: str,
        reason: str,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Credential cache entry {path} is unreadable: {reason}",
            code="GGP_CACHE_CORRUPT",
            details={"path": path},
            request_id=request_id,
        )


class CredentialCacheVersionError(CredentialCacheError):
    """Raised when a cache entry was written by a newer format version."""

    def __init__(
        self,
        path: str,
        version: int,
        supported: int,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Credential cache entry {path} has schema version {version}, newest supported is {supported}",
            code="GGP_CACHE_VERSION_UNSUPPORTED",
            details={"path": path, "version": version, "supported": supported},
            request_id=request_id,
        )


# =============================================================================
# Configuration Errors (GGP_CONFIG_*)
# =============================================================================


class ConfigError(ProvisionerError):
    """Base class for configuration errors."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration values are invalid."""

    def __init__(
        self,
        issues: list,
        request_id: Optional[str] = None,
    ):
        super().__init__(
            message=f"Configuration validation failed: {'; '.join(issues)}",
            code="GGP_CONFIG_VALIDATION_FAILED",
            details={"issue_count": len(issues)},
            request_id=request_id,
        )
        self.issues = list(issues)


# =============================================================================
# Error Code Registry
# =============================================================================

ERROR_CODES = {
    # Thing errors
    "GGP_THING_UNSUPPORTED_CONFLICT": "Thing exists and cannot be reconciled",
    # Cache errors
    "GGP_CACHE_CORRUPT": "Credential cache entry unreadable",
    "GGP_CACHE_VERSION_UNSUPPORTED": "Credential cache entry version unsupported",
    # Config errors
    "GGP_CONFIG_VALIDATION_FAILED": "Configuration validation failed",
    # Internal
    "GGP_INTERNAL_ERROR": "Internal error",
}


def validate_error_code(code: str) -> bool:
    """Validate that an error code is registered."""
    return code in ERROR_CODES


__all__ = [
    # Base
    "ProvisionerError",
    # Thing
    "ThingError",
    "ThingConflictError",
    # Cache
    "CredentialCacheError",
    "CredentialCacheCorruptError",
    "CredentialCacheVersionError",
    # Config
    "ConfigError",
    "ConfigValidationError",
    # Registry
    "ERROR_CODES",
    "validate_error_code",
]
