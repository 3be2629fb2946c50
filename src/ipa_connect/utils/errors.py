"""
Custom exception classes for ipa-connect.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..config.validator import Diagnostics


class IPAConnectError(Exception):
    """Base exception for all ipa-connect errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(IPAConnectError):
    """Exception for configuration errors."""

    pass


class MissingFieldError(ConfigurationError):
    """Raised when one or more required fields are missing.

    Carries every violation found, not only the first.
    """

    def __init__(self, diagnostics: "Diagnostics"):
        fields = ", ".join(d.field or "-" for d in diagnostics)
        super().__init__(f"Missing required configuration: {fields}")
        self.diagnostics = diagnostics


class ConfigFileError(ConfigurationError):
    """Raised when the krb5 configuration file cannot be opened."""

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"Failed to open krb5 configuration {path}: {original_error or 'Unknown error'}",
            original_error,
        )
        self.path = path


class KeytabError(ConfigurationError):
    """Error related to keytab processing."""

    pass


class KeytabDecodeError(KeytabError):
    """Raised when inline keytab content is not valid base64."""

    def __init__(self, original_error: Exception):
        super().__init__(f"Failed to decode keytab_base64: {original_error}", original_error)


class KeytabNotFoundError(KeytabError):
    """Raised when the keytab file cannot be opened."""

    def __init__(self, path: str, original_error: Optional[Exception] = None):
        super().__init__(
            f"Failed to open keytab {path}: {original_error or 'Unknown error'}",
            original_error,
        )
        self.path = path


class ConnectionError(IPAConnectError):
    """Exception for connection failures."""

    def __init__(self, host: str, original_error: Optional[Exception] = None):
        message = f"Failed to connect to FreeIPA: {original_error or 'Unknown error'}"
        super().__init__(message, original_error)
        self.host = host


class DirectoryError(IPAConnectError):
    """Exception raised by the directory client for rejected requests."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, original_error)
        self.code = code


def format_error_for_diagnostics(error: Exception) -> tuple[str, str]:
    """Map an error to the (summary, detail) pair shown to users."""
    if isinstance(error, ConfigFileError):
        return "Failed to open krb5.conf", f"Reason: {error}"

    if isinstance(error, KeytabError):
        return "Failed to load keytab", f"Reason: {error}"

    if isinstance(error, ConnectionError):
        reason = error.original_error or error
        return "Failed to connect to FreeIPA", f"Reason: {reason}"

    if isinstance(error, ConfigurationError):
        return "Configuration Error", f"Reason: {error}"

    return "Error", f"Reason: {error}"


def is_membermanager_group_decode_error(error: Optional[Exception]) -> bool:
    """Report whether an error comes from decoding the MembermanagerGroup field."""
    if error is None:
        return False

    return "MembermanagerGroup" in str(error)
