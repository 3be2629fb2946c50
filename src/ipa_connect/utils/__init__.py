"""
Utility modules for ipa-connect.
"""

from .errors import (
    ConfigFileError,
    ConfigurationError,
    ConnectionError,
    DirectoryError,
    IPAConnectError,
    KeytabDecodeError,
    KeytabError,
    KeytabNotFoundError,
    MissingFieldError,
    format_error_for_diagnostics,
    is_membermanager_group_decode_error,
)
from .logger import logger

__all__ = [
    "logger",
    "IPAConnectError",
    "ConfigurationError",
    "MissingFieldError",
    "ConfigFileError",
    "KeytabError",
    "KeytabDecodeError",
    "KeytabNotFoundError",
    "ConnectionError",
    "DirectoryError",
    "format_error_for_diagnostics",
    "is_membermanager_group_decode_error",
]
