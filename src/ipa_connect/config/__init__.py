"""
Configuration module for ipa-connect.
"""

from .keytab import (
    compact_base64_whitespace,
    decode_keytab_content,
    materialize,
    select_keytab_source,
)
from .loader import load_config, resolve
from .types import (
    SENSITIVE_FIELDS,
    AuthMode,
    ConfigDefaults,
    KeytabSource,
    RawConfiguration,
    ResolvedConfiguration,
)
from .validator import Diagnostic, Diagnostics, validate

__all__ = [
    "resolve",
    "load_config",
    "validate",
    "materialize",
    "compact_base64_whitespace",
    "decode_keytab_content",
    "select_keytab_source",
    "AuthMode",
    "ConfigDefaults",
    "KeytabSource",
    "RawConfiguration",
    "ResolvedConfiguration",
    "SENSITIVE_FIELDS",
    "Diagnostic",
    "Diagnostics",
]
