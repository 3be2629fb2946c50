"""
Shared constants for ipa-connect.
"""

import re

# Provider type name reported by Provider.metadata()
PROVIDER_TYPE_NAME = "freeipa"

# Environment variables read when the explicit value is unset
ENV_HOST = "FREEIPA_HOST"
ENV_USERNAME = "FREEIPA_USERNAME"
ENV_PASSWORD = "FREEIPA_PASSWORD"
ENV_KERBEROS_ENABLED = "FREEIPA_KERBEROS_ENABLED"
ENV_KERBEROS_PRINCIPAL = "FREEIPA_KERBEROS_PRINCIPAL"
ENV_KERBEROS_REALM = "FREEIPA_KERBEROS_REALM"
ENV_KRB5_CONF = "FREEIPA_KRB5_CONF"
ENV_KEYTAB = "FREEIPA_KEYTAB"
ENV_KEYTAB_BASE64 = "FREEIPA_KEYTAB_BASE64"

# Only this exact text enables a boolean from the environment
ENV_TRUE = "true"

# Conventional system locations
DEFAULT_KRB5_CONF_PATH = "/etc/krb5.conf"
DEFAULT_KEYTAB_PATH = "/etc/krb5.keytab"

# Characters stripped from inline keytab text before decoding
BASE64_WHITESPACE = " \t\n\r\v\f"

# First byte of every keytab file (format version 0x0502)
KEYTAB_FORMAT_BYTE = 0x05

# Default HTTP timeout in seconds for the FreeIPA session endpoints
DEFAULT_CONNECTION_TIMEOUT = 30

# FreeIPA JSON-RPC API version sent with every call
IPA_API_VERSION = "2.251"

# Environment variable pattern for config substitution
# Format: ${VAR_NAME} or ${VAR_NAME:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")
