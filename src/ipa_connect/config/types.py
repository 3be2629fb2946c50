"""
Pydantic models for provider configuration.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ..constants import DEFAULT_KEYTAB_PATH, DEFAULT_KRB5_CONF_PATH

AuthMode = Literal["password", "kerberos"]
KeytabSourceKind = Literal["base64", "path"]


class RawConfiguration(BaseModel):
    """Values supplied explicitly by the caller.

    ``None`` means the field is unset and may be filled from the
    environment or a default. Any other value, including the empty
    string, is an explicit choice.
    """

    model_config = ConfigDict(extra="forbid")

    host: Optional[str] = Field(None, description="FreeIPA host to connect to")
    username: Optional[str] = Field(None, description="Username to use for connection")
    password: Optional[SecretStr] = Field(None, description="Password to use for connection")
    insecure: Optional[bool] = Field(
        None, description="Set to true to disable FreeIPA host TLS certificate verification"
    )
    kerberos_enabled: Optional[bool] = Field(
        None, description="Use Kerberos/keytab authentication instead of username/password"
    )
    kerberos_principal: Optional[str] = Field(
        None, description="Kerberos principal to use when kerberos_enabled is true"
    )
    kerberos_realm: Optional[str] = Field(
        None, description="Kerberos realm to use when kerberos_enabled is true"
    )
    krb5_conf_path: Optional[str] = Field(
        None, description="Path to krb5.conf to use for Kerberos authentication"
    )
    keytab_path: Optional[str] = Field(
        None, description="Path to keytab file to use for Kerberos authentication"
    )
    keytab_base64: Optional[SecretStr] = Field(
        None,
        description="Base64 encoded keytab content. When set it takes precedence over keytab_path.",
    )


# Fields whose values must never be displayed
SENSITIVE_FIELDS = frozenset({"password", "keytab_base64"})


class ConfigDefaults(BaseModel):
    """Built-in defaults applied when neither explicit value nor environment is set."""

    model_config = ConfigDict(frozen=True)

    krb5_conf_path: str = DEFAULT_KRB5_CONF_PATH
    keytab_path: str = DEFAULT_KEYTAB_PATH
    insecure_skip_verify: bool = False
    kerberos_enabled: bool = False


class ResolvedConfiguration(BaseModel):
    """Fully merged, immutable configuration for one connection attempt."""

    model_config = ConfigDict(frozen=True)

    host: str = ""
    username: str = ""
    password: SecretStr = SecretStr("")
    insecure_skip_verify: bool = False
    kerberos_enabled: bool = False
    kerberos_principal: str = ""
    kerberos_realm: str = ""
    krb5_conf_path: str = DEFAULT_KRB5_CONF_PATH
    keytab_path: str = DEFAULT_KEYTAB_PATH
    keytab_base64: SecretStr = SecretStr("")

    @property
    def auth_mode(self) -> AuthMode:
        """The single active authentication mode."""
        return "kerberos" if self.kerberos_enabled else "password"


class KeytabSource(BaseModel):
    """Where keytab bytes come from for one materialization."""

    model_config = ConfigDict(frozen=True)

    kind: KeytabSourceKind
    value: str = Field(..., repr=False)
