"""
Configuration resolution and TOML loading with environment variable substitution.
"""

import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import SecretStr, ValidationError

from ..constants import (
    ENV_HOST,
    ENV_KERBEROS_ENABLED,
    ENV_KERBEROS_PRINCIPAL,
    ENV_KERBEROS_REALM,
    ENV_KEYTAB,
    ENV_KEYTAB_BASE64,
    ENV_KRB5_CONF,
    ENV_PASSWORD,
    ENV_TRUE,
    ENV_USERNAME,
    ENV_VAR_PATTERN,
)
from ..utils.errors import ConfigurationError
from ..utils.logger import logger
from .types import ConfigDefaults, RawConfiguration, ResolvedConfiguration

# Use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError as err:
        raise ImportError(
            "tomli is required for Python < 3.11. Install with: pip install tomli"
        ) from err


def _pick(
    explicit: Optional[str],
    env: Mapping[str, str],
    env_name: str,
    default: str = "",
) -> str:
    """Explicit value, else non-empty environment value, else default."""
    if explicit is not None:
        return explicit
    return env.get(env_name) or default


def _secret(value: Optional[SecretStr]) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


def resolve(
    raw: RawConfiguration,
    env: Optional[Mapping[str, str]] = None,
    defaults: Optional[ConfigDefaults] = None,
) -> ResolvedConfiguration:
    """
    Merge explicit configuration, environment and defaults.

    Precedence per field, highest first: explicitly set value,
    environment variable, built-in default, empty/false. Booleans from
    the environment are true only for the exact text ``"true"``.
    No value is trimmed or otherwise normalized here.

    Args:
        raw: Explicit configuration from the caller
        env: Environment mapping, ``os.environ`` when omitted
        defaults: Built-in defaults, ``ConfigDefaults()`` when omitted

    Returns:
        The immutable resolved configuration
    """
    env = os.environ if env is None else env
    defaults = defaults or ConfigDefaults()

    if raw.kerberos_enabled is not None:
        kerberos_enabled = raw.kerberos_enabled
    elif env.get(ENV_KERBEROS_ENABLED) == ENV_TRUE:
        kerberos_enabled = True
    else:
        kerberos_enabled = defaults.kerberos_enabled

    insecure = raw.insecure if raw.insecure is not None else defaults.insecure_skip_verify

    resolved = ResolvedConfiguration(
        host=_pick(raw.host, env, ENV_HOST),
        username=_pick(raw.username, env, ENV_USERNAME),
        password=SecretStr(_pick(_secret(raw.password), env, ENV_PASSWORD)),
        insecure_skip_verify=insecure,
        kerberos_enabled=kerberos_enabled,
        kerberos_principal=_pick(raw.kerberos_principal, env, ENV_KERBEROS_PRINCIPAL),
        kerberos_realm=_pick(raw.kerberos_realm, env, ENV_KERBEROS_REALM),
        krb5_conf_path=_pick(raw.krb5_conf_path, env, ENV_KRB5_CONF, defaults.krb5_conf_path),
        keytab_path=_pick(raw.keytab_path, env, ENV_KEYTAB, defaults.keytab_path),
        keytab_base64=SecretStr(_pick(_secret(raw.keytab_base64), env, ENV_KEYTAB_BASE64)),
    )

    logger.debug(
        "Resolved FreeIPA configuration",
        {"host": resolved.host, "auth_mode": resolved.auth_mode},
    )
    return resolved


def substitute_env_vars(value: str, env: Optional[Mapping[str, str]] = None) -> str:
    """
    Substitute environment variables in a string.

    Format: ${VAR_NAME} or ${VAR_NAME:-default}
    """
    env = os.environ if env is None else env

    def replacer(match: Any) -> str:
        var_expression = match.group(1)

        if ":-" in var_expression:
            var_name, default_value = var_expression.split(":-", 1)
        else:
            var_name = var_expression
            default_value = None

        env_value = env.get(var_name)

        if env_value is not None:
            return env_value

        if default_value is not None:
            return default_value

        logger.warning(f"Environment variable {var_name} is not set and has no default")
        return match.group(0)  # Return original if no substitution

    return ENV_VAR_PATTERN.sub(replacer, value)


def substitute_env_vars_in_object(obj: Any, env: Optional[Mapping[str, str]] = None) -> Any:
    """Recursively substitute environment variables in an object."""
    if isinstance(obj, str):
        return substitute_env_vars(obj, env)

    if isinstance(obj, list):
        return [substitute_env_vars_in_object(item, env) for item in obj]

    if isinstance(obj, dict):
        return {key: substitute_env_vars_in_object(value, env) for key, value in obj.items()}

    return obj


def load_config(config_path: str, env: Optional[Mapping[str, str]] = None) -> RawConfiguration:
    """Load explicit provider configuration from a TOML file.

    Values come from the ``[provider]`` table when present, otherwise
    from the top level. Keys left out of the file stay unset.
    """
    resolved_path = Path(config_path).resolve()

    if not resolved_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {resolved_path}")

    with open(resolved_path, "rb") as f:
        try:
            parsed = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse TOML: {e}") from e

    substituted = substitute_env_vars_in_object(parsed, env)
    provider_data = substituted.get("provider", substituted)

    try:
        return RawConfiguration(**provider_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid provider configuration in {resolved_path}: {e}", e) from e
