"""
Connection bootstrap: validated configuration in, connected client handle out.
"""

from typing import Optional

from ..config.keytab import materialize
from ..config.types import ResolvedConfiguration
from ..utils.errors import ConfigFileError, ConnectionError
from ..utils.logger import logger
from .directory import ClientHandle, DirectoryClient, KerberosConnectOptions, TransportOptions
from .freeipa import FreeIPAClient


def build_transport(cfg: ResolvedConfiguration) -> TransportOptions:
    """TLS verification is skipped only when insecure_skip_verify is set."""
    return TransportOptions(verify=not cfg.insecure_skip_verify, trust_env=True)


def _connect_kerberos(
    client: DirectoryClient,
    cfg: ResolvedConfiguration,
    transport: TransportOptions,
) -> ClientHandle:
    try:
        krb5_conf_file = open(cfg.krb5_conf_path, "rb")
    except OSError as e:
        raise ConfigFileError(cfg.krb5_conf_path, e) from e

    with krb5_conf_file:
        # Keytab errors propagate unchanged
        keytab_reader = materialize(cfg.keytab_path, cfg.keytab_base64.get_secret_value())
        with keytab_reader:
            options = KerberosConnectOptions(
                krb5_config_reader=krb5_conf_file,
                keytab_reader=keytab_reader,
                username=cfg.kerberos_principal,
                realm=cfg.kerberos_realm,
            )
            try:
                return client.connect_kerberos(cfg.host, transport, options)
            except Exception as e:
                raise ConnectionError(cfg.host, e) from e


def bootstrap(
    cfg: ResolvedConfiguration,
    client: Optional[DirectoryClient] = None,
) -> ClientHandle:
    """
    Connect to FreeIPA with the mode selected by ``cfg``.

    Args:
        cfg: Configuration that already passed validation
        client: Directory client, ``FreeIPAClient()`` when omitted

    Returns:
        A connected client handle

    Raises:
        ConfigFileError: If krb5.conf cannot be opened (Kerberos mode)
        KeytabError: If the keytab cannot be materialized (Kerberos mode)
        ConnectionError: If the directory client fails
    """
    client = client or FreeIPAClient()
    transport = build_transport(cfg)

    if cfg.kerberos_enabled:
        handle = _connect_kerberos(client, cfg, transport)
        logger.info(
            "Successfully connected to FreeIPA",
            {"host": cfg.host, "auth_mode": "kerberos", "kerberos_enabled": True},
        )
        return handle

    try:
        handle = client.connect(
            cfg.host, transport, cfg.username, cfg.password.get_secret_value()
        )
    except Exception as e:
        raise ConnectionError(cfg.host, e) from e

    logger.info(
        "Successfully connected to FreeIPA",
        {
            "host": cfg.host,
            "username": cfg.username,
            "auth_mode": "password",
            "kerberos_enabled": False,
        },
    )
    return handle
