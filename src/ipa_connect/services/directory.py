"""
Directory client interface consumed by the bootstrapper.
"""

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Protocol, runtime_checkable

from ..constants import DEFAULT_CONNECTION_TIMEOUT


@dataclass(frozen=True)
class TransportOptions:
    """HTTP transport settings for the directory connection."""

    verify: bool = True
    # Follow the process proxy configuration (HTTP(S)_PROXY, NO_PROXY)
    trust_env: bool = True
    timeout: float = DEFAULT_CONNECTION_TIMEOUT


@dataclass
class KerberosConnectOptions:
    """Inputs for a Kerberos connection. Streams stay owned by the caller."""

    krb5_config_reader: BinaryIO = field(repr=False)
    keytab_reader: BinaryIO = field(repr=False)
    username: str
    realm: str


@runtime_checkable
class ClientHandle(Protocol):
    """A connected, reusable directory session."""

    def call(self, method: str, *args: Any, **params: Any) -> Any: ...

    def close(self) -> None: ...


class DirectoryClient(Protocol):
    """Connection primitives of the directory service."""

    def connect(
        self,
        host: str,
        transport: TransportOptions,
        username: str,
        password: str,
    ) -> ClientHandle: ...

    def connect_kerberos(
        self,
        host: str,
        transport: TransportOptions,
        options: KerberosConnectOptions,
    ) -> ClientHandle: ...
