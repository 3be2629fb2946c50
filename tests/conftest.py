"""Shared fixtures for ipa-connect tests."""

import base64
from typing import Any, Optional

import pytest

from ipa_connect.services.directory import KerberosConnectOptions, TransportOptions

# Keytab header: format 0x0502 followed by the first entry length
KEYTAB_BYTES = b"\x05\x02\x00\x00\x00\x47"


class FakeHandle:
    """Stand-in for a connected session."""

    def __init__(self, mode: str):
        self.mode = mode
        self.closed = False

    def call(self, method: str, *args: Any, **params: Any) -> Any:
        return {"method": method, "args": list(args), "params": params}

    def close(self) -> None:
        self.closed = True


class FakeDirectoryClient:
    """Records connection calls and snapshots the streams it receives."""

    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.password_calls: list[dict[str, Any]] = []
        self.kerberos_calls: list[dict[str, Any]] = []
        self.kerberos_options: Optional[KerberosConnectOptions] = None

    def connect(self, host: str, transport: TransportOptions, username: str, password: str):
        self.password_calls.append(
            {"host": host, "transport": transport, "username": username, "password": password}
        )
        if self.error:
            raise self.error
        return FakeHandle("password")

    def connect_kerberos(self, host: str, transport: TransportOptions, options: KerberosConnectOptions):
        self.kerberos_options = options
        self.kerberos_calls.append(
            {
                "host": host,
                "transport": transport,
                "krb5_conf": options.krb5_config_reader.read(),
                "keytab": options.keytab_reader.read(),
                "principal": options.username,
                "realm": options.realm,
            }
        )
        if self.error:
            raise self.error
        return FakeHandle("kerberos")


@pytest.fixture
def keytab_bytes() -> bytes:
    return KEYTAB_BYTES


@pytest.fixture
def keytab_b64(keytab_bytes) -> str:
    return base64.b64encode(keytab_bytes).decode("ascii")


@pytest.fixture
def keytab_file(tmp_path, keytab_bytes):
    path = tmp_path / "service.keytab"
    path.write_bytes(keytab_bytes)
    path.chmod(0o600)
    return path


@pytest.fixture
def krb5_conf(tmp_path):
    path = tmp_path / "krb5.conf"
    path.write_text("[libdefaults]\ndefault_realm = EXAMPLE.TEST\n")
    return path


@pytest.fixture
def fake_client() -> FakeDirectoryClient:
    return FakeDirectoryClient()


@pytest.fixture
def make_client():
    """Build a FakeDirectoryClient, optionally failing with ``error``."""
    return FakeDirectoryClient
