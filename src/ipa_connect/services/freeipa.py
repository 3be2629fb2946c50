"""
FreeIPA directory client over the HTTP session endpoints.

Password logins post to ``/ipa/session/login_password``. Kerberos
logins acquire a TGT from the keytab into a private credential cache,
build an SPNEGO token for ``HTTP@<host>`` and post it to
``/ipa/session/login_kerberos``. Either way the resulting session
cookie is kept by the returned IPASession.
"""

import base64
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config.keytab import write_keytab_file
from ..constants import IPA_API_VERSION
from ..utils.errors import DirectoryError
from ..utils.logger import logger
from .directory import KerberosConnectOptions, TransportOptions

# KRB5_CONFIG is process-wide; only one handshake may point it elsewhere at a time
_KRB5_ENV_LOCK = threading.Lock()


def _referer(host: str) -> str:
    return f"https://{host}/ipa"


def _login_headers(host: str) -> dict[str, str]:
    return {
        "Referer": _referer(host),
        "Accept": "text/plain",
    }


def _check_login(response: httpx.Response, kind: str) -> None:
    if response.status_code == 200:
        return

    reason = response.headers.get("X-IPA-Rejection-Reason") or response.reason_phrase
    raise DirectoryError(
        f"{kind} login rejected by FreeIPA: HTTP {response.status_code} {reason}",
        code=response.status_code,
    )


def qualify_principal(principal: str, realm: str) -> str:
    """Append ``@realm`` unless the principal already names one."""
    if "@" in principal or not realm:
        return principal
    return f"{principal}@{realm}"


@contextmanager
def _krb5_config(path: Path) -> Iterator[None]:
    with _KRB5_ENV_LOCK:
        previous = os.environ.get("KRB5_CONFIG")
        os.environ["KRB5_CONFIG"] = str(path)
        try:
            yield
        finally:
            if previous is None:
                os.environ.pop("KRB5_CONFIG", None)
            else:
                os.environ["KRB5_CONFIG"] = previous


def _negotiate_token(host: str, principal: str, keytab_path: Path, ccache: str) -> str:
    """Acquire credentials from the keytab and return a base64 SPNEGO token."""
    try:
        import gssapi
        import gssapi.raw as gssapi_raw
    except ImportError as err:
        raise ImportError(
            "gssapi is required for Kerberos. Install with: pip install 'ipa-connect[kerberos]'"
        ) from err

    name = gssapi.Name(principal, gssapi.NameType.kerberos_principal)
    acquired = gssapi_raw.acquire_cred_from(
        {"client_keytab": str(keytab_path), "ccache": ccache},
        name=name,
        usage="initiate",
    )
    creds = gssapi.Credentials(base=acquired.creds)

    service = gssapi.Name(f"HTTP@{host.split(':')[0]}", gssapi.NameType.hostbased_service)
    context = gssapi.SecurityContext(name=service, creds=creds, usage="initiate")
    token = context.step()
    return base64.b64encode(token).decode("ascii")


class IPASession:
    """Authenticated FreeIPA session used by the directory-object managers."""

    def __init__(self, host: str, http: httpx.Client):
        self.host = host
        self._http = http
        self._request_id = 0

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    def call(self, method: str, *args: Any, **params: Any) -> Any:
        """
        Invoke a FreeIPA JSON-RPC command.

        Args:
            method: Command name, e.g. ``user_show``
            *args: Positional command arguments
            **params: Command options

        Returns:
            The ``result`` member of the response

        Raises:
            DirectoryError: If the request fails or FreeIPA reports an error
        """
        params.setdefault("version", IPA_API_VERSION)
        payload = {"method": method, "params": [list(args), params], "id": self._request_id}
        self._request_id += 1

        try:
            response = self._http.post(
                "/ipa/session/json",
                json=payload,
                headers={"Referer": _referer(self.host), "Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DirectoryError(f"FreeIPA request {method} failed: {e}", original_error=e) from e

        # An expired session gets an HTML login page with status 200
        try:
            body = response.json()
        except ValueError as e:
            raise DirectoryError(
                f"FreeIPA request {method} returned a non-JSON response: {e}", original_error=e
            ) from e
        error = body.get("error")
        if error:
            raise DirectoryError(
                f"{error.get('name', 'error')}: {error.get('message', '')}",
                code=error.get("code"),
            )

        return body.get("result")

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "IPASession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class FreeIPAClient:
    """Directory client for FreeIPA servers."""

    def __init__(self, http_transport: Optional[httpx.BaseTransport] = None):
        self._http_transport = http_transport

    def _http_client(self, host: str, transport: TransportOptions) -> httpx.Client:
        return httpx.Client(
            base_url=f"https://{host}",
            verify=transport.verify,
            trust_env=transport.trust_env,
            timeout=transport.timeout,
            transport=self._http_transport,
        )

    def _login(self, host: str, transport: TransportOptions, kind: str, **request: Any) -> IPASession:
        http = self._http_client(host, transport)
        try:
            response = http.post(**request)
            _check_login(response, kind)
        except Exception:
            http.close()
            raise
        return IPASession(host, http)

    def connect(
        self,
        host: str,
        transport: TransportOptions,
        username: str,
        password: str,
    ) -> IPASession:
        """Log in with username and password."""
        return self._login(
            host,
            transport,
            "Password",
            url="/ipa/session/login_password",
            data={"user": username, "password": password},
            headers=_login_headers(host),
        )

    def connect_kerberos(
        self,
        host: str,
        transport: TransportOptions,
        options: KerberosConnectOptions,
    ) -> IPASession:
        """Log in with a Kerberos ticket obtained from the supplied keytab."""
        principal = qualify_principal(options.username, options.realm)

        with tempfile.TemporaryDirectory(prefix="ipa-connect-") as workdir:
            work = Path(workdir)
            krb5_path = work / "krb5.conf"
            krb5_path.write_bytes(options.krb5_config_reader.read())
            keytab_path = write_keytab_file(options.keytab_reader.read(), work / "client.keytab")

            with _krb5_config(krb5_path):
                token = _negotiate_token(host, principal, keytab_path, f"FILE:{work / 'ccache'}")

        logger.debug("Obtained SPNEGO token", {"principal": principal})

        headers = _login_headers(host)
        headers["Authorization"] = f"Negotiate {token}"
        return self._login(
            host,
            transport,
            "Kerberos",
            url="/ipa/session/login_kerberos",
            headers=headers,
        )
