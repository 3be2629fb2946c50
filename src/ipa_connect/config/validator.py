"""
Authentication mode validation.

Every rule runs; violations accumulate in a Diagnostics collection so a
caller sees every correction needed in one pass.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Optional

from ..utils.errors import MissingFieldError
from .types import ResolvedConfiguration


@dataclass(frozen=True)
class Diagnostic:
    """A single violation. ``field`` is None for errors not tied to one attribute."""

    field: Optional[str]
    summary: str
    detail: str = ""


@dataclass
class Diagnostics:
    """Ordered collection of distinct violations."""

    items: list[Diagnostic] = field(default_factory=list)

    def add_attribute_error(self, field_name: str, summary: str, detail: str = "") -> None:
        """Record a violation on ``field_name`` unless that field already has one."""
        if field_name in self.fields():
            return
        self.items.append(Diagnostic(field_name, summary, detail))

    def add_error(self, summary: str, detail: str = "") -> None:
        self.items.append(Diagnostic(None, summary, detail))

    def extend(self, others: Iterable[Diagnostic]) -> None:
        for diag in others:
            if diag.field is None:
                self.items.append(diag)
            else:
                self.add_attribute_error(diag.field, diag.summary, diag.detail)

    def has_error(self) -> bool:
        return bool(self.items)

    def fields(self) -> list[str]:
        return [d.field for d in self.items if d.field is not None]

    def raise_for_errors(self) -> None:
        """Raise MissingFieldError carrying every violation, if there are any."""
        if self.items:
            raise MissingFieldError(self)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def validate(cfg: ResolvedConfiguration) -> Diagnostics:
    """
    Check that every field required by the selected mode is present.

    Host is always required. Kerberos mode requires a principal, a
    realm, at least one keytab source, and a keytab path; password mode
    requires a username and a password. No I/O is performed.

    Args:
        cfg: Resolved configuration

    Returns:
        Diagnostics, empty when the configuration may proceed to connection
    """
    diags = Diagnostics()

    if cfg.host == "":
        diags.add_attribute_error(
            "host",
            "Missing FreeIPA host",
            "Host is required to establish a connection to FreeIPA.",
        )

    if cfg.kerberos_enabled:
        keytab_base64 = cfg.keytab_base64.get_secret_value()

        if keytab_base64 == "" and cfg.keytab_path == "":
            diags.add_attribute_error(
                "keytab_path",
                "Missing keytab information",
                "When kerberos_enabled is true you must set either keytab_path or keytab_base64.",
            )

        if cfg.kerberos_principal == "":
            diags.add_attribute_error(
                "kerberos_principal",
                "Missing Kerberos principal",
                "Kerberos principal is required when kerberos_enabled is true.",
            )

        if cfg.kerberos_realm == "":
            diags.add_attribute_error(
                "kerberos_realm",
                "Missing Kerberos realm",
                "Kerberos realm is required when kerberos_enabled is true.",
            )

        # TODO: confirm with product owners whether base64-only keytabs should
        # be accepted when keytab_path is explicitly empty.
        if cfg.keytab_path == "":
            diags.add_attribute_error(
                "keytab_path",
                "Missing keytab path",
                "Path to keytab file is required when kerberos_enabled is true.",
            )
    else:
        if cfg.username == "":
            diags.add_attribute_error(
                "username",
                "Missing FreeIPA username",
                "Username is required to establish a connection to FreeIPA.",
            )

        if cfg.password.get_secret_value() == "":
            diags.add_attribute_error(
                "password",
                "Missing FreeIPA password",
                "Password is required to establish a connection to FreeIPA.",
            )

    return diags
