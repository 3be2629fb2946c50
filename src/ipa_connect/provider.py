"""
Provider: owns configuration and the connected FreeIPA client handle.

Directory-object managers (users, groups, zones, rules) are registered
as factories and receive the provider, from which they read the handle
once ``configure`` has succeeded.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from . import __version__
from .config.loader import resolve
from .config.types import SENSITIVE_FIELDS, ConfigDefaults, RawConfiguration
from .config.validator import Diagnostics, validate
from .constants import PROVIDER_TYPE_NAME
from .services.bootstrap import bootstrap
from .services.directory import ClientHandle, DirectoryClient
from .utils.errors import IPAConnectError, format_error_for_diagnostics
from .utils.logger import logger

ManagerFactory = Callable[["Provider"], Any]


class Provider:
    """FreeIPA provider."""

    type_name = PROVIDER_TYPE_NAME

    def __init__(
        self,
        managers: Iterable[ManagerFactory] = (),
        client: Optional[DirectoryClient] = None,
        env: Optional[Mapping[str, str]] = None,
        defaults: Optional[ConfigDefaults] = None,
    ):
        self._manager_factories = list(managers)
        self._directory_client = client
        self._env = env
        self._defaults = defaults
        self._client: Optional[ClientHandle] = None

    def metadata(self) -> dict[str, str]:
        return {"type_name": self.type_name, "version": __version__}

    @staticmethod
    def schema() -> dict[str, dict[str, Any]]:
        """Describe every configuration attribute."""
        return {
            name: {
                "description": info.description,
                "optional": True,
                "sensitive": name in SENSITIVE_FIELDS,
            }
            for name, info in RawConfiguration.model_fields.items()
        }

    def configure(self, raw: RawConfiguration) -> Diagnostics:
        """
        Resolve, validate and connect.

        Validation violations are returned together and no I/O is done.
        After validation, the first failure ends the attempt and is
        returned as a single diagnostic. Any previous handle is closed
        first, so a failed attempt leaves none.
        """
        self._release_client()
        cfg = resolve(raw, self._env, self._defaults)

        diags = validate(cfg)
        if diags.has_error():
            return diags

        try:
            handle = bootstrap(cfg, self._directory_client)
        except IPAConnectError as e:
            summary, detail = format_error_for_diagnostics(e)
            logger.error(summary, {"host": cfg.host, "auth_mode": cfg.auth_mode})
            diags.add_error(summary, detail)
            return diags

        self._client = handle
        return diags

    def _release_client(self) -> None:
        handle, self._client = self._client, None
        if handle is not None:
            handle.close()

    def client(self) -> Optional[ClientHandle]:
        """The connected handle, or None until configure has succeeded."""
        return self._client

    def managers(self) -> list[Callable[[], Any]]:
        """Manager constructors bound to this provider."""
        return [self._bind(factory) for factory in self._manager_factories]

    def _bind(self, factory: ManagerFactory) -> Callable[[], Any]:
        return lambda: factory(self)


def new_factory(managers: Iterable[ManagerFactory] = ()) -> Callable[[], Provider]:
    """Return a callable that builds a fresh Provider with ``managers`` registered."""
    registered = list(managers)

    def factory() -> Provider:
        return Provider(managers=registered)

    return factory


def connect(
    raw: RawConfiguration,
    env: Optional[Mapping[str, str]] = None,
    defaults: Optional[ConfigDefaults] = None,
    client: Optional[DirectoryClient] = None,
) -> ClientHandle:
    """
    Resolve, validate and bootstrap in one call.

    Raises:
        MissingFieldError: With every violation, before any I/O
        ConfigFileError, KeytabError, ConnectionError: From bootstrap
    """
    cfg = resolve(raw, env, defaults)
    validate(cfg).raise_for_errors()
    return bootstrap(cfg, client)
