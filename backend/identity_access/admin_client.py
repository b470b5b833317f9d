"""
Supabase admin client (service role) for account provisioning.

Design:
- Server-side only. The factory requires an `AdminCapability`, which the web
  entry point issues once at startup and keeps on `app.state`; request
  handlers reach it only through a dependency, never through a response.
- A fresh client is built per call; nothing is cached here.

Security:
- Do not log credentials or tokens.
- Session persistence and token auto-refresh are disabled so no session state
  can leak between unrelated requests sharing the process.
"""

from __future__ import annotations

from supabase import Client, create_client
from supabase.client import ClientOptions

from .config import ConfigurationError, ServiceRoleConfig

_ISSUER = object()


class AdminCapability:
    """Proof that the caller runs in a privileged server context.

    Only `AdminCapability.issue()` can create one. It wraps the service-role
    configuration so the key is not reachable from public config objects.
    """

    __slots__ = ("_cfg",)

    def __init__(self, cfg: ServiceRoleConfig, *, _issuer: object = None) -> None:
        if _issuer is not _ISSUER:
            raise TypeError("AdminCapability must be created via AdminCapability.issue()")
        self._cfg = cfg

    @classmethod
    def issue(cls, cfg: ServiceRoleConfig) -> "AdminCapability":
        if not isinstance(cfg, ServiceRoleConfig):
            raise TypeError("service_role_config_required")
        return cls(cfg, _issuer=_ISSUER)

    @property
    def url(self) -> str:
        return self._cfg.url

    def __repr__(self) -> str:
        return f"AdminCapability(url={self._cfg.url!r})"

    def __reduce__(self):
        raise TypeError("AdminCapability must not be serialized")


def admin_client_options() -> ClientOptions:
    return ClientOptions(auto_refresh_token=False, persist_session=False)


def create_admin_client(capability: AdminCapability) -> Client:
    """Return a Supabase client authorized with the service-role key.

    Raises:
        TypeError: when called without an AdminCapability.
        ConfigurationError: when SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is
            empty. A partially configured client is never returned.
    """
    if not isinstance(capability, AdminCapability):
        raise TypeError("admin_capability_required")
    cfg = capability._cfg
    missing = cfg.missing()
    if missing:
        raise ConfigurationError(f"Missing Supabase admin env: {', '.join(missing)}")
    return create_client(cfg.url, cfg.service_role_key, options=admin_client_options())


__all__ = ["AdminCapability", "admin_client_options", "create_admin_client"]
