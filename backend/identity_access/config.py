"""
Supabase configuration objects for the identity bridge.

Why:
    Secrets used to be read from ambient process state at every call. Loading
    them once into frozen objects keeps the error path deterministic and lets
    tests pass a plain mapping instead of mutating the real environment.

Security:
    `SupabaseConfig` is the public surface (URL + anon key) and may be handed
    to browser bootstrap code. `ServiceRoleConfig` carries the service-role key
    and must stay server-side: its repr hides the key and it refuses pickling.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


class ConfigurationError(RuntimeError):
    """Required server configuration is missing (deployment defect, not retried)."""


def _read(environ: Mapping[str, str], name: str) -> str:
    return (environ.get(name) or "").strip()


@dataclass(frozen=True)
class SupabaseConfig:
    url: str = ""
    anon_key: str = ""


@dataclass(frozen=True)
class ServiceRoleConfig:
    url: str = ""
    service_role_key: str = field(default="", repr=False)

    def missing(self) -> list[str]:
        """Names of the environment variables that are unset or empty."""
        names = []
        if not self.url:
            names.append("SUPABASE_URL")
        if not self.service_role_key:
            names.append("SUPABASE_SERVICE_ROLE_KEY")
        return names

    def __reduce__(self):
        raise TypeError("ServiceRoleConfig must not be serialized")


def load_supabase_config(environ: Optional[Mapping[str, str]] = None) -> SupabaseConfig:
    env = os.environ if environ is None else environ
    return SupabaseConfig(url=_read(env, "SUPABASE_URL"), anon_key=_read(env, "SUPABASE_ANON_KEY"))


def load_service_role_config(environ: Optional[Mapping[str, str]] = None) -> ServiceRoleConfig:
    """Read the server-only Supabase settings.

    Never fails: empty values are kept so the admin client factory can raise a
    ConfigurationError at the point of use.
    """
    env = os.environ if environ is None else environ
    return ServiceRoleConfig(
        url=_read(env, "SUPABASE_URL"),
        service_role_key=_read(env, "SUPABASE_SERVICE_ROLE_KEY"),
    )


__all__ = [
    "ConfigurationError",
    "ServiceRoleConfig",
    "SupabaseConfig",
    "load_service_role_config",
    "load_supabase_config",
]
