"""
Configuration and startup security checks for the logbook backend.

Why: The service-role key grants full control over every account. This module
provides a single guard that refuses obviously insecure production deployments
without burdening local development.

Permissions: The caller needs no special privileges. The function only reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
from typing import Mapping, Optional

_PROD_LIKE = {"prod", "production", "stage", "staging"}


def environment(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    return (env.get("LOGBOOK_ENV") or "dev").strip().lower()


def is_prod_like(env: str) -> bool:
    return (env or "").lower() in _PROD_LIKE


def _is_placeholder(value: str) -> bool:
    upper = value.upper()
    return upper == "DUMMY_DO_NOT_USE" or upper.startswith("CHANGE_ME")


def ensure_secure_config_on_startup(environ: Optional[Mapping[str, str]] = None) -> None:
    """Fail fast on insecure production configuration.

    Checks (prod-like environments only):
    - SUPABASE_SERVICE_ROLE_KEY must be set and not a placeholder.
    - SUPABASE_URL must be set and use https.
    """
    env = os.environ if environ is None else environ
    if not is_prod_like(environment(env)):
        return  # dev/test remain permissive

    srole = (env.get("SUPABASE_SERVICE_ROLE_KEY") or "").strip()
    if not srole or _is_placeholder(srole):
        raise SystemExit(
            "Refusing to start: SUPABASE_SERVICE_ROLE_KEY is unset or a placeholder in production."
        )

    url = (env.get("SUPABASE_URL") or "").strip()
    if not url:
        raise SystemExit("Refusing to start: SUPABASE_URL is unset in production.")
    if not url.lower().startswith("https://"):
        raise SystemExit("Refusing to start: SUPABASE_URL must use https in production.")
