"""
Account provisioning on top of the Supabase admin client.

Why:
    Setup and operator tooling both create accounts the same way: derive the
    synthetic login address, create the auth user, then insert the profile row.
    A failed profile insert must not leave an orphaned auth user behind.

The client is duck-typed (a `supabase.Client` built by
`admin_client.create_admin_client`) so tests can pass a small fake. Callers
map `ProvisioningError.code` to user-facing messages.

Security:
- Passwords and keys are never logged; login addresses are masked.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .domain import ALLOWED_ROLES, DEFAULT_ROLE, identifier_to_email, normalize_identifier

logger = logging.getLogger("logbook.identity_access")

MIN_IDENTIFIER_LENGTH = 2
MIN_PASSWORD_LENGTH = 8
PROFILES_TABLE = "profiles"


class ProvisioningError(ValueError):
    def __init__(self, code: str) -> None:
        super().__init__(code)
        self.code = code


@dataclass(frozen=True)
class ProvisionedAccount:
    user_id: str
    identifier: str
    email: str
    role: str


def mask_email(email: str) -> str:
    """Mask a login address for logs (`ab***@logbook.local`)."""
    local, _, domain = (email or "").partition("@")
    if not domain:
        return "***"
    return f"{local[:2]}***@{domain}"


def validate_credentials(identifier: Any, password: Any) -> str:
    """Validate raw signup input and return the normalized identifier."""
    if not identifier or not isinstance(identifier, str):
        raise ProvisioningError("identifier_required")
    if not password or not isinstance(password, str):
        raise ProvisioningError("password_required")
    ident = normalize_identifier(identifier)
    if len(ident) < MIN_IDENTIFIER_LENGTH:
        raise ProvisioningError("identifier_too_short")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ProvisioningError("password_too_short")
    return ident


def count_admins(client: Any) -> int:
    res = (
        client.table(PROFILES_TABLE)
        .select("id", count="exact", head=True)
        .eq("role", "admin")
        .execute()
    )
    return int(getattr(res, "count", None) or 0)


def has_admin(client: Any) -> bool:
    return count_admins(client) > 0


def _user_id(response: Any) -> Optional[str]:
    user = getattr(response, "user", None)
    uid = getattr(user, "id", None)
    return str(uid) if uid else None


def _is_duplicate(exc: Exception) -> bool:
    message = str(getattr(exc, "message", None) or exc).lower()
    return "already been registered" in message or "already registered" in message


def provision_account(
    client: Any,
    *,
    identifier: Any,
    password: Any,
    role: str = DEFAULT_ROLE,
    armee: bool = False,
    atc: bool = False,
) -> ProvisionedAccount:
    """Create an auth user keyed by the derived login address plus its profile.

    Unknown roles fall back to the default role. On profile insert failure the
    auth user is deleted again and `profile_create_failed` is raised.
    """
    ident = validate_credentials(identifier, password)
    role = role if role in ALLOWED_ROLES else DEFAULT_ROLE
    email = identifier_to_email(ident)

    try:
        created = client.auth.admin.create_user(
            {"email": email, "password": password, "email_confirm": True}
        )
    except Exception as exc:
        if _is_duplicate(exc):
            raise ProvisioningError("identifier_taken") from exc
        logger.warning("Auth user creation failed for %s: %s", mask_email(email), exc.__class__.__name__)
        raise ProvisioningError("user_create_failed") from exc

    user_id = _user_id(created)
    if not user_id:
        raise ProvisioningError("user_id_missing")

    try:
        client.table(PROFILES_TABLE).insert(
            {
                "id": user_id,
                "identifiant": ident,
                "role": role,
                "armee": bool(armee),
                "atc": bool(atc),
                "heures_initiales_minutes": 0,
            }
        ).execute()
    except Exception as exc:
        logger.warning("Profile insert failed for %s, rolling back auth user", mask_email(email))
        try:
            client.auth.admin.delete_user(user_id)
        except Exception as rollback_exc:
            logger.warning(
                "Rollback failed, orphaned auth user %s (%s): %s",
                user_id,
                mask_email(email),
                rollback_exc.__class__.__name__,
            )
        raise ProvisioningError("profile_create_failed") from exc

    logger.info("Provisioned account %s (%s)", mask_email(email), role)
    return ProvisionedAccount(user_id=user_id, identifier=ident, email=email, role=role)


def bootstrap_first_admin(client: Any, *, identifier: Any, password: Any) -> ProvisionedAccount:
    """Create the first admin account; refused once any admin exists."""
    ident = validate_credentials(identifier, password)
    try:
        existing = count_admins(client)
    except Exception as exc:
        logger.warning("Admin count failed: %s", exc.__class__.__name__)
        raise ProvisioningError("admin_exists") from exc
    if existing > 0:
        raise ProvisioningError("admin_exists")
    return provision_account(client, identifier=ident, password=password, role="admin")


def find_account(client: Any, identifier: Any) -> Optional[dict]:
    res = (
        client.table(PROFILES_TABLE)
        .select("id, identifiant, role")
        .eq("identifiant", normalize_identifier(identifier))
        .limit(1)
        .execute()
    )
    rows = getattr(res, "data", None) or []
    return rows[0] if rows else None


def delete_account(client: Any, user_id: str) -> None:
    client.table(PROFILES_TABLE).delete().eq("id", user_id).execute()
    client.auth.admin.delete_user(user_id)
    logger.info("Deleted account %s", user_id)


def reset_password(client: Any, user_id: str, password: Any) -> None:
    if not password or not isinstance(password, str):
        raise ProvisioningError("password_required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ProvisioningError("password_too_short")
    client.auth.admin.update_user_by_id(user_id, {"password": password})


__all__ = [
    "MIN_IDENTIFIER_LENGTH",
    "MIN_PASSWORD_LENGTH",
    "ProvisionedAccount",
    "ProvisioningError",
    "bootstrap_first_admin",
    "count_admins",
    "delete_account",
    "find_account",
    "has_admin",
    "mask_email",
    "provision_account",
    "reset_password",
    "validate_credentials",
]
