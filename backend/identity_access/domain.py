"""
Identity domain constants and simple helpers.

Why:
- Users log in with a short identifier (callsign, badge code) while the
  identity backend only understands email-shaped logins. The mapping lives
  here so every caller derives the same synthetic address.
- Centralize allowed roles to avoid drift between tools and web layer.

Changing EMAIL_DOMAIN invalidates the login address of every existing account.
"""

from __future__ import annotations

from typing import Any

EMAIL_DOMAIN = "logbook.local"

# Keep roles minimal and explicit. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"pilote", "admin"})
DEFAULT_ROLE = "pilote"


def normalize_identifier(identifier: Any) -> str:
    """Return the canonical form of a raw identifier (trimmed, lower-case)."""
    return str(identifier).strip().lower()


def identifier_to_email(identifier: Any) -> str:
    """Derive the synthetic login address for a raw identifier.

    Total and deterministic for anything `str()` accepts; no charset or length
    validation happens here. Only apply it to raw identifiers: feeding an
    already derived address appends the domain a second time.
    """
    return f"{normalize_identifier(identifier)}@{EMAIL_DOMAIN}"


__all__ = [
    "ALLOWED_ROLES",
    "DEFAULT_ROLE",
    "EMAIL_DOMAIN",
    "identifier_to_email",
    "normalize_identifier",
]
