"""
Account bootstrap routes: first-admin setup and its status probe.

Why:
    A fresh deployment has no admin yet. The login page asks `has-admin` to
    decide whether to offer setup, and `setup` creates the first admin with an
    identifier instead of an email address.

Security:
    Both handlers run server-side with the admin capability from `app.state`.
    ConfigurationError is a deployment defect: it is logged, never shown.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from backend.identity_access import provisioning
from backend.identity_access.admin_client import AdminCapability, create_admin_client
from backend.identity_access.config import ConfigurationError

logger = logging.getLogger("logbook.web")

accounts_router = APIRouter(tags=["Accounts"])

_STATUS_BY_CODE = {
    "admin_exists": 403,
    "profile_create_failed": 500,
    "user_id_missing": 500,
}


def get_admin_capability(request: Request) -> AdminCapability:
    return request.app.state.admin_capability


def _no_cache() -> dict:
    return {
        "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
        "Pragma": "no-cache",
    }


def _private_response(body: dict, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers={"Cache-Control": "private, no-store"})


@accounts_router.get("/api/has-admin")
async def has_admin_status(capability: AdminCapability = Depends(get_admin_capability)):
    """Report whether an admin account exists. Failures answer `false`."""
    try:
        client = create_admin_client(capability)
        result = provisioning.has_admin(client)
    except ConfigurationError as exc:
        logger.error("has-admin: %s", exc)
        result = False
    except Exception as exc:
        logger.warning("has-admin: backend error %s", exc.__class__.__name__)
        result = False
    return JSONResponse({"hasAdmin": result}, headers=_no_cache())


@accounts_router.post("/api/setup")
async def setup_first_admin(request: Request, capability: AdminCapability = Depends(get_admin_capability)):
    """Create the first admin from `{identifiant, password}`.

    Validation:
        - identifier at least 2 characters after normalization
        - password at least 8 characters

    Permissions:
        Anonymous, but only while no admin exists (403 afterwards).
    """
    try:
        body = await request.json()
    except ValueError:
        return _private_response({"error": "invalid_json"}, status_code=400)
    if not isinstance(body, dict):
        return _private_response({"error": "invalid_json"}, status_code=400)

    identifier = body.get("identifiant", body.get("identifier"))
    password = body.get("password")
    try:
        provisioning.validate_credentials(identifier, password)
        client = create_admin_client(capability)
        account = provisioning.bootstrap_first_admin(client, identifier=identifier, password=password)
    except provisioning.ProvisioningError as exc:
        return _private_response({"error": exc.code}, status_code=_STATUS_BY_CODE.get(exc.code, 400))
    except ConfigurationError as exc:
        logger.error("setup: %s", exc)
        return _private_response({"error": "server_error"}, status_code=500)
    except Exception as exc:
        logger.exception("setup: unexpected backend error %s", exc.__class__.__name__)
        return _private_response({"error": "server_error"}, status_code=500)

    return _private_response({"ok": True, "email": account.email})
