"Logbook identity bridge"
from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.identity_access.admin_client import AdminCapability
from backend.identity_access.config import load_service_role_config, load_supabase_config
from backend.web import config as _cfg
from backend.web.routes.accounts import accounts_router

logger = logging.getLogger("logbook.web")


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via LOGBOOK_ENABLE_DOTENV (default true outside pytest).
    """
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("LOGBOOK_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()


def create_app(environ: Optional[Mapping[str, str]] = None) -> FastAPI:
    """Build the app and read Supabase configuration exactly once.

    The admin capability is issued here and only stored on `app.state`.
    Routes obtain it through `routes.accounts.get_admin_capability`.
    """
    env = os.environ if environ is None else environ
    _cfg.ensure_secure_config_on_startup(env)

    application = FastAPI(title="Logbook", description="Identifier login bridge", version="0.1.0")
    application.state.supabase = load_supabase_config(env)
    application.state.admin_capability = AdminCapability.issue(load_service_role_config(env))
    application.include_router(accounts_router)
    if not application.state.supabase.url:
        logger.warning("SUPABASE_URL is not configured; account endpoints will fail until it is set")
    return application


app = create_app()
