"""Operator tool: create a logbook account for a short identifier.

The identifier is mapped to its synthetic login address and the account is
created through the Supabase admin API (service role). The password is read
from an environment variable so it never lands in shell history.

Usage examples:

    LOGBOOK_NEW_PASSWORD='...' python -m backend.tools.provision_account \
        --identifier AB123 --role pilote --atc

    python -m backend.tools.provision_account --identifier AB123 --delete

    LOGBOOK_NEW_PASSWORD='...' python -m backend.tools.provision_account \
        --identifier AB123 --reset-password

Environment variables: SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Mapping, Optional, Sequence

from backend.identity_access import provisioning
from backend.identity_access.admin_client import AdminCapability, create_admin_client
from backend.identity_access.config import ConfigurationError, load_service_role_config
from backend.identity_access.domain import ALLOWED_ROLES, DEFAULT_ROLE, identifier_to_email


logger = logging.getLogger("logbook.tools.provision_account")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Provision a logbook account by identifier")
    parser.add_argument("--identifier", required=True)
    parser.add_argument(
        "--password-env",
        default="LOGBOOK_NEW_PASSWORD",
        help="Name of the environment variable holding the initial password",
    )
    parser.add_argument("--role", choices=sorted(ALLOWED_ROLES), default=DEFAULT_ROLE)
    parser.add_argument("--armee", action="store_true", help="Grant military flights access")
    parser.add_argument("--atc", action="store_true", help="Grant ATC access")
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--delete", action="store_true", help="Delete the account instead of creating it")
    action.add_argument(
        "--reset-password",
        action="store_true",
        help="Set a new password (from --password-env) on the existing account",
    )
    parser.add_argument("--dry-run", action="store_true", help="Log the derived login address only")
    return parser.parse_args(argv)


def _admin_client(env: Mapping[str, str]):
    capability = AdminCapability.issue(load_service_role_config(env))
    try:
        return create_admin_client(capability)
    except ConfigurationError as exc:
        raise SystemExit(str(exc)) from exc


def _existing_user_id(client, identifier: str) -> str:
    account = provisioning.find_account(client, identifier)
    if not account:
        raise SystemExit(f"No account for identifier {identifier!r}")
    return str(account["id"])


def run(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> provisioning.ProvisionedAccount | None:
    env = os.environ if environ is None else environ
    email = identifier_to_email(args.identifier)
    if args.dry_run:
        logger.info("[dry-run] Login address for %r: %s (%s)", args.identifier, email, args.role)
        return None

    password = env.get(args.password_env) or ""
    client = _admin_client(env)

    if args.delete:
        user_id = _existing_user_id(client, args.identifier)
        provisioning.delete_account(client, user_id)
        logger.info("Deleted %s -> %s", provisioning.mask_email(email), user_id)
        return None

    try:
        if args.reset_password:
            user_id = _existing_user_id(client, args.identifier)
            provisioning.reset_password(client, user_id, password)
            logger.info("Password reset for %s", provisioning.mask_email(email))
            return None
        account = provisioning.provision_account(
            client,
            identifier=args.identifier,
            password=password,
            role=args.role,
            armee=args.armee,
            atc=args.atc,
        )
    except provisioning.ProvisioningError as exc:
        raise SystemExit(f"Provisioning failed: {exc.code}") from exc
    logger.info("Created %s -> %s", provisioning.mask_email(account.email), account.user_id)
    return account



def main(argv: Optional[Sequence[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(name)s:%(message)s")
    run(_parse_args(argv))


if __name__ == "__main__":  # pragma: no cover - manual entry point
    main()
