# app/services/credentials.py
from __future__ import annotations

from sqlalchemy.orm import Session

from app.core.errors import AccountExists, InvalidCredentials, NotFound
from app.core.logging import get_logger
from app.core.rbac import AccountRole, parse_role
from app.core.security_password import burn_verify, verify_and_maybe_upgrade
from app.crud.portal import portal_crud
from app.crud.user import user_crud
from app.models.user import User
from app.schemas.token import Identity
from app.schemas.user import RegisterRequest

log = get_logger(__name__)


def identity_for(user: User) -> Identity:
    role = parse_role(user.role)
    if role is None:
        # unknown stored role: least privilege
        log.warning("unknown_account_role", account_id=user.id, role=user.role)
        role = AccountRole.VIEWER
    return Identity(account_id=user.id, role=role, portal_id=user.portal_id)


def verify_credentials(db: Session, identifier: str, password: str) -> Identity:
    """
    Match ``identifier`` against email or username and check the password.

    Every failure raises the same ``InvalidCredentials``. When no account
    matches, a dummy hash comparison still runs so the response time does not
    tell a missing account from a wrong password.
    """
    user = user_crud.get_by_identifier(db, identifier)
    if user is None:
        burn_verify()
        log.info("login_failed", reason="unknown_identifier")
        raise InvalidCredentials()

    try:
        ok, new_hash = verify_and_maybe_upgrade(password, user.password_hash)
    except ValueError:
        # stored value is not a hash this context recognises
        log.warning("login_failed", reason="unreadable_hash", account_id=user.id)
        raise InvalidCredentials()

    if not ok:
        log.info("login_failed", reason="bad_password", account_id=user.id)
        raise InvalidCredentials()
    if not user.is_active:
        log.info("login_failed", reason="inactive", account_id=user.id)
        raise InvalidCredentials()

    if new_hash:
        user.password_hash = new_hash
        db.add(user); db.commit()
        log.info("password_rehashed", account_id=user.id)

    return identity_for(user)


def register_account(db: Session, payload: RegisterRequest) -> User:
    if portal_crud.get(db, payload.portal_id) is None:
        raise NotFound("Portal not found")
    if user_crud.exists(db, payload.email, payload.username):
        raise AccountExists()
    user = user_crud.create(db, payload)
    log.info("account_registered", account_id=user.id, portal_id=user.portal_id, role=user.role)
    return user
