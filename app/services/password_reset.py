# app/services/password_reset.py
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import InvalidResetToken
from app.core.logging import get_logger
from app.core.security_password import hash_password
from app.core.tokens import hash_token, new_opaque_token
from app.crud.user import user_crud
from app.models.tokens import PasswordResetToken
from app.models.user import User
from app.services.token_issuer import TokenIssuer, as_utc, utcnow

log = get_logger(__name__)


def request_reset(db: Session, email: str, settings: Settings, *, now: Optional[datetime] = None) -> Optional[str]:
    """Raw reset token for a known active account, else None. Callers answer the same either way."""
    user = user_crud.get_by_email(db, email)
    if user is None or not user.is_active:
        log.info("password_reset_requested", matched=False)
        return None

    now = now or utcnow()
    raw = new_opaque_token()
    db.add(PasswordResetToken(
        token_hash=hash_token(raw),
        user_id=user.id,
        expires_at=now + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
    ))
    db.commit()
    log.info("password_reset_requested", matched=True, account_id=user.id)
    return raw


def _find_reset(db: Session, token_hash: str) -> Optional[PasswordResetToken]:
    return db.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
    ).scalar_one_or_none()


def reset_password(db: Session, raw: str, new_password: str, settings: Settings, *, now: Optional[datetime] = None) -> None:
    """Consume a reset token, store the new hash and drop every refresh token of the account."""
    now = now or utcnow()
    token_hash = hash_token(raw)
    row = _find_reset(db, token_hash)
    if row is None:
        raise InvalidResetToken()
    if as_utc(row.expires_at) <= now:
        db.execute(delete(PasswordResetToken).where(PasswordResetToken.token_hash == token_hash)
                   .execution_options(synchronize_session=False))
        db.commit()
        log.info("password_reset_rejected", reason="expired", account_id=row.user_id)
        raise InvalidResetToken()

    account_id = row.user_id
    consumed = db.execute(
        delete(PasswordResetToken)
        .where(PasswordResetToken.token_hash == token_hash)
        .execution_options(synchronize_session=False)
    ).rowcount
    user = db.get(User, account_id)
    if consumed != 1 or user is None or not user.is_active:
        db.rollback()
        log.info("password_reset_rejected", reason="unavailable", account_id=account_id)
        raise InvalidResetToken()

    user.password_hash = hash_password(new_password)
    db.add(user)
    TokenIssuer(db, settings).revoke_all(user.id, commit=False)
    db.commit()
    log.info("password_reset_completed", account_id=user.id)
