# app/services/token_issuer.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import InvalidRefreshToken
from app.core.logging import get_logger
from app.core.tokens import create_access_token, hash_token, new_opaque_token
from app.models.tokens import PasswordResetToken, RefreshToken
from app.models.user import User
from app.schemas.token import Identity, TokenPair
from app.services.credentials import identity_for

log = get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TokenIssuer:
    """
    Mints access tokens and rotating, single-use refresh tokens.

    Only the SHA-256 of a refresh token is stored; the raw value leaves this
    class exactly once, inside the returned ``TokenPair``.
    """

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    # ---------- internals ----------
    def _store_refresh(self, account_id: str, now: datetime) -> str:
        raw = new_opaque_token()
        self.db.add(RefreshToken(
            token_hash=hash_token(raw),
            user_id=account_id,
            expires_at=now + timedelta(days=self.settings.JWT_REFRESH_TTL_DAYS),
            is_revoked=False,
        ))
        return raw

    def _pair(self, identity: Identity, raw_refresh: str, now: datetime) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(identity, self.settings, now=now),
            refresh_token=raw_refresh,
            expires_in=self.settings.JWT_ACCESS_TTL_MINUTES * 60,
        )

    def _lookup(self, token_hash: str) -> Optional[RefreshToken]:
        return self.db.execute(
            select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        ).scalar_one_or_none()

    # ---------- operations ----------
    def issue(self, identity: Identity, *, now: Optional[datetime] = None) -> TokenPair:
        now = now or utcnow()
        raw = self._store_refresh(identity.account_id, now)
        self.db.commit()
        log.info("tokens_issued", account_id=identity.account_id, portal_id=identity.portal_id)
        return self._pair(identity, raw, now)

    def refresh(self, raw: str, *, now: Optional[datetime] = None) -> TokenPair:
        now = now or utcnow()
        if not raw:
            raise InvalidRefreshToken()

        token_hash = hash_token(raw)
        row = self._lookup(token_hash)
        if row is None:
            log.info("refresh_rejected", reason="unknown")
            raise InvalidRefreshToken()
        if row.is_revoked or as_utc(row.expires_at) <= now:
            log.info("refresh_rejected", reason="revoked" if row.is_revoked else "expired", account_id=row.user_id)
            raise InvalidRefreshToken()

        account_id = row.user_id
        # The delete's row count is the single-use gate: a concurrent consumer sees 0.
        # Keyed on the hash since row ids of deleted rows may be reused.
        consumed = self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.token_hash == token_hash, RefreshToken.is_revoked.is_(False))
            .execution_options(synchronize_session=False)
        ).rowcount
        if consumed != 1:
            self.db.rollback()
            log.warning("refresh_rejected", reason="already_rotated", account_id=account_id)
            raise InvalidRefreshToken()

        user = self.db.get(User, account_id)
        if user is None or not user.is_active:
            self.db.commit()
            log.info("refresh_rejected", reason="account_unavailable", account_id=account_id)
            raise InvalidRefreshToken()

        identity = identity_for(user)
        new_raw = self._store_refresh(user.id, now)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            log.warning("refresh_rejected", reason="conflict", account_id=user.id)
            raise InvalidRefreshToken()

        log.info("refresh_rotated", account_id=user.id)
        return self._pair(identity, new_raw, now)

    def revoke(self, raw: str, account_id: Optional[str] = None) -> int:
        """Delete the matching record; unknown tokens are not an error."""
        if not raw:
            return 0
        stmt = delete(RefreshToken).where(RefreshToken.token_hash == hash_token(raw))
        if account_id is not None:
            stmt = stmt.where(RefreshToken.user_id == account_id)
        removed = self.db.execute(stmt.execution_options(synchronize_session=False)).rowcount
        self.db.commit()
        log.info("refresh_revoked", account_id=account_id, removed=removed)
        return removed

    def revoke_all(self, account_id: str, *, commit: bool = True) -> int:
        removed = self.db.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == account_id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if commit:
            self.db.commit()
        log.info("refresh_revoked_all", account_id=account_id, removed=removed)
        return removed

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        removed = 0
        for model in (RefreshToken, PasswordResetToken):
            removed += self.db.execute(
                delete(model)
                .where(model.expires_at < now)
                .execution_options(synchronize_session=False)
            ).rowcount
        self.db.commit()
        log.info("expired_tokens_purged", removed=removed)
        return removed
