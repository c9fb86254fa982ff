# app/core/security_password.py
from __future__ import annotations
from typing import Tuple
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
    bcrypt__min_rounds=settings.BCRYPT_ROUNDS,
)

def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)

def verify_and_maybe_upgrade(plain: str, stored_hash: str) -> Tuple[bool, str | None]:
    """Returns (ok, new_hash); new_hash is set when the stored hash uses outdated parameters."""
    ok, new_hash = pwd_context.verify_and_update(plain, stored_hash)
    return ok, new_hash

def burn_verify() -> None:
    # Same cost as a real verify, for lookups that found no account.
    pwd_context.dummy_verify()
