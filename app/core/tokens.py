# app/core/tokens.py
from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from app.core.config import Settings
from app.schemas.token import Identity

ACCESS_TYPE = "access"

def _now() -> datetime:
    return datetime.now(timezone.utc)

def create_access_token(identity: Identity, settings: Settings, *, now: Optional[datetime] = None) -> str:
    """Short-lived bearer token carrying ``{sub, role, portalId}``."""
    issued = now or _now()
    expire = issued + timedelta(minutes=settings.JWT_ACCESS_TTL_MINUTES)
    payload: Dict[str, Any] = {
        "type": ACCESS_TYPE,
        "sub": identity.account_id,
        "role": identity.role.value,
        "portalId": identity.portal_id,
        "jti": uuid.uuid4().hex,
        "iat": int(issued.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(payload, settings.signing_secret, algorithm=settings.JWT_ALGORITHM)

def decode_access(token: str, settings: Settings) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a bad signature, an expired token or a malformed payload."""
    try:
        payload = jwt.decode(token, settings.signing_secret, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if not isinstance(payload, dict):
        return None
    if payload.get("type") != ACCESS_TYPE:
        return None
    if not payload.get("sub") or not payload.get("role"):
        return None
    return payload

# ---------- opaque tokens (refresh / password reset) ----------
def new_opaque_token() -> str:
    # 32 random bytes = 256 bits of entropy
    return secrets.token_hex(32)

def hash_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
