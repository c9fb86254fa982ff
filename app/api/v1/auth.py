# app/api/v1/auth.py
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity, get_db, get_settings
from app.core.config import Settings
from app.schemas.token import Identity, LoginRequest, MeOut, RefreshRequest, TokenPair
from app.schemas.user import (
    ForgotPasswordOut,
    ForgotPasswordRequest,
    OkOut,
    RegisterOut,
    RegisterRequest,
    ResetPasswordRequest,
)
from app.services.credentials import register_account, verify_credentials
from app.services.password_reset import request_reset, reset_password
from app.services.token_issuer import TokenIssuer

router = APIRouter()

# ---------- endpoints ----------
@router.post("/register", response_model=RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = register_account(db, payload)
    return RegisterOut(id=user.id, email=user.email)

@router.post("/login", response_model=TokenPair)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    identity = verify_credentials(db, payload.identifier, payload.password)
    return TokenIssuer(db, settings).issue(identity)

@router.post("/refresh", response_model=TokenPair)
def refresh(
    payload: RefreshRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    return TokenIssuer(db, settings).refresh(payload.refresh_token)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def logout(
    payload: Optional[RefreshRequest] = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    # idempotent: unknown or foreign tokens still answer 204
    if payload is not None:
        TokenIssuer(db, settings).revoke(payload.refresh_token, account_id=identity.account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/forgot-password", response_model=ForgotPasswordOut, response_model_exclude_none=True)
def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    raw = request_reset(db, payload.email, settings)
    # the token is only echoed outside production; the answer is the same either way
    if raw and not settings.is_production:
        return ForgotPasswordOut(ok=True, reset_token=raw)
    return ForgotPasswordOut(ok=True)

@router.post("/reset-password", response_model=OkOut)
def reset(
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    reset_password(db, payload.token, payload.new_password, settings)
    return OkOut()

@router.get("/me", response_model=MeOut)
def me(identity: Identity = Depends(get_current_identity)):
    return MeOut(id=identity.account_id, role=identity.role, portal_id=identity.portal_id)
