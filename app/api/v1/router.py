# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1 import admin, auth, portals

api_router = APIRouter()

# -------- public + bearer --------
api_router.include_router(auth.router,    prefix="/auth",    tags=["auth"])
api_router.include_router(portals.router, prefix="/portals", tags=["portals"])

# -------- tenant admin (X-Portal-ID or token portalId) --------
api_router.include_router(admin.router,   prefix="/admin",   tags=["admin"])
