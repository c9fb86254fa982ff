# app/db/base.py
from app.db.base_class import Base  # noqa: F401

# Importing the models registers their tables on Base.metadata (Alembic autogenerate, create_all).
from app.models.portal import Portal  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.membership import PortalMembership  # noqa: F401
from app.models.tokens import RefreshToken, PasswordResetToken  # noqa: F401
