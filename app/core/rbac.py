# app/core/rbac.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class AccountRole(str, Enum):
    """Coarse role carried in the access token. Declaration order is rank order."""

    VIEWER = "viewer"
    EDITOR = "editor"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"


class MembershipRole(str, Enum):
    """Role an account holds inside one portal."""

    SUPER_ADMIN = "SUPER_ADMIN"
    PORTAL_ADMIN = "PORTAL_ADMIN"
    PORTAL_EDITOR = "PORTAL_EDITOR"
    PORTAL_VIEWER = "PORTAL_VIEWER"


_HIERARCHY = list(AccountRole)
_RANK = {role: idx for idx, role in enumerate(_HIERARCHY)}

ADMIN_MEMBERSHIP_ROLES = frozenset({MembershipRole.PORTAL_ADMIN, MembershipRole.SUPER_ADMIN})


def parse_role(value: str) -> Optional[AccountRole]:
    try:
        return AccountRole(value)
    except ValueError:
        return None


def role_rank(role: AccountRole) -> int:
    return _RANK[role]


def role_satisfies(actual: AccountRole, required: AccountRole) -> bool:
    """True when ``actual`` ranks at or above ``required``; superadmin satisfies everything."""
    return role_rank(actual) >= role_rank(required)


# ---------- tenant-admin predicates ----------
def is_superadmin(role: AccountRole) -> bool:
    return role is AccountRole.SUPERADMIN


def is_legacy_admin(role: AccountRole) -> bool:
    # Global "admin" predates per-portal memberships.
    return role is AccountRole.ADMIN


def membership_grants_admin(assigned_role: Optional[str], is_active: bool = True) -> bool:
    if assigned_role is None or not is_active:
        return False
    try:
        return MembershipRole(assigned_role) in ADMIN_MEMBERSHIP_ROLES
    except ValueError:
        return False
