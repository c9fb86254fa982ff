import pytest

from app.core.rbac import AccountRole, MembershipRole
from app.models.membership import PortalMembership


# ---------- role-rank gate (portals) ----------
@pytest.mark.parametrize("role", list(AccountRole))
def test_any_authenticated_role_can_list_portals(client, portal_a, bearer, role):
    r = client.get("/api/v1/portals", headers=bearer("acc", role, portal_a.id))
    assert r.status_code == 200
    assert [p["subdomain"] for p in r.json()] == ["portal-a"]


def test_get_portal(client, portal_a, bearer):
    auth = bearer("acc", AccountRole.VIEWER, portal_a.id)
    r = client.get(f"/api/v1/portals/{portal_a.id}", headers=auth)
    assert r.status_code == 200
    assert r.json()["name"] == "Portal A"
    assert r.json()["customDomain"] is None

    r = client.get("/api/v1/portals/missing", headers=auth)
    assert r.status_code == 404


@pytest.mark.parametrize("role", [AccountRole.VIEWER, AccountRole.EDITOR, AccountRole.ADMIN])
def test_only_superadmin_creates_portals(client, bearer, role):
    r = client.post("/api/v1/portals", json={"name": "X", "subdomain": "x"}, headers=bearer("acc", role))
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"


def test_superadmin_creates_portal_and_duplicates_conflict(client, bearer):
    auth = bearer("root", AccountRole.SUPERADMIN)
    body = {"name": "New", "subdomain": "new-portal", "customDomain": "new.example.com"}

    r = client.post("/api/v1/portals", json=body, headers=auth)
    assert r.status_code == 201
    assert r.json()["customDomain"] == "new.example.com"

    r = client.post("/api/v1/portals", json=body, headers=auth)
    assert r.status_code == 409
    assert r.json() == {"error": {"code": "CONFLICT", "message": "Resource already exists"}}


# ---------- tenant-admin gate (admin routes) ----------
def test_tenant_isolation(client, portal_a, portal_b, make_account, bearer_for):
    admin_a = make_account(portal_a, AccountRole.EDITOR, membership=MembershipRole.PORTAL_ADMIN)
    auth = bearer_for(admin_a)

    assert client.get("/api/v1/admin/users", headers=auth).status_code == 200
    r = client.get("/api/v1/admin/users", headers={**auth, "X-Portal-ID": portal_b.id})
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "FORBIDDEN"


def test_admin_isolated_when_legacy_bypass_disabled(client, portal_a, portal_b, make_account, bearer_for, override_settings):
    override_settings(ALLOW_LEGACY_ADMIN_BYPASS=False)
    admin_a = make_account(portal_a, AccountRole.ADMIN, membership=MembershipRole.PORTAL_ADMIN)
    auth = bearer_for(admin_a)

    assert client.get("/api/v1/admin/users", headers=auth).status_code == 200
    assert client.get("/api/v1/admin/users", headers={**auth, "X-Portal-ID": portal_b.id}).status_code == 403


def test_legacy_admin_bypasses_membership_when_enabled(client, portal_a, portal_b, make_account, bearer_for):
    legacy = make_account(portal_a, AccountRole.ADMIN)
    r = client.get("/api/v1/admin/users", headers={**bearer_for(legacy), "X-Portal-ID": portal_b.id})
    assert r.status_code == 200


def test_super_admin_membership_is_accepted(client, portal_a, make_account, bearer_for):
    owner = make_account(portal_a, AccountRole.VIEWER, membership=MembershipRole.SUPER_ADMIN)
    assert client.get("/api/v1/admin/users", headers=bearer_for(owner)).status_code == 200


@pytest.mark.parametrize("membership,active", [
    (MembershipRole.PORTAL_EDITOR, True),
    (MembershipRole.PORTAL_VIEWER, True),
    (MembershipRole.PORTAL_ADMIN, False),
    (None, True),
])
def test_non_admin_memberships_are_forbidden(client, portal_a, make_account, bearer_for, membership, active):
    user = make_account(portal_a, AccountRole.EDITOR, membership=membership, membership_active=active)
    assert client.get("/api/v1/admin/users", headers=bearer_for(user)).status_code == 403


def test_missing_portal_context(client, bearer):
    r = client.get("/api/v1/admin/users", headers=bearer("acc", AccountRole.EDITOR, None))
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "PORTAL_ID_REQUIRED"


def test_superadmin_bypasses_tenant_checks(client, portal_a, portal_b, make_account, bearer):
    make_account(portal_a)
    make_account(portal_b)
    r = client.get("/api/v1/admin/users", headers=bearer("root", AccountRole.SUPERADMIN, None))
    assert r.status_code == 200
    assert r.json()["total"] == 2

    r = client.get("/api/v1/admin/users", headers={**bearer("root", AccountRole.SUPERADMIN), "X-Portal-ID": portal_b.id})
    assert r.json()["total"] == 1


def test_user_listing_is_paginated_and_scoped(client, portal_a, portal_b, make_account, bearer_for):
    admin_a = make_account(portal_a, AccountRole.EDITOR, membership=MembershipRole.PORTAL_ADMIN)
    for _ in range(4):
        make_account(portal_a)
    make_account(portal_b)

    r = client.get("/api/v1/admin/users?page=2&pageSize=2", headers=bearer_for(admin_a))
    assert r.status_code == 200
    body = r.json()
    assert body["page"] == 2 and body["pageSize"] == 2
    assert body["total"] == 5
    assert len(body["items"]) == 2
    assert all(item["portalId"] == portal_a.id for item in body["items"])
    assert "passwordHash" not in body["items"][0]


def test_membership_grant_audit_and_revoke(client, portal_a, make_account, bearer_for):
    admin_a = make_account(portal_a, AccountRole.EDITOR, email="boss@example.com", membership=MembershipRole.PORTAL_ADMIN)
    member = make_account(portal_a, AccountRole.VIEWER, email="member@example.com")
    auth = bearer_for(admin_a)

    r = client.put("/api/v1/admin/memberships", json={"accountId": member.id, "role": "PORTAL_EDITOR"}, headers=auth)
    assert r.status_code == 200
    assert r.json() == {"accountId": member.id, "portalId": portal_a.id, "assignedRole": "PORTAL_EDITOR", "isActive": True}

    r = client.get("/api/v1/admin/permissions/audit", headers=auth)
    assert r.status_code == 200
    assert {(e["email"], e["role"], e["isActive"]) for e in r.json()} == {
        ("boss@example.com", "PORTAL_ADMIN", True),
        ("member@example.com", "PORTAL_EDITOR", True),
    }

    assert client.delete(f"/api/v1/admin/memberships/{member.id}", headers=auth).status_code == 204
    audit = {e["userId"]: e["isActive"] for e in client.get("/api/v1/admin/permissions/audit", headers=auth).json()}
    assert audit[member.id] is False

    # granting again reactivates the same row
    r = client.put("/api/v1/admin/memberships", json={"accountId": member.id, "role": "PORTAL_ADMIN"}, headers=auth)
    assert r.json()["isActive"] is True
    assert client.get("/api/v1/admin/users", headers=bearer_for(member)).status_code == 200


def test_membership_routes_404(client, portal_a, make_account, bearer_for):
    admin_a = make_account(portal_a, AccountRole.EDITOR, membership=MembershipRole.PORTAL_ADMIN)
    auth = bearer_for(admin_a)

    r = client.put("/api/v1/admin/memberships", json={"accountId": "missing", "role": "PORTAL_VIEWER"}, headers=auth)
    assert r.status_code == 404
    assert client.delete("/api/v1/admin/memberships/missing", headers=auth).status_code == 404


def test_identity_attached_to_request_state(settings, bearer):
    from starlette.requests import Request
    from app.api.deps import get_current_identity

    request = Request({"type": "http", "headers": []})
    token = bearer("acc", AccountRole.EDITOR, "portal-1")["Authorization"].split()[1]

    identity = get_current_identity(request, token, settings)

    assert request.state.identity == identity
    assert (identity.account_id, identity.role, identity.portal_id) == ("acc", AccountRole.EDITOR, "portal-1")


def test_membership_grant_needs_an_existing_portal(client, db, portal_a, make_account, bearer):
    member = make_account(portal_a)
    auth = {**bearer("root", AccountRole.SUPERADMIN), "X-Portal-ID": "no-such-portal"}

    r = client.put("/api/v1/admin/memberships", json={"accountId": member.id, "role": "PORTAL_ADMIN"}, headers=auth)

    assert r.status_code == 404
    assert r.json()["error"] == {"code": "NOT_FOUND", "message": "Portal not found"}
    db.expire_all()
    assert db.query(PortalMembership).count() == 0


def test_super_admin_membership_is_granted_only_by_super_admins(client, portal_a, make_account, bearer, bearer_for):
    portal_admin = make_account(portal_a, AccountRole.EDITOR, membership=MembershipRole.PORTAL_ADMIN)
    legacy = make_account(portal_a, AccountRole.ADMIN)
    owner = make_account(portal_a, AccountRole.EDITOR, membership=MembershipRole.SUPER_ADMIN)
    member = make_account(portal_a)
    body = {"accountId": member.id, "role": "SUPER_ADMIN"}

    for caller in (portal_admin, legacy):
        r = client.put("/api/v1/admin/memberships", json=body, headers=bearer_for(caller))
        assert r.status_code == 403
        assert r.json()["error"]["code"] == "FORBIDDEN"

    assert client.put("/api/v1/admin/memberships", json=body, headers=bearer_for(owner)).status_code == 200
    r = client.put("/api/v1/admin/memberships", json=body,
                   headers={**bearer("root", AccountRole.SUPERADMIN), "X-Portal-ID": portal_a.id})
    assert r.status_code == 200
    assert r.json()["assignedRole"] == "SUPER_ADMIN"
