# migrations/versions/0001_auth_core.py
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_auth_core"
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "portals",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(160), nullable=False),
        sa.Column("subdomain", sa.String(64), nullable=False),
        sa.Column("custom_domain", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_portals"),
    )
    op.create_index("ix_portals_subdomain", "portals", ["subdomain"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("portal_id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(160), nullable=False),
        sa.Column("username", sa.String(80), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="viewer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["portal_id"], ["portals.id"], name="fk_users_portal_id_portals"),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_portal_id", "users", ["portal_id"])

    op.create_table(
        "portal_memberships",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("portal_id", sa.String(36), nullable=False),
        sa.Column("assigned_role", sa.String(32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_portal_memberships_user_id_users"),
        sa.ForeignKeyConstraint(["portal_id"], ["portals.id"], name="fk_portal_memberships_portal_id_portals"),
        sa.PrimaryKeyConstraint("id", name="pk_portal_memberships"),
        sa.UniqueConstraint("user_id", "portal_id", name="uq_membership_user_portal"),
    )
    op.create_index("ix_portal_memberships_user_id", "portal_memberships", ["user_id"])
    op.create_index("ix_portal_memberships_portal_id", "portal_memberships", ["portal_id"])

    for table in ("refresh_tokens", "password_reset_tokens"):
        cols = [
            sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
            sa.Column("token_hash", sa.String(64), nullable=False),
            sa.Column("user_id", sa.String(36), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        ]
        if table == "refresh_tokens":
            cols.append(sa.Column("is_revoked", sa.Boolean(), nullable=False, server_default=sa.false()))
        op.create_table(
            table,
            *cols,
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=f"fk_{table}_user_id_users"),
            sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        )
        op.create_index(f"ix_{table}_token_hash", table, ["token_hash"], unique=True)
        op.create_index(f"ix_{table}_user_id", table, ["user_id"])

def downgrade():
    for table in ("password_reset_tokens", "refresh_tokens"):
        op.drop_index(f"ix_{table}_user_id", table_name=table)
        op.drop_index(f"ix_{table}_token_hash", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_portal_memberships_portal_id", table_name="portal_memberships")
    op.drop_index("ix_portal_memberships_user_id", table_name="portal_memberships")
    op.drop_table("portal_memberships")
    op.drop_index("ix_users_portal_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_portals_subdomain", table_name="portals")
    op.drop_table("portals")
