"""create_issue_tracker_schema

Revision ID: a7c3e9d1f2b4
Revises:
Create Date: 2026-10-17 09:00:00.000000

인증 계정, 리프레시 토큰, 프로필, 이슈 테이블 생성.
사용자 관리용 권한 프로시저 admin_reset_password / delete_user 등록.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "a7c3e9d1f2b4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# bcrypt 호환 해시 ($2a$) / verified by the bcrypt package on sign-in
ADMIN_RESET_PASSWORD_SQL = """
CREATE OR REPLACE FUNCTION admin_reset_password(target_user_id uuid, new_password text)
RETURNS void
LANGUAGE plpgsql
SECURITY DEFINER
AS $$
BEGIN
    UPDATE auth_users
       SET password_hash = crypt(new_password, gen_salt('bf', 12)),
           updated_at = now()
     WHERE id = target_user_id;
    IF NOT FOUND THEN
        RAISE EXCEPTION 'User % not found', target_user_id;
    END IF;
    DELETE FROM refresh_tokens WHERE user_id = target_user_id;
END;
$$;
"""

# 프로필과 리프레시 토큰은 FK CASCADE로 함께 삭제
DELETE_USER_SQL = """
CREATE OR REPLACE FUNCTION delete_user(target_user_id uuid)
RETURNS void
LANGUAGE plpgsql
SECURITY DEFINER
AS $$
BEGIN
    DELETE FROM auth_users WHERE id = target_user_id;
END;
$$;
"""


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "auth_users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("user_metadata", JSONB(), server_default=sa.text("'{}'::jsonb"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "refresh_tokens",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(512), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), sa.ForeignKey("auth_users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), server_default="STAFF", nullable=False),
        sa.Column("avatar_url", sa.String(1024), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "issues",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("status", sa.String(20), server_default="OPEN", nullable=False),
        sa.Column("priority", sa.String(20), server_default="MEDIUM", nullable=False),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("sub_category", sa.String(100), nullable=True),
        sa.Column("place", sa.String(50), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        # 이름 컬럼은 스냅샷 / FK 아님 (name snapshots, no foreign keys)
        sa.Column("reported_by", UUID(as_uuid=True), nullable=False),
        sa.Column("reported_by_name", sa.String(255), nullable=True),
        sa.Column("assigned_to", UUID(as_uuid=True), nullable=True),
        sa.Column("assigned_to_name", sa.String(255), nullable=True),
        sa.Column("comments", JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("attachments", JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("ai_analysis", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_issues_updated_at", "issues", ["updated_at"])
    op.create_index("ix_issues_reported_by", "issues", ["reported_by"])
    op.create_index("ix_issues_assigned_to", "issues", ["assigned_to"])

    op.execute(ADMIN_RESET_PASSWORD_SQL)
    op.execute(DELETE_USER_SQL)


def downgrade() -> None:
    op.execute("DROP FUNCTION IF EXISTS delete_user(uuid)")
    op.execute("DROP FUNCTION IF EXISTS admin_reset_password(uuid, text)")
    op.drop_index("ix_issues_assigned_to")
    op.drop_index("ix_issues_reported_by")
    op.drop_index("ix_issues_updated_at")
    op.drop_table("issues")
    op.drop_table("profiles")
    op.drop_index("ix_refresh_tokens_user_id")
    op.drop_table("refresh_tokens")
    op.drop_table("auth_users")
