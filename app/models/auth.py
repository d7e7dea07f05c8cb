"""인증 계정 모델 — 인증 계층의 신원 정보.

Identity model for the authentication layer.
Kept separate from the public `profiles` table: an identity can exist before
its profile is provisioned, in which case the identity claims in
`user_metadata` are used as a fallback.

Tables:
    - auth_users: 로그인 계정 (Email/password identities with metadata claims)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base, JSONType


class AuthUser(Base):
    """인증 계정 모델.

    Attributes:
        id: 고유 식별자 UUID, 프로필 id와 동일 (Same UUID as the profile row)
        email: 로그인 이메일, 전역 고유 (Login email, globally unique)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        user_metadata: 가입 시 클레임 {full_name, role, avatar_url} (Sign-up claims)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        refresh_tokens: 리프레시 토큰 목록 (Active refresh tokens, cascade delete)
    """

    __tablename__ = "auth_users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 비밀번호 해시 / 평문 저장 금지 (never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_metadata: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
