"""프로필 모델 — 공개 사용자 프로필 (이름, 역할, 아바타).

Profile model — Public user profile (name, role, avatar).

Tables:
    - profiles: 사용자 프로필 (id mirrors auth_users.id)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Profile(Base):
    """사용자 프로필 모델.

    Role is stored as free text and coerced on read (unknown → STAFF).

    Attributes:
        id: 인증 계정과 같은 UUID (Same UUID as the identity)
        email: 이메일 (Email, immutable for non-admins)
        full_name: 표시 이름 (Display name)
        role: 역할 문자열 (ADMIN / MANAGER / TECHNICIAN / STAFF)
        avatar_url: 아바타 URI (Optional avatar URI)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "profiles"

    # 인증 계정 삭제 시 프로필도 삭제 (CASCADE)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("auth_users.id", ondelete="CASCADE"), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), default="STAFF", nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
