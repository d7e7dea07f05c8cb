"""초기 데이터 시드 스크립트 — 테이블 생성 및 초기 관리자 계정.

Seed script — Creates the tables and the initial admin account.
Run this script once to bootstrap an empty database.

Usage:
    python -m app.seed

Environment:
    SEED_ADMIN_EMAIL: 관리자 이메일 (default admin@streetburger.lk)
    SEED_ADMIN_PASSWORD: 관리자 비밀번호 (default admin123)
    SEED_ADMIN_NAME: 관리자 이름 (default "System Admin")
"""

import asyncio
import os

from sqlalchemy import select

from app.database import Base, async_session, engine
from app.models import AuthUser, UserRole
from app.services.auth_service import auth_service


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Creates tables if they don't exist, then inserts the first ADMIN
    identity and profile. The privileged procedures used by user
    management are provisioned by the Alembic migration, not here.

    Idempotent: 계정이 하나라도 있으면 건너뜁니다 (Skips if any identity exists).
    """
    # 테이블 생성 / DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    email: str = os.environ.get("SEED_ADMIN_EMAIL", "admin@streetburger.lk")
    password: str = os.environ.get("SEED_ADMIN_PASSWORD", "admin123")
    full_name: str = os.environ.get("SEED_ADMIN_NAME", "System Admin")

    async with async_session() as db:
        result = await db.execute(select(AuthUser).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        identity, _ = await auth_service.create_identity(
            db,
            email=email,
            password=password,
            full_name=full_name,
            role=UserRole.ADMIN,
            issue_session=False,
        )
        await db.commit()
        print(f"Seeded: admin={identity.email} ({identity.id})")


if __name__ == "__main__":
    asyncio.run(seed())
