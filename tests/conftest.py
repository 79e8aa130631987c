"""테스트 인프라 — 임시 DB, 세션, 샘플 데이터 픽스처.

Test infrastructure — Temporary database, session, and sample data fixtures.
Uses TEST_DATABASE_URL when set (e.g. a throwaway PostgreSQL database),
otherwise a local SQLite file through aiosqlite.
Schema is applied once per session, data is deleted after each test.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from kra_engine.database import Base
from kra_engine.models import *  # noqa: F401,F403 — register all models with metadata
from kra_engine.models.kra import ResponsibilityKra

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
_SQLITE_FILE = Path(__file__).resolve().parent / "test_kra_engine.db"
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{_SQLITE_FILE}")

_schema_created = False


# ---------------------------------------------------------------------------
# Session-scoped: SQLite 파일 생성/삭제
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session", autouse=True)
def create_test_database():
    """세션 시작 시 이전 SQLite 파일을 지우고, 종료 시 삭제합니다."""
    _SQLITE_FILE.unlink(missing_ok=True)
    yield
    _SQLITE_FILE.unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(create_test_database) -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 첫 호출 시 스키마를 생성합니다."""
    global _schema_created
    eng = create_async_engine(TEST_DATABASE_URL, echo=False)

    if not _schema_created:
        async with eng.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        _schema_created = True

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session
        # 커밋되지 않은 변경 처리
        try:
            await session.commit()
        except Exception:
            await session.rollback()

    # 테스트 후 모든 데이터 정리
    async with session_factory() as cleanup:
        for table in reversed(Base.metadata.sorted_tables):
            await cleanup.execute(text(f"DELETE FROM {table.name}"))
        await cleanup.commit()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
@pytest.fixture
def org_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def responsibility_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def participant_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def manager_id() -> uuid.UUID:
    return uuid.uuid4()


async def make_kra(
    db: AsyncSession,
    responsibility_id: uuid.UUID,
    org_id: uuid.UUID,
    name: str,
    weight: int,
    sequence_order: int = 0,
    is_active: bool = True,
) -> ResponsibilityKra:
    """테스트용 KRA를 직접 생성합니다."""
    kra = ResponsibilityKra(
        responsibility_id=responsibility_id,
        organization_id=org_id,
        name=name,
        weight=weight,
        sequence_order=sequence_order,
        is_active=is_active,
    )
    db.add(kra)
    await db.flush()
    await db.refresh(kra)
    return kra


@pytest_asyncio.fixture
async def kras(db: AsyncSession, responsibility_id, org_id) -> list[ResponsibilityKra]:
    """가중치 합계 100인 KRA 3개를 생성합니다 (50/25/25)."""
    return [
        await make_kra(db, responsibility_id, org_id, "Revenue Growth", 50, 0),
        await make_kra(db, responsibility_id, org_id, "Customer Retention", 25, 1),
        await make_kra(db, responsibility_id, org_id, "Process Improvement", 25, 2),
    ]
