"""기본 CRUD 레포지토리 — 모든 레포지토리의 부모 클래스.

Base CRUD Repository — Parent class for all domain repositories.
Provides generic Create, Read, Update, Delete operations with organization scoping.
Driver errors are re-raised as StoreFailureError with the original message.

Usage:
    class KraRepository(BaseRepository[ResponsibilityKra]):
        def __init__(self) -> None:
            super().__init__(ResponsibilityKra)
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.database import Base
from kra_engine.utils.exceptions import StoreFailureError

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


@asynccontextmanager
async def store_call(action: str) -> AsyncIterator[None]:
    """저장소 호출 오류를 StoreFailureError로 변환합니다.

    Translate SQLAlchemy errors (including stale-version conflicts) raised
    inside the block into StoreFailureError. No retry or compensation.

    Args:
        action: 실패 메시지에 포함될 작업 이름 (Action name used in the failure message)
    """
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreFailureError(f"{action} failed: {exc}") from exc


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.
    All queries are scoped by organization_id when the model supports it.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        """레포지토리를 초기화합니다.

        Initialize the repository with a model class.

        Args:
            model: 이 레포지토리가 관리할 SQLAlchemy 모델 클래스
                   (SQLAlchemy model class this repository manages)
        """
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        organization_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)
            organization_id: 조직 범위 필터, None이면 조직 필터 미적용
                             (Organization scope filter; None skips org filtering)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)

        # 모델에 organization_id 컬럼이 있고, 필터가 제공된 경우 조직 범위 적용
        # Apply org scope if model has organization_id and filter is provided
        if organization_id is not None and hasattr(self.model, "organization_id"):
            query = query.where(self.model.organization_id == organization_id)

        async with store_call(f"{self.model.__tablename__} lookup"):
            result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        db: AsyncSession,
        obj_data: dict[str, Any],
    ) -> ModelType:
        """새 레코드를 생성합니다.

        Create a new record in the database.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            obj_data: 생성할 레코드의 데이터 딕셔너리
                      (Dictionary of data for the new record)

        Returns:
            ModelType: 생성된 레코드 (The created record)
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        async with store_call(f"{self.model.__tablename__} insert"):
            await db.flush()
            await db.refresh(db_obj)
        return db_obj

    async def create_many(
        self,
        db: AsyncSession,
        rows: list[dict[str, Any]],
    ) -> list[ModelType]:
        """여러 레코드를 한 번의 flush로 생성합니다.

        Create several records in a single flush so the batch lands as one unit of work.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            rows: 생성할 레코드 데이터 목록 (List of row dicts)

        Returns:
            list[ModelType]: 생성된 레코드 목록, 입력 순서 유지 (Created records in input order)
        """
        db_objs: list[ModelType] = [self.model(**row) for row in rows]
        db.add_all(db_objs)
        async with store_call(f"{self.model.__tablename__} bulk insert"):
            await db.flush()
            for db_obj in db_objs:
                await db.refresh(db_obj)
        return db_objs

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
        organization_id: UUID | None = None,
    ) -> ModelType | None:
        """기존 레코드를 업데이트합니다.

        Update an existing record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드의 UUID (UUID of the record to update)
            update_data: 업데이트할 필드와 값의 딕셔너리
                         (Dictionary of fields and values to update)
            organization_id: 조직 범위 필터 (Organization scope filter)

        Returns:
            ModelType | None: 업데이트된 레코드 또는 None (Updated record or None)
        """
        # 먼저 레코드 존재 여부 확인 — First verify record exists
        db_obj: ModelType | None = await self.get_by_id(db, record_id, organization_id)
        if db_obj is None:
            return None

        # Pydantic exclude_unset으로 전달된 필드만 업데이트 (None 값도 허용)
        # Update all fields passed via exclude_unset (allows setting to None)
        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.flush(db, db_obj)
        return db_obj

    async def flush(self, db: AsyncSession, db_obj: ModelType | None = None) -> None:
        """보류 중인 변경을 flush하고, 객체가 주어지면 새로고침합니다.

        Flush pending changes; refresh ``db_obj`` afterwards when given.
        """
        async with store_call(f"{self.model.__tablename__} write"):
            await db.flush()
            if db_obj is not None:
                await db.refresh(db_obj)

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
        organization_id: UUID | None = None,
    ) -> bool:
        """레코드를 삭제합니다.

        Delete a record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 삭제할 레코드의 UUID (UUID of the record to delete)
            organization_id: 조직 범위 필터 (Organization scope filter)

        Returns:
            bool: 삭제 성공 여부 (Whether the deletion was successful)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id, organization_id)
        if db_obj is None:
            return False

        async with store_call(f"{self.model.__tablename__} delete"):
            await db.delete(db_obj)
            await db.flush()
        return True
