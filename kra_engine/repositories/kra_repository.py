"""KRA 카탈로그 레포지토리 — ResponsibilityKra CRUD.

KRA Catalog Repository — Queries for the responsibility_kras table.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.models.kra import ResponsibilityKra
from kra_engine.repositories.base import BaseRepository, store_call


class KraRepository(BaseRepository[ResponsibilityKra]):

    def __init__(self) -> None:
        super().__init__(ResponsibilityKra)

    async def get_by_responsibility(
        self,
        db: AsyncSession,
        responsibility_id: UUID,
        include_inactive: bool = False,
    ) -> Sequence[ResponsibilityKra]:
        query: Select = select(ResponsibilityKra).where(
            ResponsibilityKra.responsibility_id == responsibility_id
        )
        if not include_inactive:
            query = query.where(ResponsibilityKra.is_active.is_(True))

        query = query.order_by(ResponsibilityKra.sequence_order, ResponsibilityKra.created_at)
        async with store_call("responsibility_kras query"):
            result = await db.execute(query)
        return list(result.scalars().all())

    async def get_active_total_weight(self, db: AsyncSession, responsibility_id: UUID) -> int:
        """활성 KRA 가중치 합계 — Sum of active KRA weights for a responsibility."""
        query: Select = select(func.coalesce(func.sum(ResponsibilityKra.weight), 0)).where(
            ResponsibilityKra.responsibility_id == responsibility_id,
            ResponsibilityKra.is_active.is_(True),
        )
        async with store_call("responsibility_kras weight total"):
            total = (await db.execute(query)).scalar()
        return int(total or 0)

    async def get_next_sequence_order(self, db: AsyncSession, responsibility_id: UUID) -> int:
        query: Select = select(func.max(ResponsibilityKra.sequence_order)).where(
            ResponsibilityKra.responsibility_id == responsibility_id,
            ResponsibilityKra.is_active.is_(True),
        )
        async with store_call("responsibility_kras sequence lookup"):
            current = (await db.execute(query)).scalar()
        return 0 if current is None else current + 1


kra_repository: KraRepository = KraRepository()
