"""직무별 KRA 레포지토리 — JobSpecificKra CRUD.

Job-specific KRA Repository — Queries for the job_specific_kras table.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.models.job_kra import JobSpecificKra
from kra_engine.repositories.base import BaseRepository, store_call


class JobKraRepository(BaseRepository[JobSpecificKra]):

    def __init__(self) -> None:
        super().__init__(JobSpecificKra)

    async def get_by_job_responsibility(
        self, db: AsyncSession, job_responsibility_id: UUID
    ) -> Sequence[JobSpecificKra]:
        query: Select = (
            select(JobSpecificKra)
            .where(JobSpecificKra.job_responsibility_id == job_responsibility_id)
            .order_by(JobSpecificKra.sequence_order, JobSpecificKra.created_at)
        )
        async with store_call("job_specific_kras query"):
            result = await db.execute(query)
        return list(result.scalars().all())

    async def get_next_sequence_order(self, db: AsyncSession, job_responsibility_id: UUID) -> int:
        query: Select = select(func.max(JobSpecificKra.sequence_order)).where(
            JobSpecificKra.job_responsibility_id == job_responsibility_id
        )
        async with store_call("job_specific_kras sequence lookup"):
            current = (await db.execute(query)).scalar()
        return 0 if current is None else current + 1


job_kra_repository: JobKraRepository = JobKraRepository()
