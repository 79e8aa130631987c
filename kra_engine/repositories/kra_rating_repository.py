"""KRA 평가 레포지토리 — KraRatingSubmission 조회.

KRA Rating Repository — Queries for the kra_rating_submissions table,
including the KRA-left-join-rating view used to render one row per KRA.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.models.kra import ResponsibilityKra
from kra_engine.models.kra_rating import KraRatingSubmission
from kra_engine.repositories.base import BaseRepository, store_call


class KraRatingRepository(BaseRepository[KraRatingSubmission]):

    def __init__(self) -> None:
        super().__init__(KraRatingSubmission)

    async def get_by_participant_kra(
        self, db: AsyncSession, participant_id: UUID, kra_id: UUID
    ) -> KraRatingSubmission | None:
        query: Select = select(KraRatingSubmission).where(
            KraRatingSubmission.participant_id == participant_id,
            KraRatingSubmission.responsibility_kra_id == kra_id,
        )
        async with store_call("kra_rating_submissions lookup"):
            result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_participant(
        self,
        db: AsyncSession,
        participant_id: UUID,
        responsibility_id: UUID | None = None,
    ) -> Sequence[KraRatingSubmission]:
        query: Select = select(KraRatingSubmission).where(
            KraRatingSubmission.participant_id == participant_id
        )
        if responsibility_id:
            query = query.where(KraRatingSubmission.responsibility_id == responsibility_id)

        query = query.order_by(KraRatingSubmission.created_at)
        async with store_call("kra_rating_submissions query"):
            result = await db.execute(query)
        return list(result.scalars().all())

    async def get_kras_with_ratings(
        self,
        db: AsyncSession,
        participant_id: UUID,
        responsibility_id: UUID,
    ) -> list[tuple[ResponsibilityKra, KraRatingSubmission | None]]:
        """활성 KRA 전체와 참가자의 평가를 LEFT JOIN으로 조회합니다.

        Every active KRA of the responsibility left-joined with the
        participant's rating, ordered by sequence_order.
        """
        query: Select = (
            select(ResponsibilityKra, KraRatingSubmission)
            .outerjoin(
                KraRatingSubmission,
                and_(
                    KraRatingSubmission.responsibility_kra_id == ResponsibilityKra.id,
                    KraRatingSubmission.participant_id == participant_id,
                ),
            )
            .where(
                ResponsibilityKra.responsibility_id == responsibility_id,
                ResponsibilityKra.is_active.is_(True),
            )
            .order_by(ResponsibilityKra.sequence_order, ResponsibilityKra.created_at)
        )
        async with store_call("kra_rating_submissions join"):
            result = await db.execute(query)
        return [(kra, rating) for kra, rating in result.all()]


kra_rating_repository: KraRatingRepository = KraRatingRepository()
