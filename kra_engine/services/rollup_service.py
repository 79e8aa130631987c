"""롤업 서비스 — 책임 단위 가중 점수 집계.

Rollup Service — Combines per-KRA final scores into one responsibility score.
The arithmetic lives in kra_engine.utils.scoring; this service loads the
active KRAs and a participant's ratings to feed it.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.repositories.kra_rating_repository import kra_rating_repository
from kra_engine.repositories.kra_repository import kra_repository
from kra_engine.schemas.kra_rating import RollupSummary
from kra_engine.utils import scoring


class RollupService:
    """롤업 서비스."""

    def calculate_responsibility_rollup(
        self,
        ratings: Sequence[scoring.RatingRecord],
        kras: Sequence[scoring.KraDefinition],
    ) -> float:
        return scoring.calculate_responsibility_rollup(ratings, kras)

    async def calculate_for_participant(
        self,
        db: AsyncSession,
        participant_id: UUID,
        responsibility_id: UUID,
    ) -> RollupSummary:
        """참가자의 책임 단위 롤업 요약을 계산합니다.

        Only active KRAs take part; ratings that still point at deactivated
        KRAs are ignored.
        """
        kras = await kra_repository.get_by_responsibility(db, responsibility_id)
        ratings = await kra_rating_repository.get_by_participant(db, participant_id, responsibility_id)
        return scoring.summarize_rollup(ratings, kras)


# 싱글턴 인스턴스
rollup_service: RollupService = RollupService()
