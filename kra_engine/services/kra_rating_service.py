"""KRA 평가 서비스 — 자기/매니저 평가 제출 비즈니스 로직.

KRA Rating Service — Business logic for self and manager rating submissions.
Upserts one submission per participant x KRA, drives the rating status
transitions, and derives the final and weight-adjusted scores.
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.models.kra import ResponsibilityKra
from kra_engine.models.kra_rating import KraRatingSubmission
from kra_engine.repositories.kra_rating_repository import kra_rating_repository
from kra_engine.repositories.kra_repository import kra_repository
from kra_engine.services.kra_service import kra_service
from kra_engine.utils import scoring
from kra_engine.utils.axiom_logging import event_logger
from kra_engine.utils.exceptions import NotFoundError, ValidationError


class KraRatingService:
    """KRA 평가 서비스.

    KRA rating service providing self/manager submission, rating lookups,
    the KRA-with-rating view, and response building.
    """

    async def _get_ratable_kra(
        self, db: AsyncSession, kra_id: UUID, responsibility_id: UUID
    ) -> ResponsibilityKra:
        kra = await kra_repository.get_by_id(db, kra_id)
        if kra is None or not kra.is_active:
            raise NotFoundError("KRA를 찾을 수 없습니다 (KRA not found)")
        if kra.responsibility_id != responsibility_id:
            raise ValidationError("KRA가 해당 직무 책임에 속하지 않습니다 (KRA does not belong to this responsibility)")
        return kra

    def _apply_scores(self, submission: KraRatingSubmission, weight: int) -> None:
        final_score = scoring.blend_final_score(submission.self_rating, submission.manager_rating)
        submission.calculated_score = float(submission.manager_rating)
        submission.final_score = final_score
        submission.weight_adjusted_score = scoring.weight_adjusted_score(final_score, weight)

    async def submit_self_rating(
        self,
        db: AsyncSession,
        participant_id: UUID,
        kra_id: UUID,
        responsibility_id: UUID,
        rating: int,
        comments: str | None = None,
    ) -> KraRatingSubmission:
        """자기 평가를 제출합니다.

        Upsert the self side of the (participant, KRA) submission.
        A new record becomes self_rated; a record that already has a manager
        rating becomes (or stays) completed and its scores are re-blended
        with the new self rating.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            participant_id: 피평가자 ID (Participant being rated)
            kra_id: 카탈로그 KRA ID (Catalog KRA)
            responsibility_id: 직무 책임 ID (Responsibility the KRA belongs to)
            rating: 자기 평가 점수 (Self rating on the configured scale)
            comments: 코멘트 (Optional comments)

        Returns:
            KraRatingSubmission: 저장된 평가 기록 (Persisted submission)

        Raises:
            InvalidInputError: 점수 범위 초과 (Rating off the scale; nothing is written)
            NotFoundError: KRA 없음 또는 비활성 (Unknown or deactivated KRA)
            ValidationError: KRA가 다른 직무 책임 소속 (KRA belongs to another responsibility)
        """
        scoring.check_rating(rating)
        kra = await self._get_ratable_kra(db, kra_id, responsibility_id)
        now = datetime.now(timezone.utc)

        submission = await kra_rating_repository.get_by_participant_kra(db, participant_id, kra_id)
        if submission is None:
            submission = await kra_rating_repository.create(db, {
                "participant_id": participant_id,
                "responsibility_kra_id": kra_id,
                "responsibility_id": responsibility_id,
                "organization_id": kra.organization_id,
                "self_rating": rating,
                "self_comments": comments,
                "self_rating_at": now,
                "status": scoring.next_status(scoring.STATUS_NOT_RATED, scoring.SIDE_SELF),
            })
        else:
            submission.self_rating = rating
            submission.self_comments = comments
            submission.self_rating_at = now
            submission.status = scoring.next_status(submission.status, scoring.SIDE_SELF)
            if submission.manager_rating is not None:
                self._apply_scores(submission, kra.weight)
            await kra_rating_repository.flush(db, submission)

        event_logger.log(
            "rating.self_submitted",
            participant_id=participant_id,
            kra_id=kra_id,
            rating=rating,
            status=submission.status,
        )
        return submission

    async def submit_manager_rating(
        self,
        db: AsyncSession,
        participant_id: UUID,
        kra_id: UUID,
        responsibility_id: UUID,
        manager_id: UUID,
        rating: int,
        comments: str | None = None,
    ) -> KraRatingSubmission:
        """매니저 평가를 제출합니다.

        Upsert the manager side and derive the scores:
            final_score = (self + manager) / 2 if a self rating exists, else manager
            weight_adjusted_score = final_score / RATING_SCALE_MAX * KRA weight
            calculated_score = manager rating
        The record is completed regardless of self-rating presence.

        Raises:
            InvalidInputError: 점수 범위 초과 (Rating off the scale; nothing is written)
            NotFoundError: KRA 없음 또는 비활성 (Unknown or deactivated KRA)
            ValidationError: KRA가 다른 직무 책임 소속 (KRA belongs to another responsibility)
        """
        scoring.check_rating(rating)
        kra = await self._get_ratable_kra(db, kra_id, responsibility_id)
        now = datetime.now(timezone.utc)

        submission = await kra_rating_repository.get_by_participant_kra(db, participant_id, kra_id)
        if submission is None:
            final_score = scoring.blend_final_score(None, rating)
            submission = await kra_rating_repository.create(db, {
                "participant_id": participant_id,
                "responsibility_kra_id": kra_id,
                "responsibility_id": responsibility_id,
                "organization_id": kra.organization_id,
                "manager_rating": rating,
                "manager_id": manager_id,
                "manager_comments": comments,
                "manager_rating_at": now,
                "calculated_score": float(rating),
                "final_score": final_score,
                "weight_adjusted_score": scoring.weight_adjusted_score(final_score, kra.weight),
                "status": scoring.next_status(scoring.STATUS_NOT_RATED, scoring.SIDE_MANAGER),
            })
        else:
            submission.manager_rating = rating
            submission.manager_id = manager_id
            submission.manager_comments = comments
            submission.manager_rating_at = now
            submission.status = scoring.next_status(submission.status, scoring.SIDE_MANAGER)
            self._apply_scores(submission, kra.weight)
            await kra_rating_repository.flush(db, submission)

        event_logger.log(
            "rating.manager_submitted",
            participant_id=participant_id,
            kra_id=kra_id,
            manager_id=manager_id,
            rating=rating,
            final_score=submission.final_score,
        )
        return submission

    async def get_rating(
        self, db: AsyncSession, participant_id: UUID, kra_id: UUID
    ) -> KraRatingSubmission:
        submission = await kra_rating_repository.get_by_participant_kra(db, participant_id, kra_id)
        if submission is None:
            raise NotFoundError("평가 기록을 찾을 수 없습니다 (Rating not found)")
        return submission

    async def fetch_ratings(
        self,
        db: AsyncSession,
        participant_id: UUID,
        responsibility_id: UUID | None = None,
    ) -> Sequence[KraRatingSubmission]:
        return await kra_rating_repository.get_by_participant(db, participant_id, responsibility_id)

    async def fetch_kras_with_ratings(
        self,
        db: AsyncSession,
        participant_id: UUID,
        responsibility_id: UUID,
    ) -> list[tuple[ResponsibilityKra, KraRatingSubmission | None]]:
        return await kra_rating_repository.get_kras_with_ratings(db, participant_id, responsibility_id)

    def build_rating_response(self, submission: KraRatingSubmission) -> dict:
        return {
            "id": str(submission.id),
            "participant_id": str(submission.participant_id),
            "responsibility_kra_id": str(submission.responsibility_kra_id),
            "responsibility_id": str(submission.responsibility_id),
            "self_rating": submission.self_rating,
            "self_rating_label": scoring.rating_label(submission.self_rating),
            "self_comments": submission.self_comments,
            "self_rating_at": submission.self_rating_at,
            "manager_rating": submission.manager_rating,
            "manager_rating_label": scoring.rating_label(submission.manager_rating),
            "manager_id": str(submission.manager_id) if submission.manager_id else None,
            "manager_comments": submission.manager_comments,
            "manager_rating_at": submission.manager_rating_at,
            "calculated_score": submission.calculated_score,
            "final_score": submission.final_score,
            "weight_adjusted_score": submission.weight_adjusted_score,
            "status": submission.status,
            "created_at": submission.created_at,
        }

    def build_kra_with_rating_response(
        self, kra: ResponsibilityKra, submission: KraRatingSubmission | None
    ) -> dict:
        return {
            "kra": kra_service.build_kra_response(kra),
            "rating": self.build_rating_response(submission) if submission else None,
        }


# 싱글턴 인스턴스
kra_rating_service: KraRatingService = KraRatingService()
