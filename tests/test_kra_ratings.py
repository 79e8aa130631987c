"""KRA 평가 제출 서비스 테스트.

KRA rating service tests — self/manager submission upsert, status
transitions, score blending, rejection of off-scale ratings, and
concurrent-update detection through the version column.
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.schemas.kra_rating import KraRatingResponse, KraWithRatingResponse
from kra_engine.services.kra_rating_service import kra_rating_service
from kra_engine.services.kra_service import kra_service
from kra_engine.services.rollup_service import rollup_service
from kra_engine.utils.exceptions import InvalidInputError, NotFoundError, StoreFailureError, ValidationError
from tests.conftest import make_kra


class TestSelfRating:
    """자기 평가 제출 테스트."""

    async def test_first_self_rating(self, db: AsyncSession, kras, participant_id, responsibility_id):
        """첫 자기 평가 → self_rated, 점수 미계산."""
        sub = await kra_rating_service.submit_self_rating(
            db, participant_id, kras[0].id, responsibility_id, 4, "Strong quarter"
        )
        assert sub.status == "self_rated"
        assert sub.self_rating == 4
        assert sub.self_comments == "Strong quarter"
        assert sub.self_rating_at is not None
        assert sub.final_score is None
        assert sub.organization_id == kras[0].organization_id

    async def test_resubmit_overwrites_self_side(self, db: AsyncSession, kras, participant_id, responsibility_id):
        """같은 KRA 재제출 시 기록 1개 유지, 자기 평가만 덮어씀."""
        await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 2)
        sub = await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 5)
        assert sub.self_rating == 5
        assert sub.status == "self_rated"
        assert len(await kra_rating_service.fetch_ratings(db, participant_id)) == 1

    @pytest.mark.parametrize("value", [0, 6])
    async def test_off_scale_rejected(self, db: AsyncSession, kras, participant_id, responsibility_id, value):
        """범위 밖 점수는 InvalidInputError, 아무것도 저장되지 않음."""
        with pytest.raises(InvalidInputError):
            await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, value)
        assert await kra_rating_service.fetch_ratings(db, participant_id) == []

    async def test_unknown_kra(self, db: AsyncSession, participant_id, responsibility_id):
        with pytest.raises(NotFoundError):
            await kra_rating_service.submit_self_rating(db, participant_id, uuid.uuid4(), responsibility_id, 3)

    async def test_inactive_kra(self, db: AsyncSession, participant_id, responsibility_id, org_id):
        """비활성 KRA는 평가 불가."""
        kra = await make_kra(db, responsibility_id, org_id, "Retired", 100, is_active=False)
        with pytest.raises(NotFoundError):
            await kra_rating_service.submit_self_rating(db, participant_id, kra.id, responsibility_id, 3)


class TestManagerRating:
    """매니저 평가 제출 및 점수 계산 테스트."""

    async def test_blend_with_self_rating(self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id):
        """자기 3 + 매니저 5 → 최종 4.0, 가중치 25 → 가중 점수 20.0."""
        await kra_rating_service.submit_self_rating(db, participant_id, kras[1].id, responsibility_id, 3)
        sub = await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[1].id, responsibility_id, manager_id, 5, "Exceeded target"
        )
        assert sub.status == "completed"
        assert sub.self_rating == 3
        assert sub.manager_rating == 5
        assert sub.manager_id == manager_id
        assert sub.calculated_score == 5.0
        assert sub.final_score == pytest.approx(4.0)
        assert sub.weight_adjusted_score == pytest.approx(20.0)

    async def test_manager_only(self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id):
        """자기 평가 없이 매니저 평가 → 바로 completed, 최종 = 매니저 점수."""
        sub = await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[0].id, responsibility_id, manager_id, 2
        )
        assert sub.status == "completed"
        assert sub.self_rating is None
        assert sub.final_score == pytest.approx(2.0)
        assert sub.weight_adjusted_score == pytest.approx(20.0)

        stored = await kra_rating_service.get_rating(db, participant_id, kras[0].id)
        assert stored.id == sub.id
        assert stored.manager_rating == 2
        assert stored.calculated_score == 2.0
        assert stored.manager_rating_at is not None
        assert stored.version == 1

    async def test_self_after_manager_stays_completed(
        self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id
    ):
        """매니저 평가 후 자기 평가 → completed 유지, 매니저 측 보존, 재계산."""
        await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[0].id, responsibility_id, manager_id, 4, "Solid"
        )
        sub = await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 2)
        assert sub.status == "completed"
        assert sub.manager_rating == 4
        assert sub.manager_comments == "Solid"
        assert sub.final_score == pytest.approx(3.0)
        assert sub.weight_adjusted_score == pytest.approx(30.0)

    async def test_manager_resubmit_keeps_self_side(
        self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id
    ):
        await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 5, "Mine")
        await kra_rating_service.submit_manager_rating(db, participant_id, kras[0].id, responsibility_id, manager_id, 3)
        sub = await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[0].id, responsibility_id, manager_id, 1
        )
        assert sub.self_rating == 5
        assert sub.self_comments == "Mine"
        assert sub.final_score == pytest.approx(3.0)

    async def test_off_scale_rejected(self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id):
        await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 3)
        with pytest.raises(InvalidInputError):
            await kra_rating_service.submit_manager_rating(
                db, participant_id, kras[0].id, responsibility_id, manager_id, 6
            )
        sub = await kra_rating_service.get_rating(db, participant_id, kras[0].id)
        assert sub.manager_rating is None
        assert sub.status == "self_rated"

    async def test_inactive_kra(self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id):
        await kra_service.delete_kra(db, kras[0].id)
        with pytest.raises(NotFoundError):
            await kra_rating_service.submit_manager_rating(
                db, participant_id, kras[0].id, responsibility_id, manager_id, 3
            )


class TestResponsibilityScope:
    """평가 대상 직무 책임 검증 테스트."""

    async def test_self_rating_wrong_responsibility(self, db: AsyncSession, kras, participant_id):
        """KRA 소속과 다른 책임 ID는 ValidationError, 아무것도 저장되지 않음."""
        with pytest.raises(ValidationError):
            await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, uuid.uuid4(), 4)
        assert await kra_rating_service.fetch_ratings(db, participant_id) == []

    async def test_manager_rating_wrong_responsibility(
        self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id
    ):
        """잘못된 책임으로 제출해도 실제 책임의 롤업은 영향 없음."""
        with pytest.raises(ValidationError):
            await kra_rating_service.submit_manager_rating(
                db, participant_id, kras[0].id, uuid.uuid4(), manager_id, 5
            )
        await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[0].id, responsibility_id, manager_id, 5
        )
        summary = await rollup_service.calculate_for_participant(db, participant_id, responsibility_id)
        assert summary.rated_count == 1
        assert summary.score == 5.0


class TestConcurrentUpdate:
    """동시 수정 감지 테스트."""

    async def test_stale_write_fails(
        self, db: AsyncSession, session_factory, kras, participant_id, responsibility_id, manager_id
    ):
        """다른 세션이 먼저 수정한 기록을 덮어쓰면 StoreFailureError."""
        kra_id = kras[0].id
        await kra_rating_service.submit_self_rating(db, participant_id, kra_id, responsibility_id, 3)
        await db.commit()

        async with session_factory() as first, session_factory() as second:
            # 두 번째 세션이 먼저 읽어 둔 버전은 곧 낡은 버전이 됨
            await kra_rating_service.get_rating(second, participant_id, kra_id)

            await kra_rating_service.submit_manager_rating(
                first, participant_id, kra_id, responsibility_id, manager_id, 5
            )
            await first.commit()

            with pytest.raises(StoreFailureError):
                await kra_rating_service.submit_manager_rating(
                    second, participant_id, kra_id, responsibility_id, manager_id, 1
                )
            await second.rollback()

        async with session_factory() as check:
            sub = await kra_rating_service.get_rating(check, participant_id, kra_id)
            assert sub.manager_rating == 5


class TestFetch:
    """평가 조회 테스트."""

    async def test_get_rating_missing(self, db: AsyncSession, kras, participant_id):
        with pytest.raises(NotFoundError):
            await kra_rating_service.get_rating(db, participant_id, kras[0].id)

    async def test_fetch_ratings_scoped(
        self, db: AsyncSession, kras, participant_id, responsibility_id, org_id
    ):
        """참가자·책임 범위로만 조회."""
        other_responsibility = uuid.uuid4()
        other_kra = await make_kra(db, other_responsibility, org_id, "Elsewhere", 100)
        await kra_rating_service.submit_self_rating(db, participant_id, kras[0].id, responsibility_id, 4)
        await kra_rating_service.submit_self_rating(db, participant_id, kras[1].id, responsibility_id, 3)
        await kra_rating_service.submit_self_rating(db, participant_id, other_kra.id, other_responsibility, 2)
        await kra_rating_service.submit_self_rating(db, uuid.uuid4(), kras[0].id, responsibility_id, 1)

        everything = await kra_rating_service.fetch_ratings(db, participant_id)
        scoped = await kra_rating_service.fetch_ratings(db, participant_id, responsibility_id)
        assert len(everything) == 3
        assert {s.responsibility_kra_id for s in scoped} == {kras[0].id, kras[1].id}

    async def test_kras_with_ratings(self, db: AsyncSession, kras, participant_id, responsibility_id):
        """KRA당 한 행, 미평가 KRA는 None."""
        await kra_rating_service.submit_self_rating(db, participant_id, kras[1].id, responsibility_id, 4)
        rows = await kra_rating_service.fetch_kras_with_ratings(db, participant_id, responsibility_id)
        assert [kra.id for kra, _ in rows] == [k.id for k in kras]
        assert rows[0][1] is None
        assert rows[1][1].self_rating == 4
        assert rows[2][1] is None

        response = KraWithRatingResponse(**kra_rating_service.build_kra_with_rating_response(*rows[1]))
        assert response.kra.name == "Customer Retention"
        assert response.rating.self_rating_label == "Exceeds Expectations"

    async def test_build_rating_response(
        self, db: AsyncSession, kras, participant_id, responsibility_id, manager_id
    ):
        sub = await kra_rating_service.submit_manager_rating(
            db, participant_id, kras[0].id, responsibility_id, manager_id, 1
        )
        response = KraRatingResponse(**kra_rating_service.build_rating_response(sub))
        assert response.manager_rating_label == "Unsatisfactory"
        assert response.self_rating_label is None
        assert response.manager_id == str(manager_id)
