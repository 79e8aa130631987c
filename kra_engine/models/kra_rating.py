"""KRA 평가 제출 SQLAlchemy ORM 모델 정의.

KRA rating submission SQLAlchemy ORM model definitions.
One row per participant x catalog KRA holding the self rating,
the manager rating, and the scores derived from them.

Tables:
    - kra_rating_submissions: KRA 평가 제출 (Self and manager ratings per KRA)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Float, String, Integer, DateTime, Text, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kra_engine.database import Base


class KraRatingSubmission(Base):
    """KRA 평가 제출 모델 — 참가자 x KRA 단위 평가 기록.

    KRA rating submission model.
    Self and manager sides live in disjoint columns of the same row.
    ``version`` is SQLAlchemy's optimistic concurrency counter: an UPDATE
    against a row changed by another writer fails instead of overwriting it.

    Status flow:
        not_rated → self_rated → completed
        not_rated → completed (매니저 평가가 완료를 결정 — manager input completes)
        manager_rated → completed

    Attributes:
        id: 고유 식별자 UUID
        participant_id: 피평가자 ID
        responsibility_kra_id: 카탈로그 KRA FK
        responsibility_id: 직무 책임 ID
        organization_id: 조직 ID
        self_rating: 자기 평가 점수 (1~5)
        self_comments: 자기 평가 코멘트
        self_rating_at: 자기 평가 제출 일시 UTC
        manager_rating: 매니저 평가 점수 (1~5)
        manager_id: 평가한 매니저 ID
        manager_comments: 매니저 코멘트
        manager_rating_at: 매니저 평가 제출 일시 UTC
        calculated_score: 매니저 원점수 (Raw manager input)
        final_score: 최종 점수 (자기+매니저 평균 또는 매니저 단독)
        weight_adjusted_score: 가중 점수 (final / scale max * weight)
        status: 상태 (not_rated, self_rated, manager_rated, completed)
        version: 낙관적 잠금 버전 (Optimistic lock counter)
        created_at: 생성 일시 UTC
        updated_at: 수정 일시 UTC

    Constraints:
        uq_kra_rating_participant_kra: (participant_id, responsibility_kra_id) — KRA당 1개 기록
    """

    __tablename__ = "kra_rating_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    participant_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    # 평가 기록은 KRA 소프트 삭제 후에도 유지 — ratings outlive deactivated KRAs
    responsibility_kra_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("responsibility_kras.id"), nullable=False)
    responsibility_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    self_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    self_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    self_rating_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    manager_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    manager_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    manager_comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    manager_rating_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    calculated_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    final_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_adjusted_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="not_rated")  # not_rated, self_rated, manager_rated, completed
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("participant_id", "responsibility_kra_id", name="uq_kra_rating_participant_kra"),
        Index("ix_kra_rating_submissions_participant_id", "participant_id"),
        Index("ix_kra_rating_submissions_responsibility_id", "responsibility_id"),
    )

    __mapper_args__ = {"version_id_col": version}
