"""직무별 KRA SQLAlchemy ORM 모델 정의.

Job-specific KRA SQLAlchemy ORM model definitions.
A job-level, independently editable copy of catalog KRAs (or an
AI-sourced equivalent) that keeps track of where it came from.

Tables:
    - job_specific_kras: 직무별 KRA (Per-job KRA clones and overrides)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, String, Integer, DateTime, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kra_engine.database import Base


class JobSpecificKra(Base):
    """직무별 KRA 모델 — 카탈로그 KRA의 직무 단위 사본.

    Job-specific KRA model.
    Starts out inherited from the catalog; the first edit to its name,
    target or measurement method marks it customized.

    Attributes:
        id: 고유 식별자 UUID
        job_responsibility_id: 소속 직무-책임 ID
        source_kra_id: 원본 카탈로그 KRA FK (AI 생성 시 null 가능)
        name: KRA 이름
        job_specific_target: 직무별 목표
        measurement_method: 측정 방법
        weight: 가중치 퍼센트
        is_inherited: 카탈로그 상속 상태 여부
        ai_generated: AI 생성 여부
        ai_source: 생성 출처 설명
        sequence_order: 정렬 순서
        customized_at: 최초 커스터마이즈 일시 UTC
        created_at: 생성 일시 UTC
        updated_at: 수정 일시 UTC
    """

    __tablename__ = "job_specific_kras"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_responsibility_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    source_kra_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("responsibility_kras.id", ondelete="SET NULL"), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    job_specific_target: Mapped[str | None] = mapped_column(Text, nullable=True)
    measurement_method: Mapped[str | None] = mapped_column(String(255), nullable=True)
    weight: Mapped[int] = mapped_column(Integer, default=0)
    is_inherited: Mapped[bool] = mapped_column(Boolean, default=True)
    ai_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sequence_order: Mapped[int] = mapped_column(Integer, default=0)
    customized_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_job_specific_kras_job_responsibility_id", "job_responsibility_id"),
    )
