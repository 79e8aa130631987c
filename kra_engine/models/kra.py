"""KRA 카탈로그 SQLAlchemy ORM 모델 정의.

KRA catalog SQLAlchemy ORM model definitions.
Holds the canonical, responsibility-scoped list of Key Result Areas
and their percentage weights.

Tables:
    - responsibility_kras: 직무 책임별 KRA (KRAs scoped to a responsibility)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Boolean, String, Integer, DateTime, Text, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from kra_engine.database import Base


class ResponsibilityKra(Base):
    """KRA 카탈로그 모델 — 직무 책임에 속한 가중치 평가 영역.

    Catalog KRA model — A weighted, measurable dimension of a responsibility.
    Responsibilities and organizations are owned by external collaborators,
    so their ids are stored without foreign keys.

    Attributes:
        id: 고유 식별자 UUID
        responsibility_id: 소속 직무 책임 ID
        organization_id: 소속 조직 ID
        name: KRA 이름 (필수)
        description: 설명
        target_metric: 목표 지표 (자유 텍스트)
        measurement_method: 측정 방법 (quantitative, qualitative, milestone_based, peer_validated)
        weight: 가중치 퍼센트 (0~100)
        is_required: 필수 여부
        is_active: 활성 여부 (False = 소프트 삭제)
        sequence_order: 정렬 순서
        created_at: 생성 일시 UTC
        updated_at: 수정 일시 UTC
    """

    __tablename__ = "responsibility_kras"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    responsibility_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    organization_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_metric: Mapped[str | None] = mapped_column(Text, nullable=True)
    measurement_method: Mapped[str | None] = mapped_column(String(30), nullable=True)
    weight: Mapped[int] = mapped_column(Integer, default=0)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sequence_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_responsibility_kras_responsibility_id", "responsibility_id"),
    )
