"""KRA 평가 Pydantic 스키마 — Rating submission and rollup response schemas."""

from datetime import datetime

from pydantic import BaseModel

from kra_engine.schemas.kra import KraResponse


class KraRatingResponse(BaseModel):
    """KRA 평가 제출 응답 스키마."""
    id: str
    participant_id: str
    responsibility_kra_id: str
    responsibility_id: str
    self_rating: int | None = None
    self_rating_label: str | None = None
    self_comments: str | None = None
    self_rating_at: datetime | None = None
    manager_rating: int | None = None
    manager_rating_label: str | None = None
    manager_id: str | None = None
    manager_comments: str | None = None
    manager_rating_at: datetime | None = None
    calculated_score: float | None = None
    final_score: float | None = None
    weight_adjusted_score: float | None = None
    status: str
    created_at: datetime


class KraWithRatingResponse(BaseModel):
    """KRA + 평가 응답 — 평가 여부와 관계없이 KRA당 한 행."""
    kra: KraResponse
    rating: KraRatingResponse | None = None


class RollupSummary(BaseModel):
    """책임 단위 롤업 요약.

    Responsibility rollup summary. score is re-normalized against the
    weight of rated KRAs only; coverage shows how much of the active
    weight is rated so far.
    """
    score: float
    rated_weight: int
    total_weight: int
    coverage: float
    rated_count: int
    kra_count: int
