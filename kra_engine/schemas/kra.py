"""KRA 카탈로그 Pydantic 스키마 — KRA request/response schemas.

KRA catalog Pydantic schema definitions.
Includes create/update inputs, the response shape, and the value objects
returned by weight validation and even redistribution.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

# 측정 방법 허용값 — Accepted measurement methods
MEASUREMENT_METHOD_PATTERN = r"^(quantitative|qualitative|milestone_based|peer_validated)$"


class KraCreate(BaseModel):
    """KRA 생성 스키마.

    weight를 생략하면 서비스가 남은 가중치(100 - 현재 합계)로 채웁니다.
    When weight is omitted the service pre-fills the remaining weight.
    """
    name: str
    description: str | None = None
    target_metric: str | None = None
    measurement_method: str | None = Field(None, pattern=MEASUREMENT_METHOD_PATTERN)
    weight: int | None = Field(None, ge=0, le=100)
    is_required: bool = False
    sequence_order: int | None = None


class KraUpdate(BaseModel):
    """KRA 수정 스키마 (부분 업데이트)."""
    name: str | None = None
    description: str | None = None
    target_metric: str | None = None
    measurement_method: str | None = Field(None, pattern=MEASUREMENT_METHOD_PATTERN)
    weight: int | None = Field(None, ge=0, le=100)
    is_required: bool | None = None
    sequence_order: int | None = None


class KraResponse(BaseModel):
    """KRA 응답 스키마."""
    id: str
    responsibility_id: str
    organization_id: str
    name: str
    description: str | None = None
    target_metric: str | None = None
    measurement_method: str | None = None
    weight: int
    is_required: bool
    is_active: bool
    sequence_order: int
    created_at: datetime
    updated_at: datetime


class WeightValidation(BaseModel):
    """가중치 검증 결과 — 합계가 정확히 100일 때만 유효.

    Weight validation result. Non-conformance is a warning, not an error.
    """
    is_valid: bool
    message: str
    total: int


class WeightAssignment(BaseModel):
    """균등 분배 결과 — KRA 하나에 대한 새 가중치.

    New weight for one KRA produced by even redistribution.
    kra_id is None for definitions that have not been persisted yet.
    """
    kra_id: UUID | str | None = None
    name: str
    sequence_order: int
    weight: int
