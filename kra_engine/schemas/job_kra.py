"""직무별 KRA Pydantic 스키마 — Job-specific KRA request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from kra_engine.schemas.kra import MEASUREMENT_METHOD_PATTERN, KraResponse


class JobKraCustomize(BaseModel):
    """직무별 KRA 커스터마이즈 스키마 — 설정된 필드만 반영."""
    name: str | None = None
    target: str | None = None
    method: str | None = Field(None, pattern=MEASUREMENT_METHOD_PATTERN)


class JobKraAiCreate(BaseModel):
    """AI 컨텍스트화 결과 저장 스키마.

    Result of the external "contextualize" action. The engine only stores it.
    """
    name: str
    target: str | None = None
    method: str | None = Field(None, pattern=MEASUREMENT_METHOD_PATTERN)
    source_kra_id: str | None = None
    ai_source: str | None = None
    weight: int = Field(0, ge=0, le=100)


class JobKraResponse(BaseModel):
    """직무별 KRA 응답 스키마."""
    id: str
    job_responsibility_id: str
    source_kra_id: str | None = None
    name: str
    job_specific_target: str | None = None
    measurement_method: str | None = None
    weight: int
    is_inherited: bool
    ai_generated: bool
    ai_source: str | None = None
    sequence_order: int
    customized_at: datetime | None = None
    created_at: datetime


class JobKraViewResponse(BaseModel):
    """직무별 KRA 화면 구성 응답.

    catalog_kras is always returned for reference; show_catalog is False
    as soon as any job-specific KRA exists.
    """
    job_kras: list[JobKraResponse] = []
    catalog_kras: list[KraResponse] = []
    show_catalog: bool = True
