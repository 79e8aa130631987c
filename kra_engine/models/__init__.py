"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    kra: KRA 카탈로그 (Responsibility-scoped catalog KRAs)
    job_kra: 직무별 KRA (Job-specific KRA clones and overrides)
    kra_rating: KRA 평가 제출 (Self and manager rating submissions)
"""

from kra_engine.models.kra import ResponsibilityKra
from kra_engine.models.job_kra import JobSpecificKra
from kra_engine.models.kra_rating import KraRatingSubmission

__all__ = [
    "ResponsibilityKra",
    "JobSpecificKra",
    "KraRatingSubmission",
]
