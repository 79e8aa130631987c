"""직무별 KRA 서비스 — 직무별 KRA 커스터마이즈 비즈니스 로직.

Job-specific KRA Service — Business logic for job-level KRA copies.
Clones catalog KRAs into independently editable records, stores
AI-contextualized equivalents, tracks inherited/customized provenance,
and exposes the display policy between the job list and the catalog list.
"""

from datetime import datetime, timezone
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.models.job_kra import JobSpecificKra
from kra_engine.models.kra import ResponsibilityKra
from kra_engine.repositories.job_kra_repository import job_kra_repository
from kra_engine.repositories.kra_repository import kra_repository
from kra_engine.schemas.job_kra import JobKraAiCreate, JobKraCustomize
from kra_engine.schemas.kra import WeightValidation
from kra_engine.services.kra_service import kra_service
from kra_engine.utils import scoring
from kra_engine.utils.axiom_logging import event_logger
from kra_engine.utils.exceptions import NotFoundError, ValidationError


class JobKraService:
    """직무별 KRA 서비스.

    Job-specific KRA service providing bulk cloning, AI result storage,
    customization, removal, weight checks, and the job/catalog view.
    """

    async def list_job_kras(
        self, db: AsyncSession, job_responsibility_id: UUID
    ) -> Sequence[JobSpecificKra]:
        return await job_kra_repository.get_by_job_responsibility(db, job_responsibility_id)

    async def get_job_kra(self, db: AsyncSession, job_kra_id: UUID) -> JobSpecificKra:
        job_kra = await job_kra_repository.get_by_id(db, job_kra_id)
        if job_kra is None:
            raise NotFoundError("직무별 KRA를 찾을 수 없습니다 (Job-specific KRA not found)")
        return job_kra

    async def clone_from_catalog(
        self,
        db: AsyncSession,
        job_responsibility_id: UUID,
        names: list[str],
    ) -> list[JobSpecificKra]:
        """이름 목록으로 직무별 KRA를 일괄 생성합니다.

        Bulk-insert one inherited job KRA per name with weight 0 and
        sequence_order equal to the list index. A blank name rejects the
        whole batch before anything is written.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            job_responsibility_id: 대상 직무-책임 ID (Target job responsibility)
            names: 카탈로그 KRA 이름 목록 (Catalog KRA names, in display order)

        Returns:
            list[JobSpecificKra]: 생성된 직무별 KRA 목록 (Created records in input order)

        Raises:
            ValidationError: 빈 이름 포함 (A name is blank)
        """
        cleaned = [(name or "").strip() for name in names]
        if any(not name for name in cleaned):
            raise ValidationError("KRA 이름은 비어 있을 수 없습니다 (KRA names must not be blank)")

        rows = [
            {
                "job_responsibility_id": job_responsibility_id,
                "name": name,
                "weight": 0,
                "is_inherited": True,
                "ai_generated": False,
                "sequence_order": index,
            }
            for index, name in enumerate(cleaned)
        ]
        job_kras = await job_kra_repository.create_many(db, rows)
        event_logger.log(
            "job_kra.cloned",
            job_responsibility_id=job_responsibility_id,
            count=len(job_kras),
        )
        return job_kras

    async def clone_catalog_kras(
        self,
        db: AsyncSession,
        job_responsibility_id: UUID,
        kras: Sequence[ResponsibilityKra],
    ) -> list[JobSpecificKra]:
        """카탈로그 KRA 레코드로부터 직무별 KRA를 생성합니다 (source_kra_id 기록)."""
        rows = [
            {
                "job_responsibility_id": job_responsibility_id,
                "source_kra_id": kra.id,
                "name": kra.name,
                "job_specific_target": kra.target_metric,
                "measurement_method": kra.measurement_method,
                "weight": 0,
                "is_inherited": True,
                "ai_generated": False,
                "sequence_order": index,
            }
            for index, kra in enumerate(kras)
        ]
        job_kras = await job_kra_repository.create_many(db, rows)
        event_logger.log(
            "job_kra.cloned",
            job_responsibility_id=job_responsibility_id,
            count=len(job_kras),
        )
        return job_kras

    async def add_ai_generated(
        self,
        db: AsyncSession,
        job_responsibility_id: UUID,
        data: JobKraAiCreate,
    ) -> JobSpecificKra:
        """AI 컨텍스트화 결과를 직무별 KRA로 저장합니다. AI 호출은 하지 않습니다."""
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("KRA 이름은 필수입니다 (KRA name is required)")

        source_kra_id = UUID(data.source_kra_id) if data.source_kra_id else None
        if source_kra_id is not None and await kra_repository.get_by_id(db, source_kra_id) is None:
            raise NotFoundError("원본 KRA를 찾을 수 없습니다 (Source KRA not found)")

        sequence_order = await job_kra_repository.get_next_sequence_order(db, job_responsibility_id)
        job_kra = await job_kra_repository.create(db, {
            "job_responsibility_id": job_responsibility_id,
            "source_kra_id": source_kra_id,
            "name": name,
            "job_specific_target": data.target,
            "measurement_method": data.method,
            "weight": data.weight,
            "is_inherited": False,
            "ai_generated": True,
            "ai_source": data.ai_source,
            "sequence_order": sequence_order,
        })
        event_logger.log("job_kra.ai_added", job_kra_id=job_kra.id, ai_source=data.ai_source)
        return job_kra

    async def customize(
        self,
        db: AsyncSession,
        job_kra_id: UUID,
        data: JobKraCustomize,
    ) -> JobSpecificKra:
        """직무별 KRA 내용을 수정하고 커스터마이즈 상태로 전환합니다.

        Update name/target/method, flip is_inherited to False and stamp
        customized_at. An empty payload leaves the record untouched.

        Raises:
            ValidationError: 이름을 빈 문자열로 변경 (Rename to blank)
            NotFoundError: 대상 없음 (Unknown job KRA)
        """
        fields = data.model_dump(exclude_unset=True)
        if "name" in fields:
            name = (fields["name"] or "").strip()
            if not name:
                raise ValidationError("KRA 이름은 비어 있을 수 없습니다 (KRA name must not be blank)")
            fields["name"] = name

        job_kra = await self.get_job_kra(db, job_kra_id)
        if not fields:
            return job_kra

        if "name" in fields:
            job_kra.name = fields["name"]
        if "target" in fields:
            job_kra.job_specific_target = fields["target"]
        if "method" in fields:
            job_kra.measurement_method = fields["method"]

        job_kra.is_inherited = False
        job_kra.customized_at = datetime.now(timezone.utc)
        await job_kra_repository.flush(db, job_kra)
        event_logger.log("job_kra.customized", job_kra_id=job_kra_id, fields=sorted(fields))
        return job_kra

    async def set_weight(self, db: AsyncSession, job_kra_id: UUID, weight: int) -> JobSpecificKra:
        """가중치만 변경합니다. 상속 상태는 유지됩니다."""
        if isinstance(weight, bool) or not isinstance(weight, int) or not 0 <= weight <= 100:
            raise ValidationError("가중치는 0~100 사이 정수입니다 (Weight must be an integer between 0 and 100)")

        job_kra = await self.get_job_kra(db, job_kra_id)
        job_kra.weight = weight
        await job_kra_repository.flush(db, job_kra)
        return job_kra

    async def remove(self, db: AsyncSession, job_kra_id: UUID) -> None:
        """직무별 KRA를 영구 삭제합니다. 카탈로그 KRA와 평가 기록에는 영향이 없습니다."""
        deleted = await job_kra_repository.delete(db, job_kra_id)
        if not deleted:
            raise NotFoundError("직무별 KRA를 찾을 수 없습니다 (Job-specific KRA not found)")
        event_logger.log("job_kra.removed", job_kra_id=job_kra_id)

    async def validate_job_weights(
        self, db: AsyncSession, job_responsibility_id: UUID
    ) -> WeightValidation:
        job_kras = await job_kra_repository.get_by_job_responsibility(db, job_responsibility_id)
        return scoring.validate_weights(job_kras)

    async def get_job_kra_view(
        self,
        db: AsyncSession,
        job_responsibility_id: UUID,
        responsibility_id: UUID,
    ) -> dict:
        """직무별 KRA 화면 구성.

        Job-specific KRAs replace the inherited catalog list on screen as
        soon as one exists. The catalog list is always returned so it stays
        retrievable for reference.
        """
        job_kras = await job_kra_repository.get_by_job_responsibility(db, job_responsibility_id)
        catalog_kras = await kra_repository.get_by_responsibility(db, responsibility_id)
        return {
            "job_kras": job_kras,
            "catalog_kras": catalog_kras,
            "show_catalog": len(job_kras) == 0,
        }

    def build_job_kra_response(self, job_kra: JobSpecificKra) -> dict:
        return {
            "id": str(job_kra.id),
            "job_responsibility_id": str(job_kra.job_responsibility_id),
            "source_kra_id": str(job_kra.source_kra_id) if job_kra.source_kra_id else None,
            "name": job_kra.name,
            "job_specific_target": job_kra.job_specific_target,
            "measurement_method": job_kra.measurement_method,
            "weight": job_kra.weight,
            "is_inherited": job_kra.is_inherited,
            "ai_generated": job_kra.ai_generated,
            "ai_source": job_kra.ai_source,
            "sequence_order": job_kra.sequence_order,
            "customized_at": job_kra.customized_at,
            "created_at": job_kra.created_at,
        }

    def build_view_response(self, view: dict) -> dict:
        return {
            "job_kras": [self.build_job_kra_response(k) for k in view["job_kras"]],
            "catalog_kras": [kra_service.build_kra_response(k) for k in view["catalog_kras"]],
            "show_catalog": view["show_catalog"],
        }


# 싱글턴 인스턴스
job_kra_service: JobKraService = JobKraService()
