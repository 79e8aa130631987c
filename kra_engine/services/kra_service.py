"""KRA 카탈로그 서비스 — KRA 카탈로그 비즈니스 로직.

KRA Catalog Service — Business logic for the responsibility-scoped KRA catalog.
Handles KRA CRUD with soft delete, weight validation, and even weight
redistribution persisted as a single unit of work.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from kra_engine.config import settings
from kra_engine.models.kra import ResponsibilityKra
from kra_engine.repositories.kra_repository import kra_repository
from kra_engine.schemas.kra import KraCreate, KraUpdate, WeightAssignment, WeightValidation
from kra_engine.utils import scoring
from kra_engine.utils.axiom_logging import event_logger
from kra_engine.utils.exceptions import NotFoundError, ValidationError


class KraService:
    """KRA 카탈로그 서비스.

    KRA catalog service providing CRUD, weight validation,
    even redistribution, reordering, and response building.
    Methods flush but never commit; the caller owns the transaction.
    """

    async def list_kras(
        self,
        db: AsyncSession,
        responsibility_id: UUID,
        include_inactive: bool = False,
    ) -> Sequence[ResponsibilityKra]:
        return await kra_repository.get_by_responsibility(db, responsibility_id, include_inactive)

    async def get_kra(self, db: AsyncSession, kra_id: UUID) -> ResponsibilityKra:
        kra = await kra_repository.get_by_id(db, kra_id)
        if kra is None:
            raise NotFoundError("KRA를 찾을 수 없습니다 (KRA not found)")
        return kra

    async def create_kra(
        self,
        db: AsyncSession,
        responsibility_id: UUID,
        organization_id: UUID,
        data: KraCreate,
    ) -> ResponsibilityKra:
        """KRA를 생성합니다.

        Create a catalog KRA. When weight is omitted it defaults to whatever
        keeps the running active total at 100 (never below 0). When
        sequence_order is omitted the KRA is appended at the end.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            responsibility_id: 소속 직무 책임 ID (Owning responsibility)
            organization_id: 소속 조직 ID (Owning organization)
            data: 생성 데이터 (Creation payload)

        Returns:
            ResponsibilityKra: 생성된 KRA (Created KRA)

        Raises:
            ValidationError: 이름이 비어 있음 (Blank name)
        """
        name = (data.name or "").strip()
        if not name:
            raise ValidationError("KRA 이름은 필수입니다 (KRA name is required)")

        weight = data.weight
        if weight is None:
            current_total = await kra_repository.get_active_total_weight(db, responsibility_id)
            weight = max(0, settings.TOTAL_WEIGHT - current_total)

        sequence_order = data.sequence_order
        if sequence_order is None:
            sequence_order = await kra_repository.get_next_sequence_order(db, responsibility_id)

        kra = await kra_repository.create(db, {
            "responsibility_id": responsibility_id,
            "organization_id": organization_id,
            "name": name,
            "description": data.description,
            "target_metric": data.target_metric,
            "measurement_method": data.measurement_method,
            "weight": weight,
            "is_required": data.is_required,
            "is_active": True,
            "sequence_order": sequence_order,
        })
        event_logger.log(
            "kra.created",
            kra_id=kra.id,
            responsibility_id=responsibility_id,
            weight=weight,
        )
        return kra

    async def update_kra(
        self,
        db: AsyncSession,
        kra_id: UUID,
        data: KraUpdate,
    ) -> ResponsibilityKra:
        """KRA를 부분 수정합니다. 가중치 합계는 검사하지 않습니다 (advisory only)."""
        update_data = data.model_dump(exclude_unset=True)

        if "name" in update_data:
            name = (update_data["name"] or "").strip()
            if not name:
                raise ValidationError("KRA 이름은 필수입니다 (KRA name is required)")
            update_data["name"] = name

        # NOT NULL 컬럼에는 None을 쓰지 않음 — skip explicit nulls on non-nullable columns
        for field in ("weight", "is_required", "sequence_order"):
            if field in update_data and update_data[field] is None:
                del update_data[field]

        kra = await kra_repository.update(db, kra_id, update_data)
        if kra is None:
            raise NotFoundError("KRA를 찾을 수 없습니다 (KRA not found)")

        event_logger.log("kra.updated", kra_id=kra_id, fields=sorted(update_data))
        return kra

    async def delete_kra(self, db: AsyncSession, kra_id: UUID) -> None:
        """KRA를 비활성화합니다 (소프트 삭제). 기존 평가 기록은 유지됩니다."""
        kra = await self.get_kra(db, kra_id)
        kra.is_active = False
        await kra_repository.flush(db, kra)
        event_logger.log("kra.deactivated", kra_id=kra_id, responsibility_id=kra.responsibility_id)

    async def reorder_kras(
        self,
        db: AsyncSession,
        responsibility_id: UUID,
        ordered_ids: list[UUID],
    ) -> Sequence[ResponsibilityKra]:
        """sequence_order를 목록 순서대로 다시 매깁니다."""
        kras = await kra_repository.get_by_responsibility(db, responsibility_id)
        by_id = {kra.id: kra for kra in kras}

        missing = [str(kra_id) for kra_id in ordered_ids if kra_id not in by_id]
        if missing:
            raise NotFoundError(f"KRA를 찾을 수 없습니다 (KRA not found: {', '.join(missing)})")

        for index, kra_id in enumerate(ordered_ids):
            by_id[kra_id].sequence_order = index

        await kra_repository.flush(db)
        return await kra_repository.get_by_responsibility(db, responsibility_id)

    # === 가중치 ===

    def validate_weights(self, kras: Sequence[scoring.KraDefinition]) -> WeightValidation:
        return scoring.validate_weights(kras)

    def distribute_weights_evenly(self, kras: Sequence[scoring.KraDefinition]) -> list[WeightAssignment]:
        return scoring.distribute_weights_evenly(kras)

    async def check_responsibility_weights(
        self, db: AsyncSession, responsibility_id: UUID
    ) -> WeightValidation:
        kras = await kra_repository.get_by_responsibility(db, responsibility_id)
        return scoring.validate_weights(kras)

    async def apply_even_distribution(
        self, db: AsyncSession, responsibility_id: UUID
    ) -> Sequence[ResponsibilityKra]:
        """활성 KRA 가중치를 균등 분배하고 한 번에 저장합니다.

        Redistribute the active KRAs' weights evenly and persist them in a
        single flush. Either every weight lands with the caller's commit or
        none does.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            responsibility_id: 대상 직무 책임 ID (Responsibility to rebalance)

        Returns:
            Sequence[ResponsibilityKra]: 갱신된 활성 KRA 목록 (Updated active KRAs)
        """
        kras = await kra_repository.get_by_responsibility(db, responsibility_id)
        assignments = scoring.distribute_weights_evenly(kras)
        by_id = {kra.id: kra for kra in kras}

        for assignment in assignments:
            by_id[assignment.kra_id].weight = assignment.weight

        await kra_repository.flush(db)
        event_logger.log(
            "kra.weights_distributed",
            responsibility_id=responsibility_id,
            weights=[assignment.weight for assignment in assignments],
        )
        return kras

    def build_kra_response(self, kra: ResponsibilityKra) -> dict:
        return {
            "id": str(kra.id),
            "responsibility_id": str(kra.responsibility_id),
            "organization_id": str(kra.organization_id),
            "name": kra.name,
            "description": kra.description,
            "target_metric": kra.target_metric,
            "measurement_method": kra.measurement_method,
            "weight": kra.weight,
            "is_required": kra.is_required,
            "is_active": kra.is_active,
            "sequence_order": kra.sequence_order,
            "created_at": kra.created_at,
            "updated_at": kra.updated_at,
        }


# 싱글턴 인스턴스
kra_service: KraService = KraService()
