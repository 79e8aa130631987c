"""KRA 점수 계산 유틸리티 모듈.

KRA scoring utility module.
Pure functions shared by the catalog, job-specific and rating services:
weight validation, even weight redistribution, rating bounds, score
blending, the rating status transitions, and the responsibility rollup.
Nothing here touches the database.

Every function accepts anything shaped like a KraDefinition, so catalog
KRAs and job-specific KRAs go through the same code.
"""

import math
from typing import Any, Iterable, Protocol, Sequence

from kra_engine.config import settings
from kra_engine.schemas.kra import WeightAssignment, WeightValidation
from kra_engine.schemas.kra_rating import RollupSummary
from kra_engine.utils.exceptions import InvalidInputError

# 평가 상태 — Rating submission statuses
STATUS_NOT_RATED = "not_rated"
STATUS_SELF_RATED = "self_rated"
STATUS_MANAGER_RATED = "manager_rated"
STATUS_COMPLETED = "completed"

SIDE_SELF = "self"
SIDE_MANAGER = "manager"

# 5점 척도 라벨 — Five-point scale labels
RATING_LABELS: dict[int, str] = {
    1: "Unsatisfactory",
    2: "Needs Improvement",
    3: "Meets Expectations",
    4: "Exceeds Expectations",
    5: "Exceptional",
}


class KraDefinition(Protocol):
    """가중치를 가진 KRA 정의 — 카탈로그 KRA와 직무별 KRA 공통 형태.

    Shape shared by catalog and job-specific KRAs.
    ``is_active`` is optional; definitions without it count as active.
    """

    id: Any
    name: str
    weight: int
    sequence_order: int


class RatingRecord(Protocol):
    responsibility_kra_id: Any
    final_score: float | None


def _is_active(kra: Any) -> bool:
    return getattr(kra, "is_active", True) is not False


def _round2(value: float) -> float:
    """소수 둘째 자리 반올림 (half-up) — Two-decimal rounding, halves round up."""
    return math.floor(value * 100 + 0.5) / 100


# === 가중치 ===

def total_weight(kras: Iterable[KraDefinition]) -> int:
    return sum(kra.weight or 0 for kra in kras if _is_active(kra))


def validate_weights(kras: Sequence[KraDefinition], expected_total: int | None = None) -> WeightValidation:
    """활성 KRA 가중치 합계를 검증합니다.

    Valid iff the active weights sum to exactly ``expected_total``
    (100 by default). An empty set has nothing to validate and is valid.
    Non-conformance is reported, never raised.

    Args:
        kras: 검증할 KRA 목록 (KRAs to check; inactive ones are ignored)
        expected_total: 목표 합계 (Target total, defaults to settings.TOTAL_WEIGHT)

    Returns:
        WeightValidation: 검증 결과 (is_valid, message, total)
    """
    expected = settings.TOTAL_WEIGHT if expected_total is None else expected_total
    active = [kra for kra in kras if _is_active(kra)]

    if not active:
        return WeightValidation(is_valid=True, message="No KRAs to validate", total=0)

    total = total_weight(active)
    if total == expected:
        return WeightValidation(is_valid=True, message=f"Weights total {total}%", total=total)

    direction = "under" if total < expected else "over"
    return WeightValidation(
        is_valid=False,
        message=f"Weights total {total}%, {abs(expected - total)}% {direction} the required {expected}%",
        total=total,
    )


def distribute_weights_evenly(
    kras: Sequence[KraDefinition], expected_total: int | None = None
) -> list[WeightAssignment]:
    """가중치를 균등하게 재분배합니다.

    base = total // n; the remainder is handed out one point at a time to
    the first KRAs in sequence_order, so the result always sums to the
    expected total. The inputs are not modified.

    Args:
        kras: 재분배할 KRA 목록 (KRAs to redistribute)
        expected_total: 목표 합계 (Target total, defaults to settings.TOTAL_WEIGHT)

    Returns:
        list[WeightAssignment]: sequence_order 순 새 가중치 (New weights in sequence order)
    """
    expected = settings.TOTAL_WEIGHT if expected_total is None else expected_total
    count = len(kras)
    if count == 0:
        return []

    base = expected // count
    remainder = expected - base * count

    # sorted()는 안정 정렬 — ties keep their input order
    ordered = sorted(kras, key=lambda kra: kra.sequence_order or 0)
    return [
        WeightAssignment(
            kra_id=kra.id,
            name=kra.name,
            sequence_order=kra.sequence_order or 0,
            weight=base + 1 if index < remainder else base,
        )
        for index, kra in enumerate(ordered)
    ]


# === 평가 점수 ===

def check_rating(rating: Any) -> int:
    """평가 점수 범위 검증 — Raise InvalidInputError unless rating is an int on the scale."""
    low, high = settings.RATING_SCALE_MIN, settings.RATING_SCALE_MAX
    if isinstance(rating, bool) or not isinstance(rating, int) or not low <= rating <= high:
        raise InvalidInputError(f"Rating must be an integer between {low} and {high}, got {rating!r}")
    return rating


def rating_label(rating: int | None) -> str | None:
    if rating is None:
        return None
    return RATING_LABELS.get(rating)


def blend_final_score(self_rating: int | None, manager_rating: int) -> float:
    """최종 점수 — 자기 평가가 있으면 평균, 없으면 매니저 점수."""
    if self_rating is not None:
        return (self_rating + manager_rating) / 2
    return float(manager_rating)


def weight_adjusted_score(final_score: float, weight: int, scale_max: int | None = None) -> float:
    """가중 점수 — (final / scale max) * weight."""
    denominator = settings.RATING_SCALE_MAX if scale_max is None else scale_max
    return (final_score / denominator) * weight


def next_status(current: str | None, side: str) -> str:
    """평가 상태 전이.

    Transition table:
        not_rated     + self    → self_rated
        not_rated     + manager → completed
        self_rated    + self    → self_rated
        self_rated    + manager → completed
        manager_rated + any     → completed
        completed     + any     → completed
    Manager input always completes the record.
    """
    if side == SIDE_MANAGER:
        return STATUS_COMPLETED
    if side != SIDE_SELF:
        raise ValueError(f"Unknown rating side: {side}")

    if current in (STATUS_MANAGER_RATED, STATUS_COMPLETED):
        return STATUS_COMPLETED
    return STATUS_SELF_RATED


# === 롤업 ===

def _usable_pairs(
    ratings: Sequence[RatingRecord], kras: Sequence[KraDefinition]
) -> list[tuple[KraDefinition, float]]:
    ratings_by_kra = {rating.responsibility_kra_id: rating for rating in ratings}
    pairs: list[tuple[KraDefinition, float]] = []
    for kra in kras:
        if not _is_active(kra):
            continue
        rating = ratings_by_kra.get(kra.id)
        if rating is None or rating.final_score is None:
            continue
        pairs.append((kra, rating.final_score))
    return pairs


def calculate_responsibility_rollup(
    ratings: Sequence[RatingRecord], kras: Sequence[KraDefinition]
) -> float:
    """책임 단위 가중 평균 점수를 계산합니다.

    Weighted average of per-KRA final scores. Only KRAs with a usable final
    score count toward the denominator, so a partially rated responsibility
    still lands on the rating scale instead of being penalized. Returns 0
    when either input is empty or no rated weight exists.

    Args:
        ratings: 평가 기록 목록 (Rating submissions, matched by responsibility_kra_id)
        kras: KRA 목록 (KRA definitions carrying the weights)

    Returns:
        float: 소수 둘째 자리로 반올림한 점수 (Score rounded to two decimals)
    """
    if not ratings or not kras:
        return 0

    weighted_sum = 0.0
    rated_weight = 0
    for kra, final_score in _usable_pairs(ratings, kras):
        weighted_sum += final_score * kra.weight
        rated_weight += kra.weight

    if rated_weight == 0:
        return 0
    return _round2(weighted_sum / rated_weight)


def summarize_rollup(
    ratings: Sequence[RatingRecord], kras: Sequence[KraDefinition]
) -> RollupSummary:
    """롤업 점수와 진행률 요약 — Rollup score plus rating coverage."""
    active = [kra for kra in kras if _is_active(kra)]
    pairs = _usable_pairs(ratings, active)
    rated_weight = sum(kra.weight for kra, _ in pairs)
    active_weight = total_weight(active)

    return RollupSummary(
        score=calculate_responsibility_rollup(ratings, active),
        rated_weight=rated_weight,
        total_weight=active_weight,
        coverage=_round2(rated_weight / active_weight * 100) if active_weight else 0.0,
        rated_count=len(pairs),
        kra_count=len(active),
    )
