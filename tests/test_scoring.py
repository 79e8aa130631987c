"""KRA 점수 계산 유닛 테스트 (DB 없음).

Tests weight validation, even redistribution, rating bounds, score
blending, status transitions and the responsibility rollup.
"""

from types import SimpleNamespace

import pytest

from kra_engine.utils import scoring
from kra_engine.utils.exceptions import InvalidInputError, ValidationError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def kra(kra_id: str, weight: int, sequence_order: int = 0, is_active: bool = True):
    return SimpleNamespace(
        id=kra_id, name=f"KRA {kra_id}", weight=weight,
        sequence_order=sequence_order, is_active=is_active,
    )


def rating(kra_id: str, final_score):
    return SimpleNamespace(responsibility_kra_id=kra_id, final_score=final_score)


# ---------------------------------------------------------------------------
# 1. validate_weights()
# ---------------------------------------------------------------------------

class TestValidateWeights:
    """가중치 합계 검증."""

    def test_empty_set_is_valid(self):
        """빈 목록은 검증할 것이 없으므로 유효."""
        result = scoring.validate_weights([])
        assert result.is_valid is True
        assert result.total == 0

    def test_sum_99_is_invalid(self):
        """60 + 39 = 99 → 무효."""
        result = scoring.validate_weights([kra("a", 60), kra("b", 39)])
        assert result.is_valid is False
        assert result.total == 99
        assert "under" in result.message

    def test_sum_100_is_valid(self):
        """60 + 40 = 100 → 유효."""
        result = scoring.validate_weights([kra("a", 60), kra("b", 40)])
        assert result.is_valid is True
        assert result.total == 100

    def test_over_100_is_invalid(self):
        result = scoring.validate_weights([kra("a", 70), kra("b", 40)])
        assert result.is_valid is False
        assert "over" in result.message

    def test_inactive_kras_are_ignored(self):
        """비활성 KRA는 합계에서 제외."""
        result = scoring.validate_weights([kra("a", 60), kra("b", 40), kra("c", 30, is_active=False)])
        assert result.is_valid is True

    def test_definitions_without_is_active_count(self):
        """is_active 속성이 없는 정의(직무별 KRA)는 활성으로 취급."""
        items = [SimpleNamespace(id="x", name="X", weight=100, sequence_order=0)]
        assert scoring.validate_weights(items).is_valid is True


# ---------------------------------------------------------------------------
# 2. distribute_weights_evenly()
# ---------------------------------------------------------------------------

class TestDistributeWeightsEvenly:
    """가중치 균등 분배."""

    def test_empty_returns_empty(self):
        assert scoring.distribute_weights_evenly([]) == []

    @pytest.mark.parametrize("count", [1, 2, 3, 6, 7, 11, 33, 100, 101])
    def test_always_sums_to_100(self, count):
        """어떤 개수든 합계 100, 각 값은 floor(100/N) 또는 +1."""
        items = [kra(str(i), 0, i) for i in range(count)]
        result = scoring.distribute_weights_evenly(items)
        weights = [a.weight for a in result]
        base = 100 // count
        assert sum(weights) == 100
        assert all(w in (base, base + 1) for w in weights)
        assert len(result) == count

    def test_remainder_goes_to_first_in_sequence_order(self):
        """나머지는 sequence_order 앞쪽 KRA에 1씩."""
        items = [kra("c", 0, 2), kra("a", 0, 0), kra("b", 0, 1)]
        result = scoring.distribute_weights_evenly(items)
        assert [(a.kra_id, a.weight) for a in result] == [("a", 34), ("b", 33), ("c", 33)]

    def test_inputs_are_not_mutated(self):
        items = [kra("a", 10, 0), kra("b", 20, 1)]
        scoring.distribute_weights_evenly(items)
        assert [i.weight for i in items] == [10, 20]


# ---------------------------------------------------------------------------
# 3. 점수 계산
# ---------------------------------------------------------------------------

class TestScores:
    """최종 점수 및 가중 점수."""

    def test_blend_with_self_rating(self):
        """자기 3 + 매니저 5 → 4.0."""
        assert scoring.blend_final_score(3, 5) == 4.0

    def test_manager_only(self):
        """자기 평가 없으면 매니저 점수 그대로."""
        assert scoring.blend_final_score(None, 2) == 2.0

    def test_weight_adjusted(self):
        """최종 4, 가중치 25 → (4/5)*25 = 20.0."""
        assert scoring.weight_adjusted_score(4, 25) == pytest.approx(20.0)

    def test_weight_adjusted_custom_scale(self):
        assert scoring.weight_adjusted_score(5, 50, scale_max=10) == pytest.approx(25.0)

    @pytest.mark.parametrize("value", [0, 6, -1, 3.5, "3", None, True])
    def test_check_rating_rejects(self, value):
        """범위 밖 또는 정수가 아닌 값은 InvalidInputError."""
        with pytest.raises(InvalidInputError):
            scoring.check_rating(value)

    def test_invalid_input_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            scoring.check_rating(9)

    @pytest.mark.parametrize("value", [1, 3, 5])
    def test_check_rating_accepts(self, value):
        assert scoring.check_rating(value) == value

    def test_rating_labels(self):
        assert scoring.rating_label(1) == "Unsatisfactory"
        assert scoring.rating_label(5) == "Exceptional"
        assert scoring.rating_label(None) is None


# ---------------------------------------------------------------------------
# 4. 상태 전이
# ---------------------------------------------------------------------------

class TestNextStatus:
    """평가 상태 전이 표."""

    @pytest.mark.parametrize("current,side,expected", [
        ("not_rated", "self", "self_rated"),
        ("not_rated", "manager", "completed"),
        ("self_rated", "self", "self_rated"),
        ("self_rated", "manager", "completed"),
        ("manager_rated", "self", "completed"),
        ("manager_rated", "manager", "completed"),
        ("completed", "self", "completed"),
        ("completed", "manager", "completed"),
    ])
    def test_transitions(self, current, side, expected):
        assert scoring.next_status(current, side) == expected

    def test_unknown_side(self):
        with pytest.raises(ValueError):
            scoring.next_status("not_rated", "peer")


# ---------------------------------------------------------------------------
# 5. 롤업
# ---------------------------------------------------------------------------

class TestRollup:
    """책임 단위 롤업."""

    def test_partial_completion_uses_rated_weight_only(self):
        """50:4, 50:미평가 → 4.00 (2.00 아님)."""
        kras = [kra("a", 50), kra("b", 50)]
        assert scoring.calculate_responsibility_rollup([rating("a", 4)], kras) == 4.0

    def test_null_final_score_is_skipped(self):
        kras = [kra("a", 50), kra("b", 50)]
        ratings = [rating("a", 4), rating("b", None)]
        assert scoring.calculate_responsibility_rollup(ratings, kras) == 4.0

    def test_no_rated_kras_returns_zero(self):
        kras = [kra("a", 50), kra("b", 50)]
        assert scoring.calculate_responsibility_rollup([rating("a", None)], kras) == 0

    def test_empty_inputs_return_zero(self):
        assert scoring.calculate_responsibility_rollup([], [kra("a", 100)]) == 0
        assert scoring.calculate_responsibility_rollup([rating("a", 4)], []) == 0

    def test_weighted_average_rounded_to_two_decimals(self):
        """(3*50 + 4*30 + 5*20) / 100 = 3.7; 3자리 이상은 반올림."""
        kras = [kra("a", 50), kra("b", 30), kra("c", 20)]
        ratings = [rating("a", 3), rating("b", 4), rating("c", 5)]
        assert scoring.calculate_responsibility_rollup(ratings, kras) == 3.7

        kras = [kra("a", 1), kra("b", 2)]
        ratings = [rating("a", 4), rating("b", 3.5)]
        # (4 + 7) / 3 = 3.666…
        assert scoring.calculate_responsibility_rollup(ratings, kras) == 3.67

    def test_inactive_kras_are_ignored(self):
        kras = [kra("a", 50), kra("b", 50, is_active=False)]
        ratings = [rating("a", 2), rating("b", 5)]
        assert scoring.calculate_responsibility_rollup(ratings, kras) == 2.0

    def test_summary_reports_coverage(self):
        kras = [kra("a", 60), kra("b", 40)]
        summary = scoring.summarize_rollup([rating("a", 4.5)], kras)
        assert summary.score == 4.5
        assert summary.rated_weight == 60
        assert summary.total_weight == 100
        assert summary.coverage == 60.0
        assert summary.rated_count == 1
        assert summary.kra_count == 2

    def test_summary_without_kras(self):
        summary = scoring.summarize_rollup([], [])
        assert summary.score == 0
        assert summary.coverage == 0.0
