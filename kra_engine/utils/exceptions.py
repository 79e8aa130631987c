"""엔진 예외 클래스 모듈.

Engine exception classes module.
Provides pre-configured exception classes for the error categories the
engine reports. Each carries a human-readable ``detail`` message and a
status code so an outer surface can map it without re-deriving the category.

Usage:
    from kra_engine.utils.exceptions import NotFoundError, ValidationError
    raise NotFoundError("KRA not found")
    raise ValidationError("KRA name is required")
"""


class EngineError(Exception):
    """엔진 예외 베이스 클래스.

    Base class for all engine errors.

    Args:
        detail: 오류 메시지 (Error message)
    """

    status_code: int = 500
    default_detail: str = "Engine error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail: str = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(EngineError):
    """422 예외 — 호출자가 전달한 값이 로컬 불변식을 위반할 때 사용.

    Raised when caller-supplied content fails a local invariant
    (e.g. blank KRA name). The operation has no side effect.
    """

    status_code = 422
    default_detail = "Validation failed"


class InvalidInputError(ValidationError):
    """422 예외 — 평가 점수가 허용 범위를 벗어났을 때 사용.

    Raised when a rating value falls outside the configured scale.
    """

    default_detail = "Invalid input"


class NotFoundError(EngineError):
    """404 예외 — 참조한 KRA, 직무별 KRA 또는 평가 기록이 없을 때 사용.

    Raised when a referenced KRA, job-specific KRA or rating record does not exist.
    """

    status_code = 404
    default_detail = "Resource not found"


class StoreFailureError(EngineError):
    """503 예외 — 저장소 호출 실패 시 사용.

    Raised when the underlying persistence call fails (connection loss,
    timeout, constraint violation, stale version). The original driver
    message is kept in ``detail`` and the cause is chained.
    """

    status_code = 503
    default_detail = "Store failure"
