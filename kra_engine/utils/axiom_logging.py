"""Axiom 이벤트 로깅 모듈.

Axiom event logging module.
Sends structured engine events (KRA edits, weight redistribution,
rating submissions) to Axiom. Sensitive fields are masked and long
values truncated before ingest. Logging is a no-op when Axiom is not
configured, and an ingest failure never breaks the calling operation.
"""

import re
import time
from typing import Any
from uuid import UUID

from axiom_py import Client as AxiomClient

from kra_engine.config import settings

# 마스킹 대상 필드 패턴 — Fields to mask in event payloads
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(k) else _mask_dict(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    if isinstance(data, UUID):
        return str(data)
    return _truncate(data)


def _truncate(value: Any, max_len: int = 2000) -> Any:
    """로그 크기 제한 — Truncate large values to prevent oversized logs."""
    if isinstance(value, str) and len(value) > max_len:
        return value[:max_len] + "...(truncated)"
    return value


class AxiomEventLogger:
    """엔진 이벤트를 Axiom에 기록하는 로거.

    Logger that ships engine events to Axiom.
    Each event carries its name, a timestamp, and the masked payload.
    """

    def __init__(self, token: str | None = None, dataset: str | None = None) -> None:
        self._client: AxiomClient | None = None
        self._dataset: str = dataset if dataset is not None else settings.AXIOM_DATASET
        token = token if token is not None else settings.AXIOM_API_TOKEN

        if token and self._dataset:
            self._client = AxiomClient(token=token)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def build_event(self, event: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Axiom 로그 이벤트 구성 — Build the event dict sent to Axiom."""
        log_event: dict[str, Any] = {
            "event": event,
            "app": settings.APP_NAME,
            "ts_ms": round(time.time() * 1000),
        }
        log_event.update(_mask_dict(payload))
        return log_event

    def log(self, event: str, **payload: Any) -> None:
        # Axiom 미설정시 패스스루 — Pass through if Axiom not configured
        if not self._client:
            return

        try:
            self._client.ingest_events(self._dataset, [self.build_event(event, payload)])
        except Exception:
            pass  # 로깅 실패가 엔진 동작에 영향주지 않도록 — Never break an operation on log failure


# 싱글턴 인스턴스
event_logger: AxiomEventLogger = AxiomEventLogger()
