import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("api.stage")


def _norm(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def log_stage(
    *,
    task_id: str,
    stage: str,
    event: str,
    variant: str | None = None,
    source: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "task_id": task_id,
        "stage": stage,
        "event": event.upper(),
    }

    if variant:
        payload["variant"] = variant
    if source:
        payload["source"] = source
    if error:
        payload["error"] = error

    for key, value in extra.items():
        norm = _norm(value)
        if norm is not None:
            payload[key] = norm

    msg = json.dumps(payload, ensure_ascii=False)
    if error or payload["event"] == "FAILED":
        logger.error("stage_event %s", msg)
    else:
        logger.info("stage_event %s", msg)
