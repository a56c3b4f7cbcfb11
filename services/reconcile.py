# User value: This file helps users see their generated images show up as soon as RunningHub finishes.
import json
import logging

from services.runninghub import first_file_url
from services.task_store import mark_complete
from utils.metrics import incr
from utils.stage_logging import log_stage

logger = logging.getLogger("api.reconcile")


# User value: accepts the result whether RunningHub sends it as text or as an object.
def decode_event_data(event_data) -> dict | None:
    if isinstance(event_data, dict):
        return event_data
    if not event_data:
        return None
    parsed = json.loads(event_data)
    return parsed if isinstance(parsed, dict) else None


# User value: finishes a job exactly once, whichever of webhook or poll arrives first.
def apply_outputs(r, *, task_id: str, result: dict | None, source: str) -> bool:
    """Apply a RunningHub outputs result to the stored task.

    Shared by the webhook and the poll path. Returns True only when this call
    moved the task to complete.
    """
    image_url = first_file_url(result)
    if not task_id or not image_url:
        log_stage(
            task_id=task_id or "unknown",
            stage="RECONCILE",
            event="SKIPPED",
            source=source,
            upstream_code=(result or {}).get("code") if isinstance(result, dict) else None,
            upstream_msg=(result or {}).get("msg") if isinstance(result, dict) else None,
        )
        return False

    changed, record = mark_complete(r, task_id=task_id, image_url=image_url, completed_by=source)
    if changed:
        incr("api_tasks_completed_total", source=source, variant=(record or {}).get("variant") or "")
        log_stage(
            task_id=task_id,
            stage="RECONCILE",
            event="COMPLETED",
            variant=(record or {}).get("variant"),
            source=source,
            image_url=image_url,
        )
    else:
        log_stage(
            task_id=task_id,
            stage="RECONCILE",
            event="NOOP",
            source=source,
            known=record is not None,
        )
    return changed
