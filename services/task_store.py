# User value: This file keeps every submitted job and its result in one place the page can list.
import json
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from config import TASK_KEY_PREFIX
from schemas.job_contract import TASK_STATUS_COMPLETE, TASK_STATUS_PROCESSING
from utils.status_machine import plan_transition

logger = logging.getLogger("api.task_store")


# User value: reports a reused task id plainly instead of overwriting an earlier job.
class TaskConflictError(RuntimeError):
    """A record already exists for a task id the engine just handed out."""


_MGET_CHUNK = 200
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


# User value: stamps jobs in one timezone so ordering is the same for everyone.
def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# User value: sorts odd or missing timestamps last instead of failing the list.
def parse_ts(value) -> datetime:
    text = str(value or "").strip()
    if not text:
        return _EPOCH
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# User value: keeps job records apart from anything else in the store.
def task_key(task_id: str) -> str:
    return f"{TASK_KEY_PREFIX}{task_id}"


# User value: skips unreadable records so one bad entry never hides the rest.
def _decode(raw) -> Optional[dict]:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("task_record_undecodable raw=%r", str(raw)[:120])
        return None
    # records written by older deployments were sometimes double-encoded
    if isinstance(data, str):
        return _decode(data)
    return data if isinstance(data, dict) else None


# User value: records a new job as processing the moment it is accepted.
def create_task(r, *, task_id: str, fields: dict) -> dict:
    existing = get_task(r, task_id)
    if existing is not None:
        logger.warning(
            "task_create_conflict task_id=%s existing_status=%s", task_id, existing.get("status")
        )
        raise TaskConflictError(f"Task {task_id} already exists with status {existing.get('status')}")

    _, record = plan_transition(
        None,
        {
            **fields,
            "taskId": task_id,
            "status": TASK_STATUS_PROCESSING,
            "createdAt": utc_now_iso(),
        },
        context="SUBMIT_INIT",
        task_id=task_id,
    )
    r.set(task_key(task_id), json.dumps(record))
    return record


# User value: loads one job as last stored.
def get_task(r, task_id: str) -> Optional[dict]:
    return _decode(r.get(task_key(task_id)))


# User value: attaches the finished image once and never replaces it.
def mark_complete(r, *, task_id: str, image_url: str, completed_by: str) -> tuple[bool, Optional[dict]]:
    """Move a processing record to complete.

    Returns ``(changed, record)``; ``record`` is None when the task is unknown.
    """
    current = get_task(r, task_id)
    if current is None:
        logger.info("task_complete_skipped_unknown task_id=%s", task_id)
        return False, None

    ok, record = plan_transition(
        current,
        {
            "status": TASK_STATUS_COMPLETE,
            "imageUrl": image_url,
            "completedAt": utc_now_iso(),
            "completedBy": completed_by,
        },
        context=f"COMPLETE_{completed_by.upper()}",
        task_id=task_id,
    )
    if ok:
        r.set(task_key(task_id), json.dumps(record))
    return ok, record


# User value: walks all jobs without blocking the store.
def iter_task_keys(r) -> Iterable[str]:
    return r.scan_iter(match=f"{TASK_KEY_PREFIX}*", count=500)


# User value: returns every job newest first for the history list.
def list_tasks(r) -> list[dict]:
    keys = list(iter_task_keys(r))
    if not keys:
        return []

    tasks = []
    for start in range(0, len(keys), _MGET_CHUNK):
        for raw in r.mget(keys[start:start + _MGET_CHUNK]):
            record = _decode(raw)
            if record is not None:
                tasks.append(record)

    tasks.sort(key=lambda t: parse_ts(t.get("createdAt")), reverse=True)
    return tasks


# User value: counts jobs still running for the queue cap.
def count_processing(r) -> int:
    return sum(1 for t in list_tasks(r) if t.get("status") == TASK_STATUS_PROCESSING)
