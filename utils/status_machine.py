# User value: This file keeps a finished image from ever flipping back to processing.
import logging
from typing import Optional

from schemas.job_contract import TASK_STATUS_COMPLETE, TASK_STATUS_PROCESSING

logger = logging.getLogger("api.status_machine")

_TERMINAL = {TASK_STATUS_COMPLETE}

_ALLOWED = {
    None: {TASK_STATUS_PROCESSING},
    TASK_STATUS_PROCESSING: {TASK_STATUS_PROCESSING, TASK_STATUS_COMPLETE},
    TASK_STATUS_COMPLETE: {TASK_STATUS_COMPLETE},
}


# User value: treats status spellings alike so stored records compare reliably.
def _norm(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    s = str(status).strip().lower()
    return s or None


# User value: allows only forward moves so history never regresses.
def is_allowed_transition(current: Optional[str], target: Optional[str]) -> bool:
    target_n = _norm(target)
    if not target_n:
        return True
    current_n = _norm(current)
    if current_n not in _ALLOWED:
        return False
    return target_n in _ALLOWED[current_n]


# User value: builds the next record only when the move is allowed.
def plan_transition(
    current: Optional[dict],
    updates: dict,
    *,
    context: str,
    task_id: str = "",
) -> tuple[bool, Optional[dict]]:
    """Merge ``updates`` into ``current`` if the status move is legal.

    Returns ``(applied, record)``. A terminal record is never rewritten: a
    repeated ``complete`` is accepted but yields the stored record unchanged
    with ``applied`` False.
    """
    current_status = _norm((current or {}).get("status"))
    target = _norm(updates.get("status")) or current_status

    if not is_allowed_transition(current_status, target):
        logger.warning(
            "status_transition_blocked context=%s task_id=%s current=%s target=%s",
            context,
            task_id,
            current_status,
            target,
        )
        return False, current

    if current_status in _TERMINAL:
        logger.info(
            "status_transition_idempotent_terminal context=%s task_id=%s status=%s",
            context,
            task_id,
            current_status,
        )
        return False, current

    merged = dict(current or {})
    merged.update(updates)
    return True, merged
