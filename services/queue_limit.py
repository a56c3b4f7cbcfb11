# User value: This file keeps the processing queue short enough that new jobs finish promptly.
import logging

from fastapi import HTTPException

from config import PROCESSING_JOB_LIMIT
from services.feature_flags import is_processing_limit_enforced
from services.task_store import count_processing

logger = logging.getLogger("api.queue_limit")


# User value: stops users from piling up jobs the engine will only queue behind each other.
def enforce_processing_limit(*, r, variant: str, request_id: str = "") -> None:
    if not is_processing_limit_enforced() or PROCESSING_JOB_LIMIT <= 0:
        return

    active = count_processing(r)
    if active >= PROCESSING_JOB_LIMIT:
        logger.warning(
            "processing_limit_reached variant=%s active=%s limit=%s request_id=%s",
            variant,
            active,
            PROCESSING_JOB_LIMIT,
            request_id,
        )
        raise HTTPException(
            status_code=429,
            detail={
                "error_code": "PROCESSING_LIMIT_REACHED",
                "error_message": f"Queue is full ({PROCESSING_JOB_LIMIT} images processing). Please wait.",
            },
        )
    logger.info(
        "processing_limit_pass variant=%s active=%s limit=%s request_id=%s",
        variant,
        active,
        PROCESSING_JOB_LIMIT,
        request_id,
    )
