# User value: This file tells the page which options and limits the API accepts.
# routes/contract.py
from fastapi import APIRouter

import config
from schemas.job_contract import (
    CANONICAL_FIELDS,
    CONTRACT_VERSION,
    RATIO_DIMENSIONS,
    SCALE_VALUES,
    TASK_STATUSES,
    TERMINAL_STATUSES,
    VARIANTS,
)
from schemas.responses import TaskContractResponse
from services.feature_flags import is_processing_limit_enforced

router = APIRouter(prefix="/api")


@router.get("/contract", response_model=TaskContractResponse)
# User value: keeps the form options and queue cap in the UI in step with the API.
def task_contract():
    return TaskContractResponse(
        contract_version=CONTRACT_VERSION,
        task_statuses=list(TASK_STATUSES),
        terminal_statuses=list(TERMINAL_STATUSES),
        variants=list(VARIANTS),
        ratios=list(RATIO_DIMENSIONS),
        scales=list(SCALE_VALUES),
        canonical_fields=list(CANONICAL_FIELDS),
        processing_limit=config.PROCESSING_JOB_LIMIT,
        processing_limit_enforced=is_processing_limit_enforced(),
        input_upload_target=config.INPUT_UPLOAD_TARGET,
    )
