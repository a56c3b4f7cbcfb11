# User value: This file fixes the response shapes the page reads.
from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional, Union


class SubmitResponse(BaseModel):
    # User value: confirms the job was accepted so the page can start tracking it.
    success: bool = True
    taskId: str


class CheckStatusResponse(BaseModel):
    # User value: tells the page whether the engine still reports the task as running.
    success: bool = True
    status: Optional[str] = None


class WebhookResponse(BaseModel):
    # User value: acknowledges RunningHub even when the callback could not be applied.
    success: bool = True
    error: Optional[str] = None


class TaskRecord(BaseModel):
    # User value: one history entry exactly as the page renders it.
    # unknown keys from older records are kept as-is
    model_config = ConfigDict(extra="allow")

    taskId: str
    status: Literal["processing", "complete"]
    createdAt: str
    variant: Optional[str] = None
    completedAt: Optional[str] = None
    completedBy: Optional[str] = None
    imageUrl: Optional[str] = None
    seed: Optional[Union[str, int]] = None

    prompt: Optional[str] = None
    ratio: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    useLora: Optional[bool] = None

    originalFilename: Optional[str] = None
    scale: Optional[str] = None
    loraStrength: Optional[Union[str, float]] = None
    inputSource: Optional[str] = None


class TaskContractResponse(BaseModel):
    # User value: gives the page the option lists and queue cap it renders.
    contract_version: str
    task_statuses: List[str]
    terminal_statuses: List[str]
    variants: List[str]
    ratios: List[str]
    scales: List[str]
    canonical_fields: List[str]
    processing_limit: int
    processing_limit_enforced: bool
    input_upload_target: str
