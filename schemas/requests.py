# User value: This file defines the request bodies the page and RunningHub send.
from pydantic import BaseModel
from typing import Any, Optional, Union


class TextToImageRequest(BaseModel):
    # User value: carries the prompt and picture options for one generation.
    # presence of prompt is checked by the route so a blank prompt is a 400, not a 422
    prompt: Optional[str] = None
    ratio: str = "1:1"
    useLora: bool = False
    seed: Optional[Union[str, int]] = "random"


class CheckStatusRequest(BaseModel):
    # User value: names the task the page wants refreshed.
    taskId: Optional[str] = None


class WebhookPayload(BaseModel):
    # User value: the completion callback RunningHub pushes for a finished task.
    taskId: Optional[str] = None
    event: Optional[str] = None
    # RunningHub sends the outputs result as a JSON-encoded string
    eventData: Optional[Union[str, dict[str, Any]]] = None
