# Shape of the task records kept in Redis and returned by /api/history.
CONTRACT_VERSION = "2025-08-task-v1"

TASK_STATUS_PROCESSING = "processing"
TASK_STATUS_COMPLETE = "complete"

TASK_STATUSES = (
    TASK_STATUS_PROCESSING,
    TASK_STATUS_COMPLETE,
)

TERMINAL_STATUSES = (TASK_STATUS_COMPLETE,)

VARIANT_TEXT_TO_IMAGE = "text_to_image"
VARIANT_UPSCALE = "upscale"

VARIANTS = (
    VARIANT_TEXT_TO_IMAGE,
    VARIANT_UPSCALE,
)

COMPLETED_BY_WEBHOOK = "webhook"
COMPLETED_BY_POLL = "poll"

# width, height per aspect ratio
RATIO_DIMENSIONS = {
    "1:1": (1080, 1080),
    "16:9": (1920, 1080),
    "9:16": (1080, 1920),
}
DEFAULT_RATIO = "1:1"

SCALE_VALUES = {
    "x2": "0.5",
    "x4": "1",
    "x8": "2",
}
DEFAULT_SCALE_VALUE = "1"

RANDOM_SEED = "random"
MAX_RANDOM_SEED = 100_000_000_000_000

TEXT_TO_IMAGE_FIELDS = (
    "prompt",
    "ratio",
    "width",
    "height",
    "useLora",
)

UPSCALE_FIELDS = (
    "originalFilename",
    "scale",
    "loraStrength",
    "inputSource",
)

CANONICAL_FIELDS = (
    "taskId",
    "status",
    "variant",
    "createdAt",
    "completedAt",
    "completedBy",
    "imageUrl",
    "seed",
    *TEXT_TO_IMAGE_FIELDS,
    *UPSCALE_FIELDS,
)
