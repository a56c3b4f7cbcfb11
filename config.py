import os
from dotenv import load_dotenv

load_dotenv()

REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
TASK_KEY_PREFIX = os.environ.get("TASK_KEY_PREFIX", "task:")

RUNNINGHUB_API_KEY = os.environ.get("RUNNINGHUB_API_KEY", "")
RUNNINGHUB_HOST = os.environ.get("RUNNINGHUB_HOST", "www.runninghub.ai")
RUNNINGHUB_UPLOAD_URL = os.environ.get("RUNNINGHUB_UPLOAD_URL", "https://www.runninghub.ai/task/openapi/upload")
RUNNINGHUB_RUN_URL = os.environ.get("RUNNINGHUB_RUN_URL", "https://www.runninghub.ai/task/openapi/ai-app/run")
RUNNINGHUB_OUTPUTS_URL = os.environ.get("RUNNINGHUB_OUTPUTS_URL", "https://www.runninghub.ai/task/openapi/outputs")
RUNNINGHUB_WEBAPP_ID = os.environ.get("RUNNINGHUB_WEBAPP_ID", "")
RUNNINGHUB_T2I_WEBAPP_ID = os.environ.get("RUNNINGHUB_T2I_WEBAPP_ID", "") or RUNNINGHUB_WEBAPP_ID
RUNNINGHUB_WEBHOOK_URL = os.environ.get("RUNNINGHUB_WEBHOOK_URL", "")
RUNNINGHUB_TIMEOUT_SEC = float(os.environ.get("RUNNINGHUB_TIMEOUT_SEC", "60"))

# "runninghub" sends the input image to the engine's own upload endpoint,
# "gcs" stores it in GCS_BUCKET_NAME and hands the engine a signed URL.
INPUT_UPLOAD_TARGET = os.environ.get("INPUT_UPLOAD_TARGET", "runninghub").strip().lower()
GCS_BUCKET_NAME = os.environ.get("GCS_BUCKET_NAME", "")
GCS_SIGNED_URL_DAYS = int(os.environ.get("GCS_SIGNED_URL_DAYS", "1"))

PROCESSING_JOB_LIMIT = int(os.environ.get("PROCESSING_JOB_LIMIT", "3"))
T2I_LORA_STRENGTH = os.environ.get("T2I_LORA_STRENGTH", "0.8")

# Workflow node identifiers. Fixed by the published RunningHub workflows.
UPSCALE_IMAGE_NODE = os.environ.get("UPSCALE_IMAGE_NODE", "15")
UPSCALE_SCALE_NODE = os.environ.get("UPSCALE_SCALE_NODE", "25")
UPSCALE_LORA_NODE = os.environ.get("UPSCALE_LORA_NODE", "22")
UPSCALE_SEED_NODE = os.environ.get("UPSCALE_SEED_NODE", "7")

T2I_PROMPT_NODE = os.environ.get("T2I_PROMPT_NODE", "6")
T2I_SIZE_NODE = os.environ.get("T2I_SIZE_NODE", "5")
T2I_LORA_NODE = os.environ.get("T2I_LORA_NODE", "22")
T2I_SEED_NODE = os.environ.get("T2I_SEED_NODE", "7")
