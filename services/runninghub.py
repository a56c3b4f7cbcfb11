import logging
from typing import Any, BinaryIO, Optional

import httpx

import config

logger = logging.getLogger("api.runninghub")


class RunningHubError(RuntimeError):
    """The workflow engine answered with a non-zero code or an unusable body."""


def first_file_url(result: dict | None) -> Optional[str]:
    """Return the first output URL of a successful outputs result, else None."""
    if not isinstance(result, dict) or result.get("code") != 0:
        return None
    data = result.get("data")
    if not isinstance(data, list):
        return None
    for item in data:
        if isinstance(item, dict) and item.get("fileUrl"):
            return str(item["fileUrl"])
    return None


class RunningHubClient:
    def __init__(
        self,
        *,
        api_key: str,
        upload_url: str,
        run_url: str,
        outputs_url: str,
        host: str = "www.runninghub.ai",
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_key = api_key
        self.upload_url = upload_url
        self.run_url = run_url
        self.outputs_url = outputs_url
        self.host = host
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.Client:
        headers = {"Host": self.host} if self.host else None
        return httpx.Client(timeout=self.timeout, transport=self.transport, headers=headers)

    @staticmethod
    def _json(resp: httpx.Response, what: str) -> dict:
        try:
            body = resp.json()
        except ValueError as exc:
            raise RunningHubError(f"RunningHub {what} returned non-JSON response (HTTP {resp.status_code})") from exc
        if not isinstance(body, dict):
            raise RunningHubError(f"RunningHub {what} returned unexpected body")
        return body

    def upload_image(self, *, file_obj: BinaryIO, filename: str, content_type: str | None = None) -> str:
        """Upload an input image and return the engine-side file name."""
        files = {"file": (filename, file_obj, content_type or "application/octet-stream")}
        data = {"apiKey": self.api_key, "fileType": "image"}
        with self._client() as client:
            resp = client.post(self.upload_url, data=data, files=files)
        body = self._json(resp, "upload")

        if body.get("code") != 0:
            raise RunningHubError(f"RunningHub Upload Error: {body.get('msg')}")

        file_name = (body.get("data") or {}).get("fileName")
        if not file_name:
            raise RunningHubError("RunningHub Upload Error: no fileName in response")
        logger.info("runninghub_upload_ok filename=%s remote=%s", filename, file_name)
        return str(file_name)

    def run_workflow(
        self,
        *,
        webapp_id: str,
        node_info_list: list[dict[str, Any]],
        webhook_url: str | None = None,
    ) -> str:
        """Start a workflow run and return its task id."""
        payload: dict[str, Any] = {
            "webappId": webapp_id,
            "apiKey": self.api_key,
            "nodeInfoList": node_info_list,
        }
        if webhook_url:
            payload["webhookUrl"] = webhook_url

        with self._client() as client:
            resp = client.post(self.run_url, json=payload)
        body = self._json(resp, "run")

        if body.get("code") != 0:
            detail = (body.get("error") or {}).get("details") if isinstance(body.get("error"), dict) else None
            message = detail or body.get("msg") or "Unknown error from RunningHub"
            raise RunningHubError(f"API Error: {message}")

        task_id = (body.get("data") or {}).get("taskId")
        if not task_id:
            raise RunningHubError("API Error: no taskId in response")
        logger.info("runninghub_run_ok webapp_id=%s task_id=%s nodes=%s", webapp_id, task_id, len(node_info_list))
        return str(task_id)

    def get_outputs(self, task_id: str) -> dict:
        """Fetch the outputs result for a task.

        A non-zero ``code`` here usually means the task is still running; the
        body is returned as-is and callers read ``msg``.
        """
        with self._client() as client:
            resp = client.post(self.outputs_url, json={"apiKey": self.api_key, "taskId": task_id})
        return self._json(resp, "outputs")


_client: RunningHubClient | None = None


def get_runninghub_client() -> RunningHubClient:
    global _client
    if _client is not None:
        return _client

    _client = RunningHubClient(
        api_key=config.RUNNINGHUB_API_KEY,
        upload_url=config.RUNNINGHUB_UPLOAD_URL,
        run_url=config.RUNNINGHUB_RUN_URL,
        outputs_url=config.RUNNINGHUB_OUTPUTS_URL,
        host=config.RUNNINGHUB_HOST,
        timeout=config.RUNNINGHUB_TIMEOUT_SEC,
    )
    return _client
