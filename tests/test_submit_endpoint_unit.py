# User value: This test guards the submit forms so bad input never creates a phantom job.
import io
import unittest
from unittest.mock import MagicMock, patch

from fastapi import HTTPException

from fake_redis import FakeRedis
from routes.generate import generate, upscale
from services.runninghub import RunningHubError
from services.task_store import create_task, get_task, list_tasks


class DummyUploadFile:
    def __init__(self, filename: str, content_type: str = "image/png"):
        self.filename = filename
        self.content_type = content_type
        self.file = io.BytesIO(b"dummy")


class SubmitEndpointUnitTests(unittest.TestCase):
    def setUp(self):
        self.r = FakeRedis()
        self.rh = MagicMock()
        self.rh.run_workflow.return_value = "1950000000001"
        self.rh.upload_image.return_value = "api/uploaded.png"
        patches = [
            patch("routes.generate.r", self.r),
            patch("routes.generate.get_runninghub_client", return_value=self.rh),
            patch("config.RUNNINGHUB_WEBAPP_ID", "upscale-app"),
            patch("config.RUNNINGHUB_T2I_WEBAPP_ID", "t2i-app"),
            patch("config.RUNNINGHUB_WEBHOOK_URL", ""),
            patch("config.INPUT_UPLOAD_TARGET", "runninghub"),
        ]
        for p in patches:
            p.start()
            self.addCleanup(p.stop)

    def test_generate_requires_prompt(self):
        with self.assertRaises(HTTPException) as ctx:
            generate({"prompt": "   "})
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["error_message"], "Prompt is required.")
        self.rh.run_workflow.assert_not_called()
        self.assertEqual(list_tasks(self.r), [])

    def test_generate_rejects_bad_fixed_seed(self):
        with self.assertRaises(HTTPException) as ctx:
            generate({"prompt": "a cat", "seed": "abc"})
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(list_tasks(self.r), [])

    def test_generate_creates_processing_record(self):
        out = generate({"prompt": "a cat", "ratio": "16:9", "useLora": True, "seed": "77"})
        self.assertTrue(out.success)
        self.assertEqual(out.taskId, "1950000000001")

        kwargs = self.rh.run_workflow.call_args.kwargs
        self.assertEqual(kwargs["webapp_id"], "t2i-app")
        self.assertIsNone(kwargs["webhook_url"])

        history = list_tasks(self.r)
        self.assertEqual(len(history), 1)
        task = history[0]
        self.assertEqual(task["status"], "processing")
        self.assertNotIn("imageUrl", task)
        self.assertEqual(task["variant"], "text_to_image")
        self.assertEqual((task["prompt"], task["ratio"], task["width"], task["height"]), ("a cat", "16:9", 1920, 1080))
        self.assertEqual(task["seed"], "77")

    def test_generate_passes_webhook_url_when_configured(self):
        with patch("config.RUNNINGHUB_WEBHOOK_URL", "https://studio.example/api/webhook"):
            generate({"prompt": "a cat"})
        self.assertEqual(self.rh.run_workflow.call_args.kwargs["webhook_url"], "https://studio.example/api/webhook")

    def test_generate_upstream_error_is_500_with_message(self):
        self.rh.run_workflow.side_effect = RunningHubError("API Error: TASK_QUEUE_MAXED")
        with self.assertRaises(HTTPException) as ctx:
            generate({"prompt": "a cat"})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail["error_message"], "API Error: TASK_QUEUE_MAXED")
        self.assertEqual(list_tasks(self.r), [])

    def test_generate_without_body_is_400(self):
        with self.assertRaises(HTTPException) as ctx:
            generate(None)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["error_code"], "INVALID_REQUEST")
        self.assertEqual(ctx.exception.detail["error_message"], "Prompt is required.")
        self.rh.run_workflow.assert_not_called()

    def test_generate_non_text_prompt_is_400(self):
        for body in ({"prompt": 123}, {"prompt": ["a", "cat"]}):
            with self.assertRaises(HTTPException) as ctx:
                generate(body)
            self.assertEqual(ctx.exception.status_code, 400)
            self.assertEqual(ctx.exception.detail["error_message"], "Prompt must be text.")

        with self.assertRaises(HTTPException) as ctx:
            generate(["a cat"])
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["error_message"], "Request body must be a JSON object.")
        self.rh.run_workflow.assert_not_called()
        self.assertEqual(list_tasks(self.r), [])

    def test_generate_existing_task_id_is_state_conflict(self):
        create_task(self.r, task_id="1950000000001", fields={"variant": "upscale"})
        before = get_task(self.r, "1950000000001")

        with self.assertRaises(HTTPException) as ctx:
            generate({"prompt": "a cat"})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail["error_code"], "STATE_CONFLICT")
        self.assertEqual(get_task(self.r, "1950000000001"), before)

    def test_generate_store_failure_is_store_unavailable(self):
        self.r.fail_with = ConnectionError("redis down")
        with patch("services.queue_limit.is_processing_limit_enforced", return_value=False):
            with self.assertRaises(HTTPException) as ctx:
                generate({"prompt": "a cat"})
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail["error_code"], "STORE_UNAVAILABLE")

    def test_upscale_requires_image(self):
        with self.assertRaises(HTTPException) as ctx:
            upscale(image=None, scale="x4", useLora="false", loraStrength="", seed="random")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail["error_message"], "Image file is required.")
        self.rh.upload_image.assert_not_called()
        self.assertEqual(list_tasks(self.r), [])

    def test_upscale_uploads_then_runs(self):
        out = upscale(image=DummyUploadFile("photo.png"), scale="x8", useLora="true", loraStrength="0.6", seed="123")
        self.assertEqual(out.taskId, "1950000000001")

        self.rh.upload_image.assert_called_once()
        kwargs = self.rh.run_workflow.call_args.kwargs
        self.assertEqual(kwargs["webapp_id"], "upscale-app")
        values = {n["fieldName"]: n["fieldValue"] for n in kwargs["node_info_list"]}
        self.assertEqual(values, {"image": "api/uploaded.png", "default_value": "2", "strength_model": "0.6", "seed": "123"})

        task = list_tasks(self.r)[0]
        self.assertEqual(task["originalFilename"], "photo.png")
        self.assertEqual(task["variant"], "upscale")
        self.assertEqual(task["status"], "processing")
        self.assertEqual(task["inputSource"], "runninghub")

    def test_upscale_random_seed_and_lora_off(self):
        upscale(image=DummyUploadFile("photo.png"), scale="x2", useLora="false", loraStrength="0.6", seed="random")
        values = {n["fieldName"]: n["fieldValue"] for n in self.rh.run_workflow.call_args.kwargs["node_info_list"]}
        self.assertEqual(values["strength_model"], "0")
        self.assertTrue(values["seed"].isdigit())
        self.assertEqual(list_tasks(self.r)[0]["seed"], values["seed"])

    def test_upscale_to_gcs_sends_signed_url(self):
        with patch("config.INPUT_UPLOAD_TARGET", "gcs"):
            with patch("routes.generate.upload_input_image", return_value={"url": "https://storage.test/signed"}) as up:
                upscale(image=DummyUploadFile("photo.png"), scale="x4", useLora="false", loraStrength="", seed="1")
        up.assert_called_once()
        self.rh.upload_image.assert_not_called()
        values = {n["fieldName"]: n["fieldValue"] for n in self.rh.run_workflow.call_args.kwargs["node_info_list"]}
        self.assertEqual(values["image"], "https://storage.test/signed")
        self.assertEqual(list_tasks(self.r)[0]["inputSource"], "gcs")

    def test_upscale_upload_error_is_500(self):
        self.rh.upload_image.side_effect = RunningHubError("RunningHub Upload Error: TOKEN_INVALID")
        with self.assertRaises(HTTPException) as ctx:
            upscale(image=DummyUploadFile("photo.png"), scale="x4", useLora="false", loraStrength="", seed="random")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.detail["error_message"], "RunningHub Upload Error: TOKEN_INVALID")
        self.rh.run_workflow.assert_not_called()

    def test_processing_limit_enforced_when_enabled(self):
        with patch("services.queue_limit.is_processing_limit_enforced", return_value=True):
            with patch("services.queue_limit.PROCESSING_JOB_LIMIT", 2):
                with patch("services.queue_limit.count_processing", return_value=2):
                    with self.assertRaises(HTTPException) as ctx:
                        generate({"prompt": "a cat"})
        self.assertEqual(ctx.exception.status_code, 429)
        self.rh.run_workflow.assert_not_called()

    def test_processing_limit_ignored_when_disabled(self):
        with patch("services.queue_limit.is_processing_limit_enforced", return_value=False):
            with patch("services.queue_limit.count_processing", return_value=99):
                generate({"prompt": "a cat"})
        self.rh.run_workflow.assert_called_once()


if __name__ == "__main__":
    unittest.main()
