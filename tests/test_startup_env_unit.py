import importlib
import os
import unittest
from unittest.mock import patch

import startup_env

BASE_ENV = {
    "RUNNINGHUB_API_KEY": "key",
    "RUNNINGHUB_WEBAPP_ID": "1234567890",
    "REDIS_URL": "redis://localhost:6379/0",
}


class StartupEnvUnitTests(unittest.TestCase):
    def test_minimal_env_passes(self):
        with patch.dict(os.environ, BASE_ENV, clear=True):
            startup_env.validate_startup_env()

    def test_missing_api_key_fails(self):
        env = dict(BASE_ENV)
        env.pop("RUNNINGHUB_API_KEY")
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(RuntimeError) as ctx:
                startup_env.validate_startup_env()
        self.assertIn("RUNNINGHUB_API_KEY is required", str(ctx.exception))

    def test_gcs_target_requires_bucket(self):
        with patch.dict(os.environ, {**BASE_ENV, "INPUT_UPLOAD_TARGET": "gcs"}, clear=True):
            with self.assertRaises(RuntimeError) as ctx:
                startup_env.validate_startup_env()
        self.assertIn("GCS_BUCKET_NAME is required", str(ctx.exception))

        with patch.dict(os.environ, {**BASE_ENV, "INPUT_UPLOAD_TARGET": "gcs", "GCS_BUCKET_NAME": "b"}, clear=True):
            startup_env.validate_startup_env()

    def test_unknown_upload_target_fails(self):
        with patch.dict(os.environ, {**BASE_ENV, "INPUT_UPLOAD_TARGET": "s3"}, clear=True):
            with self.assertRaises(RuntimeError):
                startup_env.validate_startup_env()

    def test_url_shapes(self):
        errors = []
        startup_env._validate_redis_url("localhost:6379", "REDIS_URL", errors)
        startup_env._validate_http_url("ftp://x", "RUNNINGHUB_RUN_URL", errors)
        startup_env._validate_http_url("", "RUNNINGHUB_WEBHOOK_URL", errors, required=False)
        self.assertEqual(
            errors,
            [
                "REDIS_URL must start with redis:// or rediss://",
                "RUNNINGHUB_RUN_URL must start with http:// or https://",
            ],
        )

    def test_cors_wildcard_rejected(self):
        errors, warnings = [], []
        startup_env._validate_cors_allow_origins("https://ok.example,*", errors, warnings)
        self.assertEqual(len(errors), 1)
        startup_env._validate_cors_allow_origins("", errors, warnings)
        self.assertTrue(warnings)

    def test_bool_and_int_flags(self):
        errors = []
        with patch.dict(os.environ, {"FEATURE_PROCESSING_LIMIT": "maybe", "PROCESSING_JOB_LIMIT": "-1"}, clear=True):
            startup_env._validate_bool_flag_env("FEATURE_PROCESSING_LIMIT", errors)
            startup_env._validate_int_env("PROCESSING_JOB_LIMIT", errors)
        self.assertIn("FEATURE_PROCESSING_LIMIT must be one of", errors[0])
        self.assertEqual(errors[1], "PROCESSING_JOB_LIMIT must be >= 0")


class FeatureFlagsUnitTests(unittest.TestCase):
    def tearDown(self):
        import services.feature_flags as ff

        importlib.reload(ff)

    def test_processing_limit_flag(self):
        import services.feature_flags as ff

        with patch.dict(os.environ, {"FEATURE_PROCESSING_LIMIT": "on"}):
            ff = importlib.reload(ff)
            self.assertTrue(ff.is_processing_limit_enforced())
        with patch.dict(os.environ, {"FEATURE_PROCESSING_LIMIT": "0"}):
            ff = importlib.reload(ff)
            self.assertFalse(ff.is_processing_limit_enforced())

    def test_webhook_completion_defaults_on(self):
        import services.feature_flags as ff

        with patch.dict(os.environ, {}, clear=True):
            ff = importlib.reload(ff)
            self.assertTrue(ff.is_webhook_completion_enabled())


if __name__ == "__main__":
    unittest.main()
