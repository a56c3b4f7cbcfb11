# -*- coding: utf-8 -*-

import os
import json
import base64
import datetime
from google.cloud import storage

import config

# =========================================================
# LAZY CLIENT
# =========================================================
_client = None


def _get_client():
    global _client
    if _client is not None:
        return _client

    creds_b64 = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON")
    if creds_b64:
        creds = json.loads(base64.b64decode(creds_b64))
        _client = storage.Client.from_service_account_info(creds)
    else:
        _client = storage.Client()

    return _client


def input_blob_path(token: str, filename: str) -> str:
    name = os.path.basename(filename or "") or "input"
    return f"inputs/{token}/{name}"


# =========================================================
# UPLOAD INPUT IMAGE (STREAM SAFE)
# =========================================================
def upload_input_image(
    *,
    file_obj,
    destination_path: str,
    content_type: str | None = None,
) -> dict:
    bucket_name = config.GCS_BUCKET_NAME
    if not bucket_name:
        raise RuntimeError("GCS_BUCKET_NAME not set")

    client = _get_client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(destination_path)

    blob.upload_from_file(file_obj, content_type=content_type)

    return {
        "bucket": bucket_name,
        "blob": destination_path,
        "gcs_uri": f"gs://{bucket_name}/{destination_path}",
        "url": generate_signed_url(
            bucket_name=bucket_name,
            blob_path=destination_path,
            expires_days=config.GCS_SIGNED_URL_DAYS,
        ),
    }


# =========================================================
# SIGNED URL (handed to the workflow engine)
# =========================================================
def generate_signed_url(
    *,
    bucket_name: str,
    blob_path: str,
    expires_days: int = 1,
) -> str:
    """
    Generate an HTTPS URL the workflow engine can fetch without credentials.
    """
    client = _get_client()
    bucket = client.bucket(bucket_name)
    blob = bucket.blob(blob_path)

    return blob.generate_signed_url(
        version="v4",
        expiration=datetime.timedelta(days=expires_days),
        method="GET",
    )
