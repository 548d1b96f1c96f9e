"""Cloudflare R2 object storage helpers (S3 API via boto3)"""

import logging

import boto3
from botocore.config import Config

from .config import R2_ACCESS_KEY_ID, R2_ACCOUNT_ID, R2_BUCKET_NAME, R2_SECRET_ACCESS_KEY

logger = logging.getLogger(__name__)

__all__ = [
    "get_r2_client",
    "upload_object",
    "download_object",
    "delete_object",
    "generate_presigned_url",
    "R2_BUCKET_NAME",
]

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600


def get_r2_client():
    """Create and return an R2 client."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
    )


def upload_object(key: str, body: bytes, content_type: str) -> None:
    logger.info(f"📤 Uploading {len(body)} bytes to R2: {key}")
    get_r2_client().put_object(Bucket=R2_BUCKET_NAME, Key=key, Body=body, ContentType=content_type)
    logger.info(f"✅ Uploaded to R2: {key}")


def download_object(key: str) -> bytes:
    response = get_r2_client().get_object(Bucket=R2_BUCKET_NAME, Key=key)
    return response["Body"].read()


def delete_object(key: str) -> None:
    get_r2_client().delete_object(Bucket=R2_BUCKET_NAME, Key=key)
    logger.info(f"🗑️ Deleted from R2: {key}")


def generate_presigned_url(
    key: str, expiration: int = PRESIGNED_URL_EXPIRATION, download_name: str = None
) -> str:
    """Generate a presigned URL for accessing a private object in R2."""
    params = {"Bucket": R2_BUCKET_NAME, "Key": key}
    if download_name:
        params["ResponseContentDisposition"] = f'attachment; filename="{download_name}"'
    else:
        params["ResponseContentDisposition"] = "inline"

    try:
        url = get_r2_client().generate_presigned_url(
            "get_object",
            Params=params,
            ExpiresIn=expiration,
        )
        logger.info(f"✅ Generated presigned URL for key: {key}")
        return url
    except Exception as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        raise
