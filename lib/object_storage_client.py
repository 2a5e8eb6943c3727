# =============================================================================
# lib/object_storage_client.py - S3-Compatible Client Factory
# =============================================================================
# Builds the boto3 S3 client used for image objects. Works against any
# S3-compatible endpoint (Supabase Storage, Cloudflare R2, MinIO).
# =============================================================================

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Error codes S3 uses for a missing key on HEAD/GET
MISSING_OBJECT_CODES = {"404", "NoSuchKey", "NotFound"}


def create_object_storage_client(
    endpoint_url: str | None,
    access_key_id: str | None,
    secret_access_key: str | None,
    region: str = "auto",
):
    """
    Create an S3 client.

    Path-style addressing keeps full object URLs in the
    `<endpoint>/<bucket>/<key>` form that object paths are parsed from.
    """
    client = boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        region_name=region,
    )
    logger.info(f"Object storage client initialized (endpoint: {endpoint_url or 'default'})")
    return client


def is_missing_object_error(error: ClientError) -> bool:
    """Check if a ClientError means the object does not exist."""
    return error.response.get("Error", {}).get("Code") in MISSING_OBJECT_CODES
