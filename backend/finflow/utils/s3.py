"""S3 persistence for the SQLite ledger file."""

import os
import tempfile
from typing import Optional

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

logger = Logger(service="finflow-storage")

# S3 client (reused across Lambda invocations)
_s3_client = None


def get_s3_client():
    """Get or create S3 client."""
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client('s3')
    return _s3_client


def get_bucket_name() -> Optional[str]:
    """Get the data bucket name from environment, or None when running locally."""
    return os.environ.get('DATA_BUCKET') or None


def is_enabled() -> bool:
    """Whether the ledger file is synced with S3."""
    return get_bucket_name() is not None


def download_file(key: str, local_path: str) -> bool:
    """Download the ledger file from S3.

    Args:
        key: S3 object key
        local_path: Local file path to save to

    Returns:
        True if successful, False if the object doesn't exist
    """
    try:
        get_s3_client().download_file(get_bucket_name(), key, local_path)
        logger.debug("Downloaded ledger from S3", extra={"key": key, "path": local_path})
        return True
    except ClientError as e:
        if e.response['Error']['Code'] in ('404', 'NoSuchKey'):
            return False
        raise


def upload_file(local_path: str, key: str) -> None:
    """Upload the ledger file to S3."""
    get_s3_client().upload_file(local_path, get_bucket_name(), key)
    logger.debug("Uploaded ledger to S3", extra={"key": key})


def file_exists(key: str) -> bool:
    """Check if the ledger object exists in S3."""
    try:
        get_s3_client().head_object(Bucket=get_bucket_name(), Key=key)
        return True
    except ClientError as e:
        if e.response['Error']['Code'] == '404':
            return False
        raise


def get_temp_path(filename: str) -> str:
    """Get a path in the writable temp directory (/tmp on Lambda)."""
    return os.path.join(tempfile.gettempdir(), filename)
