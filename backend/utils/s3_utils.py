import boto3
from botocore.exceptions import ClientError, EndpointConnectionError
import os
import logging
import time
import uuid

logger = logging.getLogger(__name__)

S3_CLIENT = None
AWS_REGION = os.getenv('AWS_DEFAULT_REGION', 'ap-south-1')
S3_BUCKET_NAME = os.getenv('S3_BUCKET_NAME', 'temple-files')
# Generated files (receipts) are only archived when a bucket is configured
S3_ENABLED = bool(os.getenv('S3_BUCKET_NAME'))

ALLOWED_FOLDERS = ("study-materials", "covers", "bill-attachments", "receipts")


def get_s3_client():
    """Initializes and returns a reusable S3 client."""
    global S3_CLIENT
    if S3_CLIENT is None:
        S3_CLIENT = boto3.client('s3', region_name=AWS_REGION)
        logger.info(f"S3 client initialized for region: {AWS_REGION}")
    return S3_CLIENT


def build_object_key(tenant_id: str, folder: str, object_id: int, filename: str) -> str:
    if folder not in ALLOWED_FOLDERS:
        raise ValueError(f"folder must be one of {list(ALLOWED_FOLDERS)}")
    file_extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else 'bin'
    return f"{folder}/{tenant_id}/{object_id}_{uuid.uuid4().hex}.{file_extension}"


def generate_presigned_upload_url(tenant_id: str, folder: str, object_id: int, filename: str, expires_in: int = 3600) -> dict:
    """
    Generates a pre-signed URL the browser can PUT a file to directly.

    Args:
        tenant_id: Temple the file belongs to; used as a key prefix.
        folder: One of ALLOWED_FOLDERS.
        object_id: Owning record id (study material, bill, ...).
        filename: Original file name, only its extension is kept.
        expires_in: Seconds the URL stays valid.

    Returns:
        {"upload_url": ..., "s3_path": "s3://bucket/key"}; persist s3_path on the owning record.
    """
    s3_key = build_object_key(tenant_id, folder, object_id, filename)
    try:
        url = get_s3_client().generate_presigned_url(
            'put_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        logger.exception(f"Failed to generate presigned upload URL for key: {s3_key}")
        raise RuntimeError(f"Could not generate S3 upload URL: {e}")

    logger.info(f"Generated presigned upload URL for key: {s3_key}")
    return {"upload_url": url, "s3_path": f"s3://{S3_BUCKET_NAME}/{s3_key}"}


def generate_presigned_download_url(s3_path: str, expires_in: int = 3600) -> str:
    """Pre-signed GET URL for an `s3://bucket/key` path stored in the database."""
    prefix = f's3://{S3_BUCKET_NAME}/'
    if not s3_path or not s3_path.startswith(prefix):
        raise ValueError(f"Invalid S3 path format. Must start with '{prefix}'")

    s3_key = s3_path[len(prefix):]
    try:
        url = get_s3_client().generate_presigned_url(
            'get_object',
            Params={'Bucket': S3_BUCKET_NAME, 'Key': s3_key},
            ExpiresIn=expires_in
        )
    except ClientError as e:
        logger.exception(f"Failed to generate presigned download URL for key: {s3_key}")
        if e.response['Error']['Code'] == 'NoSuchKey':
            raise FileNotFoundError(f"File not found in S3 at path: {s3_path}")
        raise RuntimeError(f"Could not generate S3 download URL: {e}")

    logger.info(f"Generated presigned download URL for key: {s3_key}")
    return url


def upload_bytes_to_s3(content: bytes, tenant_id: str, folder: str, object_id: int, filename: str,
                       content_type: str = 'application/pdf', max_retries: int = 3, backoff_base: float = 0.5) -> str:
    """Upload generated content (e.g. a receipt PDF) and return its s3:// path.

    Transient errors are retried with exponential backoff; 4xx client errors fail fast.
    """
    s3_key = build_object_key(tenant_id, folder, object_id, filename)
    s3_client = get_s3_client()

    last_exc = None
    for attempt in range(1, max_retries + 1):
        try:
            s3_client.put_object(Bucket=S3_BUCKET_NAME, Key=s3_key, Body=content, ContentType=content_type)
            logger.info(f"Uploaded {len(content)} bytes to s3://{S3_BUCKET_NAME}/{s3_key} on attempt {attempt}")
            return f"s3://{S3_BUCKET_NAME}/{s3_key}"
        except (EndpointConnectionError, ClientError) as e:
            last_exc = e
            code = e.response.get('Error', {}).get('Code') if isinstance(e, ClientError) else None
            logger.warning(f"S3 upload attempt {attempt} failed for {s3_key}, code={code}: {e}")
            if code and (str(code).startswith('4') or code in ('AccessDenied', 'NoSuchBucket')):
                break
            if attempt < max_retries:
                time.sleep(backoff_base * (2 ** (attempt - 1)))

    raise RuntimeError(f"S3 upload failed for {s3_key}: {last_exc}")
