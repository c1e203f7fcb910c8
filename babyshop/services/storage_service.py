"""S3-compatible blob store for variation media."""
import boto3
from botocore.config import Config as BotoConfig
from flask import current_app

# delete_objects accepts at most this many keys per call
DELETE_BATCH_SIZE = 1000


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def upload(storage_key, data, content_type="image/jpeg"):
    """Put a media object. Variation media is served publicly from the CDN."""
    _get_client().put_object(
        Bucket=current_app.config["S3_BUCKET_NAME"],
        Key=storage_key,
        Body=data,
        ContentType=content_type,
        ACL="public-read",
        # Keys are never reused
        CacheControl="public, max-age=31536000, immutable",
    )


def get_public_url(storage_key):
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    return f"{base}/{storage_key}"


def delete_many(storage_keys):
    """Delete objects in batches. Returns the keys S3 reported as deleted.

    Raises RuntimeError when S3 reports per-key failures.
    """
    keys = list(storage_keys)
    if not keys:
        return []
    client = _get_client()
    bucket = current_app.config["S3_BUCKET_NAME"]

    deleted, failed = [], []
    for start in range(0, len(keys), DELETE_BATCH_SIZE):
        batch = keys[start:start + DELETE_BATCH_SIZE]
        response = client.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": k} for k in batch], "Quiet": False},
        )
        deleted.extend(item["Key"] for item in response.get("Deleted", []))
        failed.extend(
            f"{item['Key']} ({item.get('Code', 'unknown')})"
            for item in response.get("Errors", [])
        )
    if failed:
        raise RuntimeError(f"Failed to delete media objects: {', '.join(failed)}")
    return deleted
