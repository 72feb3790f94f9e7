"""
Thin gateway over an S3-compatible bucket (AWS S3, Cloudflare R2, MinIO...).

One blocking call per operation. Every botocore failure is re-raised as
StorageError so callers deal with a single exception type.
"""

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from save_api.config import StorageSettings
from save_api.errors import StorageError

logger = logging.getLogger(__name__)

MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def build_client(settings: StorageSettings):
    """Create the boto3 S3 client described by the storage settings."""
    s3_options = {"addressing_style": "path"} if settings.force_path_style else {}
    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint,
        region_name=settings.region,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
        config=Config(signature_version="s3v4", s3=s3_options),
    )


def _error_code(error: ClientError):
    return str(error.response.get("Error", {}).get("Code", ""))


class ObjectStore:
    def __init__(self, client, bucket):
        self.client = client
        self.bucket = bucket

    def put(self, key, body, content_type):
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to write {key}: {e}") from e
        logger.debug(f"Wrote {key} ({content_type})")

    def copy(self, source_key, dest_key):
        """
        Server-side copy inside the bucket.

        Returns:
            bool: False if source_key does not exist, True once the copy is written.
        """
        try:
            self.client.copy_object(
                Bucket=self.bucket,
                Key=dest_key,
                CopySource={"Bucket": self.bucket, "Key": source_key},
            )
        except ClientError as e:
            if _error_code(e) in MISSING_KEY_CODES:
                return False
            raise StorageError(f"Failed to copy {source_key} to {dest_key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to copy {source_key} to {dest_key}: {e}") from e
        return True

    def list_keys(self, prefix):
        keys = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to list {prefix}: {e}") from e
        return keys

    def delete(self, key):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e
