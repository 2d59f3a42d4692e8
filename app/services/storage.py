"""S3 object storage service"""
import logging
from functools import lru_cache
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class S3Storage:
    """Uploads objects to the configured bucket"""

    def __init__(self, bucket: str, region: str, endpoint_url: Optional[str] = None, s3_client=None):
        if not bucket:
            raise ValueError("S3_BUCKET is not set. Set S3_BUCKET environment variable.")

        self.bucket = bucket
        self.s3_client = s3_client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
        )
        logger.info(f"S3Storage initialized for bucket: {self.bucket}")

    def put_object(self, object_key: str, body: BinaryIO, content_type: str) -> bool:
        """Upload a file object under object_key

        Returns:
            True if upload succeeded, False otherwise
        """
        if not object_key:
            logger.error("object_key cannot be empty")
            return False

        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=body,
                ContentType=content_type,
            )
            logger.info(f"Uploaded s3://{self.bucket}/{object_key}")
            return True
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 PutObject error for {object_key}: {e}", exc_info=True)
            return False


def public_url(distribution: str, object_key: str) -> str:
    return f"http://{distribution}/{object_key}"


@lru_cache(maxsize=None)
def build_storage(bucket: str, region: str, endpoint_url: Optional[str] = None) -> S3Storage:
    """Get or create the storage service for a bucket (lazy initialization)"""
    return S3Storage(bucket=bucket, region=region, endpoint_url=endpoint_url)
