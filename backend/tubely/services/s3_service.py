"""
AWS S3 service for video storage and retrieval
"""

import os
from datetime import timedelta
from typing import Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from tubely.config.base import Settings
from tubely.errors import PublishFailure, SigningFailure
from tubely.models.upload import AccessDescriptor, StorageObject
from tubely.services.publisher import ObjectPublisher
from tubely.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PRESIGN_TTL = timedelta(minutes=30)


def create_s3_client(settings: Settings):
    """Build a boto3 S3 client from settings"""
    kwargs = {
        "region_name": settings.AWS_REGION,
        "config": Config(signature_version="s3v4"),
    }
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY
    else:
        logger.warning("S3 credentials not configured - falling back to the default credential chain")
    if settings.AWS_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.AWS_ENDPOINT_URL
    return boto3.client("s3", **kwargs)


class S3Service(ObjectPublisher):
    """Publishes to a private bucket and signs GET URLs at read time"""

    def __init__(self, client, bucket: str, presign_ttl: timedelta = DEFAULT_PRESIGN_TTL):
        self.client = client
        self.bucket = bucket
        self.presign_ttl = presign_ttl
        logger.info(f"S3 service initialized for bucket: {self.bucket}")

    @classmethod
    def from_settings(cls, settings: Settings, client=None) -> "S3Service":
        return cls(
            client or create_s3_client(settings),
            settings.S3_BUCKET,
            presign_ttl=timedelta(minutes=settings.PRESIGN_EXPIRE_MINUTES),
        )

    def publish(self, local_path: str, key: str, content_type: str) -> StorageObject:
        """Stream a local file to S3"""
        try:
            size = os.path.getsize(local_path)
            with open(local_path, "rb") as body:
                self.client.upload_fileobj(
                    body,
                    self.bucket,
                    key,
                    ExtraArgs={"ContentType": content_type},
                )
        except (BotoCoreError, ClientError, S3UploadFailedError, OSError) as e:
            logger.error(f"Failed to upload {key} to S3: {str(e)}")
            raise PublishFailure("Unable to upload video to S3", cause=e, details={"key": key})

        logger.info(f"Successfully uploaded video to S3: {key} ({size/(1024*1024):.1f}MB)")
        return StorageObject(key=key, content_type=content_type, size=size, bucket=self.bucket)

    def describe(self, key: str) -> AccessDescriptor:
        return AccessDescriptor.composite(self.bucket, key)

    def sign(self, bucket: str, key: str, ttl: Optional[timedelta] = None) -> str:
        """Generate a presigned GET URL; computed locally, never touches the bucket"""
        ttl = ttl or self.presign_ttl
        try:
            url = self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': bucket, 'Key': key},
                ExpiresIn=int(ttl.total_seconds())
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate presigned URL for {key}: {str(e)}")
            raise SigningFailure("Unable to sign video URL", cause=e, details={"key": key})

        logger.debug(f"Generated presigned URL for {key} (expires in {int(ttl.total_seconds())}s)")
        return url

    def resolve(self, descriptor: AccessDescriptor) -> str:
        if descriptor.is_composite:
            return self.sign(descriptor.bucket, descriptor.key)
        return descriptor.url

    def discard(self, key: str) -> bool:
        """Delete file from S3"""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
            logger.info(f"Successfully deleted file from S3: {key}")
            return True
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False
