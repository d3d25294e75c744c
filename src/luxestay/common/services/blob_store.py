import logging
import os
from typing import Optional
from uuid import uuid4

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from luxestay.common.utils.constants import AWS_REGION
from luxestay.common.utils.custom_exceptions import UploadError

logger = logging.getLogger(__name__)

PHOTO_BUCKET = os.environ.get("PHOTO_BUCKET")

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class BlobStore:
    """Stores room photos in S3 and hands back their public URL."""

    def __init__(self, bucket: Optional[str] = None, client=None, region: str = AWS_REGION):
        self.bucket = bucket or PHOTO_BUCKET
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def store(self, data: bytes, content_type: str = "image/jpeg") -> str:
        if not self.bucket:
            raise UploadError("Unable to upload image: PHOTO_BUCKET is not set")
        if not data:
            raise UploadError("Unable to upload image: photo is empty")

        extension = EXTENSIONS.get(content_type, "bin")
        key = f"rooms/{uuid4().hex}.{extension}"
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as err:
            logger.error(f"Error uploading photo {key} to {self.bucket}: {err}")
            raise UploadError(f"Unable to upload image: {err}") from err

        logger.info("Stored photo %s in bucket %s", key, self.bucket)
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def delete(self, url: str):
        """Remove a photo previously returned by ``store``."""
        key = url.split(".amazonaws.com/", 1)[-1]
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as err:
            logger.error(f"Error deleting photo {key} from {self.bucket}: {err}")
            raise UploadError(f"Unable to delete image: {err}") from err

        logger.info("Deleted photo %s from bucket %s", key, self.bucket)
