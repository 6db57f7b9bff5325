import json
import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from formcreator.config import settings

logger = logging.getLogger(__name__)

_MISSING_BUCKET_CODES = ('404', 'NoSuchBucket')


def _s3_client():
    return boto3.client(
        's3',
        endpoint_url=settings.minio_endpoint,
        aws_access_key_id=settings.minio_access_key,
        aws_secret_access_key=settings.minio_secret_key,
        config=Config(signature_version='s3v4', s3={'addressing_style': 'path'}),
        region_name='us-east-1',
    )


def _public_read_policy(bucket: str) -> str:
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"AWS": ["*"]},
            "Action": ["s3:GetObject"],
            "Resource": [f"arn:aws:s3:::{bucket}/*"],
        }],
    })


class HeroImageStorage:
    """Form banner images in MinIO, served to respondents by public URL.

    The bucket is checked, and created with an anonymous-read policy, on the
    first upload rather than at construction.
    """

    _instance = None

    def __init__(self, bucket: Optional[str] = None, public_url: Optional[str] = None):
        self.bucket = bucket or settings.minio_bucket
        self.public_url = (public_url or settings.minio_public_url).rstrip('/')
        self.client = _s3_client()
        self._bucket_ready = False

    @classmethod
    def get_instance(cls) -> 'HeroImageStorage':
        if cls._instance is None:
            cls._instance = HeroImageStorage()
        return cls._instance

    def ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code', '')
            if code not in _MISSING_BUCKET_CODES:
                raise
            self.client.create_bucket(Bucket=self.bucket)
            self.client.put_bucket_policy(Bucket=self.bucket, Policy=_public_read_policy(self.bucket))
            logger.info(f"Created public MinIO bucket {self.bucket}")
        self._bucket_ready = True

    def build_key(self, form_id: int, content_type: str) -> str:
        extension = mimetypes.guess_extension(content_type) or '.bin'
        return f"forms/{form_id}/{uuid.uuid4().hex}{extension}"

    def public_url_for(self, key: str) -> str:
        return f"{self.public_url}/{self.bucket}/{key}"

    def key_from_url(self, url: Optional[str]) -> Optional[str]:
        """Object key behind one of our public URLs; None for foreign URLs."""
        prefix = f"{self.public_url}/{self.bucket}/"
        if not url or not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def upload_image(self, data: bytes, form_id: int, content_type: str) -> str:
        """
        Store a banner image and return its public URL.

        Args:
            data: Raw image bytes
            form_id: Owning form, used as the key prefix
            content_type: MIME type reported by the uploader

        Returns:
            URL to save as the form's heroImageUrl

        Raises:
            ClientError: when MinIO rejects the bucket check or the write
        """
        self.ensure_bucket()
        key = self.build_key(form_id, content_type)
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        logger.info(f"Stored hero image for form {form_id}: {key} ({len(data)} bytes)")
        return self.public_url_for(key)

    def delete_image(self, url: Optional[str]) -> bool:
        """Remove a replaced banner; failures are logged, not raised."""
        key = self.key_from_url(url)
        if key is None:
            return False
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            logger.warning(f"Could not delete old hero image {key}: {e}")
            return False
        logger.info(f"Deleted hero image {key}")
        return True
