import boto3
from botocore.exceptions import BotoCoreError, ClientError
from groupchat.config import settings
from groupchat.core.ids import new_id
from typing import Tuple
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.region = settings.aws_region
        self.expires_in = settings.upload_url_expiry_seconds

    def build_key(self, file_name: str) -> str:
        """uploads/<uuid>.<ext>; the client's file name is never used as the key."""
        ext = file_name.rsplit(".", 1)[-1] if "." in file_name else ""
        prefix = settings.upload_key_prefix.strip("/")
        key = f"{prefix}/{new_id()}"
        return f"{key}.{ext}" if ext else key

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    def generate_upload_url(self, file_name: str, content_type: str) -> Tuple[str, str]:
        """Return (pre-signed PUT url, public file url) for a new object."""
        key = self.build_key(file_name)
        try:
            signed_url = self.s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                    'ACL': 'public-read',
                },
                ExpiresIn=self.expires_in
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to generate signed URL: {str(e)}")
            raise
        return signed_url, self.public_url(key)
