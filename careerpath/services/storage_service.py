import logging
import time
import uuid
from contextlib import contextmanager
from pathlib import PurePosixPath, PureWindowsPath
from typing import Iterator, Optional, Protocol
from urllib.parse import quote

import boto3
from firebase_admin import storage

from careerpath.errors import UpstreamError
from careerpath.models import UploadedResume

logger = logging.getLogger(__name__)


def make_storage_key(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Build the object key for an upload: resumes/<epoch millis>-<filename>.
    Any directory part the client sent with the filename is dropped.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    name = PurePosixPath(PureWindowsPath(filename).name).name or "resume"
    return f"resumes/{now_ms}-{name}"


class BlobStore(Protocol):
    def upload_resume(self, file_bytes: bytes, key: str, content_type: str) -> UploadedResume: ...

    def delete_resume(self, key: str) -> None: ...


class FirebaseStorageService:
    def __init__(self, bucket):
        self.bucket = bucket

    @classmethod
    def from_app(cls, app, bucket_name: Optional[str] = None) -> "FirebaseStorageService":
        return cls(storage.bucket(bucket_name, app=app))

    def download_url(self, key: str, token: str) -> str:
        return (
            f"https://firebasestorage.googleapis.com/v0/b/{self.bucket.name}/o/"
            f"{quote(key, safe='')}?alt=media&token={token}"
        )

    def upload_resume(self, file_bytes: bytes, key: str, content_type: str) -> UploadedResume:
        """
        Upload resume bytes to Firebase Storage.
        Returns: the stored resume with its public download URL
        """
        try:
            token = str(uuid.uuid4())
            blob = self.bucket.blob(key)
            blob.metadata = {"firebaseStorageDownloadTokens": token}
            blob.upload_from_string(file_bytes, content_type=content_type)
        except Exception as e:
            raise UpstreamError(f"Firebase upload failed: {str(e)}", e)

        return UploadedResume(
            storage_key=key,
            content_type=content_type,
            download_url=self.download_url(key, token),
        )

    def delete_resume(self, key: str) -> None:
        try:
            self.bucket.blob(key).delete()
        except Exception as e:
            raise UpstreamError(f"Firebase delete failed: {str(e)}", e)


class S3StorageService:
    def __init__(self, s3_client, bucket: str, url_expires: int = 3600):
        self.s3_client = s3_client
        self.bucket = bucket
        self.url_expires = url_expires

    @classmethod
    def from_settings(cls, settings) -> "S3StorageService":
        client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        return cls(client, settings.s3_bucket_name, settings.s3_url_expires)

    def upload_resume(self, file_bytes: bytes, key: str, content_type: str) -> UploadedResume:
        """
        Upload resume to S3.
        Returns: the stored resume with a presigned download URL
        """
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=file_bytes,
                ContentType=content_type
            )
            url = self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=self.url_expires
            )
        except Exception as e:
            raise UpstreamError(f"S3 upload failed: {str(e)}", e)

        return UploadedResume(storage_key=key, content_type=content_type, download_url=url)

    def delete_resume(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket, Key=key)
        except Exception as e:
            raise UpstreamError(f"S3 delete failed: {str(e)}", e)


@contextmanager
def staged_upload(store: BlobStore, file_bytes: bytes, key: str, content_type: str) -> Iterator[UploadedResume]:
    """
    Write a resume and hand it to the caller. If the body of the `with`
    block raises, the blob is deleted again (best effort) before the
    original error propagates.
    """
    resume = store.upload_resume(file_bytes, key, content_type)
    logger.info("Resume stored", extra={"storage_key": key, "content_type": content_type})
    try:
        yield resume
    except Exception:
        try:
            store.delete_resume(key)
            logger.info("Removed resume after failed request", extra={"storage_key": key})
        except Exception:
            logger.exception("Could not remove orphaned resume", extra={"storage_key": key})
        raise
