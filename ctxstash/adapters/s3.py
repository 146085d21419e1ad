"""AWS S3 storage adapter."""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional
from urllib.parse import urlparse

from .base import BaseStorageAdapter, StorageReadParams, StorageWriteParams, StorageWriteResult

logger = logging.getLogger(__name__)


@dataclass
class S3StorageOptions:
    """Configuration options for S3 storage adapter."""

    bucket: str
    prefix: Optional[str] = None
    session_id: Optional[str] = None
    region: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    endpoint_url: Optional[str] = None  # For S3-compatible services


class S3StorageAdapter(BaseStorageAdapter):
    """
    AWS S3 storage adapter.

    Keys passed to ``write``/``read_text`` are expected to come from
    ``resolve_key`` already and are used verbatim as object keys.
    """

    def __init__(self, options: S3StorageOptions):
        try:
            import boto3
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install ctx-stash[s3]"
            )

        self.bucket = options.bucket
        self.prefix = options.prefix or ""
        self.session_id = options.session_id

        client_kwargs = {"service_name": "s3"}
        if options.region:
            client_kwargs["region_name"] = options.region
        if options.endpoint_url:
            client_kwargs["endpoint_url"] = options.endpoint_url
        if options.aws_access_key_id and options.aws_secret_access_key:
            client_kwargs["aws_access_key_id"] = options.aws_access_key_id
            client_kwargs["aws_secret_access_key"] = options.aws_secret_access_key
            if options.aws_session_token:
                client_kwargs["aws_session_token"] = options.aws_session_token

        self.s3_client = boto3.client(**client_kwargs)

        try:
            self.s3_client.head_bucket(Bucket=self.bucket)
        except Exception as e:
            raise ValueError(f"Cannot access S3 bucket '{self.bucket}': {e}")

    def write(self, params: StorageWriteParams) -> StorageWriteResult:
        """Upload content to S3."""
        body = params.body.encode("utf-8") if isinstance(params.body, str) else params.body

        put_kwargs = {
            "Bucket": self.bucket,
            "Key": params.key,
            "Body": body,
        }
        if params.content_type:
            put_kwargs["ContentType"] = params.content_type

        try:
            self.s3_client.put_object(**put_kwargs)
        except Exception as e:
            raise IOError(f"Failed to write to S3: {e}")

        logger.debug("Uploaded s3://%s/%s", self.bucket, params.key)
        return StorageWriteResult(key=params.key, url=f"s3://{self.bucket}/{params.key}")

    def read_text(self, params: StorageReadParams) -> str:
        """Read text content from S3."""
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=params.key)
            return response["Body"].read().decode("utf-8")
        except self.s3_client.exceptions.NoSuchKey:
            raise FileNotFoundError(f"S3 key not found: {params.key}")
        except Exception as e:
            raise IOError(f"Failed to read from S3: {e}")

    def open_read_stream(self, params: StorageReadParams) -> BinaryIO:
        """Return the streaming body of an S3 object."""
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=params.key)
            return response["Body"]
        except self.s3_client.exceptions.NoSuchKey:
            raise FileNotFoundError(f"S3 key not found: {params.key}")
        except Exception as e:
            raise IOError(f"Failed to open S3 stream: {e}")

    def __str__(self) -> str:
        if self.prefix:
            return f"s3://{self.bucket}/{self.prefix.strip('/')}"
        return f"s3://{self.bucket}"


def s3_uri_to_options(uri: str, session_id: Optional[str] = None) -> S3StorageOptions:
    """
    Parse an S3 URI into storage options.

    Examples:
        >>> s3_uri_to_options("s3://my-bucket")
        S3StorageOptions(bucket='my-bucket', prefix=None, ...)

        >>> s3_uri_to_options("s3://my-bucket/path/to/prefix").prefix
        'path/to/prefix'
    """
    parsed = urlparse(uri)

    if parsed.scheme != "s3":
        raise ValueError(f"Invalid S3 URI scheme: {uri}")

    bucket = parsed.netloc
    if not bucket:
        raise ValueError(f"No bucket specified in S3 URI: {uri}")

    prefix = parsed.path.lstrip("/") or None

    return S3StorageOptions(bucket=bucket, prefix=prefix, session_id=session_id)
