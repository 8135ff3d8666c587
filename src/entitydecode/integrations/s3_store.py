"""
S3-backed byte store.

Reads byte ranges of a raw message kept in Amazon S3 (for example the
objects SES writes) with ranged GetObject requests, so an entity's body
can be extracted without downloading the whole message.
"""

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..services.store import StoreIOError

logger = logging.getLogger(__name__)

# A range read is one short request; fail fast and let the caller decide
s3_config = Config(
    retries={'max_attempts': 1, 'mode': 'standard'},
    connect_timeout=10,
    read_timeout=60,
)


class S3RangeStore:
    """
    Backing store over one S3 object.

    Args:
        bucket: S3 bucket name
        key: S3 object key of the raw message
        client: boto3 S3 client; one is created with s3_config when omitted

    Example:
        >>> store = S3RangeStore("my-ses-bucket", "emails/message-id.eml")
        >>> store.read_range(120, 480)
        b'...'
    """

    def __init__(self, bucket: str, key: str, client: Optional[Any] = None):
        if not bucket:
            raise ValueError("S3 bucket name cannot be empty")
        if not key:
            raise ValueError("S3 object key cannot be empty")

        self.bucket = bucket
        self.key = key
        self.client = client or boto3.client('s3', config=s3_config)

    def read_range(self, start: int, end: int) -> bytes:
        """
        Fetch bytes [start, end) of the object.

        Returns:
            bytes: Empty when start >= end or the range lies past the object

        Raises:
            StoreIOError: If S3 cannot be read
        """
        if start is None or end is None or start < 0 or start >= end:
            return b''

        try:
            response = self.client.get_object(
                Bucket=self.bucket,
                Key=self.key,
                Range=f"bytes={start}-{end - 1}"
            )
            return response['Body'].read()
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code == 'InvalidRange':
                logger.debug(f"Range {start}-{end} outside s3://{self.bucket}/{self.key}")
                return b''
            logger.error(f"Failed to read range {start}-{end} from s3://{self.bucket}/{self.key}: {e}")
            raise StoreIOError(f"Failed to read s3://{self.bucket}/{self.key}: {error_code or e}") from e
        except BotoCoreError as e:
            logger.error(f"Failed to read range {start}-{end} from s3://{self.bucket}/{self.key}: {e}")
            raise StoreIOError(f"Failed to read s3://{self.bucket}/{self.key}: {e}") from e
