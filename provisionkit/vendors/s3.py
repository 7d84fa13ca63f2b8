"""S3 bucket operations through boto3."""

from __future__ import annotations

import logging
from typing import Optional

from botocore.exceptions import ClientError

from ..errors import VendorCommandError
from .aws import create_boto_client

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = ("404", "NoSuchBucket", "NotFound")


class S3Buckets:
    """Creates and deletes S3 buckets."""

    def __init__(self, region: str = "us-east-1", profile: Optional[str] = None):
        self.region = region
        self.profile = profile
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = create_boto_client("s3", region_name=self.region, profile_name=self.profile)
        return self._client

    def public_url(self, bucket: str) -> str:
        return f"https://{bucket}.s3.{self.region}.amazonaws.com"

    def ensure_bucket(self, bucket: str) -> str:
        """Create a bucket unless it already exists. Returns the bucket name.

        Raises:
            VendorCommandError: If the bucket cannot be checked or created
        """
        try:
            self.client.head_bucket(Bucket=bucket)
            logger.info(f"S3 bucket {bucket} already exists, reusing it")
            return bucket
        except ClientError as e:
            if _error_code(e) not in NOT_FOUND_CODES:
                raise _wrap(e, f"check S3 bucket {bucket}") from e

        params = {"Bucket": bucket}
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            self.client.create_bucket(**params)
        except ClientError as e:
            if _error_code(e) != "BucketAlreadyOwnedByYou":
                raise _wrap(e, f"create S3 bucket {bucket}") from e
        return bucket

    def delete_bucket(self, bucket: str) -> bool:
        """Empty and delete a bucket.

        Returns:
            True if deleted, False if it did not exist
        """
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=bucket):
                objects = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                if objects:
                    self.client.delete_objects(Bucket=bucket, Delete={"Objects": objects, "Quiet": True})
            self.client.delete_bucket(Bucket=bucket)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return False
            raise _wrap(e, f"delete S3 bucket {bucket}") from e
        return True


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "Unknown")


def _wrap(error: ClientError, description: str) -> VendorCommandError:
    message = error.response.get("Error", {}).get("Message", str(error))
    return VendorCommandError(
        f"Failed to {description}: {_error_code(error)}",
        command="s3",
        stderr=message,
    )
