"""S3 presigned upload URLs."""

from __future__ import annotations

import logging
from functools import lru_cache

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from zipo.exceptions import UpstreamError
from zipo.settings import settings

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _client():
	return boto3.client("s3", region_name=settings.s3_region)


def sign_upload_url(key: str, content_type: str, *, expires_in: int | None = None, client=None) -> str:
	"""Return a URL the browser can PUT the object to."""
	s3 = client or _client()
	try:
		return s3.generate_presigned_url(
			"put_object",
			Params={"Bucket": settings.s3_upload_bucket, "Key": key, "ContentType": content_type},
			ExpiresIn=expires_in or settings.s3_upload_expires_seconds,
		)
	except (BotoCoreError, ClientError) as exc:
		logger.error("s3_presign_failed", extra={"key": key, "error": str(exc)})
		raise UpstreamError("upload_url_unavailable") from exc
