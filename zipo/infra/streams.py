"""Redis stream fan-out for committed notifications."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from redis.exceptions import RedisError

from zipo.infra.redis import redis_client
from zipo.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

STREAM_NOTIFICATIONS = "zipo:notifications"
_STREAM_MAXLEN = 10_000


def _now_ts() -> str:
	return datetime.now(timezone.utc).isoformat()


async def publish_notifications(notifications: Iterable[Any]) -> int:
	"""Publish notification records after commit. Returns the number published."""
	published = 0
	try:
		for item in notifications:
			payload: dict[str, Any] = {
				"event": "notification.created",
				"id": item.id,
				"owner": item.owner,
				"initiator": item.initiator,
				"type": item.type.value,
				"resource_type": item.resource_type.value,
				"resource_id": item.resource_id,
				"ts": _now_ts(),
			}
			await redis_client.xadd_json(STREAM_NOTIFICATIONS, payload, maxlen=_STREAM_MAXLEN)
			published += 1
	except (RedisError, OSError) as exc:
		obs_metrics.notification_emit_failure(STREAM_NOTIFICATIONS)
		logger.warning("notification_stream_publish_failed", extra={"error": str(exc), "published": published})
	return published
