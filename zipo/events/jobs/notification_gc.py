"""Background job for pruning expired notifications."""

from __future__ import annotations

from datetime import datetime, timezone

from zipo.events.domain.notifications_service import NotificationService
from zipo.obs import metrics as obs_metrics

_JOB_NAME = "notifications-gc"


class NotificationGarbageCollector:
	"""Removes notifications past their retention window."""

	def __init__(self, *, service: NotificationService | None = None) -> None:
		self.service = service or NotificationService()

	async def run_once(self) -> int:
		started = datetime.now(timezone.utc)
		try:
			removed = await self.service.prune_expired(now=started)
			obs_metrics.BACKGROUND_RUNS.labels(name=_JOB_NAME, result="success").inc()
			return removed
		except Exception:
			obs_metrics.BACKGROUND_RUNS.labels(name=_JOB_NAME, result="error").inc()
			raise
		finally:
			duration = (datetime.now(timezone.utc) - started).total_seconds()
			obs_metrics.BACKGROUND_DURATION.labels(name=_JOB_NAME).observe(duration)
