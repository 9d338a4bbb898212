"""Background job removing abandoned registration sessions."""

from __future__ import annotations

from datetime import datetime, timezone

from zipo.identity.service import IdentityService
from zipo.obs import metrics as obs_metrics

_JOB_NAME = "pending-registrations-gc"


class PendingRegistrationCollector:
	def __init__(self, *, service: IdentityService | None = None) -> None:
		self.service = service or IdentityService()

	async def run_once(self) -> int:
		started = datetime.now(timezone.utc)
		try:
			removed = await self.service.prune_pending_registrations(now=started)
			obs_metrics.BACKGROUND_RUNS.labels(name=_JOB_NAME, result="success").inc()
			return removed
		except Exception:
			obs_metrics.BACKGROUND_RUNS.labels(name=_JOB_NAME, result="error").inc()
			raise
		finally:
			duration = (datetime.now(timezone.utc) - started).total_seconds()
			obs_metrics.BACKGROUND_DURATION.labels(name=_JOB_NAME).observe(duration)
