"""All-or-nothing persistence of an event mutation and its notifications.

A write unit is one of {create, update, delete} on an event, the notifications
derived from it, the matching `users.new_notifications` increments and an
optional flip of a prior invite notification's `action_taken`. Counter
increments are computed from the notification list, so the two cannot diverge.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from zipo.events.domain import models, repo as repo_module
from zipo.exceptions import ConflictError
from zipo.infra import streams
from zipo.infra.postgres import get_pool
from zipo.obs import metrics as obs_metrics
from zipo.settings import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InviteActionFlip:
	"""Marks the invitee's "Event Invite" notification as acted upon."""

	owner_id: UUID
	initiator_id: UUID
	resource_id: UUID


@dataclass(slots=True)
class WriteUnit:
	operation: str
	create: Optional[models.Event] = None
	update: Optional[models.Event] = None
	delete: Optional[models.Event] = None
	notifications: list[models.NotificationDraft] = field(default_factory=list)
	invite_action: Optional[InviteActionFlip] = None

	def __post_init__(self) -> None:
		targets = [item for item in (self.create, self.update, self.delete) if item is not None]
		if len(targets) != 1:
			raise ValueError("a write unit targets exactly one event write")

	def counter_increments(self) -> Counter[UUID]:
		return Counter(draft.owner for draft in self.notifications)


@dataclass(slots=True)
class CommitResult:
	event: models.Event
	notifications: list[models.Notification]


class WriteCoordinator:
	"""Runs a WriteUnit inside one database transaction."""

	def __init__(self, repository: repo_module.EventsRepository | None = None) -> None:
		self.repo = repository or repo_module.EventsRepository()

	async def commit(self, unit: WriteUnit, *, now: datetime | None = None) -> CommitResult:
		created_at = now or datetime.now(timezone.utc)
		expires_at = created_at + timedelta(days=settings.notification_retention_days)
		pool = await get_pool()
		try:
			async with pool.acquire() as conn:
				async with conn.transaction():
					event = await self._write_event(conn, unit)
					if unit.invite_action is not None:
						await self.repo.mark_invite_action_taken(
							conn,
							owner_id=unit.invite_action.owner_id,
							initiator_id=unit.invite_action.initiator_id,
							resource_id=unit.invite_action.resource_id,
						)
					notifications = await self.repo.insert_notifications(
						conn,
						unit.notifications,
						created_at=created_at,
						expires_at=expires_at,
					)
					await self.repo.increment_new_notifications(conn, unit.counter_increments())
		except Exception:
			obs_metrics.inc_event_rollback(unit.operation)
			logger.warning("event_write_rolled_back", extra={"operation": unit.operation})
			raise

		obs_metrics.inc_event_mutation(unit.operation)
		for type_, count in Counter(item.type.value for item in notifications).items():
			obs_metrics.notifications_persisted(type_, count)
		await streams.publish_notifications(notifications)
		return CommitResult(event=event, notifications=notifications)

	async def _write_event(self, conn, unit: WriteUnit) -> models.Event:
		if unit.create is not None:
			return await self.repo.insert_event(conn, unit.create)
		if unit.update is not None:
			updated = await self.repo.update_event(conn, unit.update)
			if updated is None:
				raise ConflictError("event_version_conflict")
			return updated
		if unit.delete is None:
			raise ValueError("write unit has no event write")
		deleted = await self.repo.delete_event(conn, unit.delete.id, expected_version=unit.delete.version)
		if not deleted:
			raise ConflictError("event_version_conflict")
		return unit.delete
