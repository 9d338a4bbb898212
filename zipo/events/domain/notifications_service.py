"""Service helpers for notification listing and retention."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from zipo.events.domain import models, repo as repo_module
from zipo.events.schemas import dto
from zipo.exceptions import UnauthorizedError, ValidationError
from zipo.infra.auth import AuthenticatedUser

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 50


def _parse_cursor(cursor: Optional[str]) -> Optional[int]:
	if cursor in (None, ""):
		return None
	try:
		return int(cursor)
	except ValueError as exc:
		raise ValidationError("invalid_cursor") from exc


class NotificationService:
	"""Encapsulates notification queries."""

	def __init__(self, *, repository: repo_module.EventsRepository | None = None) -> None:
		self.repo = repository or repo_module.EventsRepository()

	@staticmethod
	def to_response(
		entity: models.Notification,
		initiators: dict[UUID, models.UserSummary],
	) -> dto.NotificationResponse:
		initiator = initiators.get(entity.initiator)
		return dto.NotificationResponse(
			id=str(entity.id),
			owner=entity.owner,
			initiator=dto.UserSummaryResponse.model_validate(initiator) if initiator else None,
			type=entity.type.value,
			message=entity.message,
			resource_type=entity.resource_type.value,
			resource_id=entity.resource_id,
			is_action_required=entity.is_action_required,
			action_type=entity.action_type.value if entity.action_type else None,
			action_taken=entity.action_taken,
			created_at=entity.created_at,
			expires_at=entity.expires_at,
		)

	async def list_notifications(
		self,
		user: AuthenticatedUser,
		*,
		limit: Optional[int] = None,
		cursor: Optional[str] = None,
		now: datetime | None = None,
	) -> dto.NotificationPage:
		"""Newest first. Reading the first page or any later one clears the unread counter."""
		try:
			owner = UUID(str(user.id))
		except ValueError as exc:
			raise UnauthorizedError() from exc
		size = DEFAULT_LIMIT if not limit else max(1, min(int(limit), MAX_LIMIT))
		current = now or datetime.now(timezone.utc)
		before_id = _parse_cursor(cursor)
		items = await self.repo.list_notifications(owner, limit=size + 1, before_id=before_id, now=current)
		total = await self.repo.count_notifications(owner, now=current)
		has_next_page = len(items) > size
		items = items[:size]
		initiators = await self.repo.get_user_summaries(item.initiator for item in items)
		await self.repo.reset_new_notifications(owner)
		return dto.NotificationPage(
			data=[self.to_response(item, initiators) for item in items],
			pagination=dto.PaginationInfo(
				next_cursor=str(items[-1].id) if has_next_page and items else None,
				total_docs=total,
				docs_retrieved=len(items),
				has_next_page=has_next_page,
			),
		)

	async def prune_expired(self, *, now: datetime | None = None) -> int:
		removed = await self.repo.prune_expired_notifications(now=now or datetime.now(timezone.utc))
		if removed:
			logger.info("notifications_pruned", extra={"removed": removed})
		return removed
