"""Async repository helpers for events and notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import UUID

import asyncpg

from zipo.events.domain import models
from zipo.exceptions import ConflictError
from zipo.infra.postgres import get_pool

_EVENT_COLUMNS = """
	id, title, date, reminder_date, days_btwn_reminder_and_event, todo_count, todos,
	bg_cover, invited_emails, invitee_roles, invitees, owner_id, invite_link_id,
	is_invite_link_active, created_at, version
"""

_NOTIFICATION_COLUMNS = """
	id, owner_id AS owner, initiator_id AS initiator, type, message, resource_type, resource_id,
	is_action_required, action_type, action_taken, created_at, expires_at
"""


def _event_from_row(row: Mapping[str, Any]) -> models.Event:
	return models.Event.model_validate(dict(row))


def _notification_from_row(row: Mapping[str, Any]) -> models.Notification:
	return models.Notification.model_validate(dict(row))


def _todos_payload(event: models.Event) -> list[dict[str, Any]]:
	return [todo.model_dump(mode="json") for todo in event.todos]


def _roles_payload(event: models.Event) -> list[dict[str, Any]]:
	return [entry.model_dump(mode="json") for entry in event.invitee_roles]


def _affected(status: str) -> int:
	# asyncpg returns command tags such as "DELETE 3".
	try:
		return int(status.split()[-1])
	except (ValueError, IndexError):
		return 0


class EventsRepository:
	"""Thin data-access layer around asyncpg."""

	async def _fetchrow(self, query: str, *args, conn: Optional[asyncpg.Connection] = None):
		if conn is not None:
			return await conn.fetchrow(query, *args)
		pool = await get_pool()
		async with pool.acquire() as pooled:
			return await pooled.fetchrow(query, *args)

	async def _fetch(self, query: str, *args, conn: Optional[asyncpg.Connection] = None):
		if conn is not None:
			return await conn.fetch(query, *args)
		pool = await get_pool()
		async with pool.acquire() as pooled:
			return await pooled.fetch(query, *args)

	# --- Events ------------------------------------------------------------

	async def get_event(self, event_id: UUID, *, conn: Optional[asyncpg.Connection] = None) -> models.Event | None:
		row = await self._fetchrow(f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = $1", event_id, conn=conn)
		return _event_from_row(row) if row else None

	async def list_events_for_user(self, user_id: UUID) -> list[models.Event]:
		rows = await self._fetch(
			f"""
			SELECT {_EVENT_COLUMNS}
			FROM events
			WHERE owner_id = $1 OR $1 = ANY(invitees)
			ORDER BY date ASC, created_at ASC
			""",
			user_id,
		)
		return [_event_from_row(row) for row in rows]

	async def invite_link_taken(self, invite_link_id: str, *, conn: Optional[asyncpg.Connection] = None) -> bool:
		row = await self._fetchrow("SELECT 1 FROM events WHERE invite_link_id = $1", invite_link_id, conn=conn)
		return row is not None

	async def latest_invite_link_id(self) -> str | None:
		row = await self._fetchrow("SELECT invite_link_id FROM events ORDER BY created_at DESC LIMIT 1")
		return row["invite_link_id"] if row else None

	async def insert_event(self, conn: asyncpg.Connection, event: models.Event) -> models.Event:
		try:
			row = await conn.fetchrow(
				f"""
				INSERT INTO events (
					id, title, date, reminder_date, days_btwn_reminder_and_event, todo_count, todos,
					bg_cover, invited_emails, invitee_roles, invitees, owner_id, invite_link_id,
					is_invite_link_active, created_at, version
				)
				VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, 1)
				RETURNING {_EVENT_COLUMNS}
				""",
				event.id,
				event.title,
				event.date,
				event.reminder_date,
				event.days_btwn_reminder_and_event,
				event.todo_count,
				_todos_payload(event),
				event.bg_cover,
				list(event.invited_emails),
				_roles_payload(event),
				list(event.invitees),
				event.owner_id,
				event.invite_link_id,
				event.is_invite_link_active,
				event.created_at,
			)
		except asyncpg.UniqueViolationError as exc:
			raise ConflictError("invite_link_id_taken") from exc
		return _event_from_row(row)

	async def update_event(self, conn: asyncpg.Connection, event: models.Event) -> models.Event | None:
		"""Persist the whole document if nobody else wrote it since it was read.

		Returns None when `event.version` is stale.
		"""
		row = await conn.fetchrow(
			f"""
			UPDATE events
			SET title = $3,
				todo_count = $4,
				todos = $5,
				invited_emails = $6,
				invitee_roles = $7,
				invitees = $8,
				is_invite_link_active = $9,
				version = version + 1
			WHERE id = $1 AND version = $2
			RETURNING {_EVENT_COLUMNS}
			""",
			event.id,
			event.version,
			event.title,
			event.todo_count,
			_todos_payload(event),
			list(event.invited_emails),
			_roles_payload(event),
			list(event.invitees),
			event.is_invite_link_active,
		)
		return _event_from_row(row) if row else None

	async def delete_event(self, conn: asyncpg.Connection, event_id: UUID, *, expected_version: int) -> bool:
		status = await conn.execute("DELETE FROM events WHERE id = $1 AND version = $2", event_id, expected_version)
		return _affected(status) > 0

	# --- Notifications -----------------------------------------------------

	async def insert_notifications(
		self,
		conn: asyncpg.Connection,
		drafts: Sequence[models.NotificationDraft],
		*,
		created_at: datetime,
		expires_at: datetime,
	) -> list[models.Notification]:
		if not drafts:
			return []
		rows = await conn.fetch(
			f"""
			INSERT INTO notifications (
				owner_id, initiator_id, type, message, resource_type, resource_id,
				is_action_required, action_type, action_taken, created_at, expires_at
			)
			SELECT t.owner_id, t.initiator_id, t.type, t.message, t.resource_type, t.resource_id,
				t.is_action_required, t.action_type, t.action_taken, $10, $11
			FROM unnest($1::uuid[], $2::uuid[], $3::text[], $4::text[], $5::text[], $6::uuid[], $7::bool[], $8::text[], $9::bool[])
				AS t(owner_id, initiator_id, type, message, resource_type, resource_id, is_action_required, action_type, action_taken)
			RETURNING {_NOTIFICATION_COLUMNS}
			""",
			[draft.owner for draft in drafts],
			[draft.initiator for draft in drafts],
			[draft.type.value for draft in drafts],
			[draft.message for draft in drafts],
			[draft.resource_type.value for draft in drafts],
			[draft.resource_id for draft in drafts],
			[draft.is_action_required for draft in drafts],
			[draft.action_type.value if draft.action_type else None for draft in drafts],
			[draft.action_taken for draft in drafts],
			created_at,
			expires_at,
		)
		return [_notification_from_row(row) for row in rows]

	async def increment_new_notifications(self, conn: asyncpg.Connection, counts: Mapping[UUID, int]) -> None:
		if not counts:
			return
		await conn.execute(
			"""
			UPDATE users
			SET new_notifications = users.new_notifications + c.n
			FROM unnest($1::uuid[], $2::int[]) AS c(id, n)
			WHERE users.id = c.id
			""",
			list(counts.keys()),
			list(counts.values()),
		)

	async def mark_invite_action_taken(
		self,
		conn: asyncpg.Connection,
		*,
		owner_id: UUID,
		initiator_id: UUID,
		resource_id: UUID,
	) -> int:
		status = await conn.execute(
			"""
			UPDATE notifications
			SET action_taken = TRUE
			WHERE owner_id = $1 AND initiator_id = $2 AND resource_id = $3
				AND resource_type = $4 AND type = $5
			""",
			owner_id,
			initiator_id,
			resource_id,
			models.ResourceType.EVENT.value,
			models.NotificationType.EVENT_INVITE.value,
		)
		return _affected(status)

	async def list_notifications(
		self,
		owner_id: UUID,
		*,
		limit: int,
		before_id: Optional[int],
		now: datetime,
	) -> list[models.Notification]:
		rows = await self._fetch(
			f"""
			SELECT {_NOTIFICATION_COLUMNS}
			FROM notifications
			WHERE owner_id = $1 AND expires_at > $2 AND ($3::bigint IS NULL OR id < $3)
			ORDER BY id DESC
			LIMIT $4
			""",
			owner_id,
			now,
			before_id,
			limit,
		)
		return [_notification_from_row(row) for row in rows]

	async def count_notifications(self, owner_id: UUID, *, now: datetime) -> int:
		row = await self._fetchrow(
			"SELECT COUNT(*) AS total FROM notifications WHERE owner_id = $1 AND expires_at > $2",
			owner_id,
			now,
		)
		return int(row["total"]) if row else 0

	async def reset_new_notifications(self, user_id: UUID) -> None:
		pool = await get_pool()
		async with pool.acquire() as conn:
			await conn.execute("UPDATE users SET new_notifications = 0 WHERE id = $1", user_id)

	async def prune_expired_notifications(self, *, now: datetime) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute("DELETE FROM notifications WHERE expires_at <= $1", now)
		return _affected(status)

	# --- Users -------------------------------------------------------------

	async def find_registered_users_by_emails(self, emails: Iterable[str]) -> list[models.UserSummary]:
		values = list(dict.fromkeys(emails))
		if not values:
			return []
		rows = await self._fetch(
			"""
			SELECT id, name, email, photo
			FROM users
			WHERE email = ANY($1::text[]) AND is_signup_completed
			""",
			values,
		)
		return [models.UserSummary.model_validate(dict(row)) for row in rows]

	async def get_user_summaries(self, user_ids: Iterable[UUID]) -> dict[UUID, models.UserSummary]:
		ids = list(dict.fromkeys(user_ids))
		if not ids:
			return {}
		rows = await self._fetch("SELECT id, name, email, photo FROM users WHERE id = ANY($1::uuid[])", ids)
		summaries = [models.UserSummary.model_validate(dict(row)) for row in rows]
		return {summary.id: summary for summary in summaries}
