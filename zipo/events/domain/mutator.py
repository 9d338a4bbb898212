"""State transitions for the event aggregate.

Every function takes the loaded event and returns a mutated copy; the input is
never modified, so a failed precondition leaves nothing half-applied. Not-found
conditions raise NotFoundError before any write is attempted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Optional, Sequence
from uuid import UUID

from zipo.events.domain import models
from zipo.exceptions import ForbiddenError, NotFoundError, ValidationError

INVITE_LINK_ID_WIDTH = 8
DEFAULT_REMINDER_DAYS = 5


@dataclass(slots=True)
class TodoChange:
	event: models.Event
	todo: models.Todo
	previous: Optional[models.Todo] = None
	changed: bool = True


@dataclass(slots=True)
class InviteChange:
	event: models.Event
	added: list[str]

	@property
	def is_noop(self) -> bool:
		return not self.added


def _copy(event: models.Event) -> models.Event:
	return event.model_copy(deep=True)


def _sync_todo_count(event: models.Event) -> models.Event:
	event.todo_count = len(event.todos)
	return event


def reminder_date_for(date: datetime, days: int) -> datetime:
	return date - timedelta(days=days)


def format_invite_link_id(number: int) -> str:
	return str(number).zfill(INVITE_LINK_ID_WIDTH)


def next_invite_link_id(latest: Optional[str]) -> str:
	"""Sequential id after `latest`, zero-padded to eight digits."""
	try:
		current = int(latest) if latest else 0
	except ValueError:
		current = 0
	return format_invite_link_id(current + 1)


def create_event(
	*,
	event_id: UUID,
	owner_id: UUID,
	owner_email: str,
	title: str,
	date: datetime,
	bg_cover: str,
	invite_link_id: str,
	created_at: datetime,
	days_btwn_reminder_and_event: Optional[int] = None,
	todos: Sequence[tuple[str, str]] = (),
	invited_emails: Iterable[str] = (),
) -> models.Event:
	days = DEFAULT_REMINDER_DAYS if days_btwn_reminder_and_event is None else days_btwn_reminder_and_event
	if days < 0:
		raise ValidationError("daysBtwnReminderAndEvent must not be negative")
	emails: list[str] = []
	for email in invited_emails:
		if email == owner_email or email in emails:
			continue
		emails.append(email)
	event = models.Event(
		id=event_id,
		title=title,
		date=date,
		reminder_date=reminder_date_for(date, days),
		days_btwn_reminder_and_event=days,
		todos=[models.Todo(title=todo_title, note=note) for todo_title, note in todos],
		bg_cover=bg_cover,
		invited_emails=emails,
		owner_id=owner_id,
		invite_link_id=invite_link_id,
		is_invite_link_active=True,
		created_at=created_at,
	)
	return _sync_todo_count(event)


def toggle_invite_link(event: models.Event, is_active: bool) -> models.Event:
	updated = _copy(event)
	updated.is_invite_link_active = is_active
	return updated


def invite_users(event: models.Event, emails: Iterable[str], *, member_emails: Iterable[str]) -> InviteChange:
	"""Add pending invitations, skipping the owner, current invitees and duplicates.

	Matching is exact and case-sensitive.
	"""
	excluded = set(member_emails)
	filtered: list[str] = []
	for email in emails:
		if email in excluded or email in filtered:
			continue
		filtered.append(email)
	if not filtered:
		return InviteChange(event=event, added=[])
	updated = _copy(event)
	for email in filtered:
		if email not in updated.invited_emails:
			updated.invited_emails.append(email)
	return InviteChange(event=updated, added=filtered)


def _require_invited(event: models.Event, email: str) -> None:
	if email not in event.invited_emails:
		raise ForbiddenError("You have not been invited to this event.")


def accept_invitation(event: models.Event, *, user_id: UUID, email: str) -> models.Event:
	_require_invited(event, email)
	updated = _copy(event)
	updated.invited_emails = [item for item in updated.invited_emails if item != email]
	if user_id not in updated.invitees:
		updated.invitees.append(user_id)
		updated.invitee_roles.append(models.InviteeRole(id=user_id, role=models.Role.VIEWER))
	return updated


def reject_invitation(event: models.Event, *, email: str) -> models.Event:
	_require_invited(event, email)
	updated = _copy(event)
	updated.invited_emails = [item for item in updated.invited_emails if item != email]
	return updated


def _require_invitee(event: models.Event, invitee_id: UUID) -> models.Role:
	role = event.role_of(invitee_id)
	if not event.has_invitee(invitee_id) or role is None:
		raise NotFoundError(f"InviteeId: {invitee_id} does not match any invitee")
	return role


def remove_invitee(event: models.Event, invitee_id: UUID) -> tuple[models.Event, models.Role]:
	"""Drop the invitee from both `invitees` and `invitee_roles`; returns the role they held."""
	role = _require_invitee(event, invitee_id)
	updated = _copy(event)
	updated.invitees = [item for item in updated.invitees if item != invitee_id]
	updated.invitee_roles = [entry for entry in updated.invitee_roles if entry.id != invitee_id]
	return updated, role


def assign_role(event: models.Event, invitee_id: UUID, role: models.Role) -> models.Event:
	_require_invitee(event, invitee_id)
	updated = _copy(event)
	for entry in updated.invitee_roles:
		if entry.id == invitee_id:
			entry.role = role
	return updated


def _require_todo(event: models.Event, todo_id: UUID) -> models.Todo:
	todo = event.find_todo(todo_id)
	if todo is None:
		raise NotFoundError("Todo does not exist.")
	return todo


def add_todo(event: models.Event, *, title: str, note: str) -> TodoChange:
	updated = _copy(event)
	todo = models.Todo(title=title, note=note)
	updated.todos.append(todo)
	return TodoChange(event=_sync_todo_count(updated), todo=todo)


def edit_todo(event: models.Event, todo_id: UUID, *, title: str, note: str) -> TodoChange:
	previous = _require_todo(event, todo_id).model_copy()
	updated = _copy(event)
	todo = _require_todo(updated, todo_id)
	todo.title = title
	todo.note = note
	return TodoChange(event=_sync_todo_count(updated), todo=todo, previous=previous)


def delete_todo(event: models.Event, todo_id: UUID) -> TodoChange:
	removed = _require_todo(event, todo_id).model_copy()
	updated = _copy(event)
	updated.todos = [todo for todo in updated.todos if todo.id != todo_id]
	return TodoChange(event=_sync_todo_count(updated), todo=removed, previous=removed)


def duplicate_todo(event: models.Event, todo_id: UUID) -> TodoChange:
	source = _require_todo(event, todo_id).model_copy()
	updated = _copy(event)
	copy = models.Todo(title=source.title, note=source.note)
	updated.todos.append(copy)
	return TodoChange(event=_sync_todo_count(updated), todo=copy, previous=source)


def mark_todo(event: models.Event, todo_id: UUID, *, is_completed: bool) -> TodoChange:
	"""Set completion; `changed` is False when the todo already had that value."""
	previous = _require_todo(event, todo_id).model_copy()
	updated = _copy(event)
	todo = _require_todo(updated, todo_id)
	todo.is_completed = is_completed
	return TodoChange(
		event=_sync_todo_count(updated),
		todo=todo,
		previous=previous,
		changed=previous.is_completed != is_completed,
	)
