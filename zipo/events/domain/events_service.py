"""Event service layer: loads, authorizes, mutates and commits events."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from uuid import UUID, uuid4

from zipo.events.domain import fanout, models, mutator, permissions, repo as repo_module
from zipo.events.domain.coordinator import InviteActionFlip, WriteCoordinator, WriteUnit
from zipo.events.domain.permissions import Operation
from zipo.events.schemas import dto
from zipo.exceptions import NotFoundError, UnauthorizedError
from zipo.infra.auth import AuthenticatedUser
from zipo.infra.mailer import Mailer, get_mailer

logger = logging.getLogger(__name__)


def _actor_id(user: AuthenticatedUser) -> UUID:
	try:
		return UUID(str(user.id))
	except ValueError as exc:
		raise UnauthorizedError() from exc


def matches_status(event: models.Event, status: dto.EventStatus | None, *, today: date) -> bool:
	"""Compare the calendar day of the event with today's."""
	if status is None:
		return True
	event_day = event.date.astimezone(timezone.utc).date() if event.date.tzinfo else event.date.date()
	if status is dto.EventStatus.TODAY:
		return event_day == today
	if status is dto.EventStatus.UPCOMING:
		return event_day > today
	return event_day < today


class EventsService:
	"""Business logic for events, invitations and todos."""

	def __init__(
		self,
		repository: repo_module.EventsRepository | None = None,
		*,
		coordinator: WriteCoordinator | None = None,
		mailer: Mailer | None = None,
	) -> None:
		self.repo = repository or repo_module.EventsRepository()
		self.coordinator = coordinator or WriteCoordinator(self.repo)
		self._mailer = mailer

	@property
	def mailer(self) -> Mailer:
		return self._mailer or get_mailer()

	# --- Queries -----------------------------------------------------------

	async def list_events(
		self,
		user: AuthenticatedUser,
		*,
		status: dto.EventStatus | None = None,
		today: date | None = None,
	) -> list[dto.EventResponse]:
		actor = _actor_id(user)
		current_day = today or datetime.now(timezone.utc).date()
		events = [
			event
			for event in await self.repo.list_events_for_user(actor)
			if matches_status(event, status, today=current_day)
		]
		user_ids: list[UUID] = []
		for event in events:
			user_ids.append(event.owner_id)
			user_ids.extend(event.invitees)
		summaries = await self.repo.get_user_summaries(user_ids)
		return [self._event_to_response(event, summaries) for event in events]

	async def get_event(self, user: AuthenticatedUser, event_id: UUID) -> dto.EventResponse:
		event = await self._load_event(event_id)
		permissions.require(Operation.GET_EVENT, _actor_id(user), event, detail="You are not authorized to view this event.")
		return await self._render(event)

	async def generate_invite_link_id(self) -> str:
		return mutator.next_invite_link_id(await self.repo.latest_invite_link_id())

	# --- Event lifecycle ---------------------------------------------------

	async def create_event(
		self,
		user: AuthenticatedUser,
		payload: dto.EventCreateRequest,
		*,
		now: datetime | None = None,
	) -> dto.EventResponse:
		actor = _actor_id(user)
		created_at = now or datetime.now(timezone.utc)
		invite_link_id = await self._fresh_invite_link_id(payload.invite_link_id)
		event = mutator.create_event(
			event_id=uuid4(),
			owner_id=actor,
			owner_email=user.email,
			title=payload.title,
			date=payload.date,
			bg_cover=payload.bg_cover,
			invite_link_id=invite_link_id,
			created_at=created_at,
			days_btwn_reminder_and_event=payload.days_btwn_reminder_and_event,
			todos=[(todo.title, todo.note) for todo in payload.todos],
			invited_emails=payload.invited_emails,
		)
		registered = await self.repo.find_registered_users_by_emails(event.invited_emails)
		drafts = fanout.fanout(
			[member.id for member in registered if member.id != actor],
			fanout.event_invite(event.title),
			initiator=actor,
			resource_id=event.id,
		)
		result = await self.coordinator.commit(WriteUnit(operation="event_create", create=event, notifications=drafts), now=created_at)
		await self._send_invitations(result.event, result.event.invited_emails, inviter_name=user.name)
		return await self._render(result.event)

	async def delete_event(self, user: AuthenticatedUser, event_id: UUID) -> dto.EventResponse:
		event = await self._load_event(event_id)
		decision = permissions.require(
			Operation.DELETE_EVENT, _actor_id(user), event, detail="You are not authorized to delete this event."
		)
		response = await self._render(event)
		drafts = fanout.fanout(
			decision.notif_hosts,
			fanout.event_deleted(event.title),
			initiator=_actor_id(user),
			resource_id=event.id,
		)
		await self.coordinator.commit(WriteUnit(operation="event_delete", delete=event, notifications=drafts))
		return response

	async def toggle_invite_link(self, user: AuthenticatedUser, event_id: UUID, is_active: bool) -> dto.EventResponse:
		event = await self._load_event(event_id)
		permissions.require(
			Operation.TOGGLE_INVITE_LINK,
			_actor_id(user),
			event,
			detail="You are not authorized to edit this part of the event.",
		)
		updated = mutator.toggle_invite_link(event, is_active)
		result = await self.coordinator.commit(WriteUnit(operation="event_toggle_invite_link", update=updated))
		return await self._render(result.event)

	# --- Invitations -------------------------------------------------------

	async def invite_users(self, user: AuthenticatedUser, event_id: UUID, emails: Iterable[str]) -> dto.EventResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		permissions.require(Operation.INVITE_USER, actor, event, detail="You are not authorized to invite users.")
		summaries = await self.repo.get_user_summaries([event.owner_id, *event.invitees])
		member_emails = [summary.email for summary in summaries.values()]
		change = mutator.invite_users(event, emails, member_emails=member_emails)
		if change.is_noop:
			return self._event_to_response(event, summaries)
		registered = await self.repo.find_registered_users_by_emails(change.added)
		drafts = fanout.fanout(
			[member.id for member in registered],
			fanout.event_invite(event.title),
			initiator=actor,
			resource_id=event.id,
		)
		result = await self.coordinator.commit(
			WriteUnit(operation="event_invite_users", update=change.event, notifications=drafts)
		)
		await self._send_invitations(result.event, change.added, inviter_name=user.name)
		return self._event_to_response(result.event, summaries)

	async def accept_invitation(
		self,
		user: AuthenticatedUser,
		event_id: UUID,
		*,
		via_notification: bool = False,
	) -> dto.InviteeResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		updated = mutator.accept_invitation(event, user_id=actor, email=user.email)
		drafts = fanout.single(
			event.owner_id,
			fanout.invitation_accepted(user.name, event.title),
			initiator=actor,
			resource_id=event.id,
		)
		await self.coordinator.commit(
			WriteUnit(
				operation="event_accept_invitation",
				update=updated,
				notifications=drafts,
				invite_action=self._invite_flip(actor, event) if via_notification else None,
			)
		)
		return await self._invitee_response(actor, models.Role.VIEWER, fallback=user)

	async def reject_invitation(
		self,
		user: AuthenticatedUser,
		event_id: UUID,
		*,
		via_notification: bool = False,
	) -> dto.EventResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		updated = mutator.reject_invitation(event, email=user.email)
		drafts = fanout.single(
			event.owner_id,
			fanout.invitation_rejected(user.name, event.title),
			initiator=actor,
			resource_id=event.id,
		)
		result = await self.coordinator.commit(
			WriteUnit(
				operation="event_reject_invitation",
				update=updated,
				notifications=drafts,
				invite_action=self._invite_flip(actor, event) if via_notification else None,
			)
		)
		return await self._render(result.event)

	async def remove_invitee(self, user: AuthenticatedUser, event_id: UUID, invitee_id: UUID) -> dto.InviteeResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.evaluate(Operation.REMOVE_INVITEE, actor, event)
		permissions.ensure_can_remove_invitee(decision, event, invitee_id)
		updated, role = mutator.remove_invitee(event, invitee_id)
		drafts = fanout.single(invitee_id, fanout.invitee_removed(event.title), initiator=actor, resource_id=event.id)
		await self.coordinator.commit(WriteUnit(operation="event_remove_invitee", update=updated, notifications=drafts))
		return await self._invitee_response(invitee_id, role)

	async def assign_role(
		self,
		user: AuthenticatedUser,
		event_id: UUID,
		invitee_id: UUID,
		role: models.Role,
	) -> dto.InviteeResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		permissions.assert_is_owner(actor, event)
		updated = mutator.assign_role(event, invitee_id, role)
		drafts = fanout.single(invitee_id, fanout.role_assigned(role, event.title), initiator=actor, resource_id=event.id)
		await self.coordinator.commit(WriteUnit(operation="event_assign_role", update=updated, notifications=drafts))
		return await self._invitee_response(invitee_id, role)

	# --- Todos -------------------------------------------------------------

	async def add_todo(self, user: AuthenticatedUser, event_id: UUID, *, title: str, note: str) -> dto.TodoResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.require(Operation.ADD_TODO, actor, event, detail="You are not authorized to add todos.")
		change = mutator.add_todo(event, title=title, note=note)
		await self._commit_todo("todo_add", change, decision, fanout.todo_added(title), actor)
		return dto.TodoResponse.model_validate(change.todo)

	async def edit_todo(
		self,
		user: AuthenticatedUser,
		event_id: UUID,
		todo_id: UUID,
		*,
		title: str,
		note: str,
	) -> dto.TodoResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.require(Operation.EDIT_TODO, actor, event, detail="You are not authorized to edit todos.")
		change = mutator.edit_todo(event, todo_id, title=title, note=note)
		await self._commit_todo("todo_edit", change, decision, fanout.todo_edited(change.todo.title), actor)
		return dto.TodoResponse.model_validate(change.todo)

	async def delete_todo(self, user: AuthenticatedUser, event_id: UUID, todo_id: UUID) -> dto.TodoResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.require(Operation.DELETE_TODO, actor, event, detail="You are not authorized to remove todos.")
		change = mutator.delete_todo(event, todo_id)
		await self._commit_todo("todo_delete", change, decision, fanout.todo_deleted(change.todo.title), actor)
		return dto.TodoResponse.model_validate(change.todo)

	async def duplicate_todo(self, user: AuthenticatedUser, event_id: UUID, todo_id: UUID) -> dto.TodoResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.require(
			Operation.DUPLICATE_TODO, actor, event, detail="You are not authorized to duplicate todos."
		)
		change = mutator.duplicate_todo(event, todo_id)
		await self._commit_todo("todo_duplicate", change, decision, fanout.todo_duplicated(change.todo.title), actor)
		return dto.TodoResponse.model_validate(change.todo)

	async def mark_todo(
		self,
		user: AuthenticatedUser,
		event_id: UUID,
		todo_id: UUID,
		*,
		is_completed: bool,
	) -> dto.TodoResponse:
		actor = _actor_id(user)
		event = await self._load_event(event_id)
		decision = permissions.require(Operation.MARK_TODO, actor, event, detail="You are not authorized to mark todos.")
		change = mutator.mark_todo(event, todo_id, is_completed=is_completed)
		if not change.changed:
			return dto.TodoResponse.model_validate(change.todo)
		await self._commit_todo("todo_mark", change, decision, fanout.todo_marked(is_completed, change.todo.title), actor)
		return dto.TodoResponse.model_validate(change.todo)

	# --- Helpers -----------------------------------------------------------

	async def _load_event(self, event_id: UUID) -> models.Event:
		event = await self.repo.get_event(event_id)
		if event is None:
			raise NotFoundError("Event not found.")
		return event

	async def _fresh_invite_link_id(self, requested: Optional[str]) -> str:
		if requested and not await self.repo.invite_link_taken(requested):
			return requested
		candidate = mutator.next_invite_link_id(await self.repo.latest_invite_link_id())
		while await self.repo.invite_link_taken(candidate):
			candidate = mutator.next_invite_link_id(candidate)
		return candidate

	async def _commit_todo(
		self,
		operation: str,
		change: mutator.TodoChange,
		decision: permissions.Decision,
		template: fanout.Template,
		actor: UUID,
	) -> None:
		drafts = fanout.fanout(decision.notif_hosts, template, initiator=actor, resource_id=change.event.id)
		await self.coordinator.commit(WriteUnit(operation=operation, update=change.event, notifications=drafts))

	@staticmethod
	def _invite_flip(actor: UUID, event: models.Event) -> InviteActionFlip:
		return InviteActionFlip(owner_id=actor, initiator_id=event.owner_id, resource_id=event.id)

	async def _send_invitations(self, event: models.Event, emails: Iterable[str], *, inviter_name: Optional[str]) -> None:
		subject, body = fanout.invitation_email(event_title=event.title, inviter_name=inviter_name, date=event.date)
		for email in emails:
			await self.mailer.send_best_effort(email, subject, body, template="event_invitation")

	async def _render(self, event: models.Event) -> dto.EventResponse:
		summaries = await self.repo.get_user_summaries([event.owner_id, *event.invitees])
		return self._event_to_response(event, summaries)

	async def _invitee_response(
		self,
		user_id: UUID,
		role: models.Role,
		*,
		fallback: AuthenticatedUser | None = None,
	) -> dto.InviteeResponse:
		summary = (await self.repo.get_user_summaries([user_id])).get(user_id)
		if summary is None:
			if fallback is None:
				raise NotFoundError("User not found")
			summary = models.UserSummary(id=user_id, name=fallback.name, email=fallback.email)
		return dto.InviteeResponse(**summary.model_dump(), role=role)

	@staticmethod
	def _event_to_response(event: models.Event, summaries: dict[UUID, models.UserSummary]) -> dto.EventResponse:
		invitees: list[dto.InviteeResponse] = []
		for entry in event.invitee_roles:
			summary = summaries.get(entry.id)
			if summary is None:
				continue
			invitees.append(dto.InviteeResponse(**summary.model_dump(), role=entry.role))
		owner = summaries.get(event.owner_id)
		return dto.EventResponse(
			id=event.id,
			title=event.title,
			date=event.date,
			reminder_date=event.reminder_date,
			days_btwn_reminder_and_event=event.days_btwn_reminder_and_event,
			todo_count=event.todo_count,
			todos=[dto.TodoResponse.model_validate(todo) for todo in event.todos],
			bg_cover=event.bg_cover,
			invited_emails=list(event.invited_emails),
			invitee_roles=[dto.InviteeRoleResponse.model_validate(entry) for entry in event.invitee_roles],
			invitees=invitees,
			owner=dto.UserSummaryResponse.model_validate(owner) if owner else None,
			invite_link_id=event.invite_link_id,
			is_invite_link_active=event.is_invite_link_active,
			created_at=event.created_at,
		)
