"""Event, invitation and todo resolvers."""

from __future__ import annotations

from uuid import UUID

from ariadne import MutationType, QueryType

from zipo.api.graphql.guards import protect
from zipo.api.graphql.responses import dump, success
from zipo.events.domain.events_service import EventsService
from zipo.events.domain.models import Role
from zipo.events.schemas import dto
from zipo.exceptions import NotFoundError

query = QueryType()
mutation = MutationType()
_service = EventsService()


def _uuid(value, label: str) -> UUID:
	try:
		return UUID(str(value))
	except ValueError as exc:
		raise NotFoundError(f"{label} not found.") from exc


@query.field("events")
@protect
async def resolve_events(_, info, user, status=None):
	selected = dto.EventStatus(status) if status else None
	return [dump(event) for event in await _service.list_events(user, status=selected)]


@query.field("event_getById")
@protect
async def resolve_event(_, info, user, id):
	return dump(await _service.get_event(user, _uuid(id, "Event")))


@query.field("event_generateInviteLinkId")
@protect
async def resolve_generate_invite_link_id(_, info, user):
	return await _service.generate_invite_link_id()


@mutation.field("event_create")
@protect
async def resolve_create_event(_, info, user, input):
	payload = dto.EventCreateRequest.model_validate(input)
	return success(201, await _service.create_event(user, payload))


@mutation.field("event_delete")
@protect
async def resolve_delete_event(_, info, user, id):
	return success(200, await _service.delete_event(user, _uuid(id, "Event")))


@mutation.field("event_toggleInviteLink")
@protect
async def resolve_toggle_invite_link(_, info, user, id, is_invite_link_active):
	return success(200, await _service.toggle_invite_link(user, _uuid(id, "Event"), is_invite_link_active))


@mutation.field("event_inviteUsers")
@protect
async def resolve_invite_users(_, info, user, id, invited_emails):
	return success(200, await _service.invite_users(user, _uuid(id, "Event"), invited_emails))


@mutation.field("event_acceptInvitation")
@protect
async def resolve_accept_invitation(_, info, user, id, via_notification=False):
	invitee = await _service.accept_invitation(user, _uuid(id, "Event"), via_notification=bool(via_notification))
	return success(200, invitee)


@mutation.field("event_rejectInvitation")
@protect
async def resolve_reject_invitation(_, info, user, id, via_notification=False):
	event = await _service.reject_invitation(user, _uuid(id, "Event"), via_notification=bool(via_notification))
	return success(200, event)


@mutation.field("event_removeInvitee")
@protect
async def resolve_remove_invitee(_, info, user, id, invitee_id):
	invitee = await _service.remove_invitee(user, _uuid(id, "Event"), _uuid(invitee_id, "Invitee"))
	return success(200, invitee)


@mutation.field("event_assignRoleToInvitee")
@protect
async def resolve_assign_role(_, info, user, id, invitee_id, role):
	invitee = await _service.assign_role(user, _uuid(id, "Event"), _uuid(invitee_id, "Invitee"), Role(role))
	return success(200, invitee)


@mutation.field("event_addTodo")
@protect
async def resolve_add_todo(_, info, user, id, title, note):
	return success(201, await _service.add_todo(user, _uuid(id, "Event"), title=title, note=note))


@mutation.field("event_editTodo")
@protect
async def resolve_edit_todo(_, info, user, id, todo_id, title, note):
	todo = await _service.edit_todo(user, _uuid(id, "Event"), _uuid(todo_id, "Todo"), title=title, note=note)
	return success(200, todo)


@mutation.field("event_deleteTodo")
@protect
async def resolve_delete_todo(_, info, user, id, todo_id):
	return success(200, await _service.delete_todo(user, _uuid(id, "Event"), _uuid(todo_id, "Todo")))


@mutation.field("event_duplicateTodo")
@protect
async def resolve_duplicate_todo(_, info, user, id, todo_id):
	return success(201, await _service.duplicate_todo(user, _uuid(id, "Event"), _uuid(todo_id, "Todo")))


@mutation.field("event_markTodo")
@protect
async def resolve_mark_todo(_, info, user, id, todo_id, is_completed):
	todo = await _service.mark_todo(user, _uuid(id, "Event"), _uuid(todo_id, "Todo"), is_completed=is_completed)
	return success(200, todo)
