"""Authorization policies for event operations.

The event owner may perform every operation. Invitees are checked against a
fixed allowed-role table. `evaluate` never raises; callers turn a negative
decision into a ForbiddenError.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

from zipo.events.domain import models
from zipo.exceptions import ForbiddenError

ROLE_HIERARCHY = {models.Role.ADMIN: 3, models.Role.EDITOR: 2, models.Role.VIEWER: 1}


class Operation(str, Enum):
	GET_EVENT = "getEvent"
	DELETE_EVENT = "deleteEvent"
	TOGGLE_INVITE_LINK = "toggleInviteLink"
	INVITE_USER = "inviteUser"
	REMOVE_INVITEE = "removeInvitee"
	ADD_TODO = "addTodo"
	EDIT_TODO = "editTodo"
	DELETE_TODO = "deleteTodo"
	DUPLICATE_TODO = "duplicateTodo"
	MARK_TODO = "markTodo"


_ALL = frozenset({models.Role.ADMIN, models.Role.EDITOR, models.Role.VIEWER})
_ADMIN = frozenset({models.Role.ADMIN})
_EDITORS = frozenset({models.Role.ADMIN, models.Role.EDITOR})

OPERATION_ROLES: dict[Operation, frozenset[models.Role]] = {
	Operation.GET_EVENT: _ALL,
	Operation.DELETE_EVENT: _ADMIN,
	Operation.TOGGLE_INVITE_LINK: _ADMIN,
	Operation.INVITE_USER: _EDITORS,
	Operation.REMOVE_INVITEE: _EDITORS,
	Operation.ADD_TODO: _EDITORS,
	Operation.EDIT_TODO: _EDITORS,
	Operation.DELETE_TODO: _EDITORS,
	Operation.DUPLICATE_TODO: _EDITORS,
	Operation.MARK_TODO: _EDITORS,
}


class UserType(str, Enum):
	OWNER = "Owner"
	INVITEE = "Invitee"


@dataclass(frozen=True, slots=True)
class Decision:
	has_permission: bool
	user_type: Optional[UserType] = None
	notif_hosts: tuple[UUID, ...] = ()
	executor: Optional[UUID] = None


DENIED = Decision(has_permission=False)


def evaluate(operation: Operation, actor_id: UUID, event: models.Event) -> Decision:
	if actor_id == event.owner_id:
		return Decision(
			has_permission=True,
			user_type=UserType.OWNER,
			notif_hosts=tuple(event.invitees),
			executor=actor_id,
		)
	role = event.role_of(actor_id)
	if role is not None and role in OPERATION_ROLES[operation]:
		hosts = [invitee for invitee in event.invitees if invitee != actor_id]
		# The owner did not act, so they are told about it.
		hosts.append(event.owner_id)
		return Decision(
			has_permission=True,
			user_type=UserType.INVITEE,
			notif_hosts=tuple(hosts),
			executor=actor_id,
		)
	return DENIED


def require(operation: Operation, actor_id: UUID, event: models.Event, *, detail: str) -> Decision:
	decision = evaluate(operation, actor_id, event)
	if not decision.has_permission:
		raise ForbiddenError(detail)
	return decision


def assert_is_owner(actor_id: UUID, event: models.Event) -> None:
	if actor_id != event.owner_id:
		raise ForbiddenError("Unauthorized to perform this action.")


def can_remove(actor_role: Optional[models.Role], target_role: Optional[models.Role]) -> bool:
	"""Invitees may only remove invitees of strictly lower rank."""
	if actor_role is None:
		return False
	if target_role is None:
		return True
	return ROLE_HIERARCHY[actor_role] > ROLE_HIERARCHY[target_role]


def ensure_can_remove_invitee(decision: Decision, event: models.Event, invitee_id: UUID) -> None:
	"""Second-stage check for removeInvitee, run after a positive base decision."""
	if not decision.has_permission:
		raise ForbiddenError("You are not authorized to remove users.")
	if decision.executor == invitee_id:
		raise ForbiddenError("You cannot remove yourself.")
	if decision.user_type is UserType.OWNER:
		return
	actor_role = event.role_of(decision.executor) if decision.executor else None
	target_role = event.role_of(invitee_id)
	if can_remove(actor_role, target_role):
		return
	if actor_role is models.Role.ADMIN:
		raise ForbiddenError("You can only remove users who are Editors or Viewers")
	raise ForbiddenError("You can only remove users who are Viewers")
