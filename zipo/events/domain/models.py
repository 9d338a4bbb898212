"""Domain models for events, todos and notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
	"""Invitee role on an event. Ordered by `ROLE_HIERARCHY` in permissions."""

	VIEWER = "Viewer"
	EDITOR = "Editor"
	ADMIN = "Admin"


class NotificationType(str, Enum):
	EVENT_INVITE = "Event Invite"
	EVENT_ARCHIVE = "Event Archive"
	EVENT_DELETE = "Event Delete"
	EVENT_INVITATION_ACCEPTED = "Event Invitation Accepted"
	EVENT_INVITATION_REJECTED = "Event Invitation Rejected"
	INVITEE_REMOVAL = "Invitee Removal"
	INVITEE_ROLE_ASSIGNED = "Invitee Role Assigned"
	TODO_ADDED = "Todo Added"
	TODO_EDITED = "Todo Edited"
	TODO_DELETED = "Todo Deleted"
	TODO_DUPLICATED = "Todo Duplicated"
	TODO_UNMARKED = "Todo Unmarked"
	TODO_COMPLETED = "Todo Completed"


class ResourceType(str, Enum):
	EVENT = "Event"
	TODO = "Todo"


class ActionType(str, Enum):
	ACCEPT_OR_DECLINE_INVITATION = "Accept or Decline Invitation"


class Todo(BaseModel):
	"""A todo item owned by its event."""

	id: UUID = Field(default_factory=uuid4)
	title: str
	note: str
	is_completed: bool = False

	model_config = ConfigDict(from_attributes=True)


class InviteeRole(BaseModel):
	id: UUID
	role: Role = Role.VIEWER

	model_config = ConfigDict(from_attributes=True)


class Event(BaseModel):
	"""An event document with its embedded todos and invitee roles."""

	id: UUID
	title: str
	date: datetime
	reminder_date: datetime
	days_btwn_reminder_and_event: int = 5
	todo_count: int = 0
	todos: list[Todo] = Field(default_factory=list)
	bg_cover: str
	invited_emails: list[str] = Field(default_factory=list)
	invitee_roles: list[InviteeRole] = Field(default_factory=list)
	invitees: list[UUID] = Field(default_factory=list)
	owner_id: UUID
	invite_link_id: str
	is_invite_link_active: bool = True
	created_at: datetime
	version: int = 1

	model_config = ConfigDict(from_attributes=True)

	def role_of(self, user_id: UUID) -> Optional[Role]:
		for entry in self.invitee_roles:
			if entry.id == user_id:
				return entry.role
		return None

	def find_todo(self, todo_id: UUID) -> Optional[Todo]:
		for todo in self.todos:
			if todo.id == todo_id:
				return todo
		return None

	def has_invitee(self, user_id: UUID) -> bool:
		return user_id in self.invitees


class NotificationDraft(BaseModel):
	"""A notification about to be written as part of a write unit."""

	owner: UUID
	initiator: UUID
	type: NotificationType
	message: str
	resource_type: ResourceType = ResourceType.EVENT
	resource_id: UUID
	is_action_required: bool = False
	action_type: Optional[ActionType] = None
	action_taken: Optional[bool] = None


class Notification(NotificationDraft):
	"""A persisted notification."""

	id: int
	created_at: datetime
	expires_at: datetime

	model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
	"""Public projection of a user used to populate owners, invitees and initiators."""

	id: UUID
	name: Optional[str] = None
	email: str
	photo: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)
