"""Request and response models for the events surface."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from zipo.events.domain import models


class EventStatus(str, Enum):
	TODAY = "Today"
	UPCOMING = "Upcoming"
	PASSED = "Passed"


class TodoInput(BaseModel):
	title: str = Field(..., min_length=1)
	note: str


class EventCreateRequest(BaseModel):
	title: str = Field(..., min_length=1)
	date: datetime
	days_btwn_reminder_and_event: Optional[int] = Field(default=None, ge=0)
	todos: list[TodoInput] = Field(default_factory=list)
	bg_cover: str
	invited_emails: list[str] = Field(default_factory=list)
	invite_link_id: Optional[str] = None


class UserSummaryResponse(BaseModel):
	id: UUID
	name: Optional[str] = None
	email: str
	photo: Optional[str] = None

	model_config = ConfigDict(from_attributes=True)


class InviteeResponse(UserSummaryResponse):
	role: models.Role

	model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class InviteeRoleResponse(BaseModel):
	id: UUID
	role: models.Role

	model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class TodoResponse(BaseModel):
	id: UUID
	title: str
	note: str
	is_completed: bool

	model_config = ConfigDict(from_attributes=True)


class EventResponse(BaseModel):
	id: UUID
	title: str
	date: datetime
	reminder_date: datetime
	days_btwn_reminder_and_event: int
	todo_count: int
	todos: list[TodoResponse]
	bg_cover: str
	invited_emails: list[str]
	invitee_roles: list[InviteeRoleResponse]
	invitees: list[InviteeResponse]
	owner: Optional[UserSummaryResponse] = None
	invite_link_id: str
	is_invite_link_active: bool
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class NotificationResponse(BaseModel):
	id: str
	owner: UUID
	initiator: Optional[UserSummaryResponse] = None
	type: str
	message: str
	resource_type: str
	resource_id: UUID
	is_action_required: bool
	action_type: Optional[str] = None
	action_taken: Optional[bool] = None
	created_at: datetime
	expires_at: datetime


class PaginationInfo(BaseModel):
	next_cursor: Optional[str] = None
	total_docs: int
	docs_retrieved: int
	has_next_page: bool


class NotificationPage(BaseModel):
	data: list[NotificationResponse]
	pagination: PaginationInfo
