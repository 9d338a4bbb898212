"""Pydantic schemas for identity flows."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
	id: UUID
	email: str
	name: Optional[str] = None
	photo: Optional[str] = None
	is_email_verified: bool
	receive_newsletter: bool
	new_notifications: int
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)


class RegisterRequest(BaseModel):
	token: str
	name: Annotated[str, Field(min_length=1, max_length=80)]
	password: Annotated[str, Field(min_length=6)]


class AuthResult(BaseModel):
	"""A user paired with a freshly issued access token."""

	user: UserResponse
	token: str
