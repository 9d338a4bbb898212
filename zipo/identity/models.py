"""Domain models for the identity subsystem."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional
from uuid import UUID

RecordLike = Mapping[str, Any]


def _as_uuid(value: Any) -> UUID:
	if isinstance(value, UUID):
		return value
	return UUID(str(value))


@dataclass(slots=True)
class User:
	"""Core user record, including pending registrations."""

	id: UUID
	email: str
	name: Optional[str]
	photo: Optional[str]
	password_hash: Optional[str]
	is_email_verified: bool
	is_signup_completed: bool
	receive_newsletter: bool
	new_notifications: int
	created_at: datetime
	verify_email_code: Optional[str] = None
	verify_email_expire: Optional[datetime] = None
	reset_password_code: Optional[str] = None
	reset_password_expire: Optional[datetime] = None
	is_reset_password_code_verified: bool = False

	@classmethod
	def from_record(cls, record: RecordLike) -> "User":
		return cls(
			id=_as_uuid(record["id"]),
			email=str(record["email"]),
			name=record.get("name"),
			photo=record.get("photo"),
			password_hash=record.get("password_hash"),
			is_email_verified=bool(record.get("is_email_verified", False)),
			is_signup_completed=bool(record.get("is_signup_completed", False)),
			receive_newsletter=bool(record.get("receive_newsletter", False)),
			new_notifications=int(record.get("new_notifications") or 0),
			created_at=record.get("created_at"),
			verify_email_code=record.get("verify_email_code"),
			verify_email_expire=record.get("verify_email_expire"),
			reset_password_code=record.get("reset_password_code"),
			reset_password_expire=record.get("reset_password_expire"),
			is_reset_password_code_verified=bool(record.get("is_reset_password_code_verified", False)),
		)
