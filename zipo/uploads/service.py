"""Presigned upload URLs for profile photos and event backdrops."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from zipo.exceptions import ValidationError
from zipo.identity.policy import random_digits
from zipo.infra import s3
from zipo.infra.auth import AuthenticatedUser

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png")


class UploadPurpose(str, Enum):
	PROFILE_PHOTO = "Profile_Photo"
	EVENT_BACKDROP = "Event_Backdrop"


@dataclass(slots=True)
class UploadTicket:
	key: str
	upload_url: str


def object_key(purpose: UploadPurpose, content_type: str, *, user_id: str) -> str:
	if content_type not in ALLOWED_CONTENT_TYPES:
		raise ValidationError("Please upload a jpeg or png file")
	extension = content_type.split("/", 1)[1]
	if purpose is UploadPurpose.PROFILE_PHOTO:
		return f"user/profile-photo/{user_id}.{extension}"
	return f"event/{random_digits(20)}.{extension}"


def get_upload_url(user: AuthenticatedUser, purpose: UploadPurpose, content_type: str, *, client=None) -> UploadTicket:
	key = object_key(purpose, content_type, user_id=str(user.id))
	return UploadTicket(key=f"/{key}", upload_url=s3.sign_upload_url(key, content_type, client=client))
