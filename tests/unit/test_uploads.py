from uuid import uuid4

import pytest
from botocore.exceptions import ClientError

from zipo.exceptions import UpstreamError, ValidationError
from zipo.infra.auth import AuthenticatedUser
from zipo.uploads.service import UploadPurpose, get_upload_url, object_key


class FakeS3Client:
	def __init__(self, error=None):
		self.calls = []
		self.error = error

	def generate_presigned_url(self, operation, Params, ExpiresIn):
		if self.error is not None:
			raise self.error
		self.calls.append((operation, Params, ExpiresIn))
		return f"https://uploads.example/{Params['Key']}?signature=abc"


@pytest.fixture
def user():
	return AuthenticatedUser(id=str(uuid4()), email="ada@zipo.me", name="Ada")


def test_profile_photo_key_is_stable(user):
	assert object_key(UploadPurpose.PROFILE_PHOTO, "image/png", user_id=user.id) == f"user/profile-photo/{user.id}.png"


def test_event_backdrop_key_is_random():
	first = object_key(UploadPurpose.EVENT_BACKDROP, "image/jpeg", user_id="u")
	second = object_key(UploadPurpose.EVENT_BACKDROP, "image/jpeg", user_id="u")

	assert first.startswith("event/") and first.endswith(".jpeg")
	assert first != second


def test_rejects_other_content_types():
	with pytest.raises(ValidationError) as exc:
		object_key(UploadPurpose.EVENT_BACKDROP, "image/gif", user_id="u")
	assert exc.value.detail == "Please upload a jpeg or png file"


def test_get_upload_url_signs_put(user):
	client = FakeS3Client()

	ticket = get_upload_url(user, UploadPurpose.PROFILE_PHOTO, "image/jpeg", client=client)

	assert ticket.key == f"/user/profile-photo/{user.id}.jpeg"
	assert ticket.upload_url.startswith("https://uploads.example/user/profile-photo/")
	operation, params, _ = client.calls[0]
	assert operation == "put_object"
	assert params["ContentType"] == "image/jpeg"


def test_signing_failure_is_upstream_error(user):
	error = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
	client = FakeS3Client(error=error)

	with pytest.raises(UpstreamError):
		get_upload_url(user, UploadPurpose.EVENT_BACKDROP, "image/png", client=client)
