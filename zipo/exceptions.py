"""Domain exceptions shared by the events, identity and links services."""

from __future__ import annotations

from fastapi import status

if hasattr(status, "HTTP_422_UNPROCESSABLE_CONTENT"):
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_CONTENT
else:  # pragma: no cover - fallback for older Starlette builds
	_HTTP_422 = status.HTTP_422_UNPROCESSABLE_ENTITY


class ZipoError(Exception):
	"""Base class for errors surfaced to API clients."""

	status_code: int = status.HTTP_400_BAD_REQUEST
	code: str = "BAD_REQUEST"
	detail: str = "bad_request"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class NotFoundError(ZipoError):
	"""Event, todo, invitee, user or link is absent."""

	status_code = status.HTTP_404_NOT_FOUND
	code = "NOT_FOUND"
	detail = "not_found"


class UnauthorizedError(ZipoError):
	"""No session or an invalid token."""

	status_code = status.HTTP_401_UNAUTHORIZED
	code = "UNAUTHENTICATED"
	detail = "Please log in to continue"


class ForbiddenError(ZipoError):
	"""Authenticated but not allowed to perform the operation."""

	status_code = status.HTTP_403_FORBIDDEN
	code = "FORBIDDEN"
	detail = "forbidden"


class ConflictError(ZipoError):
	"""Duplicate unique key or a stale write."""

	status_code = status.HTTP_409_CONFLICT
	code = "CONFLICT"
	detail = "conflict"


class ValidationError(ZipoError):
	"""Input rejected by a business rule."""

	status_code = _HTTP_422
	code = "BAD_USER_INPUT"
	detail = "validation_error"


class UpstreamError(ZipoError):
	"""Email or storage provider failure."""

	status_code = status.HTTP_502_BAD_GATEWAY
	code = "UPSTREAM_ERROR"
	detail = "upstream_error"
