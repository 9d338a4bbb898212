"""Authentication helpers for the GraphQL and HTTP surfaces.

Tokens are read from an `Authorization: Bearer` header, falling back to the
`token` cookie. Decoding failures are treated as an anonymous request; the
resolver-level guard decides whether a session is required.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from starlette.requests import HTTPConnection

from zipo.exceptions import UnauthorizedError
from zipo.infra import jwt as jwt_helper

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token"


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	email: str
	name: Optional[str] = None

	def with_profile(self, *, email: str, name: Optional[str]) -> "AuthenticatedUser":
		return AuthenticatedUser(id=self.id, email=email, name=name)


def extract_token(request: HTTPConnection) -> Optional[str]:
	header = request.headers.get("Authorization") or ""
	if header.startswith("Bearer"):
		parts = header.split(" ", 1)
		if len(parts) == 2 and parts[1].strip():
			return parts[1].strip()
	cookie = request.cookies.get(TOKEN_COOKIE)
	return cookie or None


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception as exc:
		raise UnauthorizedError() from exc
	sub = str(payload.get("sub") or "").strip()
	if not sub:
		raise UnauthorizedError()
	return AuthenticatedUser(id=sub, email=str(payload.get("email") or ""))


def resolve_user(request: HTTPConnection) -> Optional[AuthenticatedUser]:
	token = extract_token(request)
	if not token:
		return None
	try:
		return verify_access_jwt(token)
	except UnauthorizedError:
		logger.info("auth_token_rejected")
		return None
