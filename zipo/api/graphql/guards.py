"""Resolver guards."""

from __future__ import annotations

import functools
from uuid import UUID

from zipo.exceptions import UnauthorizedError
from zipo.identity.repo import UsersRepository
from zipo.infra.auth import AuthenticatedUser
from zipo.obs import logging as obs_logging

_users = UsersRepository()


async def current_user(info) -> AuthenticatedUser:
	"""Load the caller from the store; a valid token for a deleted user is rejected."""
	cached = info.context.get("current_user")
	if cached is not None:
		return cached
	claims = info.context.get("user")
	if claims is None:
		raise UnauthorizedError()
	try:
		user_id = UUID(str(claims.id))
	except ValueError as exc:
		raise UnauthorizedError() from exc
	record = await _users.get_user(user_id)
	if record is None:
		raise UnauthorizedError()
	user = claims.with_profile(email=record.email, name=record.name)
	info.context["current_user"] = user
	obs_logging.bind_user(user.id)
	return user


def protect(resolver):
	"""Require a logged in user and pass it to the resolver as the third argument."""

	@functools.wraps(resolver)
	async def wrapper(obj, info, **kwargs):
		user = await current_user(info)
		return await resolver(obj, info, user, **kwargs)

	return wrapper
