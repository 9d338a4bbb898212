"""User and auth resolvers."""

from __future__ import annotations

from ariadne import MutationType, QueryType

from zipo.api.graphql.guards import protect
from zipo.api.graphql.responses import dump, success
from zipo.identity import schemas
from zipo.identity.service import IdentityService, to_response

query = QueryType()
mutation = MutationType()
_service = IdentityService()


@query.field("user")
@protect
async def resolve_user(_, info, user):
	return dump(to_response(await _service.get_user(user.id)))


@query.field("user_getById")
@protect
async def resolve_user_by_id(_, info, user, id):
	return dump(to_response(await _service.get_user(id)))


@mutation.field("auth_sendVerificationCode")
async def resolve_send_verification_code(_, info, email):
	return success(200, token=await _service.send_verification_code(email))


@mutation.field("auth_resendVerificationCode")
async def resolve_resend_verification_code(_, info, token):
	return success(200, token=await _service.resend_verification_code(token))


@mutation.field("auth_verifyEmail")
async def resolve_verify_email(_, info, token, code):
	return success(200, token=await _service.verify_email(token, code))


@mutation.field("auth_register")
async def resolve_register(_, info, token, name, password):
	result = await _service.register(schemas.RegisterRequest(token=token, name=name, password=password))
	return success(201, result.user, result.token)


@mutation.field("auth_login")
async def resolve_login(_, info, email, password):
	result = await _service.login(email, password)
	return success(200, result.user, result.token)


@mutation.field("auth_sendResetPasswordMail")
async def resolve_send_reset_password_mail(_, info, email):
	return success(200, token=await _service.send_reset_password_mail(email))


@mutation.field("auth_resendResetPasswordMail")
async def resolve_resend_reset_password_mail(_, info, token):
	return success(200, token=await _service.resend_reset_password_mail(token))


@mutation.field("auth_verifyResetPasswordCode")
async def resolve_verify_reset_password_code(_, info, token, code):
	return success(200, token=await _service.verify_reset_password_code(token, code))


@mutation.field("auth_resetPassword")
async def resolve_reset_password(_, info, token, password):
	await _service.reset_password(token, password)
	return success(200)
