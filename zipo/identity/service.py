"""Registration, login and password reset flows."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from zipo.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from zipo.identity import models, policy, schemas
from zipo.identity.repo import UsersRepository
from zipo.infra import jwt as jwt_helper
from zipo.infra.mailer import Mailer, get_mailer, mask_email
from zipo.infra.password import check_needs_rehash, hash_password, verify_password
from zipo.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

WELCOME_BODY = "Welcome to the Events App. Create your first event and keep track of it effectively"


def _now() -> datetime:
	return datetime.now(timezone.utc)


def _verification_body(code: str) -> str:
	return f"{code} is your verification code. Expires in 10 minutes. Thanks."


def _reset_body(name: str | None, code: str) -> str:
	greeting = f"Hi {name}" if name else "Hi"
	return f"{greeting}, {code} is your reset password code. Expires in 10 minutes. Thanks"


def to_response(user: models.User) -> schemas.UserResponse:
	return schemas.UserResponse.model_validate(user)


class IdentityService:
	"""Email based sign up and credential management."""

	def __init__(self, repository: UsersRepository | None = None, *, mailer: Mailer | None = None) -> None:
		self.repo = repository or UsersRepository()
		self._mailer = mailer

	@property
	def mailer(self) -> Mailer:
		return self._mailer or get_mailer()

	# --- Profiles ----------------------------------------------------------

	async def get_user(self, user_id: UUID | str) -> models.User:
		try:
			key = user_id if isinstance(user_id, UUID) else UUID(str(user_id))
		except ValueError as exc:
			raise NotFoundError("User not found") from exc
		user = await self.repo.get_user(key)
		if user is None:
			raise NotFoundError("User not found")
		return user

	# --- Registration ------------------------------------------------------

	async def send_verification_code(self, email: str) -> str:
		"""Open a registration session and email its code. Returns the raw session token."""
		normalised = policy.guard_email(email)
		if await self.repo.find_completed_by_email(normalised):
			obs_metrics.auth_event("verification_code", "email_taken")
			raise ConflictError("Email taken")
		token = policy.new_session_token()
		code = policy.random_digits(policy.CODE_LENGTH)
		await self.repo.upsert_pending(
			normalised,
			token_hash=policy.hash_token(token),
			code=code,
			expires_at=policy.session_expiry(),
		)
		await self.mailer.send(normalised, "Your verification code", _verification_body(code), template="verification_code")
		obs_metrics.auth_event("verification_code", "sent")
		return token

	async def resend_verification_code(self, token: str) -> str:
		pending = await self.repo.find_by_verify_token(policy.hash_token(token), now=_now())
		if pending is None:
			raise ValidationError("Registration session expired.")
		await self.repo.extend_verify_session(pending.id, expires_at=policy.session_expiry())
		await self.mailer.send(
			pending.email,
			"Your verification code",
			_verification_body(pending.verify_email_code or ""),
			template="verification_code",
		)
		obs_metrics.auth_event("verification_code", "resent")
		return token

	async def verify_email(self, token: str, code: str) -> str:
		pending = await self.repo.find_by_verify_token(policy.hash_token(token), now=_now())
		if pending is None:
			raise ValidationError("Registration session expired.")
		if await self.repo.find_completed_by_email(pending.email):
			raise ConflictError("Email taken.")
		if not policy.codes_match(pending.verify_email_code, code):
			obs_metrics.auth_event("verify_email", "incorrect_code")
			raise ValidationError("Incorrect code.")
		await self.repo.mark_email_verified(pending.id)
		obs_metrics.auth_event("verify_email", "verified")
		return token

	async def register(self, payload: schemas.RegisterRequest) -> schemas.AuthResult:
		pending = await self.repo.find_by_verify_token(policy.hash_token(payload.token), now=_now())
		if pending is None:
			raise ValidationError("Registration session expired.")
		if not pending.is_email_verified:
			raise ValidationError("Please verify your email first.")
		user = await self.repo.complete_signup(
			pending.id,
			name=payload.name.strip(),
			password_hash=hash_password(payload.password),
		)
		token = jwt_helper.encode_access(user_id=str(user.id), email=user.email)
		await self.mailer.send_best_effort(user.email, f"Welcome {user.name}", WELCOME_BODY, template="welcome")
		obs_metrics.auth_event("register", "completed")
		logger.info("user_registered", extra={"user_id": str(user.id)})
		return schemas.AuthResult(user=to_response(user), token=token)

	async def prune_pending_registrations(self, *, now: datetime | None = None) -> int:
		return await self.repo.delete_expired_pending(now=now or _now())

	# --- Login -------------------------------------------------------------

	async def login(self, email: str, password: str) -> schemas.AuthResult:
		user = await self.repo.find_completed_by_email(policy.normalise_email(email))
		if user is None or not verify_password(user.password_hash, password):
			obs_metrics.auth_event("login", "invalid_credentials")
			raise UnauthorizedError("Invalid credentials")
		if user.password_hash and check_needs_rehash(user.password_hash):
			await self.repo.update_password_hash(user.id, hash_password(password))
		obs_metrics.auth_event("login", "ok")
		token = jwt_helper.encode_access(user_id=str(user.id), email=user.email)
		return schemas.AuthResult(user=to_response(user), token=token)

	# --- Password reset ----------------------------------------------------

	async def send_reset_password_mail(self, email: str) -> str:
		normalised = policy.normalise_email(email)
		user = await self.repo.find_completed_by_email(normalised)
		if user is None:
			raise NotFoundError("Email does not belong to any user")
		token = policy.new_session_token()
		code = policy.random_digits(policy.CODE_LENGTH)
		await self.repo.set_reset_session(
			user.id,
			token_hash=policy.hash_token(token),
			code=code,
			expires_at=policy.session_expiry(),
		)
		await self.mailer.send(user.email, "Your Reset Password Code", _reset_body(user.name, code), template="reset_password")
		obs_metrics.auth_event("reset_password", "requested")
		return token

	async def resend_reset_password_mail(self, token: str) -> str:
		user = await self.repo.find_by_reset_token(policy.hash_token(token), now=_now())
		if user is None:
			raise ValidationError("Registration session expired.")
		await self.repo.extend_reset_session(user.id, expires_at=policy.session_expiry())
		sent = await self.mailer.send_best_effort(
			user.email,
			"Your Reset Password Code",
			_reset_body(user.name, user.reset_password_code or ""),
			template="reset_password",
		)
		if not sent:
			logger.warning("reset_password_resend_failed", extra={"recipient": mask_email(user.email)})
		return token

	async def verify_reset_password_code(self, token: str, code: str) -> str:
		user = await self.repo.find_by_reset_token(policy.hash_token(token), now=_now())
		if user is None:
			raise ValidationError("Invalid token")
		if not policy.codes_match(user.reset_password_code, code):
			obs_metrics.auth_event("reset_password", "incorrect_code")
			raise ValidationError("Incorrect code")
		await self.repo.mark_reset_code_verified(user.id)
		return token

	async def reset_password(self, token: str, password: str) -> None:
		user = await self.repo.find_by_reset_token(policy.hash_token(token), now=_now())
		if user is None:
			raise ValidationError("Invalid token")
		if not user.is_reset_password_code_verified:
			raise ValidationError("Reset password code not yet verified")
		await self.repo.reset_password(user.id, hash_password(password))
		obs_metrics.auth_event("reset_password", "completed")
		logger.info("password_reset", extra={"user_id": str(user.id)})
