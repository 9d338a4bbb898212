"""Identity guards and helpers for verification and reset sessions."""

from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from email_validator import EmailNotValidError, validate_email

from zipo.exceptions import ValidationError
from zipo.settings import settings

CODE_LENGTH = 5
_CODE_ALPHABET = "123456789"


def normalise_email(email: str) -> str:
	return email.strip().lower()


def guard_email(email: str) -> str:
	normalised = normalise_email(email)
	try:
		validate_email(normalised, check_deliverability=False)
	except EmailNotValidError as exc:
		raise ValidationError("Please add a valid email") from exc
	return normalised


def random_digits(length: int) -> str:
	"""Digits 1-9 only, so codes never start with zero."""
	return "".join(secrets.choice(_CODE_ALPHABET) for _ in range(length))


def new_session_token() -> str:
	return secrets.token_hex(20)


def hash_token(token: str) -> str:
	return hashlib.sha256(token.encode("utf-8")).hexdigest()


def session_expiry(now: datetime | None = None) -> datetime:
	return (now or datetime.now(timezone.utc)) + timedelta(minutes=settings.session_ttl_minutes)


def codes_match(expected: str | None, supplied: str) -> bool:
	if not expected:
		return False
	return secrets.compare_digest(expected, supplied.strip())
