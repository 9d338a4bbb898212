"""Custom scalars."""

from __future__ import annotations

from datetime import datetime, timezone

from ariadne import ScalarType

datetime_scalar = ScalarType("DateTime")


@datetime_scalar.serializer
def serialize_datetime(value):
	if isinstance(value, datetime):
		return value.isoformat()
	return str(value)


@datetime_scalar.value_parser
def parse_datetime(value):
	if not isinstance(value, str):
		raise ValueError("DateTime must be an ISO 8601 string")
	parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
	if parsed.tzinfo is None:
		parsed = parsed.replace(tzinfo=timezone.utc)
	return parsed
