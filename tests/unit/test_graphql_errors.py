import logging

from graphql import GraphQLError

from zipo.api.graphql.errors import DomainErrorFilter, format_error
from zipo.exceptions import ForbiddenError


def _record(error: Exception) -> logging.LogRecord:
	return logging.LogRecord("zipo.graphql", logging.ERROR, __file__, 1, str(error), None, (type(error), error, None))


def test_domain_errors_are_not_logged():
	forbidden = ForbiddenError("You are not authorized to view this event.")
	wrapped = GraphQLError(str(forbidden), original_error=forbidden)

	assert DomainErrorFilter().filter(_record(forbidden)) is False
	assert DomainErrorFilter().filter(_record(wrapped)) is False


def test_unexpected_errors_are_still_logged():
	crash = RuntimeError("boom")
	wrapped = GraphQLError("boom", original_error=crash)

	assert DomainErrorFilter().filter(_record(crash)) is True
	assert DomainErrorFilter().filter(_record(wrapped)) is True
	assert DomainErrorFilter().filter(logging.LogRecord("zipo.graphql", logging.INFO, __file__, 1, "ok", None, None)) is True


def test_format_error_carries_domain_code():
	forbidden = ForbiddenError("You are not authorized to view this event.")

	formatted = format_error(GraphQLError(str(forbidden), original_error=forbidden))

	assert formatted["extensions"]["code"] == "FORBIDDEN"
