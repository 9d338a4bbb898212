"""Error formatting for GraphQL responses."""

from __future__ import annotations

import logging
from typing import Any

import pydantic
from ariadne import format_error as default_format_error
from graphql import GraphQLError

from zipo.exceptions import ZipoError
from zipo.obs import logging as obs_logging
from zipo.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

GRAPHQL_LOGGER = "zipo.graphql"


class DomainErrorFilter(logging.Filter):
	"""Drops execution logs for domain errors; clients already see them in `errors`."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if not record.exc_info:
			return True
		error = record.exc_info[1]
		if isinstance(error, GraphQLError) and error.original_error is not None:
			error = error.original_error
		return not isinstance(error, ZipoError)


logging.getLogger(GRAPHQL_LOGGER).addFilter(DomainErrorFilter())


def format_error(error: GraphQLError, debug: bool = False) -> dict[str, Any]:
	formatted = default_format_error(error, debug)
	original = error.original_error
	if isinstance(original, ZipoError):
		code, status = original.code, original.status_code
		formatted["message"] = original.detail
	elif isinstance(original, pydantic.ValidationError):
		code, status = "BAD_USER_INPUT", 422
		formatted["message"] = "; ".join(err["msg"] for err in original.errors()) or "validation_error"
	elif original is None:
		code, status = "GRAPHQL_VALIDATION_FAILED", 400
	else:
		code, status = "INTERNAL_SERVER_ERROR", 500
		logger.error("graphql_resolver_failed", exc_info=original)
		if not debug:
			formatted["message"] = "Internal server error"
	extensions = dict(formatted.get("extensions") or {})
	extensions.update({"code": code, "status": status})
	request_id = obs_logging.current_request_id()
	if request_id:
		extensions["request_id"] = request_id
	formatted["extensions"] = extensions
	obs_metrics.graphql_error(code)
	return formatted
