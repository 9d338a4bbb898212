"""Executable GraphQL schema and the FastAPI route that serves it."""

from __future__ import annotations

from ariadne import graphql, make_executable_schema
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from zipo.api.graphql import events, links, notifications, uploads, users
from zipo.api.graphql.context import build_context
from zipo.api.graphql.errors import GRAPHQL_LOGGER, format_error
from zipo.api.graphql.scalars import datetime_scalar
from zipo.api.graphql.type_defs import type_defs
from zipo.settings import settings

schema = make_executable_schema(
	type_defs,
	users.query,
	users.mutation,
	events.query,
	events.mutation,
	notifications.query,
	links.query,
	links.mutation,
	uploads.query,
	datetime_scalar,
	convert_names_case=True,
)

router = APIRouter(tags=["graphql"])


@router.post("/graphql")
async def graphql_server(request: Request) -> JSONResponse:
	try:
		data = await request.json()
	except ValueError:
		return JSONResponse({"errors": [{"message": "Request body must be JSON"}]}, status_code=400)
	_, result = await graphql(
		schema,
		data,
		context_value=build_context(request),
		error_formatter=format_error,
		logger=GRAPHQL_LOGGER,
		debug=settings.graphql_debug,
	)
	# Resolver errors still produce a "data" key; parse and validation failures do not.
	return JSONResponse(result, status_code=200 if "data" in result else 400)
