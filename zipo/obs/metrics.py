"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"zipo_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"zipo_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

GRAPHQL_ERRORS = Counter(
	"zipo_graphql_errors_total",
	"GraphQL errors returned to clients",
	["code"],
)

EVENT_MUTATIONS = Counter(
	"zipo_event_mutations_total",
	"Committed event mutations",
	["operation"],
)

EVENT_WRITE_ROLLBACKS = Counter(
	"zipo_event_write_rollbacks_total",
	"Event write units aborted and rolled back",
	["operation"],
)

NOTIFICATIONS_PERSISTED = Counter(
	"zipo_notifications_persisted_total",
	"Notifications written alongside event mutations",
	["type"],
)

NOTIFICATION_EMIT_FAILURES = Counter(
	"zipo_notification_emit_failures_total",
	"Notification stream publish failures",
	["stream"],
)

EMAILS_SENT = Counter(
	"zipo_emails_total",
	"Outbound emails by template and result",
	["template", "result"],
)

LINKS_RESOLVED = Counter(
	"zipo_links_resolved_total",
	"Short link resolutions",
	["result"],
)

LINKS_CREATED = Counter(
	"zipo_links_created_total",
	"Links created",
	["type"],
)

AUTH_EVENTS = Counter(
	"zipo_auth_events_total",
	"Identity flow outcomes",
	["flow", "result"],
)


BACKGROUND_RUNS = Counter(
	"zipo_background_runs_total",
	"Background job runs",
	["name", "result"],
)

BACKGROUND_DURATION = Histogram(
	"zipo_background_duration_seconds",
	"Background job duration in seconds",
	["name"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def graphql_error(code: str) -> None:
	GRAPHQL_ERRORS.labels(code=code).inc()


def inc_event_mutation(operation: str) -> None:
	EVENT_MUTATIONS.labels(operation=operation).inc()


def inc_event_rollback(operation: str) -> None:
	EVENT_WRITE_ROLLBACKS.labels(operation=operation).inc()


def notifications_persisted(type: str, count: int) -> None:
	if count > 0:
		NOTIFICATIONS_PERSISTED.labels(type=type).inc(count)


def notification_emit_failure(stream: str) -> None:
	NOTIFICATION_EMIT_FAILURES.labels(stream=stream).inc()


def email_sent(template: str, result: str) -> None:
	EMAILS_SENT.labels(template=template, result=result).inc()


def link_resolved(result: str) -> None:
	LINKS_RESOLVED.labels(result=result).inc()


def link_created(type: str) -> None:
	LINKS_CREATED.labels(type=type).inc()


def auth_event(flow: str, result: str) -> None:
	AUTH_EVENTS.labels(flow=flow, result=result).inc()
