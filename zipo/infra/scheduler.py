"""Maintenance schedule for notification and registration cleanup."""

from __future__ import annotations

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from zipo.events.jobs.notification_gc import NotificationGarbageCollector
from zipo.identity.jobs import PendingRegistrationCollector
from zipo.settings import settings

NOTIFICATIONS_GC_JOB = "notifications-gc"
PENDING_REGISTRATIONS_GC_JOB = "pending-registrations-gc"


def build_maintenance_scheduler(
    *,
    notification_gc: Optional[NotificationGarbageCollector] = None,
    registration_gc: Optional[PendingRegistrationCollector] = None,
) -> AsyncIOScheduler:
    """Return an unstarted scheduler with both cleanup jobs registered.

    A run that is still going when the next one is due is skipped, not stacked.
    """
    scheduler = AsyncIOScheduler(timezone="UTC")
    notification_gc = notification_gc or NotificationGarbageCollector()
    registration_gc = registration_gc or PendingRegistrationCollector()
    scheduler.add_job(
        notification_gc.run_once,
        trigger=IntervalTrigger(hours=settings.notification_gc_interval_hours),
        id=NOTIFICATIONS_GC_JOB,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        registration_gc.run_once,
        trigger=IntervalTrigger(hours=1),
        id=PENDING_REGISTRATIONS_GC_JOB,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


__all__ = [
    "NOTIFICATIONS_GC_JOB",
    "PENDING_REGISTRATIONS_GC_JOB",
    "build_maintenance_scheduler",
]
