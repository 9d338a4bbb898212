from datetime import timedelta

from zipo.infra import scheduler as scheduler_module
from zipo.infra.scheduler import NOTIFICATIONS_GC_JOB, PENDING_REGISTRATIONS_GC_JOB, build_maintenance_scheduler


class _Collector:
	async def run_once(self) -> int:
		return 0


def test_registers_both_cleanup_jobs(monkeypatch):
	monkeypatch.setattr(scheduler_module.settings, "notification_gc_interval_hours", 6)
	notification_gc, registration_gc = _Collector(), _Collector()

	scheduler = build_maintenance_scheduler(notification_gc=notification_gc, registration_gc=registration_gc)
	jobs = {job.id: job for job in scheduler.get_jobs()}

	assert set(jobs) == {NOTIFICATIONS_GC_JOB, PENDING_REGISTRATIONS_GC_JOB}
	assert jobs[NOTIFICATIONS_GC_JOB].trigger.interval == timedelta(hours=6)
	assert jobs[PENDING_REGISTRATIONS_GC_JOB].trigger.interval == timedelta(hours=1)
	assert jobs[NOTIFICATIONS_GC_JOB].func == notification_gc.run_once
	assert jobs[PENDING_REGISTRATIONS_GC_JOB].func == registration_gc.run_once
	assert all(job.max_instances == 1 and job.coalesce for job in jobs.values())
