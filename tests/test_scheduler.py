from norquay_status.config import SchedulerConfig
from norquay_status.scheduler import build_scheduler


def _noop() -> None:
    return None


def test_disabled_scheduler_is_none():
    assert build_scheduler(_noop, SchedulerConfig(enabled=False)) is None


def test_refresh_job_is_registered():
    scheduler = build_scheduler(_noop, SchedulerConfig(cron="*/20 * * * *"))

    job = scheduler.get_job("refresh-overlay")
    assert job is not None
    assert job.max_instances == 1
    assert not scheduler.running
