import logging

import pytest

from epg_browser.exceptions import UpstreamUnavailable
from epg_browser.services.fetch_types import RefreshResult
from epg_browser.services.scheduler_service import JOB_ID, RefreshScheduler


class FakeRefreshService:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls = 0

    async def refresh(self) -> RefreshResult:
        self.calls += 1
        if self.error:
            raise self.error
        return RefreshResult(channel_count=3, last_update="2024-01-01T03:00:00.000Z", files_total=1, files_failed=0)


@pytest.mark.asyncio
async def test_scheduler_registers_cron_job():
    scheduler = RefreshScheduler(FakeRefreshService(), "0 3 * * *")

    scheduler.start()
    try:
        assert scheduler.running
        job = scheduler.scheduler.get_job(JOB_ID)
        assert job.max_instances == 1
        assert job.coalesce is True
        next_run = scheduler.get_next_run_time()
        assert (next_run.hour, next_run.minute) == (3, 0)
    finally:
        scheduler.shutdown()

    assert not scheduler.running
    assert scheduler.get_next_run_time() is None


@pytest.mark.asyncio
async def test_scheduled_job_logs_refresh_failure(caplog):
    caplog.set_level(logging.ERROR)
    service = FakeRefreshService(UpstreamUnavailable("tree listing failed"))
    scheduler = RefreshScheduler(service, "0 3 * * *")

    await scheduler._refresh_job()

    assert service.calls == 1
    assert "tree listing failed" in caplog.text


def test_invalid_cron_is_rejected():
    scheduler = RefreshScheduler(FakeRefreshService(), "not a cron")

    with pytest.raises(ValueError):
        scheduler.start()
    assert not scheduler.running
