"""Unit tests for the scheduler service.

Tests the SchedulerService including:
- Cron trigger construction (Quartz 6-field and crontab 5-field)
- Job registration with max_instances=1 and coalescing
- Optional run on startup
- Run uniqueness between scheduled and manual ticks
- Start/shutdown lifecycle
"""

import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock, Mock

import pytest
from apscheduler.triggers.cron import CronTrigger

from ticket_notifier.config.cron import CronParseError
from ticket_notifier.scheduler import JOB_ID, SchedulerService


class TestSchedulerService:
    """Test suite for SchedulerService."""

    def test_scheduler_initialization(self):
        mock_callable = Mock()
        shutdown_event = threading.Event()

        scheduler = SchedulerService(
            tick_callable=mock_callable,
            cron_expression="0 */5 * ? * *",
            shutdown_event=shutdown_event,
        )

        assert scheduler.tick_callable is mock_callable
        assert scheduler.shutdown_event is shutdown_event
        assert isinstance(scheduler.trigger, CronTrigger)
        assert not scheduler.is_running()

    def test_scheduler_job_defaults(self):
        scheduler = SchedulerService(tick_callable=Mock())

        assert scheduler.scheduler._job_defaults["max_instances"] == 1
        assert scheduler.scheduler._job_defaults["coalesce"] is True
        assert scheduler.scheduler._job_defaults["misfire_grace_time"] == 60

    def test_invalid_cron_rejected(self):
        with pytest.raises(CronParseError):
            SchedulerService(tick_callable=Mock(), cron_expression="every five minutes")

    def test_start_registers_cron_job(self):
        fake_scheduler = MagicMock()
        fake_scheduler.running = False
        service = SchedulerService(tick_callable=Mock(), scheduler=fake_scheduler)

        service.start()

        kwargs = fake_scheduler.add_job.call_args.kwargs
        assert kwargs["id"] == JOB_ID
        assert kwargs["func"] == service.run_exclusive
        assert kwargs["trigger"] is service.trigger
        assert kwargs["replace_existing"] is True
        assert "next_run_time" not in kwargs
        fake_scheduler.start.assert_called_once()

    def test_run_on_startup_schedules_immediate_run(self):
        fake_scheduler = MagicMock()
        fake_scheduler.running = False
        service = SchedulerService(tick_callable=Mock(), run_on_startup=True, scheduler=fake_scheduler)

        service.start()

        next_run = fake_scheduler.add_job.call_args.kwargs["next_run_time"]
        assert abs((datetime.now(timezone.utc) - next_run).total_seconds()) < 5

    def test_scheduler_start_and_shutdown(self):
        shutdown_event = threading.Event()
        scheduler = SchedulerService(tick_callable=Mock(), shutdown_event=shutdown_event)

        scheduler.start()
        assert scheduler.is_running()

        next_run = scheduler.get_next_run_time()
        assert next_run is not None
        assert next_run.second == 0
        assert next_run.minute % 5 == 0

        scheduler.shutdown(wait=False)
        assert not scheduler.is_running()
        assert shutdown_event.is_set()

    def test_run_on_startup_executes_tick(self):
        ran = threading.Event()
        scheduler = SchedulerService(
            tick_callable=ran.set,
            cron_expression="0 0 1 1 *",
            run_on_startup=True,
        )

        scheduler.start()
        try:
            assert ran.wait(timeout=5)
        finally:
            scheduler.shutdown(wait=True)

    def test_trigger_now_executes_synchronously(self):
        tick = Mock(return_value="result")
        scheduler = SchedulerService(tick_callable=tick)

        assert scheduler.trigger_now() == "result"
        tick.assert_called_once()

    def test_overlapping_tick_is_skipped(self, caplog):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_tick():
            calls.append(1)
            started.set()
            release.wait(5)
            return "done"

        scheduler = SchedulerService(tick_callable=slow_tick)
        runner = threading.Thread(target=scheduler.run_exclusive)
        runner.start()
        try:
            assert started.wait(5)
            assert scheduler.is_tick_in_flight()

            assert scheduler.trigger_now() is None
        finally:
            release.set()
            runner.join(5)

        assert len(calls) == 1
        assert not scheduler.is_tick_in_flight()
        assert any(getattr(r, "event", None) == "scheduler.tick.skipped" for r in caplog.records)

    def test_tick_exception_is_contained(self):
        scheduler = SchedulerService(tick_callable=Mock(side_effect=RuntimeError("boom")))

        assert scheduler.trigger_now() is None
        assert not scheduler.is_tick_in_flight()

    def test_get_next_run_time_before_start(self):
        scheduler = SchedulerService(tick_callable=Mock())
        assert scheduler.get_next_run_time() is None
