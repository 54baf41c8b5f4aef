# -*- coding: utf-8 -*-
"""
tests/shared/scheduler/test_scheduler_service.py

SchedulerService: registro de jobs por intervalo, arranque y parada.
"""

import asyncio

import pytest

from pylinks.shared.scheduler import SchedulerService


async def _noop(**kwargs):
    return kwargs


class TestSchedulerService:
    def test_add_interval_job_replaces_existing(self):
        scheduler = SchedulerService()
        scheduler.add_interval_job(_noop, job_id="sweep", seconds=60, label="a")
        scheduler.add_interval_job(_noop, job_id="sweep", seconds=30, label="b")

        jobs = scheduler.get_jobs()
        assert [j["id"] for j in jobs] == ["sweep"]
        assert "0:00:30" in jobs[0]["trigger"]
        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_start_and_shutdown(self):
        scheduler = SchedulerService()
        scheduler.add_interval_job(_noop, job_id="tick", seconds=3600)

        scheduler.start()
        scheduler.start()
        assert scheduler.is_running is True
        [job] = scheduler.get_jobs()
        assert job["next_run"] is not None

        scheduler.shutdown(wait=False)
        assert scheduler.is_running is False
        await asyncio.sleep(0)
        scheduler.shutdown()
        assert scheduler.is_running is False

    @pytest.mark.asyncio
    async def test_replacing_a_job_after_start(self):
        scheduler = SchedulerService()
        scheduler.start()
        scheduler.add_interval_job(_noop, job_id="sweep", seconds=60)
        scheduler.add_interval_job(_noop, job_id="sweep", seconds=15)

        [job] = scheduler.get_jobs()
        assert "0:00:15" in job["trigger"]
        scheduler.shutdown(wait=False)
        await asyncio.sleep(0)
