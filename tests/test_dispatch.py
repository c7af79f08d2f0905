"""Tests for background delivery."""

import asyncio
import logging

import pytest
from pokerarena.dispatch import BackgroundDispatcher, RecordWriter
from pokerarena.storage import GameRecord, InMemoryStore


def _drain(dispatcher: BackgroundDispatcher, *jobs) -> BackgroundDispatcher:
    async def go():
        dispatcher.start()
        for i, job in enumerate(jobs):
            dispatcher.submit(f"job{i}", job)
        await dispatcher.close()

    asyncio.run(go())
    return dispatcher


class TestBackgroundDispatcher:
    def test_runs_jobs_in_order(self):
        done = []

        def job(n):
            async def run():
                done.append(n)
            return run

        dispatcher = _drain(BackgroundDispatcher("test"), job(1), job(2), job(3))
        assert done == [1, 2, 3]
        assert dispatcher.delivered == 3
        assert not dispatcher.running

    def test_retries_until_success(self):
        attempts = []

        async def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise OSError("busy")

        dispatcher = _drain(BackgroundDispatcher("test", retries=2), flaky)
        assert len(attempts) == 3
        assert dispatcher.delivered == 1
        assert dispatcher.failed == 0

    def test_gives_up(self, caplog):
        attempts = []

        async def broken():
            attempts.append(1)
            raise OSError("disk full")

        with caplog.at_level(logging.WARNING, logger="pokerarena.dispatch"):
            dispatcher = _drain(BackgroundDispatcher("test", retries=1), broken)

        assert len(attempts) == 2
        assert dispatcher.failed == 1
        assert "disk full" in caplog.text

    def test_failure_does_not_stop_later_jobs(self):
        done = []

        async def broken():
            raise RuntimeError("boom")

        async def fine():
            done.append(True)

        dispatcher = _drain(BackgroundDispatcher("test"), broken, fine)
        assert done == [True]
        assert (dispatcher.failed, dispatcher.delivered) == (1, 1)

    def test_submit_before_start(self):
        async def noop():
            pass

        with pytest.raises(RuntimeError):
            BackgroundDispatcher("test").submit("noop", noop)


class BrokenStore:
    async def append(self, record):
        raise ValueError("schema mismatch")

    async def get(self, kind, record_id):
        return None


class TestRecordWriter:
    def test_writes_records(self):
        store = InMemoryStore()

        async def go():
            writer = RecordWriter(store)
            writer.start()
            writer.write(GameRecord(id="g1"))
            await writer.close()

        asyncio.run(go())
        assert [r.id for r in store.all("game")] == ["g1"]

    def test_store_errors_are_reported(self, caplog):
        async def go():
            writer = RecordWriter(BrokenStore(), retries=0)
            writer.start()
            writer.write(GameRecord(id="g1"))
            await writer.close()
            return writer

        with caplog.at_level(logging.WARNING, logger="pokerarena.dispatch"):
            writer = asyncio.run(go())

        assert writer.dispatcher.failed == 1
        assert "game g1: schema mismatch" in caplog.text
