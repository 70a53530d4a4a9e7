"""
Tests for the visit logging pipeline: queue, recorder, storage and worker.
"""

import asyncio
import logging

import pytest
import redis

from shortlink_app.config import Settings
from shortlink_app.models import LogEntry
from shortlink_app.queue.factory import QueueBackend, QueueFactory
from shortlink_app.queue.models import VisitEvent
from shortlink_app.queue.strategies import InMemoryQueue
from shortlink_app.hit_processor.visit_worker import VisitLogWorker
from shortlink_app.services.visit_recorder import VisitRecorder
from shortlink_app.storage.strategies import NullVisitStorage, SQLVisitStorage

QUEUE = "test_visits"


def make_event(slug="abc1", **fields):
    fields.setdefault("url", "https://example.com/page")
    return VisitEvent(slug=slug, **fields)


class BrokenStorage(NullVisitStorage):
    async def store_visits(self, events):
        raise RuntimeError("database is locked")


class RecordingQueue(InMemoryQueue):
    """In-memory queue that remembers acknowledgments."""

    def __init__(self):
        super().__init__()
        self.acked = []

    async def ack(self, queue_name, message_ids):
        self.acked.extend(message_ids)
        return True


class TestInMemoryQueue:
    def test_consume_in_publish_order(self):
        queue = InMemoryQueue()
        for slug in ("aa", "bb", "cc"):
            asyncio.run(queue.publish(QUEUE, make_event(slug)))

        batch = asyncio.run(queue.consume(QUEUE, batch_size=2))
        assert [event.slug for event in batch] == ["aa", "bb"]
        assert asyncio.run(queue.get_queue_length(QUEUE)) == 1

    def test_empty_queue(self):
        queue = InMemoryQueue()
        assert asyncio.run(queue.consume(QUEUE, batch_size=10)) == []


class TestQueueFactory:
    def test_memory_backend_is_cached(self):
        QueueFactory.clear_instance()
        try:
            first = QueueFactory.create(QueueBackend.MEMORY)
            second = QueueFactory.create(QueueBackend.MEMORY)
            assert isinstance(first, InMemoryQueue)
            assert first is second
        finally:
            QueueFactory.clear_instance()


class TestVisitRecorder:
    def test_writes_to_storage(self, db_session, session_factory):
        recorder = VisitRecorder(storage=SQLVisitStorage(session_factory))

        asyncio.run(recorder.record(make_event(ip="203.0.113.7", ua="agent", referer="https://ref/")))

        entry = db_session.query(LogEntry).one()
        assert entry.slug == "abc1"
        assert entry.ip == "203.0.113.7"
        assert entry.ua == "agent"
        assert entry.referer == "https://ref/"

    def test_publishes_when_queue_configured(self):
        queue = InMemoryQueue()
        recorder = VisitRecorder(queue=queue, queue_name=QUEUE)

        asyncio.run(recorder.record(make_event()))

        assert asyncio.run(queue.get_queue_length(QUEUE)) == 1

    def test_storage_failure_is_swallowed(self):
        recorder = VisitRecorder(storage=BrokenStorage())

        # Must not raise
        asyncio.run(recorder.record(make_event()))

    def test_needs_a_destination(self):
        with pytest.raises(ValueError):
            VisitRecorder()


class TestVisitLogWorker:
    def test_drains_queue_into_logs(self, db_session, session_factory):
        queue = RecordingQueue()
        for slug in ("aa", "bb", "cc"):
            event = make_event(slug)
            event.message_id = f"id-{slug}"
            asyncio.run(queue.publish(QUEUE, event))

        worker = VisitLogWorker(
            queue=queue,
            storage=SQLVisitStorage(session_factory),
            queue_name=QUEUE,
            batch_size=2,
        )

        assert asyncio.run(worker.process_batch()) == 2
        assert asyncio.run(worker.process_batch()) == 1
        assert asyncio.run(worker.process_batch()) == 0

        slugs = sorted(entry.slug for entry in db_session.query(LogEntry).all())
        assert slugs == ["aa", "bb", "cc"]
        assert queue.acked == ["id-aa", "id-bb", "id-cc"]
        assert worker.processed_count == 3

    def test_failed_batch_is_not_acknowledged(self):
        queue = RecordingQueue()
        event = make_event()
        event.message_id = "id-1"
        asyncio.run(queue.publish(QUEUE, event))

        worker = VisitLogWorker(queue=queue, storage=BrokenStorage(), queue_name=QUEUE)

        with pytest.raises(RuntimeError):
            asyncio.run(worker.process_batch())
        assert queue.acked == []
        assert worker.processed_count == 0

    def test_stop(self):
        worker = VisitLogWorker(queue=InMemoryQueue(), storage=NullVisitStorage())
        worker.running = True
        worker.stop()
        assert worker.running is False


def use_backend(monkeypatch, backend):
    monkeypatch.setattr(
        "shortlink_app.dependencies.settings",
        Settings(_env_file=None, visit_log_backend=backend, queue_name=QUEUE),
    )


class TestVisitRecorderSelection:
    """get_visit_recorder picks its destination from visit_log_backend"""

    def test_database_backend(self, monkeypatch, fresh_visit_recorder):
        use_backend(monkeypatch, "database")

        recorder = fresh_visit_recorder()
        assert isinstance(recorder.storage, SQLVisitStorage)
        assert recorder.queue is None
        assert fresh_visit_recorder() is recorder

    def test_null_backend(self, monkeypatch, fresh_visit_recorder):
        use_backend(monkeypatch, "null")

        recorder = fresh_visit_recorder()
        assert isinstance(recorder.storage, NullVisitStorage)

    def test_redis_backend_publishes(self, monkeypatch, fresh_visit_recorder):
        use_backend(monkeypatch, "redis_streams")
        queue = InMemoryQueue()
        monkeypatch.setattr(QueueFactory, "create", lambda backend: queue)

        recorder = fresh_visit_recorder()
        assert recorder.queue is queue
        assert recorder.queue_name == QUEUE
        assert recorder.storage is None

    def test_unreachable_redis_falls_back_to_database(self, monkeypatch, fresh_visit_recorder, caplog):
        use_backend(monkeypatch, "redis_streams")

        def refuse(backend):
            raise redis.exceptions.ConnectionError("Connection refused")

        monkeypatch.setattr(QueueFactory, "create", refuse)

        with caplog.at_level(logging.WARNING, logger="shortlink_app.dependencies"):
            recorder = fresh_visit_recorder()

        assert recorder.queue is None
        assert isinstance(recorder.storage, SQLVisitStorage)
        assert "Redis connection failed" in caplog.text

    def test_unknown_backend_disables_logging(self, monkeypatch, fresh_visit_recorder, caplog):
        use_backend(monkeypatch, "bogus")

        with caplog.at_level(logging.WARNING, logger="shortlink_app.dependencies"):
            recorder = fresh_visit_recorder()

        assert isinstance(recorder.storage, NullVisitStorage)
        assert "bogus" in caplog.text
