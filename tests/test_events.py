"""
Tests for the in-process event bus and fraud signal processor.
"""

import asyncio
import logging
import uuid

import pytest

from authgate.core.config import settings
from authgate.core.constants import CacheKey, EventName
from authgate.services.events import AccountRegistered, EventBus, LoginFailed, LoginSucceeded
from authgate.services.fraud import FraudSignalProcessor


@pytest.mark.asyncio
@pytest.mark.unit
class TestEventBus:

    async def test_events_carry_names(self):
        assert LoginSucceeded(account_id=uuid.uuid4(), ip=None, user_agent=None).name == EventName.LOGIN_SUCCESS
        assert LoginFailed(email="a@b.c", ip=None, user_agent=None).name == EventName.LOGIN_FAILED
        assert AccountRegistered(account_id=uuid.uuid4(), email=None).name == EventName.ACCOUNT_REGISTERED

    async def test_publish_dispatches_to_subscribers(self):
        bus = EventBus(maxsize=10)
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(LoginFailed, handler)
        bus.start()
        event = LoginFailed(email="a@example.com", ip="10.0.0.1", user_agent="pytest")

        assert bus.publish(event) is True
        await bus.drain()
        await bus.stop()

        assert received == [event]

    async def test_handlers_only_receive_subscribed_type(self):
        bus = EventBus(maxsize=10)
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe(LoginSucceeded, handler)
        await bus.dispatch(LoginFailed(email="a@example.com", ip=None, user_agent=None))

        assert received == []

    async def test_publish_drops_when_queue_full(self, caplog):
        bus = EventBus(maxsize=1)
        event = AccountRegistered(account_id=uuid.uuid4(), email="a@example.com")

        assert bus.publish(event) is True
        with caplog.at_level(logging.WARNING):
            assert bus.publish(event) is False

        assert bus.pending == 1
        assert "queue full" in caplog.text

    async def test_failing_handler_does_not_stop_others(self, caplog):
        bus = EventBus(maxsize=10)
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def working(event):
            received.append(event)

        bus.subscribe(LoginFailed, broken)
        bus.subscribe(LoginFailed, working)
        event = LoginFailed(email="a@example.com", ip=None, user_agent=None)

        with caplog.at_level(logging.ERROR):
            await bus.dispatch(event)

        assert received == [event]
        assert "Event handler failed" in caplog.text

    async def test_publish_does_not_wait_for_handler(self):
        bus = EventBus(maxsize=10)
        release = asyncio.Event()

        async def slow(event):
            await release.wait()

        bus.subscribe(LoginFailed, slow)
        bus.start()

        assert bus.publish(LoginFailed(email="a@example.com", ip=None, user_agent=None))
        release.set()
        await bus.stop(drain_timeout=1.0)


@pytest.mark.asyncio
@pytest.mark.unit
class TestFraudSignalProcessor:

    async def test_first_login_records_ip_without_warning(self, store, redis_client, caplog):
        processor = FraudSignalProcessor(store)
        account_id = uuid.uuid4()

        with caplog.at_level(logging.WARNING, logger="authgate.fraud"):
            await processor.on_login_success(
                LoginSucceeded(account_id=account_id, ip="10.0.0.1", user_agent="pytest")
            )

        key = CacheKey.LAST_SEEN_IP.format(account_id=account_id)
        assert await store.get(key) == "10.0.0.1"
        assert 0 < await redis_client.ttl(key) <= settings.fraud_last_ip_ttl_seconds
        assert not caplog.records

    async def test_new_ip_logs_warning(self, store, caplog):
        processor = FraudSignalProcessor(store)
        account_id = uuid.uuid4()
        await processor.on_login_success(LoginSucceeded(account_id=account_id, ip="10.0.0.1", user_agent="a"))

        with caplog.at_level(logging.WARNING, logger="authgate.fraud"):
            await processor.on_login_success(
                LoginSucceeded(account_id=account_id, ip="10.0.0.2", user_agent="b")
            )

        assert "New device/location" in caplog.text
        assert await store.get(CacheKey.LAST_SEEN_IP.format(account_id=account_id)) == "10.0.0.2"

    async def test_same_ip_is_quiet(self, store, caplog):
        processor = FraudSignalProcessor(store)
        account_id = uuid.uuid4()
        event = LoginSucceeded(account_id=account_id, ip="10.0.0.1", user_agent="a")
        await processor.on_login_success(event)

        with caplog.at_level(logging.WARNING, logger="authgate.fraud"):
            await processor.on_login_success(event)

        assert not caplog.records

    async def test_failed_logins_counted_per_ip(self, store, redis_client, caplog):
        processor = FraudSignalProcessor(store)
        event = LoginFailed(email="a@example.com", ip="10.0.0.9", user_agent="bot")

        with caplog.at_level(logging.WARNING, logger="authgate.fraud"):
            for _ in range(settings.FRAUD_FAILED_LOGIN_THRESHOLD):
                await processor.on_login_failed(event)
            assert "brute force" not in caplog.text

            await processor.on_login_failed(event)

        assert "brute force" in caplog.text
        key = CacheKey.FAILED_LOGINS_BY_IP.format(ip="10.0.0.9")
        assert int(await redis_client.get(key)) == settings.FRAUD_FAILED_LOGIN_THRESHOLD + 1
        assert 0 < await redis_client.ttl(key) <= settings.FRAUD_FAILED_LOGIN_WINDOW_SECONDS

    async def test_register_subscribes_to_bus(self, store):
        bus = EventBus(maxsize=10)
        FraudSignalProcessor(store).register(bus)
        account_id = uuid.uuid4()

        await bus.dispatch(LoginSucceeded(account_id=account_id, ip="10.0.0.1", user_agent=None))

        assert await store.get(CacheKey.LAST_SEEN_IP.format(account_id=account_id)) == "10.0.0.1"
