"""In-memory broker doubles for scenario tests."""

import itertools
from typing import Dict, List, Optional, Tuple

import pytest

from rabbitmq_messaging.contracts import IBrokerChannelHandle, IBrokerConnection


class FakeBroker:
    """Keeps declared queues and bindings, and records every channel call."""

    def __init__(self):
        self.queues: Dict[str, Tuple[bool, bool, bool]] = {}
        self.bindings: List[Tuple[str, str, str]] = []
        self.connections: List["FakeConnection"] = []
        self.acks: List[Tuple[int, bool]] = []
        self.nacks: List[Tuple[int, bool, bool]] = []
        self.failing_routing_keys = set()
        self._names = itertools.count(1)

    async def connect(self, setting):
        connection = FakeConnection(self)
        self.connections.append(connection)
        return connection

    def declare(self, name, flags):
        if not name:
            name = f"amq.gen-{next(self._names)}"
        existing = self.queues.get(name)
        if existing is not None and existing != flags:
            raise RuntimeError(f"PRECONDITION_FAILED - inequivalent arg for queue '{name}'")
        self.queues[name] = flags
        return name


class FakeConnection(IBrokerConnection):
    def __init__(self, broker):
        self.broker = broker
        self.channels: List[FakeChannelHandle] = []
        self.closed = False

    @property
    def is_closed(self):
        return self.closed

    async def open_channel(self):
        channel = FakeChannelHandle(self.broker)
        self.channels.append(channel)
        return channel

    async def close(self):
        self.closed = True
        for channel in self.channels:
            channel.closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class FakeChannelHandle(IBrokerChannelHandle):
    def __init__(self, broker):
        self.broker = broker
        self.closed = False
        self.consumers = {}
        self.prefetch_count: Optional[int] = None
        self._tags = itertools.count(1)

    @property
    def is_closed(self):
        return self.closed

    async def declare_queue(self, name, *, durable, exclusive, auto_delete):
        return self.broker.declare(name, (durable, exclusive, auto_delete))

    async def declare_exchange(self, name, exchange_type, *, durable):
        pass

    async def bind_queue(self, queue, exchange, routing_key):
        if routing_key in self.broker.failing_routing_keys:
            raise RuntimeError(f"ACCESS_REFUSED - {routing_key}")
        self.broker.bindings.append((queue, exchange, routing_key))

    async def consume(
        self, queue, on_delivery, *, auto_ack=False, exclusive=False, consumer_tag=None, arguments=None
    ):
        tag = consumer_tag or f"ctag-{next(self._tags)}"
        self.consumers[tag] = (queue, on_delivery)
        return tag

    async def cancel(self, consumer_tag):
        del self.consumers[consumer_tag]

    async def prefetch(self, count):
        self.prefetch_count = count

    def ack(self, delivery_tag, multiple=False):
        self.broker.acks.append((delivery_tag, multiple))

    def nack(self, delivery_tag, multiple=False, requeue=True):
        self.broker.nacks.append((delivery_tag, multiple, requeue))

    def publish(self, exchange, routing_key, body, properties=None):
        pass

    async def close(self):
        self.closed = True

    def deliver(self, delivery):
        for _, on_delivery in list(self.consumers.values()):
            on_delivery(delivery)


@pytest.fixture
def broker():
    return FakeBroker()
