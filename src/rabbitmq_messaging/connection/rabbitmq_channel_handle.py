"""pika implementation of the broker channel contract."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Set

from pika.channel import Channel
from pika.exceptions import ChannelClosed
from pika.spec import Basic, BasicProperties

from rabbitmq_messaging.contracts import DeliveryCallback, IBrokerChannelHandle
from rabbitmq_messaging.message import Delivery


class RabbitMQChannelHandle(IBrokerChannelHandle):
    """Wraps a pika asyncio channel so each RPC can be awaited.

    pika reports a failed RPC by closing the channel instead of invoking the RPC
    callback, so every pending future is failed with the close reason.
    """

    def __init__(self, channel: Channel) -> None:
        self.channel = channel
        self._pending: Set[asyncio.Future] = set()
        self._closed: Optional[asyncio.Future] = None
        self.logger = logging.getLogger(__name__)
        channel.add_on_close_callback(self._on_channel_closed)

    @property
    def is_closed(self) -> bool:
        return bool(self.channel.is_closed)

    async def declare_queue(
        self, name: str, *, durable: bool, exclusive: bool, auto_delete: bool
    ) -> str:
        frame = await self._rpc(
            self.channel.queue_declare,
            queue=name,
            durable=durable,
            exclusive=exclusive,
            auto_delete=auto_delete,
        )
        return str(frame.method.queue)

    async def declare_exchange(self, name: str, exchange_type: str, *, durable: bool) -> None:
        await self._rpc(
            self.channel.exchange_declare,
            exchange=name,
            exchange_type=exchange_type,
            durable=durable,
        )

    async def bind_queue(self, queue: str, exchange: str, routing_key: str) -> None:
        await self._rpc(
            self.channel.queue_bind,
            queue=queue,
            exchange=exchange,
            routing_key=routing_key,
        )

    async def consume(
        self,
        queue: str,
        on_delivery: DeliveryCallback,
        *,
        auto_ack: bool = False,
        exclusive: bool = False,
        consumer_tag: Optional[str] = None,
        arguments: Optional[Dict[str, Any]] = None,
    ) -> str:
        def on_message(
            channel: Channel,
            method: Basic.Deliver,
            properties: BasicProperties,
            body: bytes,
        ) -> None:
            on_delivery(Delivery.from_pika(method, properties, body))

        future = self._track()
        try:
            tag = self.channel.basic_consume(
                queue=queue,
                on_message_callback=on_message,
                auto_ack=auto_ack,
                exclusive=exclusive,
                consumer_tag=consumer_tag,
                arguments=arguments,
                callback=self._resolver(future),
            )
        except Exception:
            self._pending.discard(future)
            future.cancel()
            raise
        await future
        return str(tag)

    async def cancel(self, consumer_tag: str) -> None:
        await self._rpc(self.channel.basic_cancel, consumer_tag=consumer_tag)

    async def prefetch(self, count: int) -> None:
        await self._rpc(self.channel.basic_qos, prefetch_count=count)

    def ack(self, delivery_tag: int, multiple: bool = False) -> None:
        self.channel.basic_ack(delivery_tag=delivery_tag, multiple=multiple)

    def nack(self, delivery_tag: int, multiple: bool = False, requeue: bool = True) -> None:
        self.channel.basic_nack(delivery_tag=delivery_tag, multiple=multiple, requeue=requeue)

    def publish(
        self,
        exchange: str,
        routing_key: str,
        body: bytes,
        properties: Optional[BasicProperties] = None,
    ) -> None:
        self.channel.basic_publish(
            exchange=exchange,
            routing_key=routing_key,
            body=body,
            properties=properties,
        )

    async def close(self) -> None:
        if self.channel.is_closed or self.channel.is_closing:
            return

        self._closed = asyncio.get_running_loop().create_future()
        self.channel.close()
        await self._closed
        self.logger.info("Closed RabbitMQ channel %s.", self.channel.channel_number)

    def _track(self) -> asyncio.Future:
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        return future

    @staticmethod
    def _resolver(future: asyncio.Future) -> Callable[[Any], None]:
        def resolve(frame: Any) -> None:
            if not future.done():
                future.set_result(frame)

        return resolve

    async def _rpc(self, method: Callable[..., Any], **kwargs: Any) -> Any:
        future = self._track()
        try:
            method(callback=self._resolver(future), **kwargs)
        except Exception:
            self._pending.discard(future)
            future.cancel()
            raise
        return await future

    def _on_channel_closed(self, channel: Channel, reason: Exception) -> None:
        self.logger.info("RabbitMQ channel %s closed: %s", channel.channel_number, reason)
        error = reason if isinstance(reason, BaseException) else ChannelClosed(0, str(reason))
        for future in list(self._pending):
            if not future.done():
                future.set_exception(error)
        self._pending.clear()

        if self._closed is not None and not self._closed.done():
            self._closed.set_result(None)
