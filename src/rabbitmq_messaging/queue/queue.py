"""Queues built from named topology recipes, and their consumption."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Set

from rabbitmq_messaging import constants
from rabbitmq_messaging.channel import (
    BrokerChannel,
    ChannelSource,
    FromConnectionSetting,
    FromSharedChannel,
)
from rabbitmq_messaging.connection import ConnectionSetting
from rabbitmq_messaging.consume_options import ConsumeOptions
from rabbitmq_messaging.contracts import (
    AckCallback,
    Connector,
    IBrokerChannelHandle,
    IMessageListener,
)
from rabbitmq_messaging.errors import (
    BindingError,
    ChannelStateError,
    ConsumerRegistrationError,
    MessageConsumerError,
    NameRequiredError,
    QueueAssertionError,
)
from rabbitmq_messaging.exchange import Exchange
from rabbitmq_messaging.message import Delivery

from . import topology
from .topology import NamePolicy, TopologyRequest

ConsumerErrorListener = Callable[[MessageConsumerError], None]


class Queue(BrokerChannel):
    """A consumable queue.

    Instances are obtained from the recipe classmethods, which declare the queue (and its
    bindings, for exchange subscribers) before returning it. A queue has at most one active
    consumer. Errors raised by the message listener are reported to the callbacks added
    with ``add_consumer_error_listener`` instead of reaching the transport.
    """

    def __init__(
        self,
        source: ChannelSource,
        name: str = "",
        *,
        connector: Optional[Connector] = None,
    ) -> None:
        super().__init__(source, name, connector=connector)
        self.consumer_tag: Optional[str] = None
        self._auto_ack = False
        self._error_listeners: List[ConsumerErrorListener] = []
        self._handler_tasks: Set[asyncio.Future] = set()
        self.logger = logging.getLogger(__name__)

    @classmethod
    async def custom_instance_using_connection_setting(
        cls,
        setting: ConnectionSetting,
        name: str,
        durable: bool = True,
        exclusive: bool = False,
        auto_delete: bool = False,
        *,
        connector: Optional[Connector] = None,
    ) -> Queue:
        request = topology.custom_request(
            durable=durable, exclusive=exclusive, auto_delete=auto_delete, bound=False
        )
        return await cls._construct(
            FromConnectionSetting(setting), name, request, connector=connector
        )

    @classmethod
    async def custom_instance_using_exchange(
        cls,
        exchange: Exchange,
        name: str,
        routing_keys: Sequence[str] = (),
        durable: bool = True,
        exclusive: bool = False,
        auto_delete: bool = False,
    ) -> Queue:
        request = topology.custom_request(
            durable=durable, exclusive=exclusive, auto_delete=auto_delete, bound=True
        )
        return await cls._construct(FromSharedChannel(exchange), name, request, routing_keys)

    @classmethod
    async def durable_instance(
        cls, setting: ConnectionSetting, name: str, *, connector: Optional[Connector] = None
    ) -> Queue:
        return await cls._construct(
            FromConnectionSetting(setting),
            name,
            topology.RECIPES[topology.DURABLE],
            connector=connector,
        )

    @classmethod
    async def durable_exclusive_instance(
        cls, setting: ConnectionSetting, name: str, *, connector: Optional[Connector] = None
    ) -> Queue:
        return await cls._construct(
            FromConnectionSetting(setting),
            name,
            topology.RECIPES[topology.DURABLE_EXCLUSIVE],
            connector=connector,
        )

    @classmethod
    async def durable_non_exclusive_not_auto_deleted_instance(
        cls, setting: ConnectionSetting, name: str, *, connector: Optional[Connector] = None
    ) -> Queue:
        return await cls._construct(
            FromConnectionSetting(setting),
            name,
            topology.RECIPES[topology.DURABLE_NON_EXCLUSIVE_NOT_AUTO_DELETED],
            connector=connector,
        )

    @classmethod
    async def individual_exchange_subscriber_instance(
        cls, exchange: Exchange, name: str, routing_keys: Sequence[str] = ()
    ) -> Queue:
        """Durable named subscriber of a direct or topic exchange."""
        return await cls._construct(
            FromSharedChannel(exchange),
            name,
            topology.RECIPES[topology.INDIVIDUAL_EXCHANGE_SUBSCRIBER],
            routing_keys,
        )

    @classmethod
    async def exchange_temporary_subscriber_instance(cls, exchange: Exchange) -> Queue:
        """Broker-named, exclusive, auto-deleted fanout subscriber."""
        return await cls._construct(
            FromSharedChannel(exchange),
            "",
            topology.RECIPES[topology.EXCHANGE_TEMPORARY_SUBSCRIBER],
        )

    @classmethod
    async def exchange_named_subscriber_instance(cls, exchange: Exchange, name: str) -> Queue:
        """Durable named fanout subscriber."""
        return await cls._construct(
            FromSharedChannel(exchange),
            name,
            topology.RECIPES[topology.EXCHANGE_NAMED_SUBSCRIBER],
        )

    @classmethod
    async def exchange_temporary_direct_or_topic_subscriber_instance(
        cls, exchange: Exchange, routing_keys: Sequence[str]
    ) -> Queue:
        """Broker-named, exclusive, auto-deleted direct or topic subscriber."""
        return await cls._construct(
            FromSharedChannel(exchange),
            "",
            topology.RECIPES[topology.EXCHANGE_TEMPORARY_DIRECT_OR_TOPIC_SUBSCRIBER],
            routing_keys,
        )

    @classmethod
    async def _construct(
        cls,
        source: ChannelSource,
        name: str,
        request: TopologyRequest,
        routing_keys: Sequence[str] = (),
        *,
        connector: Optional[Connector] = None,
    ) -> Queue:
        if request.name_policy is NamePolicy.BROKER_ASSIGNED:
            name = ""
        elif not name:
            raise NameRequiredError()

        queue = cls(source, name, connector=connector)
        await queue.build()

        try:
            await queue._assert(request)
            if isinstance(source, FromSharedChannel):
                await queue._bind(source.peer.name, request.routing_keys(routing_keys))
        except (QueueAssertionError, BindingError):
            await queue.discard()
            raise

        queue.logger.info(
            "Queue %s ready (durable=%s, exclusive=%s, auto_delete=%s)",
            queue.name,
            request.durable,
            request.exclusive,
            request.auto_delete,
        )
        return queue

    async def _assert(self, request: TopologyRequest) -> None:
        self.set_durable(request.durable)
        try:
            assigned = await self.channel().declare_queue(
                self.name,
                durable=request.durable,
                exclusive=request.exclusive,
                auto_delete=request.auto_delete,
            )
        except Exception as exc:
            self.logger.error("Failed to assert queue %r: %s", self.name, exc)
            raise QueueAssertionError(cause=exc) from exc
        self.set_name(assigned)

    async def _bind(self, exchange_name: str, routing_keys: Sequence[str]) -> None:
        if not routing_keys:
            return

        handle = self.channel()
        results = await asyncio.gather(
            *(handle.bind_queue(self.name, exchange_name, key) for key in routing_keys),
            return_exceptions=True,
        )
        failed = [
            (key, result)
            for key, result in zip(routing_keys, results)
            if isinstance(result, BaseException)
        ]
        if failed:
            keys = [key for key, _ in failed]
            self.logger.error(
                "Broker rejected binding queue %s to exchange %s with routing key %r; not confirmed: %s",
                self.name,
                exchange_name,
                keys[0],
                keys,
            )
            raise BindingError(routing_keys=keys, cause=failed[0][1]) from failed[0][1]

        self.logger.debug(
            "Bound queue %s to exchange %s with routing keys %s",
            self.name,
            exchange_name,
            list(routing_keys),
        )

    async def consume(
        self,
        listener: IMessageListener,
        ack_callback: Optional[AckCallback] = None,
        options: Optional[ConsumeOptions] = None,
    ) -> str:
        handle = self.channel()
        if self.consumer_tag is not None:
            raise ChannelStateError(constants.ALREADY_CONSUMING)

        options = options or ConsumeOptions()
        ack = ack_callback or self.ack

        def on_delivery(delivery: Delivery) -> None:
            self._dispatch(listener, delivery, ack)

        try:
            tag = await handle.consume(
                self.name,
                on_delivery,
                auto_ack=options.auto_ack,
                exclusive=options.exclusive,
                consumer_tag=options.consumer_tag,
                arguments=options.arguments or None,
            )
        except Exception as exc:
            self.logger.error("%s %s: %s", constants.CONSUMER_REGISTRATION_FAILED, self.name, exc)
            raise ConsumerRegistrationError(cause=exc) from exc

        self.consumer_tag = tag
        self._auto_ack = options.auto_ack
        self.logger.info("Started consuming from %s", self.name)
        return tag

    def ack(self, delivery: Delivery) -> None:
        self._acknowledgeable().ack(delivery.delivery_tag, multiple=False)
        self.logger.debug("Acked delivery %s on %s", delivery.delivery_tag, self.name)

    def nack(self, delivery: Delivery, requeue: bool = True) -> None:
        self._acknowledgeable().nack(delivery.delivery_tag, multiple=False, requeue=requeue)
        self.logger.debug(
            "Nacked delivery %s on %s (requeue=%s)", delivery.delivery_tag, self.name, requeue
        )

    async def basic_qos(self, count: int) -> None:
        if count < 0:
            raise ValueError("Prefetch count must not be negative.")
        await self.channel().prefetch(count)

    def add_consumer_error_listener(self, listener: ConsumerErrorListener) -> None:
        self._error_listeners.append(listener)

    def remove_consumer_error_listener(self, listener: ConsumerErrorListener) -> None:
        self._error_listeners.remove(listener)

    async def close(self) -> None:
        handle = self.channel()
        tag, self.consumer_tag = self.consumer_tag, None
        try:
            if tag is not None and not self.owns_connection and not handle.is_closed:
                await handle.cancel(tag)
                self.logger.info("Cancelled consumer %s on %s", tag, self.name)
        finally:
            await super().close()

    def _acknowledgeable(self) -> IBrokerChannelHandle:
        handle = self.channel()
        if self._auto_ack:
            raise ChannelStateError(constants.AUTO_ACK_CONSUMER)
        return handle

    def _dispatch(
        self, listener: IMessageListener, delivery: Delivery, ack: AckCallback
    ) -> None:
        try:
            listener.set_current_message(delivery)
            result = listener.handle_message(delivery, ack)
        except Exception as exc:
            self._report(delivery, exc)
            return

        if inspect.isawaitable(result):
            self._track_handler(delivery, result)

    def _track_handler(self, delivery: Delivery, result: Awaitable[None]) -> None:
        task = asyncio.ensure_future(result)
        self._handler_tasks.add(task)

        def on_done(done: asyncio.Future) -> None:
            self._handler_tasks.discard(done)
            if not done.cancelled() and done.exception() is not None:
                self._report(delivery, done.exception())

        task.add_done_callback(on_done)

    def _report(self, delivery: Delivery, exc: Optional[BaseException]) -> None:
        self.logger.error(
            "Message listener failed on delivery %s from %s: %s",
            delivery.delivery_tag,
            self.name,
            exc,
            exc_info=exc,
        )
        error = MessageConsumerError(delivery, cause=exc)
        for callback in list(self._error_listeners):
            try:
                callback(error)
            except Exception:
                self.logger.exception(
                    "Consumer error listener raised on delivery %s from %s",
                    delivery.delivery_tag,
                    self.name,
                )
