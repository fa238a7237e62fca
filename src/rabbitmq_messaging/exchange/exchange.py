"""Typed publish points that queues bind to."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pika.spec import BasicProperties

from rabbitmq_messaging.channel import BrokerChannel, ChannelSource, FromConnectionSetting
from rabbitmq_messaging.connection import ConnectionSetting
from rabbitmq_messaging.contracts import Connector
from rabbitmq_messaging.errors import ExchangeDeclarationError, NameRequiredError


class ExchangeType(str, Enum):
    FANOUT = "fanout"
    DIRECT = "direct"
    TOPIC = "topic"


class Exchange(BrokerChannel):
    """A named exchange owning its own connection and channel.

    Queues built from an exchange share its channel for declaration, binding and
    consumption, so the exchange must stay open while they are in use.
    """

    def __init__(
        self,
        source: ChannelSource,
        name: str,
        exchange_type: ExchangeType,
        *,
        connector: Optional[Connector] = None,
    ) -> None:
        super().__init__(source, name, connector=connector)
        self.exchange_type = exchange_type
        self.logger = logging.getLogger(__name__)

    @classmethod
    async def fanout_instance(
        cls,
        setting: ConnectionSetting,
        name: str,
        durable: bool = True,
        *,
        connector: Optional[Connector] = None,
    ) -> Exchange:
        return await cls._declare(setting, name, ExchangeType.FANOUT, durable, connector)

    @classmethod
    async def direct_instance(
        cls,
        setting: ConnectionSetting,
        name: str,
        durable: bool = True,
        *,
        connector: Optional[Connector] = None,
    ) -> Exchange:
        return await cls._declare(setting, name, ExchangeType.DIRECT, durable, connector)

    @classmethod
    async def topic_instance(
        cls,
        setting: ConnectionSetting,
        name: str,
        durable: bool = True,
        *,
        connector: Optional[Connector] = None,
    ) -> Exchange:
        return await cls._declare(setting, name, ExchangeType.TOPIC, durable, connector)

    def publish(
        self,
        body: bytes,
        routing_key: str = "",
        properties: Optional[BasicProperties] = None,
    ) -> None:
        self.channel().publish(self.name, routing_key, body, properties)
        self.logger.debug("Published to %s with routing key %r", self.name, routing_key)

    @classmethod
    async def _declare(
        cls,
        setting: ConnectionSetting,
        name: str,
        exchange_type: ExchangeType,
        durable: bool,
        connector: Optional[Connector],
    ) -> Exchange:
        if not name:
            raise NameRequiredError()

        exchange = cls(FromConnectionSetting(setting), name, exchange_type, connector=connector)
        await exchange.build()
        exchange.set_durable(durable)
        try:
            await exchange.channel().declare_exchange(
                name, exchange_type.value, durable=durable
            )
        except Exception as exc:
            exchange.logger.error("Failed to declare exchange %s: %s", name, exc)
            await exchange.discard()
            raise ExchangeDeclarationError(cause=exc) from exc

        exchange.logger.info("Declared %s exchange %s", exchange_type.value, name)
        return exchange
