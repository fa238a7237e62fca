"""Defines the contract for protocol-level broker channels."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from pika.spec import BasicProperties

from rabbitmq_messaging.message import Delivery

DeliveryCallback = Callable[[Delivery], None]


class IBrokerChannelHandle(ABC):
    """An open AMQP channel exposing awaitable declare, bind and consume primitives."""

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Whether the channel has been closed by either side."""

    @abstractmethod
    async def declare_queue(
        self, name: str, *, durable: bool, exclusive: bool, auto_delete: bool
    ) -> str:
        """Declare a queue and return the name the broker acknowledged."""

    @abstractmethod
    async def declare_exchange(self, name: str, exchange_type: str, *, durable: bool) -> None:
        """Declare an exchange of the given type."""

    @abstractmethod
    async def bind_queue(self, queue: str, exchange: str, routing_key: str) -> None:
        """Bind a queue to an exchange with a routing key."""

    @abstractmethod
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
        """Register a per-delivery callback and return the consumer tag."""

    @abstractmethod
    async def cancel(self, consumer_tag: str) -> None:
        """Cancel a consumer registered on this channel."""

    @abstractmethod
    async def prefetch(self, count: int) -> None:
        """Limit the number of unacknowledged deliveries pushed to this channel."""

    @abstractmethod
    def ack(self, delivery_tag: int, multiple: bool = False) -> None:
        """Acknowledge a delivery."""

    @abstractmethod
    def nack(self, delivery_tag: int, multiple: bool = False, requeue: bool = True) -> None:
        """Negatively acknowledge a delivery."""

    @abstractmethod
    def publish(
        self,
        exchange: str,
        routing_key: str,
        body: bytes,
        properties: Optional[BasicProperties] = None,
    ) -> None:
        """Publish a message body to an exchange."""

    @abstractmethod
    async def close(self) -> None:
        """Close the channel."""
