"""Defines the contract for application message handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from rabbitmq_messaging.message import Delivery

AckCallback = Callable[[Delivery], None]


class IMessageListener(ABC):
    """Handles deliveries pushed to a consuming queue."""

    @abstractmethod
    def set_current_message(self, delivery: Delivery) -> None:
        """Record the delivery about to be handled."""

    @abstractmethod
    def handle_message(
        self, delivery: Delivery, ack: AckCallback
    ) -> Optional[Awaitable[None]]:
        """Process a delivery; call ``ack`` (or the queue's ``nack``) when done."""
