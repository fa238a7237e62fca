"""Base class for application message listeners."""

from __future__ import annotations

from abc import abstractmethod
from typing import Awaitable, Optional

from rabbitmq_messaging.contracts import AckCallback, IMessageListener
from rabbitmq_messaging.message import Delivery


class MessageListener(IMessageListener):
    """Remembers the delivery being handled so acknowledgments can refer back to it."""

    def __init__(self) -> None:
        self.current_message: Optional[Delivery] = None

    def set_current_message(self, delivery: Delivery) -> None:
        self.current_message = delivery

    @abstractmethod
    def handle_message(
        self, delivery: Delivery, ack: AckCallback
    ) -> Optional[Awaitable[None]]:
        """Process ``delivery``."""
