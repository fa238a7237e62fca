"""Defines the contract for broker connections."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Type

from .broker_channel_handle_interface import IBrokerChannelHandle

if TYPE_CHECKING:
    from rabbitmq_messaging.connection.connection_setting import ConnectionSetting


class IBrokerConnection(ABC):
    """Represents an open transport connection capable of producing channels."""

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Whether the connection has been closed."""

    @abstractmethod
    async def open_channel(self) -> IBrokerChannelHandle:
        """Open a new channel on this connection."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection and every channel opened on it."""

    @abstractmethod
    async def __aenter__(self) -> IBrokerConnection:
        """Enter a managed connection context."""

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit a managed connection context."""


Connector = Callable[["ConnectionSetting"], Awaitable[IBrokerConnection]]
