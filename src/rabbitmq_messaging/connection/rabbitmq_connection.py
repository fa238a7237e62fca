"""RabbitMQ connection management."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Optional, Set, Type, Union

from pika.adapters.asyncio_connection import AsyncioConnection
from pika.channel import Channel
from pika.connection import Connection
from pika.exceptions import AMQPConnectionError, ConnectionClosed

from rabbitmq_messaging.contracts import IBrokerChannelHandle, IBrokerConnection

from .connection_setting import ConnectionSetting
from .rabbitmq_channel_handle import RabbitMQChannelHandle


class RabbitMQConnection(IBrokerConnection):
    """Manages lifecycle of an asyncio RabbitMQ connection."""

    def __init__(self, setting: ConnectionSetting) -> None:
        self.setting = setting
        self.connection: Optional[AsyncioConnection] = None
        self._opened: Optional[asyncio.Future] = None
        self._closed: Optional[asyncio.Future] = None
        self._pending_channels: Set[asyncio.Future] = set()
        self.logger = logging.getLogger(__name__)

    @classmethod
    async def open(cls, setting: ConnectionSetting) -> RabbitMQConnection:
        """Connect with ``setting``; used as the default connector for channels."""
        return await cls(setting).connect()

    @property
    def is_closed(self) -> bool:
        return self.connection is None or bool(self.connection.is_closed)

    async def connect(self) -> RabbitMQConnection:
        if self.connection is not None and not self.connection.is_closed:
            return self

        loop = asyncio.get_running_loop()
        self._opened = loop.create_future()
        self.logger.info(
            "Connecting to RabbitMQ at %s:%s%s",
            self.setting.host,
            self.setting.port,
            self.setting.vhost,
        )
        self.connection = AsyncioConnection(
            parameters=self.setting.to_parameters(),
            on_open_callback=self._on_open,
            on_open_error_callback=self._on_open_error,
            on_close_callback=self._on_close,
            custom_ioloop=loop,
        )
        try:
            await self._opened
        except AMQPConnectionError as exc:
            self.logger.error("Failed to establish RabbitMQ connection: %s", exc)
            raise

        self.logger.info("Connected to RabbitMQ.")
        return self

    async def open_channel(self) -> IBrokerChannelHandle:
        if self.connection is None or self.connection.is_closed:
            raise ConnectionClosed(0, "Connection is not open")

        opened: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending_channels.add(opened)
        opened.add_done_callback(self._pending_channels.discard)

        def on_channel_open(channel: Channel) -> None:
            if not opened.done():
                opened.set_result(channel)

        # A refused channel is closed by pika without calling on_open_callback.
        def on_channel_closed(channel: Channel, reason: BaseException) -> None:
            if not opened.done():
                self.logger.error("RabbitMQ refused channel %s: %s", channel.channel_number, reason)
                opened.set_exception(reason)

        pending = self.connection.channel(on_open_callback=on_channel_open)
        pending.add_on_close_callback(on_channel_closed)
        channel = await opened
        self.logger.debug("Opened RabbitMQ channel %s.", channel.channel_number)
        return RabbitMQChannelHandle(channel)

    async def close(self) -> None:
        if self.connection is None or self.connection.is_closed or self.connection.is_closing:
            return

        self._closed = asyncio.get_running_loop().create_future()
        self.connection.close()
        await self._closed
        self.logger.info("Closed RabbitMQ connection.")

    async def __aenter__(self) -> RabbitMQConnection:
        return await self.connect()

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    def _on_open(self, connection: Connection) -> None:
        if self._opened is not None and not self._opened.done():
            self._opened.set_result(connection)

    def _on_open_error(self, connection: Connection, error: Union[BaseException, str]) -> None:
        if self._opened is not None and not self._opened.done():
            exc = error if isinstance(error, BaseException) else AMQPConnectionError(error)
            self._opened.set_exception(exc)

    def _on_close(self, connection: Connection, reason: BaseException) -> None:
        self.logger.info("RabbitMQ connection closed: %s", reason)
        for future in list(self._pending_channels):
            if not future.done():
                future.set_exception(reason)
        self._pending_channels.clear()

        if self._closed is not None and not self._closed.done():
            self._closed.set_result(None)
