"""Ownership and lifecycle of a logical broker channel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Type, Union

from rabbitmq_messaging import constants
from rabbitmq_messaging.connection import ConnectionSetting, RabbitMQConnection
from rabbitmq_messaging.contracts import Connector, IBrokerChannelHandle, IBrokerConnection
from rabbitmq_messaging.errors import ChannelBuildError, ChannelStateError


@dataclass(frozen=True)
class FromConnectionSetting:
    """Open a fresh connection and channel that the new instance owns."""

    setting: ConnectionSetting


@dataclass(frozen=True)
class FromSharedChannel:
    """Reuse the open channel of ``peer``; its connection stays with the peer."""

    peer: BrokerChannel


ChannelSource = Union[FromConnectionSetting, FromSharedChannel]


class BrokerChannel:
    """A named endpoint backed by an open channel.

    The channel is either opened from a ``ConnectionSetting``, in which case this instance
    owns the connection and channel, or borrowed from a peer such as an ``Exchange``, in
    which case closing this instance leaves the peer's channel and connection open.
    """

    def __init__(
        self,
        source: ChannelSource,
        name: str = "",
        *,
        connector: Optional[Connector] = None,
    ) -> None:
        self.source = source
        self._name = name
        self._is_durable = False
        self._connector: Connector = connector or RabbitMQConnection.open
        self._owned_connection: Optional[IBrokerConnection] = None
        self._handle: Optional[IBrokerChannelHandle] = None
        self._closed = False
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    @property
    def is_durable(self) -> bool:
        return self._is_durable

    def set_durable(self, durable: bool) -> None:
        self._is_durable = durable

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def owns_connection(self) -> bool:
        return self._owned_connection is not None

    def channel(self) -> IBrokerChannelHandle:
        if self._closed:
            raise ChannelStateError(constants.ALREADY_CLOSED)
        if self._handle is None:
            raise ChannelStateError(constants.NOT_BUILT)
        return self._handle

    async def build(self) -> None:
        if self._handle is not None or self._closed:
            raise ChannelStateError(constants.ALREADY_BUILT)

        if isinstance(self.source, FromSharedChannel):
            self._handle = self._borrow(self.source.peer)
            self.logger.debug(
                "Sharing channel of %s for %s", self.source.peer.name, self._name or "<unnamed>"
            )
            return

        try:
            connection = await self._connector(self.source.setting)
        except Exception as exc:
            self.logger.error("Failed to connect for %s: %s", self._name or "<unnamed>", exc)
            raise ChannelBuildError(cause=exc) from exc

        try:
            handle = await connection.open_channel()
        except Exception as exc:
            self.logger.error("Failed to open channel for %s: %s", self._name or "<unnamed>", exc)
            await self._release(connection)
            raise ChannelBuildError(cause=exc) from exc

        self._owned_connection = connection
        self._handle = handle

    async def close(self) -> None:
        handle = self.channel()
        self._closed = True

        if self._owned_connection is None:
            self.logger.debug("Detached %s from shared channel.", self._name)
            return

        connection, self._owned_connection = self._owned_connection, None
        try:
            await handle.close()
        finally:
            await connection.close()
        self.logger.info("Closed channel and connection of %s.", self._name)

    async def __aenter__(self) -> BrokerChannel:
        await self.build()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if not self._closed:
            await self.close()

    async def discard(self) -> None:
        """Release owned resources after a failed construction step, keeping the error."""
        if self._closed or self._handle is None:
            return
        try:
            await self.close()
        except Exception as exc:
            self.logger.error("Failed to release %s: %s", self._name, exc, exc_info=True)

    def _borrow(self, peer: BrokerChannel) -> IBrokerChannelHandle:
        try:
            handle = peer.channel()
        except ChannelStateError as exc:
            raise ChannelBuildError(constants.SHARED_CHANNEL_UNAVAILABLE, cause=exc) from exc
        if handle.is_closed:
            raise ChannelBuildError(constants.SHARED_CHANNEL_UNAVAILABLE)
        return handle

    async def _release(self, connection: IBrokerConnection) -> None:
        try:
            await connection.close()
        except Exception as exc:
            self.logger.error("Failed to close connection: %s", exc, exc_info=True)
