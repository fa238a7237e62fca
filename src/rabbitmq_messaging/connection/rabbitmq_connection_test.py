"""Tests for RabbitMQ connection management."""

from unittest.mock import Mock, patch

import asyncio

import pika
import pytest

from rabbitmq_messaging.connection import (
    ConnectionSetting,
    RabbitMQChannelHandle,
    RabbitMQConnection,
)


@pytest.fixture
def pika_connection():
    connection = Mock()
    connection.is_closed = False
    connection.is_closing = False
    return connection


@pytest.fixture
def mock_asyncio_connection(pika_connection):
    def open_connection(**kwargs):
        kwargs["on_open_callback"](pika_connection)
        return pika_connection

    with patch(
        "rabbitmq_messaging.connection.rabbitmq_connection.AsyncioConnection",
        side_effect=open_connection,
    ) as connection_class:
        yield connection_class


@pytest.mark.asyncio
async def test_open_connects_with_setting_parameters(mock_asyncio_connection, pika_connection):
    setting = ConnectionSetting(host="broker", username="app", password="secret")

    connection = await RabbitMQConnection.open(setting)

    mock_asyncio_connection.assert_called_once()
    parameters = mock_asyncio_connection.call_args.kwargs["parameters"]
    assert parameters.host == "broker"
    assert parameters.credentials.username == "app"
    assert connection.connection is pika_connection
    assert connection.is_closed is False


@pytest.mark.asyncio
async def test_connect_reuses_open_connection(mock_asyncio_connection):
    connection = await RabbitMQConnection.open(ConnectionSetting())

    await connection.connect()

    mock_asyncio_connection.assert_called_once()


@pytest.mark.asyncio
async def test_connect_failure_logs_and_raises():
    def fail(**kwargs):
        kwargs["on_open_error_callback"](Mock(), pika.exceptions.AMQPConnectionError("failed"))
        return Mock()

    with patch(
        "rabbitmq_messaging.connection.rabbitmq_connection.AsyncioConnection",
        side_effect=fail,
    ):
        with pytest.raises(pika.exceptions.AMQPConnectionError):
            await RabbitMQConnection.open(ConnectionSetting())


@pytest.mark.asyncio
async def test_connect_failure_with_message_is_wrapped():
    def fail(**kwargs):
        kwargs["on_open_error_callback"](Mock(), "connection refused")
        return Mock()

    with patch(
        "rabbitmq_messaging.connection.rabbitmq_connection.AsyncioConnection",
        side_effect=fail,
    ):
        with pytest.raises(pika.exceptions.AMQPConnectionError):
            await RabbitMQConnection.open(ConnectionSetting())


@pytest.mark.asyncio
async def test_open_channel_wraps_pika_channel(mock_asyncio_connection, pika_connection):
    pika_channel = Mock()
    pika_channel.channel_number = 1

    def open_channel(on_open_callback):
        on_open_callback(pika_channel)
        return pika_channel

    pika_connection.channel.side_effect = open_channel
    connection = await RabbitMQConnection.open(ConnectionSetting())

    handle = await connection.open_channel()

    assert isinstance(handle, RabbitMQChannelHandle)
    assert handle.channel is pika_channel
    # One callback guards the open, the handle adds its own.
    assert pika_channel.add_on_close_callback.call_count == 2


@pytest.mark.asyncio
async def test_open_channel_fails_when_connection_closes(mock_asyncio_connection, pika_connection):
    connection = await RabbitMQConnection.open(ConnectionSetting())
    reason = pika.exceptions.ConnectionClosedByBroker(320, "CONNECTION_FORCED")

    def close_connection(on_open_callback):
        connection._on_close(pika_connection, reason)
        return Mock()

    pika_connection.channel.side_effect = close_connection

    with pytest.raises(pika.exceptions.ConnectionClosedByBroker):
        await connection.open_channel()


@pytest.mark.asyncio
async def test_open_channel_requires_open_connection():
    connection = RabbitMQConnection(ConnectionSetting())

    with pytest.raises(pika.exceptions.ConnectionClosed):
        await connection.open_channel()


@pytest.mark.asyncio
async def test_close_waits_for_close_callback(mock_asyncio_connection, pika_connection):
    connection = await RabbitMQConnection.open(ConnectionSetting())
    pika_connection.close.side_effect = lambda: connection._on_close(
        pika_connection, pika.exceptions.ConnectionClosedByClient(200, "Normal shutdown")
    )

    await connection.close()

    pika_connection.close.assert_called_once()


@pytest.mark.asyncio
async def test_close_is_safe_when_never_opened():
    connection = RabbitMQConnection(ConnectionSetting())

    await connection.close()

    assert connection.connection is None
    assert connection.is_closed is True


@pytest.mark.asyncio
async def test_close_is_safe_when_already_closed(mock_asyncio_connection, pika_connection):
    connection = await RabbitMQConnection.open(ConnectionSetting())
    pika_connection.is_closed = True

    await connection.close()

    pika_connection.close.assert_not_called()


@pytest.mark.asyncio
async def test_open_channel_fails_when_broker_refuses_channel(mock_asyncio_connection, pika_connection):
    connection = await RabbitMQConnection.open(ConnectionSetting())
    loop = asyncio.get_running_loop()
    pika_channel = Mock()
    pika_channel.channel_number = 1
    reason = pika.exceptions.ChannelClosedByBroker(504, "CHANNEL_ERROR")
    pika_channel.add_on_close_callback.side_effect = lambda callback: loop.call_soon(
        callback, pika_channel, reason
    )
    pika_connection.channel.return_value = pika_channel

    with pytest.raises(pika.exceptions.ChannelClosedByBroker):
        await asyncio.wait_for(connection.open_channel(), 1.0)


@pytest.mark.asyncio
async def test_async_context_connects_and_closes(mock_asyncio_connection, pika_connection):
    connection = RabbitMQConnection(ConnectionSetting())
    pika_connection.close.side_effect = lambda: connection._on_close(
        pika_connection, pika.exceptions.ConnectionClosedByClient(200, "Normal shutdown")
    )

    async with connection as entered:
        assert entered is connection
        assert connection.connection is pika_connection

    mock_asyncio_connection.assert_called_once()
    pika_connection.close.assert_called_once()
