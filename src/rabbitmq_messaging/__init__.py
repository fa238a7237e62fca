"""Messaging package declaring RabbitMQ topologies and consuming from queues."""

from .channel import BrokerChannel, FromConnectionSetting, FromSharedChannel
from .connection import ConnectionSetting, RabbitMQChannelHandle, RabbitMQConnection
from .consume_options import ConsumeOptions
from .contracts import IBrokerChannelHandle, IBrokerConnection, IMessageListener
from .errors import (
    BindingError,
    ChannelBuildError,
    ChannelStateError,
    ConsumerRegistrationError,
    ExchangeDeclarationError,
    MessageConsumerError,
    MessagingError,
    NameRequiredError,
    QueueAssertionError,
)
from .exchange import Exchange, ExchangeType
from .listener import MessageListener
from .message import Delivery
from .queue import Queue

__all__ = [
    "BindingError",
    "BrokerChannel",
    "ChannelBuildError",
    "ChannelStateError",
    "ConnectionSetting",
    "ConsumeOptions",
    "ConsumerRegistrationError",
    "Delivery",
    "Exchange",
    "ExchangeDeclarationError",
    "ExchangeType",
    "FromConnectionSetting",
    "FromSharedChannel",
    "IBrokerChannelHandle",
    "IBrokerConnection",
    "IMessageListener",
    "MessageConsumerError",
    "MessageListener",
    "MessagingError",
    "NameRequiredError",
    "Queue",
    "QueueAssertionError",
    "RabbitMQChannelHandle",
    "RabbitMQConnection",
]
