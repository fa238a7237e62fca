"""Contract interfaces for broker messaging."""

from .broker_channel_handle_interface import DeliveryCallback, IBrokerChannelHandle
from .broker_connection_interface import Connector, IBrokerConnection
from .message_listener_interface import AckCallback, IMessageListener

__all__ = [
    "AckCallback",
    "Connector",
    "DeliveryCallback",
    "IBrokerChannelHandle",
    "IBrokerConnection",
    "IMessageListener",
]
