"""Connection settings and the pika transport."""

from .connection_setting import DEFAULT_URL_ENV_VAR, ConnectionSetting
from .rabbitmq_channel_handle import RabbitMQChannelHandle
from .rabbitmq_connection import RabbitMQConnection

__all__ = [
    "ConnectionSetting",
    "DEFAULT_URL_ENV_VAR",
    "RabbitMQChannelHandle",
    "RabbitMQConnection",
]
