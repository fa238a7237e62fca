"""Broker addressing and credentials."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pika

DEFAULT_URL_ENV_VAR = "RABBITMQ_URL"


@dataclass(frozen=True)
class ConnectionSetting:
    """Describes how to reach a broker.

    Settings are shared by every channel that opens a connection with them and are never
    mutated. ``heartbeat`` and ``blocked_connection_timeout`` fall back to the broker and
    pika defaults when left as ``None``.
    """

    host: str = "localhost"
    port: int = 5672
    username: str = "guest"
    password: str = field(default="guest", repr=False)
    vhost: str = "/"
    heartbeat: Optional[int] = None
    blocked_connection_timeout: Optional[float] = None

    @classmethod
    def from_url(cls, url: str) -> ConnectionSetting:
        url = url.strip()
        try:
            parameters = pika.URLParameters(url)
        except ValueError as exc:
            raise ValueError(f"Invalid RabbitMQ URL provided: {url}") from exc

        credentials = parameters.credentials
        return cls(
            host=parameters.host,
            port=parameters.port,
            username=getattr(credentials, "username", "guest"),
            password=getattr(credentials, "password", "guest"),
            vhost=parameters.virtual_host,
            heartbeat=parameters.heartbeat,
            blocked_connection_timeout=parameters.blocked_connection_timeout,
        )

    @classmethod
    def from_env(cls, var_name: str = DEFAULT_URL_ENV_VAR) -> ConnectionSetting:
        url = (os.getenv(var_name) or "").strip()
        if not url:
            raise ValueError(
                f"RabbitMQ URL must be provided via the {var_name} environment variable."
            )
        return cls.from_url(url)

    def to_parameters(self) -> pika.ConnectionParameters:
        options: Dict[str, Any] = {}
        if self.heartbeat is not None:
            options["heartbeat"] = self.heartbeat
        if self.blocked_connection_timeout is not None:
            options["blocked_connection_timeout"] = self.blocked_connection_timeout

        return pika.ConnectionParameters(
            host=self.host,
            port=self.port,
            virtual_host=self.vhost,
            credentials=pika.PlainCredentials(self.username, self.password),
            **options,
        )
