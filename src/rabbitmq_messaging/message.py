"""Delivery record handed to message listeners."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pika.spec import Basic, BasicProperties


@dataclass(frozen=True)
class Delivery:
    """A message pushed by the broker, identified by its delivery tag.

    The body is kept as raw bytes; decoding is left to the listener.
    """

    body: bytes
    delivery_tag: int
    exchange: str = ""
    routing_key: str = ""
    redelivered: bool = False
    consumer_tag: Optional[str] = None
    properties: Optional[BasicProperties] = None

    @classmethod
    def from_pika(
        cls,
        method: Basic.Deliver,
        properties: Optional[BasicProperties],
        body: bytes,
    ) -> Delivery:
        return cls(
            body=body,
            delivery_tag=method.delivery_tag,
            exchange=method.exchange or "",
            routing_key=method.routing_key or "",
            redelivered=bool(method.redelivered),
            consumer_tag=method.consumer_tag,
            properties=properties,
        )
