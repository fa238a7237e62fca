"""Exchanges queues can subscribe to."""

from .exchange import Exchange, ExchangeType

__all__ = ["Exchange", "ExchangeType"]
