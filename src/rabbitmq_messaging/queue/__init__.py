"""Queues and the recipes that declare them."""

from .queue import ConsumerErrorListener, Queue
from .topology import RECIPES, BindingPolicy, NamePolicy, TopologyRequest

__all__ = [
    "BindingPolicy",
    "ConsumerErrorListener",
    "NamePolicy",
    "Queue",
    "RECIPES",
    "TopologyRequest",
]
