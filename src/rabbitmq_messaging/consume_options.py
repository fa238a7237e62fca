"""Provides consumer registration options for queues."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ConsumeOptions:
    """Encapsulates ``basic.consume`` options.

    With ``auto_ack`` the broker treats every delivery as acknowledged on send, so the
    listener must not call ``ack`` or ``nack``. Leave ``consumer_tag`` empty to let the
    transport generate one.
    """

    auto_ack: bool = False
    exclusive: bool = False
    consumer_tag: Optional[str] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
