"""Declaration policy of each named queue recipe."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence, Tuple


class NamePolicy(Enum):
    REQUIRED = "required"
    BROKER_ASSIGNED = "broker_assigned"


class BindingPolicy(Enum):
    NONE = "none"
    # A single binding with the empty routing key.
    FANOUT = "fanout"
    ROUTING_KEYS = "routing_keys"


@dataclass(frozen=True)
class TopologyRequest:
    """Flags sent with ``queue.declare`` plus how the queue is named and bound."""

    durable: bool
    exclusive: bool
    auto_delete: bool
    name_policy: NamePolicy = NamePolicy.REQUIRED
    binding: BindingPolicy = BindingPolicy.NONE

    def routing_keys(self, requested: Sequence[str] = ()) -> Tuple[str, ...]:
        if self.binding is BindingPolicy.FANOUT:
            return ("",)
        if self.binding is BindingPolicy.ROUTING_KEYS:
            return tuple(requested)
        return ()


DURABLE = "durable"
DURABLE_EXCLUSIVE = "durable_exclusive"
DURABLE_NON_EXCLUSIVE_NOT_AUTO_DELETED = "durable_non_exclusive_not_auto_deleted"
INDIVIDUAL_EXCHANGE_SUBSCRIBER = "individual_exchange_subscriber"
EXCHANGE_TEMPORARY_SUBSCRIBER = "exchange_temporary_subscriber"
EXCHANGE_NAMED_SUBSCRIBER = "exchange_named_subscriber"
EXCHANGE_TEMPORARY_DIRECT_OR_TOPIC_SUBSCRIBER = "exchange_temporary_direct_or_topic_subscriber"

RECIPES: Dict[str, TopologyRequest] = {
    DURABLE: TopologyRequest(durable=True, exclusive=False, auto_delete=False),
    DURABLE_EXCLUSIVE: TopologyRequest(durable=True, exclusive=True, auto_delete=False),
    DURABLE_NON_EXCLUSIVE_NOT_AUTO_DELETED: TopologyRequest(
        durable=True, exclusive=False, auto_delete=False
    ),
    INDIVIDUAL_EXCHANGE_SUBSCRIBER: TopologyRequest(
        durable=True,
        exclusive=False,
        auto_delete=False,
        binding=BindingPolicy.ROUTING_KEYS,
    ),
    EXCHANGE_TEMPORARY_SUBSCRIBER: TopologyRequest(
        durable=False,
        exclusive=True,
        auto_delete=True,
        name_policy=NamePolicy.BROKER_ASSIGNED,
        binding=BindingPolicy.FANOUT,
    ),
    EXCHANGE_NAMED_SUBSCRIBER: TopologyRequest(
        durable=True,
        exclusive=False,
        auto_delete=False,
        binding=BindingPolicy.FANOUT,
    ),
    EXCHANGE_TEMPORARY_DIRECT_OR_TOPIC_SUBSCRIBER: TopologyRequest(
        durable=False,
        exclusive=True,
        auto_delete=True,
        name_policy=NamePolicy.BROKER_ASSIGNED,
        binding=BindingPolicy.ROUTING_KEYS,
    ),
}


def custom_request(
    *, durable: bool, exclusive: bool, auto_delete: bool, bound: bool
) -> TopologyRequest:
    """Build the request of the custom recipes from caller-chosen flags."""
    return TopologyRequest(
        durable=durable,
        exclusive=exclusive,
        auto_delete=auto_delete,
        binding=BindingPolicy.ROUTING_KEYS if bound else BindingPolicy.NONE,
    )
