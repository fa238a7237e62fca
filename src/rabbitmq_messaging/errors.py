"""Failure taxonomy for topology construction and consumption."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Tuple

from rabbitmq_messaging import constants

if TYPE_CHECKING:
    from rabbitmq_messaging.message import Delivery


class MessagingError(Exception):
    """Base error carrying the pipeline stage that failed and its cause."""

    stage = "messaging"
    default_message = ""

    def __init__(
        self, message: Optional[str] = None, *, cause: Optional[BaseException] = None
    ) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.stage}: {self.message}"
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


class NameRequiredError(MessagingError):
    stage = "validate"
    default_message = constants.NAME_REQUIRED


class ChannelBuildError(MessagingError):
    stage = "build"
    default_message = constants.CHANNEL_BUILD_FAILED


class QueueAssertionError(MessagingError):
    stage = "assert"
    default_message = constants.QUEUE_ASSERTION_FAILED


class ExchangeDeclarationError(MessagingError):
    stage = "declare"
    default_message = constants.EXCHANGE_DECLARATION_FAILED


class BindingError(MessagingError):
    """One or more routing-key bindings were not confirmed; the queue may be partially bound.

    ``routing_keys`` lists every key not confirmed bound, in request order. The broker closes
    the channel on the first rejected bind, so the keys after it fail with the same reason;
    ``routing_key`` is the first of them, the one the broker rejected.
    """

    stage = "bind"
    default_message = constants.QUEUE_BINDING_FAILED

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        routing_keys: Sequence[str] = (),
        cause: Optional[BaseException] = None,
    ) -> None:
        self.routing_keys: Tuple[str, ...] = tuple(routing_keys)
        super().__init__(message, cause=cause)

    @property
    def routing_key(self) -> Optional[str]:
        return self.routing_keys[0] if self.routing_keys else None


class ConsumerRegistrationError(MessagingError):
    stage = "consume"
    default_message = constants.CONSUMER_REGISTRATION_FAILED


class MessageConsumerError(MessagingError):
    """Reported, never raised, when a listener fails on a single delivery."""

    stage = "deliver"
    default_message = constants.MESSAGE_CONSUMER_FAILED

    def __init__(
        self,
        delivery: Delivery,
        *,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ) -> None:
        self.delivery = delivery
        super().__init__(message, cause=cause)


class ChannelStateError(MessagingError):
    """An operation was attempted in a lifecycle state that does not allow it."""

    stage = "state"
