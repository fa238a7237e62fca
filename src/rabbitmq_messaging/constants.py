"""Catalog of diagnostic messages used when reporting messaging failures."""

NAME_REQUIRED = "A name must be provided for this queue or exchange"
CHANNEL_BUILD_FAILED = "Failed to open a connection or channel"
SHARED_CHANNEL_UNAVAILABLE = "The channel to share is not open"
QUEUE_ASSERTION_FAILED = "Failed to assert the queue"
EXCHANGE_DECLARATION_FAILED = "Failed to declare the exchange"
QUEUE_BINDING_FAILED = "Failed to bind the queue to the exchange"
CONSUMER_REGISTRATION_FAILED = "Failed to register the consumer"
MESSAGE_CONSUMER_FAILED = "The message listener raised an error"
ALREADY_BUILT = "The channel was already built"
NOT_BUILT = "The channel has not been built"
ALREADY_CLOSED = "The channel is closed"
ALREADY_CONSUMING = "The queue already has an active consumer"
AUTO_ACK_CONSUMER = "Deliveries consumed with auto_ack cannot be acknowledged"
