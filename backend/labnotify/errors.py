"""Exceptions raised by the notification dispatcher.

Shared-path failures (settings lookup, notification insert, bad input)
propagate to the caller. Provider failures are never raised: channel
clients return a failed ``ChannelResult`` and the dispatcher records it as
a ``failed`` delivery log.
"""


class NotificationError(Exception):
    """Base class for all dispatcher errors."""

    pass


class ConfigurationError(NotificationError):
    """A settings row or provider credential is missing.

    Fatal for the dispatch (settings) or the channel (credentials) it
    affects. Never retried.
    """

    pass


class ValidationError(NotificationError):
    """Required input is missing or malformed; raised before any side effect."""

    pass


class RecipientNotFoundError(ValidationError):
    def __init__(self, recipient_id: str):
        super().__init__(f"Recipient {recipient_id} not found")
        self.recipient_id = recipient_id


class AuthorizationError(NotificationError):
    """The acting profile may not perform the operation."""

    pass


class NotificationCreateError(NotificationError):
    """The notification row could not be written."""

    pass


class ChannelSkipped(NotificationError):
    """The channel cannot be attempted for this recipient (e.g. no phone)."""

    pass
