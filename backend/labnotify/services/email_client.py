import logging

from labnotify.models.enums import Channel
from labnotify.services.channel_client import ChannelClient, ChannelResult

logger = logging.getLogger(__name__)

EMAIL_NOT_IMPLEMENTED = "email channel has no provider"


class EmailClient(ChannelClient):
    """Placeholder for the email channel.

    The channel can be toggled on per event type but no provider is wired
    up yet, so sends are deferred: the delivery log stays pending.
    """

    channel = Channel.EMAIL

    async def send(self, destination: str, message: str, **options) -> ChannelResult:
        logger.warning(f"Email to {destination or 'unknown address'} not sent: {EMAIL_NOT_IMPLEMENTED}")
        return ChannelResult(
            success=False,
            error=EMAIL_NOT_IMPLEMENTED,
            provider="email",
            deferred=True,
            retryable=False,
        )
