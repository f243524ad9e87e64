import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from labnotify.models.enums import Channel

logger = logging.getLogger(__name__)


@dataclass
class ChannelResult:
    """Uniform outcome of one outbound send."""

    success: bool
    response: Any = None
    error: Optional[str] = None
    provider: Optional[str] = None
    # Stub channels leave the delivery log pending instead of failing it
    deferred: bool = False
    # Missing credentials and similar are not worth another attempt
    retryable: bool = True

    @classmethod
    def not_configured(cls, message: str, provider: Optional[str] = None) -> "ChannelResult":
        return cls(success=False, error=message, provider=provider, retryable=False)


class ChannelClient:
    """One external delivery channel.

    Subclasses perform a single outbound call per ``send`` and always return
    a ``ChannelResult``; provider and transport problems never raise.
    """

    channel: Channel
    # HTTP adapters bound each call themselves and write their send log
    # afterwards, so the dispatcher must not cut them off.
    owns_deadline = False

    @property
    def configured(self) -> bool:
        return True

    async def send(self, destination: str, message: str, **options) -> ChannelResult:
        raise NotImplementedError

    @staticmethod
    def _response_body(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    async def _post(
        self,
        url: str,
        *,
        json: dict,
        headers: dict,
        timeout: float,
        provider: str,
        error_field=None,
    ) -> ChannelResult:
        """POST *json* and map the reply onto a ``ChannelResult``.

        ``error_field`` pulls the provider's failure reason out of a JSON
        error body; non-2xx without one falls back to the status code.
        """
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await asyncio.wait_for(client.post(url, json=json, headers=headers), timeout=timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning(f"{provider} request timed out after {timeout}s")
            return ChannelResult(success=False, error="timeout", provider=provider)
        except httpx.HTTPError as e:
            logger.error(f"{provider} request failed: {e}")
            return ChannelResult(success=False, error=str(e) or e.__class__.__name__, provider=provider)

        body = self._response_body(resp)
        if resp.is_success:
            return ChannelResult(success=True, response=body, provider=provider)

        reason = error_field(body) if error_field and isinstance(body, dict) else None
        error = reason or f"{provider} HTTP {resp.status_code}"
        logger.warning(f"{provider} rejected message ({resp.status_code}): {error}")
        return ChannelResult(success=False, response=body, error=error, provider=provider)
