import asyncio
from unittest.mock import patch

import httpx
import pytest
from sqlalchemy import select

from labnotify.errors import ValidationError
from labnotify.models import SmsLog
from labnotify.services.sms_client import SmsClient


def _response(status_code, body, url="https://api.revecloud.com/sms/send"):
    return httpx.Response(status_code, json=body, request=httpx.Request("POST", url))


@pytest.fixture
def sms_client():
    return SmsClient(api_key="test-key", sender_id="LABCARE", api_url="", provider="reve", timeout=5)


class TestSmsClient:
    @pytest.mark.asyncio
    async def test_reve_send_success(self, db, session, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {"status": "queued", "id": "r-1"})

            result = await sms_client.send("01712-345678", "Your report is ready")

        assert result.success is True
        assert result.provider == "reve"
        assert result.response == {"status": "queued", "id": "r-1"}
        mock_post.assert_called_once_with(
            "https://api.revecloud.com/sms/send",
            json={"to": "8801712345678", "message": "Your report is ready", "sender_id": "LABCARE"},
            headers={"Content-Type": "application/json", "Authorization": "Bearer test-key"},
        )

        logs = (await session.execute(select(SmsLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].phone == "8801712345678"
        assert logs[0].provider == "reve"
        assert logs[0].status == "sent"

    @pytest.mark.asyncio
    async def test_khudebarta_uses_its_own_wire_format(self, db):
        client = SmsClient(api_key="kb-key", sender_id="LAB", api_url="", provider="khudebarta")
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(201, {"ok": True})

            result = await client.send("01712345678", "hello")

        assert result.success is True
        mock_post.assert_called_once_with(
            "https://api.khudebarta.com/v1/sms/send",
            json={"recipient": "8801712345678", "text": "hello", "sender": "LAB"},
            headers={"Content-Type": "application/json", "X-API-Key": "kb-key"},
        )

    @pytest.mark.asyncio
    async def test_provider_override_per_call(self, db, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {})
            result = await sms_client.send("01712345678", "hello", provider="khudebarta")

        assert result.provider == "khudebarta"
        assert mock_post.call_args.args[0] == "https://api.khudebarta.com/v1/sms/send"

    @pytest.mark.asyncio
    async def test_unknown_provider_falls_back_to_reve(self, db):
        client = SmsClient(api_key="k", sender_id="S", api_url="", provider="carrier-pigeon")
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {})
            result = await client.send("01712345678", "hello")

        assert result.provider == "reve"

    @pytest.mark.asyncio
    async def test_custom_url_is_used(self, db):
        client = SmsClient(api_key="k", sender_id="S", api_url="https://sms.internal/send")
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {}, url="https://sms.internal/send")
            await client.send("01712345678", "hello")

        assert mock_post.call_args.args[0] == "https://sms.internal/send"

    @pytest.mark.asyncio
    async def test_non_2xx_is_failure_with_provider_message(self, db, session, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(400, {"message": "Invalid sender id"})

            result = await sms_client.send("01712345678", "hello")

        assert result.success is False
        assert result.error == "Invalid sender id"
        logs = (await session.execute(select(SmsLog))).scalars().all()
        assert logs[0].status == "failed"
        assert logs[0].response == {"message": "Invalid sender id"}

    @pytest.mark.asyncio
    async def test_non_2xx_without_message_uses_default(self, db, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(500, {})
            result = await sms_client.send("01712345678", "hello")

        assert result.success is False
        assert result.error == "Failed to send SMS via Reve"

    @pytest.mark.asyncio
    async def test_timeout_is_reported_as_timeout(self, db, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.side_effect = httpx.ConnectTimeout("timed out")
            result = await sms_client.send("01712345678", "hello")

        assert result.success is False
        assert result.error == "timeout"
        assert result.retryable is True

    @pytest.mark.asyncio
    async def test_hung_provider_is_cut_off_and_logged(self, db, session):
        client = SmsClient(api_key="k", sender_id="LAB", api_url="", timeout=0.1)

        async def hang(*args, **kwargs):
            await asyncio.sleep(1)

        with patch("httpx.AsyncClient.post", side_effect=hang):
            result = await client.send("01712345678", "hello")

        assert result.success is False
        assert result.error == "timeout"
        logs = (await session.execute(select(SmsLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].status == "failed"

    @pytest.mark.asyncio
    async def test_transport_error_is_captured(self, db, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.side_effect = httpx.ConnectError("connection refused")
            result = await sms_client.send("01712345678", "hello")

        assert result.success is False
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_not_configured_makes_no_call(self, db, session):
        client = SmsClient(api_key="", sender_id="")
        with patch("httpx.AsyncClient.post") as mock_post:
            result = await client.send("01712345678", "hello")

        mock_post.assert_not_called()
        assert client.configured is False
        assert result.success is False
        assert result.retryable is False
        assert "not configured" in result.error
        assert (await session.execute(select(SmsLog))).scalars().all() == []

    @pytest.mark.asyncio
    async def test_missing_fields_rejected_before_any_call(self, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            with pytest.raises(ValidationError):
                await sms_client.send("", "hello")
            with pytest.raises(ValidationError):
                await sms_client.send("01712345678", "")

        mock_post.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreign_international_number_is_not_prefixed(self, db, sms_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {})
            await sms_client.send("+1 555-123-4567", "hello")

        assert mock_post.call_args.kwargs["json"]["to"] == "+15551234567"
