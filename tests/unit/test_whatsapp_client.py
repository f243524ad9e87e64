from unittest.mock import patch

import httpx
import pytest
from sqlalchemy import select

from labnotify.models import WhatsAppLog
from labnotify.services.whatsapp_client import WhatsAppClient

MESSAGES_URL = "https://graph.facebook.com/v18.0/123456789/messages"


def _response(status_code, body):
    return httpx.Response(status_code, json=body, request=httpx.Request("POST", MESSAGES_URL))


@pytest.fixture
def whatsapp_client():
    return WhatsAppClient(access_token="test_token", phone_number_id="123456789", timeout=5)


class TestWhatsAppClient:
    @pytest.mark.asyncio
    async def test_text_message(self, db, session, whatsapp_client):
        api_response = {"messaging_product": "whatsapp", "messages": [{"id": "wamid.123"}]}
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, api_response)

            result = await whatsapp_client.send("+880 1712-345678", "Your sample was collected")

        assert result.success is True
        assert result.response == api_response
        mock_post.assert_called_once_with(
            MESSAGES_URL,
            json={
                "messaging_product": "whatsapp",
                "to": "8801712345678",
                "type": "text",
                "text": {"body": "Your sample was collected"},
            },
            headers={"Authorization": "Bearer test_token", "Content-Type": "application/json"},
        )

        logs = (await session.execute(select(WhatsAppLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].status == "sent"
        assert logs[0].template_name is None

    @pytest.mark.asyncio
    async def test_template_message_with_params(self, db, session, whatsapp_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {"messages": [{"id": "wamid.9"}]})

            await whatsapp_client.send(
                "01712345678", "fallback text", template_name="report_ready", template_params=["CBC, ESR"]
            )

        body = mock_post.call_args.kwargs["json"]
        assert body["type"] == "template"
        assert body["template"] == {
            "name": "report_ready",
            "language": {"code": "en"},
            "components": [{"type": "body", "parameters": [{"type": "text", "text": "CBC, ESR"}]}],
        }
        assert "text" not in body

        logs = (await session.execute(select(WhatsAppLog))).scalars().all()
        assert logs[0].template_name == "report_ready"

    def test_template_without_params_has_no_components(self, whatsapp_client):
        body = whatsapp_client.build_payload("8801712345678", "hi", template_name="hello_world")
        assert "components" not in body["template"]

    @pytest.mark.asyncio
    async def test_graph_error_message_is_the_failure_reason(self, db, whatsapp_client):
        error_body = {"error": {"message": "Recipient phone number not in allowed list", "code": 131030}}
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(400, error_body)
            result = await whatsapp_client.send("01712345678", "hello")

        assert result.success is False
        assert result.error == "Recipient phone number not in allowed list"
        assert result.response == error_body

    @pytest.mark.asyncio
    async def test_not_configured(self, db):
        client = WhatsAppClient(access_token="", phone_number_id="")
        with patch("httpx.AsyncClient.post") as mock_post:
            result = await client.send("01712345678", "hello")

        mock_post.assert_not_called()
        assert result.success is False
        assert result.retryable is False
        assert "not configured" in result.error

    @pytest.mark.asyncio
    async def test_foreign_number_sent_without_plus(self, db, whatsapp_client):
        with patch("httpx.AsyncClient.post") as mock_post:
            mock_post.return_value = _response(200, {"messages": [{"id": "wamid.2"}]})
            await whatsapp_client.send("+1 555-123-4567", "hello")

        assert mock_post.call_args.kwargs["json"]["to"] == "15551234567"
