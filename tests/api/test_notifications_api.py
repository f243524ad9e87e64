import pytest

from labnotify.api.notifications import get_channel_clients
from labnotify.main import app
from labnotify.models import Channel
from labnotify.services.channel_client import ChannelResult

DISPATCH = {
    "recipientId": "patient-1",
    "type": "report_ready",
    "data": {"requestId": "req-1", "testNames": ["CBC"]},
}


@pytest.fixture
def fake_clients(fake_client):
    clients = {
        Channel.SMS: fake_client(Channel.SMS),
        Channel.WHATSAPP: fake_client(Channel.WHATSAPP),
    }
    app.dependency_overrides[get_channel_clients] = lambda: clients
    return clients


class TestDispatchEndpoint:
    @pytest.mark.asyncio
    async def test_dispatch_in_app(self, client, patient, fake_clients):
        response = await client.post("/api/notifications/dispatch", json=DISPATCH)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["channels"] == ["in_app"]
        assert body["deliveries"] == {"in_app": "delivered"}
        assert body["notification"]["title"] == "Report Ready"
        assert body["notification"]["recipient_id"] == "patient-1"

    @pytest.mark.asyncio
    async def test_dispatch_with_failing_sms_still_succeeds(
        self, client, patient, set_channels, fake_clients
    ):
        await set_channels("report_ready", sms_enabled=True)
        fake_clients[Channel.SMS].results = [
            ChannelResult(success=False, error="gateway down", provider="fake", retryable=False)
        ]

        response = await client.post("/api/notifications/dispatch", json=DISPATCH)

        assert response.status_code == 200
        notification_id = response.json()["notification"]["id"]
        assert response.json()["deliveries"] == {"in_app": "delivered", "sms": "failed"}

        logs = (await client.get(f"/api/notifications/{notification_id}/logs")).json()
        by_channel = {log["channel"]: log for log in logs}
        assert by_channel["sms"]["status"] == "failed"
        assert by_channel["sms"]["error_message"] == "gateway down"
        assert by_channel["sms"]["metadata"]["error"] == "gateway down"

    @pytest.mark.asyncio
    async def test_all_disabled(self, client, patient, set_channels, fake_clients):
        await set_channels("report_ready", in_app_enabled=False)

        response = await client.post("/api/notifications/dispatch", json=DISPATCH)

        assert response.status_code == 200
        assert response.json()["notification"] is None
        assert response.json()["message"] == "All notification channels are disabled for this type"

    @pytest.mark.asyncio
    async def test_unknown_recipient_is_404(self, client, fake_clients):
        response = await client.post("/api/notifications/dispatch", json=DISPATCH)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_type_is_rejected(self, client, patient, fake_clients):
        response = await client.post(
            "/api/notifications/dispatch", json={**DISPATCH, "type": "lab_exploded"}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_missing_recipient_is_rejected(self, client, fake_clients):
        response = await client.post("/api/notifications/dispatch", json={"type": "report_ready"})
        assert response.status_code == 422


class TestFeedEndpoints:
    @pytest.mark.asyncio
    async def test_feed_read_flow(self, client, patient, fake_clients):
        for _ in range(2):
            await client.post("/api/notifications/dispatch", json=DISPATCH)

        feed = (await client.get("/api/notifications/", params={"recipient_id": "patient-1"})).json()
        assert len(feed) == 2
        assert feed[0]["id"] > feed[1]["id"]

        unread = await client.get("/api/notifications/unread-count", params={"recipient_id": "patient-1"})
        assert unread.json() == {"recipient_id": "patient-1", "unread": 2}

        read = await client.post(
            f"/api/notifications/{feed[0]['id']}/read", params={"recipient_id": "patient-1"}
        )
        assert read.status_code == 200
        assert read.json()["read_at"] is not None

        unread = await client.get("/api/notifications/unread-count", params={"recipient_id": "patient-1"})
        assert unread.json()["unread"] == 1

        marked = await client.post("/api/notifications/read-all", params={"recipient_id": "patient-1"})
        assert marked.json() == {"recipient_id": "patient-1", "updated": 1}

    @pytest.mark.asyncio
    async def test_mark_read_wrong_recipient_is_404(self, client, patient, fake_clients):
        created = (await client.post("/api/notifications/dispatch", json=DISPATCH)).json()

        response = await client.post(
            f"/api/notifications/{created['notification']['id']}/read", params={"recipient_id": "patient-9"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delivery_history_filters(self, client, patient, set_channels, fake_clients):
        await set_channels("report_ready", sms_enabled=True)
        await client.post("/api/notifications/dispatch", json=DISPATCH)

        everything = (await client.get("/api/notifications/logs")).json()
        assert everything["total"] == 2

        sms_only = (await client.get("/api/notifications/logs", params={"channel": "sms"})).json()
        assert sms_only["total"] == 1
        assert sms_only["items"][0]["channel"] == "sms"
        assert sms_only["items"][0]["status"] == "delivered"
