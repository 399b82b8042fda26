import pytest
from rest_framework import status


@pytest.mark.django_db
class TestGlobalConfigAPI:
    def test_anyone_can_read(self, api_client, settings):
        settings.DEFAULT_UPI_ID = "admin@upi"
        response = api_client.get("/api/config/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["upi_id"] == "admin@upi"
        assert response.data["chat_disabled"] is False

    def test_admin_updates(self, admin_client, api_client):
        response = admin_client.patch(
            "/api/config/", {"upi_id": "arena@upi", "chat_disabled": True}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["config"]["upi_id"] == "arena@upi"
        assert api_client.get("/api/config/").data["chat_disabled"] is True

    def test_player_cannot_update(self, player_client):
        response = player_client.patch("/api/config/", {"chat_disabled": True}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_blank_upi_rejected(self, admin_client):
        response = admin_client.patch("/api/config/", {"upi_id": "   "}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
