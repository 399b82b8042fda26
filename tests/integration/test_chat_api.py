import pytest
from rest_framework import status

from chat.models import Message


@pytest.mark.django_db
class TestChatAPI:
    def test_support_contact(self, player_client, admin_user):
        response = player_client.get("/api/chat/support-contact/")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["id"] == admin_user.pk

    def test_send_and_poll_conversation(self, player_client, admin_client, player, admin_user):
        sent = player_client.post(
            "/api/chat/messages/",
            {"receiver_id": admin_user.pk, "text": "Where is my deposit?"},
            format="json",
        )
        assert sent.status_code == status.HTTP_201_CREATED
        assert sent.data["message"]["text"] == "Where is my deposit?"

        assert admin_client.get("/api/chat/unread-count/").data == {"unread": 1}
        inbox = admin_client.get("/api/chat/inbox/")
        assert inbox.data == [
            {"id": player.pk, "username": "player", "role": "PLAYER", "unread": 1}
        ]

        conversation = admin_client.get("/api/chat/messages/", {"with": player.pk})
        assert [m["text"] for m in conversation.data] == ["Where is my deposit?"]
        assert admin_client.get("/api/chat/unread-count/").data == {"unread": 0}

    def test_player_to_player_refused(self, player_client, other_player):
        response = player_client.post(
            "/api/chat/messages/",
            {"receiver_id": other_player.pk, "text": "hi"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["code"] == "unauthorized"
        assert not Message.objects.exists()

    def test_chat_blocked(self, player_client, player, admin_user):
        player.is_chat_blocked = True
        player.save(update_fields=["is_chat_blocked"])

        response = player_client.post(
            "/api/chat/messages/",
            {"receiver_id": admin_user.pk, "text": "hi"},
            format="json",
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["code"] == "chat_blocked"

    def test_conversation_requires_partner(self, player_client):
        response = player_client.get("/api/chat/messages/")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "missing_parameter"
