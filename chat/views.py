from drf_spectacular.utils import OpenApiParameter, extend_schema, inline_serializer
from rest_framework import serializers, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from common.exceptions import ApplicationError
from common.responses import success_response
from common.throttles import MediumThrottle, RelaxedThrottle, StrictThrottle
from users.serializers import UserReadOnlySerializer

from .serializers import InboxEntrySerializer, MessageCreateSerializer, MessageSerializer
from .services import get_conversation, get_support_contact, inbox, send_message, unread_count


class MessageViewSet(viewsets.ViewSet):
    """
    Polling chat between players and support.
    - GET ?with=<user id> returns the conversation and marks it read.
    - POST sends a message.
    """

    permission_classes = [IsAuthenticated]

    def get_throttles(self):
        if self.action == "create":
            self.throttle_classes = [StrictThrottle]
        else:
            self.throttle_classes = [RelaxedThrottle]
        return super().get_throttles()

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="with",
                type=int,
                location=OpenApiParameter.QUERY,
                required=True,
                description="The other participant of the conversation.",
            )
        ],
        responses=MessageSerializer(many=True),
    )
    def list(self, request):
        other_id = request.query_params.get("with")
        if not other_id:
            raise ApplicationError(
                "The 'with' query parameter is required.", code="missing_parameter"
            )
        messages = get_conversation(request.user, other_id)
        return Response(MessageSerializer(messages, many=True).data)

    @extend_schema(request=MessageCreateSerializer, responses=MessageSerializer)
    def create(self, request):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = send_message(
            request.user,
            serializer.validated_data["receiver_id"],
            serializer.validated_data["text"],
        )
        return success_response(
            "Message sent.",
            status=status.HTTP_201_CREATED,
            message=MessageSerializer(message).data,
        )


class SupportContactAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MediumThrottle]

    @extend_schema(responses=UserReadOnlySerializer)
    def get(self, request, *args, **kwargs):
        return Response(UserReadOnlySerializer(get_support_contact()).data)


class UnreadCountAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [RelaxedThrottle]

    @extend_schema(
        responses=inline_serializer(
            name="UnreadCount", fields={"unread": serializers.IntegerField()}
        )
    )
    def get(self, request, *args, **kwargs):
        return Response({"unread": unread_count(request.user)})


class InboxAPIView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MediumThrottle]

    @extend_schema(responses=InboxEntrySerializer(many=True))
    def get(self, request, *args, **kwargs):
        return Response(InboxEntrySerializer(inbox(request.user), many=True).data)
