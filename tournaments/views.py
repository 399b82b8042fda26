from django.db.models import Prefetch
from drf_spectacular.utils import extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated

from common.responses import success_response
from common.throttles import MediumThrottle, RelaxedThrottle, StrictThrottle
from users.permissions import IsAdminRole

from .models import JoinRequest, Participant, Tournament
from .serializers import (
    GoLiveSerializer,
    JoinRequestSerializer,
    JoinTournamentSerializer,
    ParticipantSerializer,
    SetWinnerSerializer,
    TournamentCreateUpdateSerializer,
    TournamentReadOnlySerializer,
)
from .services import (
    approve_join_request,
    create_join_request,
    go_live,
    join_with_wallet,
    reject_join_request,
    set_winner,
)


class TournamentViewSet(viewsets.ModelViewSet):
    """
    Public tournament listing, admin management and the entry flows.
    """

    queryset = Tournament.objects.all()
    filterset_fields = ["status", "game_name", "mode"]

    def get_queryset(self):
        return (
            super()
            .get_queryset()
            .select_related("winner")
            .prefetch_related(
                Prefetch(
                    "participants",
                    queryset=Participant.objects.select_related("user").order_by("slot_no"),
                )
            )
        )

    def get_serializer_class(self):
        if self.action in ["create", "update", "partial_update"]:
            return TournamentCreateUpdateSerializer
        return TournamentReadOnlySerializer

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            return [AllowAny()]
        if self.action == "join":
            return [IsAuthenticated()]
        return [IsAdminRole()]

    def get_throttles(self):
        if self.action == "join":
            self.throttle_classes = [StrictThrottle]
        elif self.action in ["list", "retrieve"]:
            self.throttle_classes = [MediumThrottle]
        else:
            self.throttle_classes = [RelaxedThrottle]
        return super().get_throttles()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tournament = serializer.save()
        return success_response(
            "Tournament created.",
            status=status.HTTP_201_CREATED,
            tournament=TournamentReadOnlySerializer(
                tournament, context=self.get_serializer_context()
            ).data,
        )

    @extend_schema(request=JoinTournamentSerializer, responses=ParticipantSerializer)
    @action(detail=True, methods=["post"])
    def join(self, request, pk=None):
        """
        Join a tournament, either paying the entry fee from the wallet or
        submitting a UTR for manual verification.
        """
        serializer = JoinTournamentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data["pay_via_wallet"]:
            participant = join_with_wallet(
                request.user, pk, data["ff_name"], data["ff_uid"]
            )
            return success_response(
                f"Joined successfully. Your slot number is {participant.slot_no}.",
                status=status.HTTP_201_CREATED,
                participant=ParticipantSerializer(participant).data,
            )

        join_request = create_join_request(
            request.user, pk, data["ff_name"], data["ff_uid"], data["utr_number"]
        )
        return success_response(
            "Join request submitted. An admin will verify your payment.",
            status=status.HTTP_201_CREATED,
            join_request=JoinRequestSerializer(join_request).data,
        )

    @extend_schema(request=GoLiveSerializer, responses=TournamentReadOnlySerializer)
    @action(detail=True, methods=["post"], url_path="go-live")
    def go_live(self, request, pk=None):
        serializer = GoLiveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tournament = go_live(request.user, pk, **serializer.validated_data)
        return success_response(
            "Tournament is live. Room details are visible to participants.",
            tournament=TournamentReadOnlySerializer(
                self.get_queryset().get(pk=tournament.pk),
                context=self.get_serializer_context(),
            ).data,
        )

    @extend_schema(request=SetWinnerSerializer, responses=TournamentReadOnlySerializer)
    @action(detail=True, methods=["post"], url_path="set-winner")
    def set_winner(self, request, pk=None):
        serializer = SetWinnerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        tournament = set_winner(request.user, pk, serializer.validated_data["winner_id"])
        return success_response(
            "Winner declared and prize credited.",
            tournament=TournamentReadOnlySerializer(
                self.get_queryset().get(pk=tournament.pk),
                context=self.get_serializer_context(),
            ).data,
        )


class JoinRequestViewSet(
    mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet
):
    """Admins review every join request; players see their own."""

    queryset = JoinRequest.objects.select_related("user", "tournament")
    serializer_class = JoinRequestSerializer
    filterset_fields = ["status", "tournament"]

    def get_queryset(self):
        queryset = super().get_queryset()
        if not self.request.user.is_admin:
            queryset = queryset.filter(user=self.request.user)
        return queryset

    def get_permissions(self):
        if self.action in ["approve", "reject"]:
            return [IsAdminRole()]
        return [IsAuthenticated()]

    def get_throttles(self):
        if self.action in ["approve", "reject"]:
            self.throttle_classes = [StrictThrottle]
        else:
            self.throttle_classes = [MediumThrottle]
        return super().get_throttles()

    @extend_schema(request=None, responses=ParticipantSerializer)
    @action(detail=True, methods=["post"])
    def approve(self, request, pk=None):
        participant = approve_join_request(request.user, pk)
        return success_response(
            f"Join request approved. Slot {participant.slot_no} assigned.",
            participant=ParticipantSerializer(participant).data,
        )

    @extend_schema(request=None, responses=JoinRequestSerializer)
    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        join_request = reject_join_request(request.user, pk)
        return success_response(
            "Join request rejected.",
            join_request=JoinRequestSerializer(join_request).data,
        )
