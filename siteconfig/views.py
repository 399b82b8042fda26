from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from common.responses import success_response
from common.throttles import RelaxedThrottle, StrictThrottle
from users.permissions import IsAdminRoleOrReadOnly

from .serializers import GlobalConfigSerializer
from .services import get_config, update_config


class GlobalConfigAPIView(APIView):
    """Payment details and feature switches shown to every client."""

    permission_classes = [IsAdminRoleOrReadOnly]

    def get_throttles(self):
        if self.request.method == "GET":
            self.throttle_classes = [RelaxedThrottle]
        else:
            self.throttle_classes = [StrictThrottle]
        return super().get_throttles()

    @extend_schema(responses=GlobalConfigSerializer)
    def get(self, request, *args, **kwargs):
        return Response(GlobalConfigSerializer(get_config()).data)

    @extend_schema(request=GlobalConfigSerializer, responses=GlobalConfigSerializer)
    def patch(self, request, *args, **kwargs):
        serializer = GlobalConfigSerializer(get_config(), data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        config = update_config(request.user, **serializer.validated_data)
        return success_response(
            "Configuration updated.", config=GlobalConfigSerializer(config).data
        )
