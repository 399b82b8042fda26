from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(detail, status=http_status.HTTP_200_OK, **payload):
    """Envelope for completed workflow operations; mirrors the failure body."""
    body = {"success": True, "detail": detail}
    body.update(payload)
    return Response(body, status=status)
