import uuid
from threading import local

_thread_locals = local()

REQUEST_ID_HEADER = "HTTP_X_REQUEST_ID"


def get_current_request_id():
    """Returns the request_id for the current request, or "-" outside a request."""
    return getattr(_thread_locals, "request_id", None) or "-"


class RequestIDMiddleware:
    """
    Tags each request with a request_id so wallet and approval log lines can be
    correlated. An incoming X-Request-ID header is reused; otherwise a new one is
    generated. The id lives in thread-local storage for the request's lifetime.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.META.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        _thread_locals.request_id = request_id
        request.request_id = request_id
        try:
            response = self.get_response(request)
        finally:
            _thread_locals.request_id = None
        response["X-Request-ID"] = request_id
        return response
