import logging

from .middleware import get_current_request_id


class RequestIDFilter(logging.Filter):
    """
    Adds `request_id` to every log record so the formatter can print it.
    """

    def filter(self, record):
        record.request_id = get_current_request_id()
        return True
