"""Middleware that assigns and propagates a request identifier.

Every incoming request (API calls from the order flow and gateway status
callbacks alike) receives a request id. The id is taken from the incoming
``X-Request-Id`` header when present and generated as a UUID4 otherwise. It
is stored on the request, in ``REQUEST_ID_CTX`` for log records and for the
outgoing gateway calls made by ``MonoPayClient``, and echoed back in the
``X-Request-ID`` response header.
"""

import contextvars
import uuid

from django.utils.deprecation import MiddlewareMixin

REQUEST_ID_CTX = contextvars.ContextVar("request_id", default="-")


class RequestIdMiddleware(MiddlewareMixin):
    """Django middleware that sets and returns a per-request identifier.

    Attributes:
        HEADER (str): Incoming header name in ``request.META`` casing.
        RESPONSE_HEADER (str): Header added to outgoing responses.
    """

    HEADER = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        rid = request.META.get(self.HEADER) or str(uuid.uuid4())
        request.request_id = rid
        REQUEST_ID_CTX.set(rid)

    def process_response(self, request, response):
        """Add the request id header to the response.

        Args:
            request: Django HttpRequest (may lack ``request_id`` when an
                earlier middleware short-circuited).
            response: Django HttpResponse to modify.

        Returns:
            The same HttpResponse with ``X-Request-ID`` set.
        """
        rid = getattr(request, "request_id", REQUEST_ID_CTX.get())
        response[self.RESPONSE_HEADER] = rid
        return response
