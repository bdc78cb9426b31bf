"""HTTP views for the payments app.

Views validate requests with Pydantic, map them to domain DTOs, delegate to
the ``PaymentService`` returned by ``providers.get_payment_service()`` and
persist state transitions through ``PaymentRepository``. The adapter never
raises, so each view only translates ``PaymentResult`` errors to HTTP:

- REJECTED → 409 with ``{"errText": ...}`` (customer-displayable)
- VALIDATION → 400 ``INVALID_INVOICE``
- GATEWAY → 502 ``GATEWAY_ERROR``
- TRANSPORT / UNEXPECTED → 503 ``UPSTREAM_UNAVAILABLE``
"""

import logging

from django.conf import settings
from pydantic import ValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import providers
from .domain import ErrorKind, Order, PaymentError, PaymentStatus
from .repository import PaymentRepository
from .schemas import CreateInvoiceDTO, FinalizeInvoiceDTO, InvoiceStatusDTO

logger = logging.getLogger("payments")

KNOWN_STATUSES = {s.value for s in PaymentStatus}

_ERROR_STATUS = {
    ErrorKind.VALIDATION: (status.HTTP_400_BAD_REQUEST, "INVALID_INVOICE"),
    ErrorKind.GATEWAY: (status.HTTP_502_BAD_GATEWAY, "GATEWAY_ERROR"),
    ErrorKind.TRANSPORT: (status.HTTP_503_SERVICE_UNAVAILABLE, "UPSTREAM_UNAVAILABLE"),
    ErrorKind.UNEXPECTED: (status.HTTP_503_SERVICE_UNAVAILABLE, "UPSTREAM_UNAVAILABLE"),
}


def _error_response(error: PaymentError) -> Response:
    if error.kind is ErrorKind.REJECTED:
        return Response(error.as_payload(), status=status.HTTP_409_CONFLICT)
    code, detail = _ERROR_STATUS[error.kind]
    return Response({"detail": detail}, status=code)


def _validation_response(e: ValidationError) -> Response:
    return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)


class PaymentsPingView(APIView):
    """Health-check endpoint for the payments module."""

    def get(self, request):
        return Response({"ok": True})


class InvoiceCollectionView(APIView):
    """Create a hold invoice for an order.

    On success the payment record is stored with status ``created`` and the
    response is 201 with exactly ``{"url", "invoiceId"}``.
    """

    def post(self, request):
        try:
            dto = CreateInvoiceDTO.model_validate(request.data)
        except ValidationError as e:
            return _validation_response(e)

        invoice = dto.to_domain(
            default_redirect=getattr(settings, "MONOPAY_REDIRECT_URL", None),
            default_validity=getattr(settings, "MONOPAY_INVOICE_VALIDITY", 86400),
        )
        result = providers.get_payment_service().create_invoice(invoice)
        if not result:
            return _error_response(result.error)

        PaymentRepository().store_new(
            Order(id=dto.order_id, customer_id=dto.customer_id),
            {"invoiceId": result.data["invoiceId"], "amount": dto.amount_cents},
        )
        return Response(result.data, status=status.HTTP_201_CREATED)


class InvoiceStatusView(APIView):
    """Poll the gateway for an invoice and sync the local record.

    The gateway body is returned unchanged.
    """

    def get(self, request, invoice_id: str):
        result = providers.get_payment_service().get_status(invoice_id)
        if not result:
            return _error_response(result.error)

        body = result.data
        if body.get("invoiceId") and body.get("status"):
            if not PaymentRepository().update(body):
                logger.warning("status for unknown invoice", extra={"invoice_id": invoice_id})
        return Response(body, status=status.HTTP_200_OK)


class InvoiceFinalizeView(APIView):
    """Capture a held invoice for the final order contents."""

    def post(self, request, invoice_id: str):
        try:
            dto = FinalizeInvoiceDTO.model_validate(request.data)
        except ValidationError as e:
            return _validation_response(e)

        result = providers.get_payment_service().finalize_invoice(dto.to_domain(invoice_id))
        if not result:
            return _error_response(result.error)

        PaymentRepository().update_status(invoice_id, result.data.get("status") or "success")
        return Response(result.data, status=status.HTTP_200_OK)


class WebhookView(APIView):
    """Receive gateway status callbacks and apply them to the payment record.

    Returns:
        Response: 200 ``{"ok": true}`` when a record was updated, 404
        ``NOT_FOUND`` for an unknown invoice, 400 for an invalid body.
    """

    def post(self, request):
        try:
            dto = InvoiceStatusDTO.model_validate(request.data)
        except ValidationError as e:
            return _validation_response(e)

        if dto.status not in KNOWN_STATUSES:
            logger.warning("unknown invoice status received", extra={"invoice_id": dto.invoiceId, "status": dto.status})
        if not PaymentRepository().update(dto.model_dump()):
            return Response({"detail": "NOT_FOUND"}, status=status.HTTP_404_NOT_FOUND)
        logger.info("invoice status applied", extra={"invoice_id": dto.invoiceId, "status": dto.status})
        return Response({"ok": True}, status=status.HTTP_200_OK)
