"""Repository layer for persisting payment records.

The repository is the only writer of ``PaymentModel`` rows. It accepts
domain objects and gateway bodies (plain mappings) and returns primitive
values, so callers are not coupled to Django ORM types. Every mutation is a
single-row, last-write-wins update keyed by invoice id or row id.
"""

from typing import Mapping, Optional

from django.utils import timezone

from .domain import Order, PaymentStatus, from_minor_units
from .models import PaymentModel


def _payment_info(response: Mapping) -> Mapping:
    return response.get("paymentInfo") or {}


def _amount(response: Mapping):
    value = response.get("amount")
    return from_minor_units(value) if value is not None else None


class PaymentRepository:
    """Repository that persists payment state using Django ORM."""

    def store_new(self, order: Order, response: Mapping) -> Optional[int]:
        """Persist the record for a freshly created invoice.

        Args:
            order: Order the invoice was created for.
            response: Initial gateway fields, e.g. ``{"invoiceId", "amount"}``
                with ``amount`` in minor units. ``status`` defaults to
                ``created``.

        Returns:
            The generated primary key. The insert succeeded iff a key is
            returned.
        """
        info = _payment_info(response)
        now = timezone.now()
        obj = PaymentModel.objects.create(
            rrn=info.get("rrn") or response.get("rrn"),
            payment_id=info.get("tranId"),
            order_id=order.id,
            user_id=order.customer_id or 0,
            amount=_amount(response),
            response_status=response.get("status") or PaymentStatus.CREATED.value,
            failure_reason=response.get("failureReason"),
            err_code=response.get("errCode"),
            invoice_id=response.get("invoiceId"),
            time=now,
            updated_at=now,
        )
        return obj.pk

    def update(self, response: Mapping) -> bool:
        """Apply a full gateway status body to the matching record.

        Args:
            response: Gateway status body. ``invoiceId`` and ``status`` are
                required; ``amount`` is converted from minor units when present.

        Returns:
            bool: True when a row matched ``invoiceId``.
        """
        info = _payment_info(response)
        rows = PaymentModel.objects.filter(invoice_id=response["invoiceId"]).update(
            rrn=info.get("rrn"),
            payment_id=info.get("tranId"),
            amount=_amount(response),
            response_status=response["status"],
            failure_reason=response.get("failureReason"),
            err_code=response.get("errCode"),
            updated_at=timezone.now(),
        )
        return rows > 0

    def update_status(self, invoice_id: str, status: str, reason_err: str = "") -> bool:
        """Set the status of ``invoice_id``; ``reason_err`` is stored only for ``error``."""
        data = {"response_status": status}
        if status == PaymentStatus.ERROR.value:
            data["failure_reason"] = reason_err
        rows = PaymentModel.objects.filter(invoice_id=invoice_id).update(**data)
        return rows > 0

    def touch_payment(self, pk: int) -> int:
        """Bump ``updated_at`` for the row ``pk``; returns the number of rows touched."""
        return PaymentModel.objects.filter(pk=pk).update(updated_at=timezone.now())
