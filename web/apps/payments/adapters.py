"""Payment adapters implementing ``PaymentsPort``.

``MonoPayAdapter`` translates domain data into the MonoPay wire format,
calls ``MonoPayClient`` and maps replies back into ``PaymentResult``. It is
the error boundary of the payments flow: no exception leaves its public
methods. Every failure is logged on the ``monopay`` channel with the status
code and the gateway ``errCode``/``errText``.

``PaymentsStub`` is an in-process implementation without network calls,
intended for unit tests and local development.
"""

import logging
import uuid
from decimal import Decimal
from typing import Callable

import httpx
from django.conf import settings

from .domain import (
    CartItem,
    ErrorKind,
    InvoiceRequest,
    Order,
    PaymentResult,
    final_charge,
    to_minor_units,
)
from .http_client import GatewayResponse, MonoPayClient, MonoPayValidationError
from .storage import resolve_icon_url

logger = logging.getLogger("monopay")

PAYMENT_TYPE_HOLD = "hold"
BASKET_UNIT = "pcs"

# gateway errText -> message shown to the customer
FINALIZE_REJECTIONS = {
    "finalization amount exceeds hold amount": "The finalization amount exceeds the hold amount.",
    "order on hold not found": "Order on hold not found.",
}


def _purchase_comment(order_id) -> str:
    return f"Product purchase, order {order_id}"


class MonoPayAdapter:
    """MonoPay implementation of ``PaymentsPort``.

    Args:
        client: Configured ``MonoPayClient``.
        icon_resolver: Callable mapping a cart item to its icon URL.
        door_surcharge: Fixed charge added at finalization for door delivery,
            in major units. Defaults to ``settings.DOOR_DELIVERY_SURCHARGE``.
    """

    def __init__(
        self,
        client: MonoPayClient,
        icon_resolver: Callable[[CartItem], str] = resolve_icon_url,
        door_surcharge=None,
    ):
        self.client = client
        self.icon_resolver = icon_resolver
        if door_surcharge is None:
            door_surcharge = getattr(settings, "DOOR_DELIVERY_SURCHARGE", "75")
        self.door_surcharge = Decimal(str(door_surcharge))

    # ---- payload builders ----

    def build_create_payload(self, request: InvoiceRequest) -> dict:
        """Render ``request`` into the gateway's invoice-create schema."""
        basket = [
            {
                "name": item.product_name,
                "qty": item.qty,
                "sum": to_minor_units(item.product_price),
                "icon": self.icon_resolver(item),
                "unit": BASKET_UNIT,
            }
            for item in request.items
        ]
        payload = {
            "amount": int(request.amount),
            "validity": request.validity,
            "paymentType": PAYMENT_TYPE_HOLD,
            "merchantPaymInfo": {
                "destination": _purchase_comment(request.order_id),
                "comment": _purchase_comment(request.order_id),
                "basketOrder": basket,
            },
        }
        if request.redirect_url is not None:
            payload["redirectUrl"] = request.redirect_url
        return payload

    def build_finalize_payload(self, order: Order) -> dict:
        """Render ``order`` into the gateway's finalize schema.

        Raises:
            MonoPayValidationError: If the order has no associated invoice.
        """
        if not order.invoice_id:
            raise MonoPayValidationError("invoiceId is required")
        items = [
            {
                "name": item.product_name,
                "qty": item.qty,
                "sum": to_minor_units(item.product_price),
            }
            for item in order.cart
        ]
        return {
            "invoiceId": order.invoice_id,
            "amount": to_minor_units(final_charge(order, self.door_surcharge)),
            "items": items,
        }

    # ---- PaymentsPort ----

    def create(self, request: InvoiceRequest) -> PaymentResult:
        """Create a hold invoice.

        Returns:
            PaymentResult: ``data`` is ``{"url": pageUrl, "invoiceId": ...}``
            on HTTP 200; otherwise an error classified by ``ErrorKind``.
        """
        return self._call("create", lambda: self.client.create(self.build_create_payload(request)), self._on_created)

    def get_status(self, invoice_id: str) -> PaymentResult:
        """Fetch the invoice status; the gateway body is passed through unchanged."""
        return self._call("get_status", lambda: self.client.get_status(invoice_id), PaymentResult.success)

    def finalize_invoice(self, order: Order) -> PaymentResult:
        """Capture the held invoice of ``order`` for its final charge.

        Two HTTP 400 replies are promoted to ``ErrorKind.REJECTED`` with a
        customer-facing ``message``: a capture larger than the hold and a
        missing hold. Any other failure is a plain gateway/transport error.
        """
        result = self._call("finalize_invoice", lambda: self.client.finalize(self.build_finalize_payload(order)), PaymentResult.success)
        error = result.error
        if error is not None and error.kind is ErrorKind.GATEWAY and error.status_code == 400:
            message = FINALIZE_REJECTIONS.get(error.err_text)
            if message:
                return PaymentResult.failure(
                    ErrorKind.REJECTED,
                    message=message,
                    status_code=error.status_code,
                    err_code=error.err_code,
                    err_text=error.err_text,
                )
        return result

    # ---- helpers ----

    @staticmethod
    def _on_created(body: dict) -> PaymentResult:
        if not body.get("pageUrl") or not body.get("invoiceId"):
            logger.error(
                "payment create reply without pageUrl/invoiceId",
                extra={"operation": "create", "status_code": 200, "body_keys": sorted(body)},
            )
            return PaymentResult.failure(
                ErrorKind.GATEWAY,
                status_code=200,
                err_code="",
                err_text="reply is missing pageUrl or invoiceId",
            )
        return PaymentResult.success({"url": body["pageUrl"], "invoiceId": body["invoiceId"]})

    def _call(self, operation: str, send: Callable[[], GatewayResponse], on_ok: Callable[[dict], PaymentResult]) -> PaymentResult:
        try:
            resp = send()
            if not isinstance(resp.body, dict):
                raise ValueError(f"malformed gateway body: {type(resp.body).__name__}")
            if resp.status_code == 200:
                return on_ok(resp.body)
            return self._gateway_failure(operation, resp)
        except MonoPayValidationError as e:
            logger.error("payment %s rejected before sending", operation, extra={"operation": operation, "reason": str(e)})
            return PaymentResult.failure(ErrorKind.VALIDATION, err_text=str(e))
        except (httpx.HTTPError, ValueError) as e:
            logger.error("payment %s transport failure", operation, extra={"operation": operation, "reason": str(e)})
            return PaymentResult.failure(ErrorKind.TRANSPORT, err_text=str(e))
        except Exception as e:
            logger.exception("payment %s failed", operation, extra={"operation": operation})
            return PaymentResult.failure(ErrorKind.UNEXPECTED, err_text=str(e))

    @staticmethod
    def _gateway_failure(operation: str, resp: GatewayResponse) -> PaymentResult:
        err_code = resp.body.get("errCode") or ""
        err_text = resp.body.get("errText") or ""
        logger.error(
            "payment %s %s|%s|%s",
            operation,
            resp.status_code,
            err_code,
            err_text,
            extra={"operation": operation, "status_code": resp.status_code, "err_code": err_code, "err_text": err_text},
        )
        return PaymentResult.failure(
            ErrorKind.GATEWAY,
            status_code=resp.status_code,
            err_code=err_code,
            err_text=err_text,
        )


class PaymentsStub:
    """Stub implementation of ``PaymentsPort``.

    Approves invoices with a positive amount and keeps their state in memory
    so status and finalize calls behave consistently within one instance.
    Finalizing more than the held amount, or an unknown invoice, is rejected
    with the same messages as the real gateway adapter.
    """

    def __init__(self, door_surcharge=Decimal("75")):
        self.door_surcharge = door_surcharge
        self._invoices: dict[str, dict] = {}

    def create(self, request: InvoiceRequest) -> PaymentResult:
        if request.amount <= 0:
            return PaymentResult.failure(ErrorKind.GATEWAY, status_code=400, err_code="BAD_REQUEST", err_text="amount is invalid")
        invoice_id = uuid.uuid4().hex
        self._invoices[invoice_id] = {"invoiceId": invoice_id, "status": "hold", "amount": int(request.amount)}
        return PaymentResult.success({"url": f"https://pay.stub.local/{invoice_id}", "invoiceId": invoice_id})

    def get_status(self, invoice_id: str) -> PaymentResult:
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            return PaymentResult.failure(ErrorKind.GATEWAY, status_code=404, err_code="NOT_FOUND", err_text="invoice not found")
        return PaymentResult.success(dict(invoice))

    def finalize_invoice(self, order: Order) -> PaymentResult:
        invoice = self._invoices.get(order.invoice_id or "")
        if invoice is None or invoice["status"] != "hold":
            return PaymentResult.failure(ErrorKind.REJECTED, message=FINALIZE_REJECTIONS["order on hold not found"], status_code=400)
        amount = to_minor_units(final_charge(order, self.door_surcharge))
        if amount > invoice["amount"]:
            return PaymentResult.failure(
                ErrorKind.REJECTED,
                message=FINALIZE_REJECTIONS["finalization amount exceeds hold amount"],
                status_code=400,
            )
        invoice.update(status="success", finalAmount=amount)
        return PaymentResult.success({"status": "success"})
