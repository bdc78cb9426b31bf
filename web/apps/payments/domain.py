"""Domain models, ports and service for payments.

This module contains the dataclasses exchanged between the order flow and
the payment adapters, the explicit result type returned by every adapter
operation, the ``PaymentsPort`` protocol that concrete gateways implement,
and the ``PaymentService`` facade callers depend on.

Amounts are decimal major units (e.g. 12.50) inside the domain and integer
minor units (e.g. 1250) on the wire. ``to_minor_units`` and
``from_minor_units`` are the only places where the two meet.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, List, Optional, Protocol


# ---- Currency ----
def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps float inputs like 50.5 from expanding to binary noise
    return Decimal(str(value))


def to_minor_units(amount) -> int:
    """Convert a major-unit amount to integer minor units, rounding half-up.

    Args:
        amount: Decimal, float, int or numeric string in major units.

    Returns:
        int: Amount in minor units, e.g. ``Decimal("50.505")`` -> ``5051``.
    """
    return int((_as_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> Decimal:
    """Convert integer minor units back to a two-place major-unit Decimal."""
    return (Decimal(int(amount)) / 100).quantize(Decimal("0.01"))


# ---- Enums ----
class PaymentStatus(str, Enum):
    """Invoice statuses reported by the gateway, persisted verbatim."""

    CREATED = "created"
    PROCESSING = "processing"
    HOLD = "hold"
    SUCCESS = "success"
    FAILURE = "failure"
    REVERSED = "reversed"
    EXPIRED = "expired"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Classification of a failed adapter operation."""

    VALIDATION = "VALIDATION"
    TRANSPORT = "TRANSPORT"
    GATEWAY = "GATEWAY"
    REJECTED = "REJECTED"
    UNEXPECTED = "UNEXPECTED"


# ---- Entities / DTOs ----
@dataclass(frozen=True)
class CartItem:
    """Snapshot of a cart line as read at invoice and finalize time.

    Attributes:
        product_name: Display name sent to the gateway basket.
        product_price: Unit price in major units.
        quantity: Number of units. Accepts numeric strings as stored by the
            order subsystem.
        product_id: Product identifier used to locate the icon in storage.
        product_image: Image path relative to the product folder, if any.
        final_cost: Optional line total overriding ``price * quantity``.
    """

    product_name: str
    product_price: Decimal
    quantity: Any = 1
    product_id: Optional[int] = None
    product_image: Optional[str] = None
    final_cost: Optional[Decimal] = None

    @property
    def qty(self) -> float:
        return float(self.quantity)

    def line_total(self) -> Decimal:
        """Line charge in major units: ``final_cost`` when set, else price * quantity."""
        if self.final_cost:
            return _as_decimal(self.final_cost)
        return _as_decimal(self.product_price) * _as_decimal(self.quantity)


@dataclass
class Order:
    """Order data read by the adapter during finalization.

    Attributes:
        id: Order identifier.
        customer_id: Owner of the order.
        cart: Cart lines captured for the order.
        to_door: Whether the order is delivered to the door, which adds the
            fixed door-delivery surcharge.
        delivery_price: Additional explicit delivery charge in major units.
        invoice_id: Gateway invoice id of the associated transaction.
    """

    id: Optional[int]
    customer_id: Optional[int] = None
    cart: List[CartItem] = field(default_factory=list)
    to_door: bool = False
    delivery_price: Optional[Decimal] = None
    invoice_id: Optional[str] = None


@dataclass(frozen=True)
class InvoiceRequest:
    """Input for creating a hold invoice.

    Attributes:
        order_id: Order the invoice pays for, used in the merchant comment.
        amount: Total to hold, already in minor units.
        items: Cart lines rendered into the gateway basket.
        redirect_url: Where the payer returns after the payment page. A
            missing value is rejected by the client before any request.
        validity: Invoice lifetime in seconds.
    """

    order_id: Any
    amount: int
    items: List[CartItem]
    redirect_url: Optional[str] = None
    validity: int = 86400


def final_charge(order: Order, door_surcharge=Decimal("75")) -> Decimal:
    """Compute the amount to capture for ``order`` in major units.

    Sums every cart line (``final_cost`` or price * quantity), then adds the
    door-delivery surcharge when ``order.to_door`` is set and any explicit
    ``delivery_price``.
    """
    total = sum((item.line_total() for item in order.cart), Decimal("0"))
    if order.to_door:
        total += _as_decimal(door_surcharge)
    if order.delivery_price:
        total += _as_decimal(order.delivery_price)
    return total


# ---- Results ----
@dataclass(frozen=True)
class PaymentError:
    """Details of a failed operation.

    Attributes:
        kind: Error classification.
        message: User-displayable text; only set for ``REJECTED``.
        status_code: HTTP status returned by the gateway, when one was received.
        err_code: Gateway ``errCode``, when present.
        err_text: Gateway ``errText`` or the exception text.
    """

    kind: ErrorKind
    message: Optional[str] = None
    status_code: Optional[int] = None
    err_code: Optional[str] = None
    err_text: Optional[str] = None

    def as_payload(self) -> dict:
        """The ``{"errText": ...}`` body shown to customers for rejections."""
        return {"errText": self.message}


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of an adapter operation: either ``data`` or ``error``.

    The instance is truthy only on success.
    """

    ok: bool
    data: Optional[dict] = None
    error: Optional[PaymentError] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, data: dict) -> "PaymentResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind: ErrorKind, **details) -> "PaymentResult":
        return cls(ok=False, error=PaymentError(kind=kind, **details))


# ---- Ports (DIP) ----
class PaymentsPort(Protocol):
    """Capability set every payment gateway adapter implements.

    None of the operations raise; failures are reported through
    ``PaymentResult.error``.
    """

    def create(self, request: InvoiceRequest) -> PaymentResult:
        """Create a hold invoice; ``data`` is exactly ``{"url", "invoiceId"}``."""
        raise NotImplementedError()

    def get_status(self, invoice_id: str) -> PaymentResult:
        """Fetch the invoice status; ``data`` is the gateway body unchanged."""
        raise NotImplementedError()

    def finalize_invoice(self, order: Order) -> PaymentResult:
        """Capture the held amount for ``order``; ``data`` is the gateway body."""
        raise NotImplementedError()


# ---- Domain service ----
class PaymentService:
    """Facade that forwards calls to the configured ``PaymentsPort``.

    Callers depend on this class rather than on a concrete gateway adapter.
    """

    def __init__(self, adapter: PaymentsPort):
        self.adapter = adapter

    def create_invoice(self, request: InvoiceRequest) -> PaymentResult:
        return self.adapter.create(request)

    def get_status(self, invoice_id: str) -> PaymentResult:
        return self.adapter.get_status(invoice_id)

    def finalize_invoice(self, order: Order) -> PaymentResult:
        return self.adapter.finalize_invoice(order)
