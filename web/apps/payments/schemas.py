"""Pydantic schemas for the payments API.

Request DTOs validate what the order flow sends to the payments endpoints;
``InvoiceStatusDTO`` validates gateway status bodies received on the
webhook. Validated DTOs are mapped to domain dataclasses in ``to_domain``
helpers so views stay thin.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .domain import CartItem, InvoiceRequest, Order


class CartItemIn(BaseModel):
    """Input schema for a single cart line.

    Attributes:
        product_name: Name shown in the gateway basket.
        product_price: Unit price in major units (e.g. 25.50).
        quantity: Positive number of units.
        product_id: Optional product id used for icon lookup.
        product_image: Optional image path inside the product folder.
        final_cost: Optional line total overriding price * quantity.
    """

    product_name: str = Field(min_length=1, max_length=255)
    product_price: Decimal = Field(ge=0)
    quantity: Decimal = Field(gt=0)
    product_id: Optional[int] = None
    product_image: Optional[str] = None
    final_cost: Optional[Decimal] = Field(default=None, ge=0)

    def to_domain(self) -> CartItem:
        return CartItem(
            product_name=self.product_name,
            product_price=self.product_price,
            quantity=self.quantity,
            product_id=self.product_id,
            product_image=self.product_image,
            final_cost=self.final_cost,
        )


class CreateInvoiceDTO(BaseModel):
    """Schema for creating a hold invoice for an order.

    Attributes:
        order_id: Order being paid.
        customer_id: Owner of the order, stored on the payment record.
        amount_cents: Amount to hold in minor units (must be > 0).
        redirect_url: Optional return URL; falls back to settings.
        validity: Optional invoice lifetime in seconds.
        items: Cart lines (at least one).
    """

    order_id: int
    customer_id: int = 0
    amount_cents: int = Field(gt=0)
    redirect_url: Optional[str] = None
    validity: Optional[int] = Field(default=None, gt=0)
    items: list[CartItemIn] = Field(min_length=1)

    def to_domain(self, default_redirect: Optional[str], default_validity: int) -> InvoiceRequest:
        return InvoiceRequest(
            order_id=self.order_id,
            amount=self.amount_cents,
            items=[i.to_domain() for i in self.items],
            redirect_url=self.redirect_url or default_redirect or None,
            validity=self.validity or default_validity,
        )


class FinalizeInvoiceDTO(BaseModel):
    """Schema for capturing a held invoice.

    Attributes:
        order_id: Order being captured.
        customer_id: Owner of the order.
        items: Final cart lines.
        to_door: Door delivery flag, adds the fixed surcharge.
        delivery_price: Optional explicit delivery charge in major units.
    """

    order_id: Optional[int] = None
    customer_id: Optional[int] = None
    items: list[CartItemIn] = Field(min_length=1)
    to_door: bool = False
    delivery_price: Optional[Decimal] = Field(default=None, ge=0)

    def to_domain(self, invoice_id: str) -> Order:
        return Order(
            id=self.order_id,
            customer_id=self.customer_id,
            cart=[i.to_domain() for i in self.items],
            to_door=self.to_door,
            delivery_price=self.delivery_price,
            invoice_id=invoice_id,
        )


class PaymentInfoDTO(BaseModel):
    model_config = ConfigDict(extra="allow")

    rrn: Optional[str] = None
    tranId: Optional[str] = None


class InvoiceStatusDTO(BaseModel):
    """Gateway status body as delivered to the webhook.

    Unknown fields are kept so the body can be stored or echoed unchanged.
    ``status`` is any non-empty string; values outside ``PaymentStatus`` are
    stored as received.
    """

    model_config = ConfigDict(extra="allow")

    invoiceId: str = Field(min_length=1)
    status: str = Field(min_length=1, max_length=32)
    amount: Optional[int] = None
    failureReason: Optional[str] = None
    errCode: Optional[str] = None
    paymentInfo: Optional[PaymentInfoDTO] = None
