"""Unit tests for MonoPayAdapter request shaping and result mapping.

A fake client records the payloads the adapter builds and replays canned
``GatewayResponse`` values or exceptions, so no transport is involved.
"""
import logging
from decimal import Decimal

import httpx
import pytest

from apps.payments.adapters import MonoPayAdapter
from apps.payments.domain import CartItem, ErrorKind, InvoiceRequest, Order
from apps.payments.http_client import GatewayResponse, MonoPayValidationError


class FakeClient:
    """Records calls and returns a canned reply (or raises it)."""
    def __init__(self, reply=None):
        self.reply = reply if reply is not None else GatewayResponse(200, {})
        self.calls = []
    def _answer(self, name, arg):
        self.calls.append((name, arg))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply
    def create(self, data):
        if data.get("redirectUrl") is None:
            raise MonoPayValidationError("redirectUrl is required")
        return self._answer("create", data)
    def get_status(self, invoice_id): return self._answer("get_status", invoice_id)
    def finalize(self, data): return self._answer("finalize", data)


def _adapter(reply=None):
    client = FakeClient(reply)
    adapter = MonoPayAdapter(client, icon_resolver=lambda item: f"icon://{item.product_image}")
    return adapter, client


def _widget_request(**overrides):
    fields = dict(
        order_id=7,
        amount=5000,
        items=[CartItem(product_name="Widget", product_price=25.0, quantity="2", product_image="img.png")],
        redirect_url="https://shop.test/return",
        validity=3600,
    )
    fields.update(overrides)
    return InvoiceRequest(**fields)


def _order(**overrides):
    fields = dict(
        id=7,
        customer_id=3,
        cart=[
            CartItem(product_name="Lamp", product_price=Decimal("100.00"), quantity=1),
            CartItem(product_name="Bulb", product_price=Decimal("50.50"), quantity=2),
        ],
        to_door=True,
        delivery_price=Decimal("20"),
        invoice_id="inv-1",
    )
    fields.update(overrides)
    return Order(**fields)


# ---- create ----

def test_create_builds_hold_invoice_payload():
    adapter, client = _adapter(GatewayResponse(200, {"invoiceId": "inv-1", "pageUrl": "https://pay/inv-1"}))
    adapter.create(_widget_request())

    name, payload = client.calls[0]
    assert name == "create"
    assert payload["amount"] == 5000
    assert payload["paymentType"] == "hold"
    assert payload["validity"] == 3600
    assert payload["redirectUrl"] == "https://shop.test/return"
    info = payload["merchantPaymInfo"]
    assert info["destination"] == info["comment"] == "Product purchase, order 7"
    assert info["basketOrder"] == [
        {"name": "Widget", "qty": 2.0, "sum": 2500, "icon": "icon://img.png", "unit": "pcs"}
    ]


@pytest.mark.parametrize("price,expected", [(0.1 + 0.2, 30), (19.99, 1999), (50.505, 5051), (Decimal("1.005"), 101)])
def test_basket_sum_rounds_unit_price_to_minor_units(price, expected):
    adapter, client = _adapter(GatewayResponse(200, {"invoiceId": "i", "pageUrl": "u"}))
    adapter.create(_widget_request(items=[CartItem(product_name="X", product_price=price)]))
    assert client.calls[0][1]["merchantPaymInfo"]["basketOrder"][0]["sum"] == expected


def test_create_success_returns_only_url_and_invoice_id():
    body = {"invoiceId": "inv-1", "pageUrl": "https://pay/inv-1", "extra": "ignored"}
    adapter, _ = _adapter(GatewayResponse(200, body))
    result = adapter.create(_widget_request())
    assert result
    assert result.data == {"url": "https://pay/inv-1", "invoiceId": "inv-1"}


def test_create_gateway_error_is_logged_and_classified(caplog):
    adapter, _ = _adapter(GatewayResponse(400, {"errCode": "BAD_REQUEST", "errText": "invalid amount"}))
    with caplog.at_level(logging.ERROR, logger="monopay"):
        result = adapter.create(_widget_request())
    assert not result
    assert result.error.kind is ErrorKind.GATEWAY
    assert (result.error.status_code, result.error.err_code, result.error.err_text) == (400, "BAD_REQUEST", "invalid amount")
    assert "400|BAD_REQUEST|invalid amount" in caplog.text


def test_create_error_without_body_fields_uses_empty_strings():
    adapter, _ = _adapter(GatewayResponse(500, {}))
    result = adapter.create(_widget_request())
    assert result.error.kind is ErrorKind.GATEWAY
    assert result.error.err_code == "" and result.error.err_text == ""


def test_create_missing_redirect_is_a_validation_failure():
    adapter, client = _adapter()
    result = adapter.create(_widget_request(redirect_url=None))
    assert not result
    assert result.error.kind is ErrorKind.VALIDATION
    assert client.calls == []


def test_create_transport_error_does_not_escape():
    adapter, _ = _adapter(httpx.ConnectTimeout("slow"))
    result = adapter.create(_widget_request())
    assert result.error.kind is ErrorKind.TRANSPORT


@pytest.mark.parametrize("body", [{"status": "ok"}, {"invoiceId": "inv-1"}, {"pageUrl": "https://pay/inv-1", "invoiceId": ""}])
def test_create_success_without_url_or_invoice_id_is_a_failure(body, caplog):
    adapter, _ = _adapter(GatewayResponse(200, body))
    with caplog.at_level(logging.ERROR, logger="monopay"):
        result = adapter.create(_widget_request())
    assert not result
    assert result.data is None
    assert result.error.kind is ErrorKind.GATEWAY
    assert result.error.status_code == 200
    assert "without pageUrl/invoiceId" in caplog.text


@pytest.mark.parametrize("status_code", [200, 502])
def test_create_non_object_body_is_a_transport_failure(status_code):
    adapter, _ = _adapter(GatewayResponse(status_code, ["bad gateway"]))
    result = adapter.create(_widget_request())
    assert not result
    assert result.error.kind is ErrorKind.TRANSPORT


def test_create_unexpected_error_does_not_escape():
    adapter, _ = _adapter(RuntimeError("boom"))
    result = adapter.create(_widget_request())
    assert result.error.kind is ErrorKind.UNEXPECTED
    assert result.error.err_text == "boom"


# ---- get_status ----

def test_get_status_passes_body_through_unchanged():
    body = {"invoiceId": "inv-1", "status": "hold", "amount": 5000, "paymentInfo": {"rrn": "1", "tranId": "t"}}
    adapter, client = _adapter(GatewayResponse(200, body))
    result = adapter.get_status("inv-1")
    assert result.data == body
    assert client.calls == [("get_status", "inv-1")]


def test_get_status_non_object_body_does_not_escape():
    adapter, _ = _adapter(GatewayResponse(200, "ok"))
    assert adapter.get_status("inv-1").error.kind is ErrorKind.TRANSPORT


def test_get_status_failure():
    adapter, _ = _adapter(GatewayResponse(404, {"errCode": "NOT_FOUND", "errText": "invoice not found"}))
    result = adapter.get_status("nope")
    assert not result and result.error.kind is ErrorKind.GATEWAY


# ---- finalize ----

def test_finalize_amount_includes_door_surcharge_and_delivery():
    adapter, client = _adapter(GatewayResponse(200, {"status": "success"}))
    adapter.finalize_invoice(_order())

    name, payload = client.calls[0]
    assert name == "finalize"
    # 10000 + 10100 + 7500 + 2000
    assert payload["amount"] == 29600
    assert payload["invoiceId"] == "inv-1"
    assert payload["items"] == [
        {"name": "Lamp", "qty": 1.0, "sum": 10000},
        {"name": "Bulb", "qty": 2.0, "sum": 5050},
    ]


def test_finalize_prefers_final_cost_and_skips_surcharge_when_not_to_door():
    cart = [
        CartItem(product_name="Lamp", product_price=Decimal("100.00"), quantity=3, final_cost=Decimal("250.00")),
        CartItem(product_name="Bulb", product_price=Decimal("10.00"), quantity=2),
    ]
    adapter, client = _adapter(GatewayResponse(200, {"status": "success"}))
    adapter.finalize_invoice(_order(cart=cart, to_door=False, delivery_price=None))
    assert client.calls[0][1]["amount"] == 27000


def test_finalize_success_returns_body():
    adapter, _ = _adapter(GatewayResponse(200, {"status": "success"}))
    result = adapter.finalize_invoice(_order())
    assert result.data == {"status": "success"}


@pytest.mark.parametrize("err_text,message", [
    ("finalization amount exceeds hold amount", "The finalization amount exceeds the hold amount."),
    ("order on hold not found", "Order on hold not found."),
])
def test_finalize_known_rejections_are_promoted(err_text, message):
    adapter, _ = _adapter(GatewayResponse(400, {"errCode": "BAD_REQUEST", "errText": err_text}))
    result = adapter.finalize_invoice(_order())
    assert not result
    assert result.error.kind is ErrorKind.REJECTED
    assert result.error.as_payload() == {"errText": message}


def test_finalize_other_400_is_generic_failure():
    adapter, _ = _adapter(GatewayResponse(400, {"errCode": "BAD_REQUEST", "errText": "something else"}))
    result = adapter.finalize_invoice(_order())
    assert result.error.kind is ErrorKind.GATEWAY
    assert result.error.message is None


def test_finalize_known_text_on_non_400_is_generic_failure():
    adapter, _ = _adapter(GatewayResponse(500, {"errText": "order on hold not found"}))
    assert adapter.finalize_invoice(_order()).error.kind is ErrorKind.GATEWAY


def test_finalize_without_invoice_makes_no_call():
    adapter, client = _adapter()
    result = adapter.finalize_invoice(_order(invoice_id=None))
    assert result.error.kind is ErrorKind.VALIDATION
    assert client.calls == []


def test_finalize_transport_error_does_not_escape():
    adapter, _ = _adapter(httpx.ReadError("reset"))
    assert adapter.finalize_invoice(_order()).error.kind is ErrorKind.TRANSPORT


def test_finalize_non_object_error_body_does_not_escape():
    adapter, _ = _adapter(GatewayResponse(400, None))
    assert adapter.finalize_invoice(_order()).error.kind is ErrorKind.TRANSPORT


def test_door_surcharge_is_configurable():
    adapter = MonoPayAdapter(FakeClient(GatewayResponse(200, {})), door_surcharge="100")
    payload = adapter.build_finalize_payload(_order(delivery_price=None))
    assert payload["amount"] == 30100
