"""Sandbox MonoPay gateway built with FastAPI.

This service emulates the three merchant invoice endpoints the payments app
calls, so the whole flow can run locally without the real gateway. Errors
use the gateway's ``{"errCode", "errText"}`` body shape, including the two
finalize rejections the payments adapter translates for customers.

An extra ``/sandbox`` route lets a developer play the payer and put an
invoice on hold.
"""

import logging
import os
import uuid
from typing import List, Optional

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from pythonjsonlogger import jsonlogger

from repo import FinalizeRejected, InvoiceRepo, init_db

SANDBOX_TOKEN = os.getenv("MONOGATEWAY_TOKEN", "sandbox-token")
PAGE_URL = os.getenv("MONOGATEWAY_PAGE_URL", "http://localhost:9002/pay/")

app = FastAPI(title="MonoPay Sandbox Gateway")

logger = logging.getLogger("monogateway")
if not logger.handlers:
    h = logging.StreamHandler()
    h.setFormatter(jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"))
    logger.addHandler(h)
    logger.setLevel(logging.INFO)

init_db()


class BasketItem(BaseModel):
    name: str
    qty: float = Field(gt=0)
    sum: int = Field(ge=0)
    icon: Optional[str] = None
    unit: Optional[str] = None


class MerchantPaymInfo(BaseModel):
    destination: Optional[str] = None
    comment: Optional[str] = None
    basketOrder: List[BasketItem] = []


class CreateInvoiceRequest(BaseModel):
    """Request body for invoice creation.

    Attributes:
        amount: Amount to hold in minor units.
        redirectUrl: Payer return URL.
        validity: Invoice lifetime in seconds.
        paymentType: ``hold`` or ``debit``.
    """
    amount: Optional[int] = None
    ccy: int = 980
    redirectUrl: Optional[str] = None
    validity: Optional[int] = None
    paymentType: str = "debit"
    merchantPaymInfo: Optional[MerchantPaymInfo] = None


class FinalizeItem(BaseModel):
    name: str
    qty: float
    sum: int


class FinalizeRequest(BaseModel):
    invoiceId: str
    amount: Optional[int] = None
    items: List[FinalizeItem] = []


def _error(status_code: int, err_code: str, err_text: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errCode": err_code, "errText": err_text})


def _forbidden(token: Optional[str]) -> Optional[JSONResponse]:
    if token != SANDBOX_TOKEN:
        return _error(403, "FORBIDDEN", "forbidden")
    return None


@app.get("/health")
def health():
    """Liveness/health probe endpoint."""
    return {"ok": True}


@app.post("/api/merchant/invoice/create")
def create_invoice(req: CreateInvoiceRequest, x_token: Optional[str] = Header(default=None)):
    """Create an invoice.

    Returns:
        dict: ``{"invoiceId", "pageUrl"}``; 400 when the amount is missing
        or not positive; 403 on a bad token.
    """
    denied = _forbidden(x_token)
    if denied:
        return denied
    if not req.amount or req.amount <= 0:
        return _error(400, "BAD_REQUEST", "amount is invalid")

    reference = req.merchantPaymInfo.comment if req.merchantPaymInfo else None
    invoice_id = InvoiceRepo().create(req.amount, reference, req.redirectUrl, ccy=req.ccy)
    logger.info("invoice created", extra={"invoice_id": invoice_id, "amount": req.amount, "payment_type": req.paymentType})
    return {"invoiceId": invoice_id, "pageUrl": f"{PAGE_URL}{invoice_id}"}


@app.get("/api/merchant/invoice/status")
def invoice_status(invoiceId: str, x_token: Optional[str] = Header(default=None)):
    """Return the invoice status body, or 404 for an unknown invoice."""
    denied = _forbidden(x_token)
    if denied:
        return denied
    body = InvoiceRepo().get(invoiceId)
    if body is None:
        return _error(404, "NOT_FOUND", "invoice not found")
    return body


@app.post("/api/merchant/invoice/finalize")
def finalize_invoice(req: FinalizeRequest, x_token: Optional[str] = Header(default=None)):
    """Capture a held invoice.

    Returns:
        dict: ``{"status": "success"}``; 400 with the gateway errText when
        the invoice is not on hold or the amount exceeds the hold.
    """
    denied = _forbidden(x_token)
    if denied:
        return denied
    try:
        InvoiceRepo().finalize(req.invoiceId, req.amount)
    except FinalizeRejected as e:
        return _error(400, "BAD_REQUEST", str(e))
    logger.info("invoice finalized", extra={"invoice_id": req.invoiceId, "amount": req.amount})
    return {"status": "success"}


@app.post("/sandbox/invoice/{invoice_id}/hold")
def hold_invoice(invoice_id: str):
    """Simulate the payer authorizing the invoice."""
    if not InvoiceRepo().set_status(invoice_id, "hold"):
        return _error(404, "NOT_FOUND", "invoice not found")
    return {"invoiceId": invoice_id, "status": "hold"}


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = rid
    try:
        response = await call_next(request)
    finally:
        logger.info("request handled", extra={"request_id": rid, "path": request.url.path, "method": request.method})
    response.headers["X-Request-ID"] = rid
    return response
