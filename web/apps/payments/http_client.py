"""HTTP client for the MonoPay merchant invoice API.

This module wraps the three gateway endpoints used by the payments app
(create, status and finalize) with ``httpx``. It adds:

- Token authentication via the ``X-Token`` header. The token is fixed when
    the client is constructed.
- Request correlation: propagates ``X-Request-ID`` from the ContextVar set
    by the gateway middleware.
- Pre-flight validation of the create payload, so an incomplete invoice
    never reaches the network.

The client applies no business rules and never retries. Transport errors
and undecodable bodies propagate to the caller as raised by ``httpx``.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from django.conf import settings

from gateway.middleware import REQUEST_ID_CTX

CREATE_PATH = "merchant/invoice/create"
STATUS_PATH = "merchant/invoice/status"
FINALIZE_PATH = "merchant/invoice/finalize"

REQUIRED_CREATE_FIELDS = ("redirectUrl", "paymentType")


class MonoPayValidationError(ValueError):
    """A required invoice field is missing; raised before any request."""


@dataclass(frozen=True)
class GatewayResponse:
    """Raw gateway reply: HTTP status code and decoded JSON body."""

    status_code: int
    body: dict


def _request_headers(extra: Optional[dict] = None) -> dict:
    """Build base headers including X-Request-ID and any extras.

    Args:
        extra: Optional dict of additional headers to include.

    Returns:
        dict: Final headers dictionary for the outgoing request.
    """
    headers: dict[str, str] = {}
    rid = REQUEST_ID_CTX.get()
    if rid and rid != "-":
        headers["X-Request-ID"] = rid
    if extra:
        headers.update(extra)
    return headers


def _decode(resp: httpx.Response) -> GatewayResponse:
    body = resp.json() if resp.content else {}
    if not isinstance(body, dict):
        raise ValueError(f"gateway body is not a JSON object: {type(body).__name__}")
    return GatewayResponse(status_code=resp.status_code, body=body)


class MonoPayClient:
    """Blocking client for the gateway's invoice endpoints.

    Args:
        token: Merchant API token sent as ``X-Token``. Defaults to
            ``settings.MONOPAY_TOKEN``.
        base_url: API root, e.g. ``https://api.monobank.ua/api/``.
        timeout: Per-request timeout in seconds handed to httpx.
    """

    def __init__(self, token: str | None = None, base_url: str | None = None, timeout: float | None = None):
        self._token = token if token is not None else settings.MONOPAY_TOKEN
        base = base_url or settings.MONOPAY_BASE_URL
        self.base_url = base if base.endswith("/") else base + "/"
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECS

    @property
    def token(self) -> str:
        return self._token

    def _auth_headers(self) -> dict:
        return _request_headers({"X-Token": self._token})

    def create(self, invoice_data: dict) -> GatewayResponse:
        """Create an invoice.

        Args:
            invoice_data: Gateway-format payload. Must carry ``redirectUrl``
                and ``paymentType``.

        Returns:
            GatewayResponse: Status code and decoded body, whatever the status.

        Raises:
            MonoPayValidationError: If a required field is missing. No
                request is made in that case.
            httpx.HTTPError: For network/transport errors.
            ValueError: If the response body is not valid JSON.
        """
        self._validate(invoice_data)
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(f"{self.base_url}{CREATE_PATH}", json=invoice_data, headers=self._auth_headers())
        return _decode(resp)

    def get_status(self, invoice_id: str) -> GatewayResponse:
        """Fetch the current status of ``invoice_id``."""
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.get(
                f"{self.base_url}{STATUS_PATH}",
                params={"invoiceId": invoice_id},
                headers=self._auth_headers(),
            )
        return _decode(resp)

    def finalize(self, invoice_data: dict) -> GatewayResponse:
        """Capture a held invoice.

        Args:
            invoice_data: ``{"invoiceId", "amount", "items"}`` payload.
        """
        with httpx.Client(timeout=self.timeout) as client:
            resp = client.post(f"{self.base_url}{FINALIZE_PATH}", json=invoice_data, headers=self._auth_headers())
        return _decode(resp)

    @staticmethod
    def _validate(invoice_data: dict) -> None:
        for name in REQUIRED_CREATE_FIELDS:
            if invoice_data.get(name) is None:
                raise MonoPayValidationError(f"{name} is required")
