"""Service provider helpers for wiring PaymentService with an adapter.

``get_payment_service`` returns a ``PaymentService`` backed by the MonoPay
HTTP adapter when ``settings.USE_HTTP_ADAPTERS`` is truthy, and by the
in-process ``PaymentsStub`` otherwise. Views obtain the service through this
function so tests and local development can swap the adapter without
touching view logic.
"""

from django.conf import settings

from .adapters import MonoPayAdapter, PaymentsStub
from .domain import PaymentService
from .http_client import MonoPayClient

_stub = None


def _shared_stub() -> PaymentsStub:
    # one stub per process so create/status/finalize see the same invoices
    global _stub
    if _stub is None:
        _stub = PaymentsStub(door_surcharge=getattr(settings, "DOOR_DELIVERY_SURCHARGE", "75"))
    return _stub


def get_payment_service() -> PaymentService:
    """Return a configured PaymentService instance.

    Returns:
        PaymentService: Service wrapping ``MonoPayAdapter`` when HTTP
        adapters are enabled, otherwise the process-wide ``PaymentsStub``.
    """
    if getattr(settings, "USE_HTTP_ADAPTERS", True):
        return PaymentService(MonoPayAdapter(MonoPayClient()))
    return PaymentService(_shared_stub())
