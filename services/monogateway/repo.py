"""SQLAlchemy repository for sandbox gateway invoices.

The sandbox keeps one row per invoice with the held amount, the captured
amount and the current status, mirroring what the real gateway reports on
its status endpoint. The connection string is read from the
``MONOGATEWAY_DATABASE_URL`` environment variable and defaults to a local
sqlite file.
"""

import os
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, mapped_column

DATABASE_URL = os.getenv("MONOGATEWAY_DATABASE_URL", "sqlite:///./monogateway.db")

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)


class Base(DeclarativeBase):
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Invoice(Base):
    """SQLAlchemy model for a sandbox invoice.

    Attributes:
        id: Invoice id handed to the merchant.
        amount: Held amount in minor units.
        final_amount: Captured amount in minor units, once finalized.
        ccy: ISO 4217 numeric currency code.
        status: Gateway status string (created, hold, success, ...).
        reference: Merchant comment sent at creation.
        redirect_url: Payer return URL.
    """

    __tablename__ = "invoices"

    id = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    amount = mapped_column(Integer, nullable=False)
    final_amount = mapped_column(Integer, nullable=True)
    ccy = mapped_column(Integer, nullable=False, default=980)
    status = mapped_column(String(16), nullable=False, default="created")
    reference = mapped_column(Text, nullable=True)
    redirect_url = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    modified_at = mapped_column(DateTime(timezone=True), nullable=False, default=_now)

    def as_status(self) -> dict:
        body = {
            "invoiceId": self.id,
            "status": self.status,
            "amount": self.amount,
            "ccy": self.ccy,
            "createdDate": self.created_at.isoformat(),
            "modifiedDate": self.modified_at.isoformat(),
            "reference": self.reference,
        }
        if self.final_amount is not None:
            body["finalAmount"] = self.final_amount
        return body


@contextmanager
def get_session():
    """Yield a SQLAlchemy session bound to the configured engine.

    Yields:
        Session: Active SQLAlchemy session.
    """
    with Session(engine) as s:
        yield s


class FinalizeRejected(Exception):
    """The gateway refuses to capture; ``str(exc)`` is the gateway errText."""


class InvoiceRepo:
    """Repository for creating and transitioning sandbox invoices."""

    def create(self, amount: int, reference: Optional[str], redirect_url: Optional[str], ccy: int = 980) -> str:
        """Persist a new invoice in ``created`` status and return its id."""
        with get_session() as s:
            inv = Invoice(amount=amount, reference=reference, redirect_url=redirect_url, ccy=ccy)
            s.add(inv)
            s.commit()
            return inv.id

    def get(self, invoice_id: str) -> Optional[dict]:
        with get_session() as s:
            inv = s.get(Invoice, invoice_id)
            return inv.as_status() if inv else None

    def set_status(self, invoice_id: str, status: str) -> bool:
        with get_session() as s:
            inv = s.get(Invoice, invoice_id)
            if inv is None:
                return False
            inv.status = status
            inv.modified_at = _now()
            s.commit()
            return True

    def finalize(self, invoice_id: str, amount: Optional[int]) -> None:
        """Capture ``amount`` (or the full hold) of a held invoice.

        Raises:
            FinalizeRejected: If the invoice is not on hold or ``amount``
                exceeds the held amount.
        """
        with get_session() as s:
            inv = s.get(Invoice, invoice_id)
            if inv is None or inv.status != "hold":
                raise FinalizeRejected("order on hold not found")
            captured = inv.amount if amount is None else amount
            if captured > inv.amount:
                raise FinalizeRejected("finalization amount exceeds hold amount")
            inv.final_amount = captured
            inv.status = "success"
            inv.modified_at = _now()
            s.commit()


def init_db() -> None:
    Base.metadata.create_all(engine)
