# test_invoices.py
import uuid
from datetime import date
from decimal import Decimal

import pytest

from qrmenu.db import Base, SessionLocal, engine
from qrmenu.models.core import PaymentRecord, Tenant
from qrmenu.services.billing import generate_invoice_number
from qrmenu.services.invoices import MAX_ATTEMPTS, InvoiceNumberExhausted, issue_invoice_number
from qrmenu.util.validation import PaymentMethod

@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    s = SessionLocal()
    try:
        yield s
    finally:
        s.rollback()
        s.close()

@pytest.fixture()
def tenant(db):
    t = Tenant(slug=f"inv-{uuid.uuid4().hex[:8]}", business_name="Invoice Cafe", owner_name="Owner",
               owner_email="owner@example.com", monthly_fee=Decimal("100"), currency="EGP",
               joined_on=date(2025, 3, 10))
    db.add(t); db.flush()
    return t

def _record(tenant, number):
    return PaymentRecord(tenant_id=tenant.id, amount=Decimal("10"), currency="EGP",
                         method=PaymentMethod.CASH, invoice_number=number, due_date=date(2025, 3, 31))

def test_issue_returns_plain_number_when_free(db, tenant):
    number = issue_invoice_number(db, tenant.id, date(2025, 3, 10), timestamp_ms=1000)
    assert number == generate_invoice_number(tenant.id, date(2025, 3, 10), timestamp_ms=1000)

def test_issue_skips_stored_numbers(db, tenant):
    taken = generate_invoice_number(tenant.id, date(2025, 3, 10), timestamp_ms=2000)
    db.add(_record(tenant, taken)); db.flush()
    number = issue_invoice_number(db, tenant.id, date(2025, 3, 10), timestamp_ms=2000)
    assert number != taken
    assert number.endswith("-2001")

def test_issue_skips_numbers_from_same_batch(db, tenant):
    issued: set[str] = set()
    a = issue_invoice_number(db, tenant.id, date(2025, 4, 1), taken=issued, timestamp_ms=3000)
    b = issue_invoice_number(db, tenant.id, date(2025, 4, 1), taken=issued, timestamp_ms=3000)
    assert a != b
    assert issued == {a, b}

def test_issue_gives_up_after_max_attempts(db, tenant):
    taken = {generate_invoice_number(tenant.id, date(2025, 5, 1), timestamp_ms=4000 + i)
             for i in range(MAX_ATTEMPTS)}
    with pytest.raises(InvoiceNumberExhausted):
        issue_invoice_number(db, tenant.id, date(2025, 5, 1), taken=taken, timestamp_ms=4000)
