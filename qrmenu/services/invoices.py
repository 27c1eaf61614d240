import logging
import time

from sqlalchemy.orm import Session

from qrmenu.models.core import PaymentRecord
from qrmenu.services.billing import generate_invoice_number

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 50

class InvoiceNumberExhausted(RuntimeError):
    pass

def issue_invoice_number(db: Session, tenant_id: str, on, taken: set[str] | None = None,
                         timestamp_ms: int | None = None) -> str:
    """
    Invoice number that is not yet stored in payment_record (nor in `taken`,
    for numbers handed out earlier in the same unflushed batch).
    Collisions move the millisecond suffix forward by one and try again.
    """
    taken = taken if taken is not None else set()
    ts = timestamp_ms if timestamp_ms is not None else time.time_ns() // 1_000_000
    for attempt in range(MAX_ATTEMPTS):
        number = generate_invoice_number(tenant_id, on, timestamp_ms=ts + attempt)
        if number in taken:
            continue
        exists = db.query(PaymentRecord.id).filter(PaymentRecord.invoice_number == number).first()
        if not exists:
            if attempt:
                logger.info("Invoice number collision for tenant %s, resolved after %d retries", tenant_id, attempt)
            taken.add(number)
            return number
    raise InvoiceNumberExhausted(f"no free invoice number for tenant {tenant_id} after {MAX_ATTEMPTS} attempts")
