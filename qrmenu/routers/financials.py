# qrmenu/routers/financials.py
import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from qrmenu.config import local_today
from qrmenu.db import get_db
from qrmenu.deps import Principal, require_super_admin
from qrmenu.models.core import PaymentRecord, Tenant
from qrmenu.schemas.billing import BulkStatusIn, PaymentCreateIn, PaymentUpdateIn, RegisterPaymentIn
from qrmenu.services.billing import (
    _money, as_amount, calculate_next_payment_date, month_bounds, parse_month, revenue_growth,
)
from qrmenu.services.invoices import issue_invoice_number
from qrmenu.util.audit import audit
from qrmenu.util.validation import (
    AuditAction, PaymentMethod, PaymentStatus, SubscriptionStatus, parse_enum,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/super-admin/financials", tags=["super-admin"])

OUTSTANDING = (PaymentStatus.PENDING, PaymentStatus.OVERDUE)

def payment_out(p: PaymentRecord) -> dict:
    return {
        "id": p.id, "tenant_id": p.tenant_id,
        "amount": float(p.amount), "currency": p.currency,
        "method": p.method.value, "status": p.status.value,
        "description": p.description, "invoice_number": p.invoice_number,
        "due_date": p.due_date.isoformat(),
        "paid_at": p.paid_at.isoformat() if p.paid_at else None,
        "notes": p.notes,
    }

@router.post("/register-payment")
def register_payment(body: RegisterPaymentIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    """
    Record a PAID month for one or more tenants. If a tenant's next payment
    date falls inside the paid month it moves forward one calendar month.
    """
    if not body.tenant_ids:
        raise HTTPException(400, detail="At least one tenant must be selected")
    year, month = parse_month(body.month)
    method = parse_enum(PaymentMethod, body.method)
    amount = as_amount(body.amount) if body.amount is not None else None
    first_day, last_day = month_bounds(year, month)

    tenants = db.query(Tenant).filter(Tenant.id.in_(body.tenant_ids), Tenant.deleted_at.is_(None)).all()
    missing = set(body.tenant_ids) - {t.id for t in tenants}
    if missing:
        raise HTTPException(404, detail=f"tenant not found: {', '.join(sorted(missing))}")

    now = datetime.now(timezone.utc)
    issued: set[str] = set()
    records = []
    for t in tenants:
        rec = PaymentRecord(
            tenant_id=t.id,
            amount=amount if amount is not None else t.monthly_fee,
            currency=t.currency,
            method=method,
            status=PaymentStatus.PAID,
            paid_at=now,
            due_date=last_day,
            description=f"Payment for {t.business_name} - {body.month}",
            invoice_number=issue_invoice_number(db, t.id, first_day, taken=issued),
            notes=body.notes or f"Payment registered by Super Admin for {body.month}",
            created_by_id=me.user_id,
        )
        db.add(rec)
        records.append(rec)

        nxt = t.next_payment_date
        if nxt and (nxt.year, nxt.month) == (year, month):
            t.next_payment_date = calculate_next_payment_date(nxt, is_first_payment=False)
        audit(db, me.user_id, "TENANT", t.id, AuditAction.PAYMENT_UPDATE,
              before={"next_payment_date": nxt}, after={"next_payment_date": t.next_payment_date,
                                                        "invoice_number": rec.invoice_number})

    db.commit()
    logger.info("Registered %d payment(s) for %s", len(records), body.month)
    return {
        "message": f"Successfully registered {len(records)} payment(s)",
        "count": len(records),
        "payments": [payment_out(r) for r in records],
    }

@router.get("/payments")
def list_payments(tenant_id: str | None = None, status: str | None = None,
                  db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    q = db.query(PaymentRecord).filter(PaymentRecord.deleted_at.is_(None))
    if tenant_id:
        q = q.filter(PaymentRecord.tenant_id == tenant_id)
    if status:
        q = q.filter(PaymentRecord.status == parse_enum(PaymentStatus, status))
    rows = q.order_by(PaymentRecord.due_date.desc(), PaymentRecord.created_at.desc()).limit(500).all()
    return [payment_out(p) for p in rows]

def _get_payment(db: Session, payment_id: str) -> PaymentRecord:
    p = db.get(PaymentRecord, payment_id)
    if not p or p.deleted_at is not None:
        raise HTTPException(404, detail="payment not found")
    return p

def _set_status(p: PaymentRecord, new_status: PaymentStatus, now: datetime):
    old = p.status
    p.status = new_status
    if new_status is PaymentStatus.PAID:
        p.paid_at = p.paid_at or now
    elif old is PaymentStatus.PAID:
        p.paid_at = None

@router.post("/payments", status_code=201)
def create_payment(body: PaymentCreateIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    """Manual PENDING payment record; the invoice number is issued unless one is given."""
    t = db.get(Tenant, body.tenant_id)
    if not t or t.deleted_at is not None:
        raise HTTPException(404, detail="tenant not found")
    amount = as_amount(body.amount)
    method = parse_enum(PaymentMethod, body.method)

    if body.invoice_number:
        invoice_number = body.invoice_number.strip().upper()
        if db.query(PaymentRecord.id).filter(PaymentRecord.invoice_number == invoice_number).first():
            raise HTTPException(409, detail="Invoice number already exists")
    else:
        invoice_number = issue_invoice_number(db, t.id, body.due_date)

    p = PaymentRecord(
        tenant_id=t.id,
        amount=amount,
        currency=(body.currency or t.currency).upper(),
        method=method,
        status=PaymentStatus.PENDING,
        description=body.description or f"Monthly subscription fee for {t.business_name}",
        invoice_number=invoice_number,
        due_date=body.due_date,
        notes=body.notes,
        created_by_id=me.user_id,
    )
    db.add(p); db.flush()
    audit(db, me.user_id, "PAYMENT", p.id, AuditAction.CREATE, after=payment_out(p))
    db.commit()
    logger.info("Payment %s created for tenant %s (%s)", p.invoice_number, t.slug, amount)
    return payment_out(p)

@router.get("/payments/{payment_id}")
def get_payment(payment_id: str, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    p = _get_payment(db, payment_id)
    t = db.get(Tenant, p.tenant_id)
    return {**payment_out(p), "tenant": {"id": t.id, "slug": t.slug, "business_name": t.business_name} if t else None}

@router.put("/payments/{payment_id}")
def update_payment(payment_id: str, body: PaymentUpdateIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    p = _get_payment(db, payment_id)
    before = payment_out(p)
    changes = body.model_dump(exclude_unset=True)

    if changes.get("amount") is not None:
        p.amount = as_amount(changes["amount"])
    if changes.get("method") is not None:
        p.method = parse_enum(PaymentMethod, changes["method"])
    if changes.get("due_date") is not None:
        p.due_date = changes["due_date"]
    if "notes" in changes:
        p.notes = changes["notes"]
    if changes.get("status") is not None:
        _set_status(p, parse_enum(PaymentStatus, changes["status"]), datetime.now(timezone.utc))
    # an explicit paid_at wins over the one derived from the status
    if "paid_at" in changes:
        p.paid_at = changes["paid_at"]

    audit(db, me.user_id, "PAYMENT", p.id, AuditAction.PAYMENT_UPDATE, before=before, after=payment_out(p))
    db.commit(); db.refresh(p)
    return payment_out(p)

@router.delete("/payments/{payment_id}")
def delete_payment(payment_id: str, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    p = _get_payment(db, payment_id)
    if p.status is PaymentStatus.PAID:
        raise HTTPException(400, detail="Cannot delete paid payment records")
    p.deleted_at = datetime.now(timezone.utc)
    audit(db, me.user_id, "PAYMENT", p.id, AuditAction.DELETE, before=payment_out(p))
    db.commit()
    return {"id": p.id, "deleted": True}

@router.post("/bulk-update-status")
def bulk_update_status(body: BulkStatusIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    if not body.payment_ids:
        raise HTTPException(400, detail="No payments selected")
    new_status = parse_enum(PaymentStatus, body.status)

    rows = (db.query(PaymentRecord)
              .filter(PaymentRecord.id.in_(body.payment_ids), PaymentRecord.deleted_at.is_(None)).all())
    if not rows:
        raise HTTPException(404, detail="payments not found")

    now = datetime.now(timezone.utc)
    for p in rows:
        old = p.status
        _set_status(p, new_status, now)
        audit(db, me.user_id, "PAYMENT", p.id, AuditAction.PAYMENT_UPDATE,
              before={"status": old.value}, after={"status": new_status.value})
    db.commit()
    logger.info("Set %d payment(s) to %s", len(rows), new_status.value)
    return {"updated": len(rows), "status": new_status.value}

def _paid_between(db: Session, start: date, end: date) -> Decimal:
    """Sum of PAID amounts with paid_at in [start, end)."""
    lo = datetime.combine(start, time.min, tzinfo=timezone.utc)
    hi = datetime.combine(end, time.min, tzinfo=timezone.utc)
    total = (db.query(func.sum(PaymentRecord.amount))
               .filter(PaymentRecord.deleted_at.is_(None), PaymentRecord.status == PaymentStatus.PAID,
                       PaymentRecord.paid_at >= lo, PaymentRecord.paid_at < hi)
               .scalar())
    return Decimal(total or 0)

@router.get("/stats")
def financial_stats(db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    live = PaymentRecord.deleted_at.is_(None)
    rows = (db.query(PaymentRecord.status, func.count(PaymentRecord.id), func.sum(PaymentRecord.amount))
              .filter(live)
              .group_by(PaymentRecord.status).all())
    by_status = {s.value: {"count": 0, "total": 0.0} for s in PaymentStatus}
    collected = outstanding = Decimal("0")
    for status, count, total in rows:
        total = Decimal(total or 0)
        by_status[status.value] = {"count": count, "total": float(total)}
        if status is PaymentStatus.PAID:
            collected += total
        elif status in OUTSTANDING:
            outstanding += total

    # revenue by month of paid_at
    today = local_today()
    month_start, month_end = month_bounds(today.year, today.month)
    prev_end = month_start - timedelta(days=1)
    prev_start, _ = month_bounds(prev_end.year, prev_end.month)
    monthly = _paid_between(db, month_start, month_end + timedelta(days=1))
    previous = _paid_between(db, prev_start, month_start)

    average = (db.query(func.avg(PaymentRecord.amount))
                 .filter(live, PaymentRecord.status == PaymentStatus.PAID).scalar())

    live_tenants = Tenant.deleted_at.is_(None)
    total_tenants = db.query(func.count(Tenant.id)).filter(live_tenants).scalar() or 0
    paid_tenants = select(PaymentRecord.tenant_id).where(live, PaymentRecord.status == PaymentStatus.PAID)
    active_tenants = (db.query(func.count(Tenant.id))
                        .filter(live_tenants, or_(Tenant.subscription_status == SubscriptionStatus.ACTIVE,
                                                  Tenant.id.in_(paid_tenants)))
                        .scalar() or 0)
    overdue = (db.query(func.count(PaymentRecord.id))
                 .filter(live, PaymentRecord.status == PaymentStatus.OVERDUE, PaymentRecord.due_date < today)
                 .scalar() or 0)

    return {
        "by_status": by_status,
        "total_collected": float(collected),
        "total_outstanding": float(outstanding),
        "monthly_revenue": float(monthly),
        "previous_month_revenue": float(previous),
        "revenue_growth": float(revenue_growth(monthly, previous)),
        "average_payment": float(_money(Decimal(str(average)))) if average is not None else 0.0,
        "total_tenants": total_tenants,
        "active_tenants": active_tenants,
        "pending_payments": by_status[PaymentStatus.PENDING.value]["count"],
        "overdue_payments": overdue,
    }
