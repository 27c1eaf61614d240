# qrmenu/routers/tenants.py
import logging
import re
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from qrmenu.config import local_today, settings
from qrmenu.db import get_db
from qrmenu.deps import Principal, require_super_admin
from qrmenu.models.core import Tenant, PaymentRecord, User
from qrmenu.routers.financials import payment_out
from qrmenu.routers.users import create_user_record, user_out
from qrmenu.schemas.tenants import TenantCreateIn, TenantUpdateIn
from qrmenu.schemas.users import TenantUserIn
from qrmenu.services.billing import (
    as_amount, calculate_tenant_billing, first_payment_description, first_payment_notes,
)
from qrmenu.services.invoices import issue_invoice_number
from qrmenu.util.audit import audit
from qrmenu.util.validation import (
    AuditAction, PaymentMethod, PaymentStatus, SubscriptionPlan, SubscriptionStatus, TenantRole,
    parse_enum,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/super-admin/tenants", tags=["super-admin"])

# ── helpers ─────────────────────────────────────────────────────────────────

def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9-]", "-", value.lower())
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "tenant"

def _get_tenant(db: Session, tenant_id: str) -> Tenant:
    t = db.get(Tenant, tenant_id)
    if not t or t.deleted_at is not None:
        raise HTTPException(404, detail="tenant not found")
    return t

def _unique_slug(db: Session, base: str) -> str:
    slug, counter = base, 1
    while db.query(Tenant.id).filter(Tenant.slug == slug).first():
        slug = f"{base}-{counter}"
        counter += 1
    return slug

def tenant_out(t: Tenant) -> dict:
    return {
        "id": t.id, "slug": t.slug,
        "business_name": t.business_name, "business_name_ar": t.business_name_ar,
        "owner_name": t.owner_name, "owner_email": t.owner_email, "owner_phone": t.owner_phone,
        "address": t.address,
        "subscription_plan": t.subscription_plan.value,
        "subscription_status": t.subscription_status.value,
        "monthly_fee": float(t.monthly_fee), "currency": t.currency,
        "default_language": t.default_language,
        "joined_on": t.joined_on.isoformat(),
        "next_payment_date": t.next_payment_date.isoformat() if t.next_payment_date else None,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }

# ── endpoints ───────────────────────────────────────────────────────────────

@router.post("", status_code=201)
def create_tenant(body: TenantCreateIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    """
    Create a tenant and its first (possibly prorated) payment record.
    Joining after the 1st bills the rest of the month; the next payment is due on the 1st.
    """
    for field in ("business_name", "owner_name", "owner_email"):
        if not getattr(body, field).strip():
            raise HTTPException(400, detail=f"missing field: {field}")

    plan = parse_enum(SubscriptionPlan, body.subscription_plan)
    fee = as_amount(body.monthly_fee if body.monthly_fee is not None else settings.DEFAULT_MONTHLY_FEE)
    join_date = body.join_date or local_today()
    currency = (body.currency or settings.DEFAULT_CURRENCY).upper()
    billing = calculate_tenant_billing(fee, join_date)

    t = Tenant(
        slug=_unique_slug(db, slugify(body.subdomain or body.business_name)),
        business_name=body.business_name.strip(),
        business_name_ar=body.business_name_ar,
        owner_name=body.owner_name.strip(),
        owner_email=body.owner_email.strip().lower(),
        owner_phone=body.owner_phone,
        address=body.address,
        subscription_plan=plan,
        subscription_status=SubscriptionStatus.ACTIVE,
        monthly_fee=fee,
        currency=currency,
        default_language=body.default_language,
        joined_on=join_date,
        next_payment_date=billing.next_payment_date,
        created_by_id=me.user_id,
    )
    db.add(t); db.flush()

    first = PaymentRecord(
        tenant_id=t.id,
        amount=billing.first_payment_amount,
        currency=currency,
        method=PaymentMethod.BANK_TRANSFER,
        status=PaymentStatus.PENDING,
        description=first_payment_description(billing),
        invoice_number=issue_invoice_number(db, t.id, join_date),
        due_date=join_date + timedelta(days=settings.FIRST_INVOICE_DUE_DAYS),
        notes=first_payment_notes(billing),
        created_by_id=me.user_id,
    )
    db.add(first)

    audit(db, me.user_id, "TENANT", t.id, AuditAction.CREATE,
          after={"slug": t.slug, "business_name": t.business_name, "monthly_fee": str(fee),
                 "first_payment": str(billing.first_payment_amount)})
    db.commit()
    logger.info("Tenant %s created (fee %s, first payment %s, prorated=%s)",
                t.slug, fee, billing.first_payment_amount, billing.first_payment_prorated)

    return {
        "tenant": tenant_out(t),
        "billing": billing.model_dump(mode="json"),
        "first_payment": payment_out(first),
    }

@router.get("")
def list_tenants(status: str | None = None, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    q = db.query(Tenant).filter(Tenant.deleted_at.is_(None))
    if status:
        q = q.filter(Tenant.subscription_status == parse_enum(SubscriptionStatus, status))
    return [tenant_out(t) for t in q.order_by(Tenant.created_at.desc()).limit(500).all()]

@router.get("/{tenant_id}")
def get_tenant(tenant_id: str, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    t = _get_tenant(db, tenant_id)
    payments = (db.query(PaymentRecord)
                  .filter(PaymentRecord.tenant_id == t.id, PaymentRecord.deleted_at.is_(None))
                  .order_by(PaymentRecord.due_date.desc()).all())
    return {**tenant_out(t), "payments": [payment_out(p) for p in payments]}

@router.patch("/{tenant_id}")
def update_tenant(tenant_id: str, body: TenantUpdateIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    t = _get_tenant(db, tenant_id)
    before = tenant_out(t)
    changes = body.model_dump(exclude_unset=True)

    action = AuditAction.UPDATE
    if "subscription_status" in changes:
        new_status = parse_enum(SubscriptionStatus, changes.pop("subscription_status"))
        if new_status is SubscriptionStatus.SUSPENDED:
            action = AuditAction.SUSPEND
        elif new_status is SubscriptionStatus.ACTIVE and t.subscription_status is not SubscriptionStatus.ACTIVE:
            action = AuditAction.ACTIVATE
        t.subscription_status = new_status
    if "subscription_plan" in changes:
        t.subscription_plan = parse_enum(SubscriptionPlan, changes.pop("subscription_plan"))
    if "monthly_fee" in changes:
        # applies from the next renewal; issued records keep their amount
        t.monthly_fee = as_amount(changes.pop("monthly_fee"))
    for k, v in changes.items():
        if v is not None:
            setattr(t, k, v)

    audit(db, me.user_id, "TENANT", t.id, action, before=before, after=tenant_out(t))
    db.commit(); db.refresh(t)
    return tenant_out(t)

@router.delete("/{tenant_id}")
def delete_tenant(tenant_id: str, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    """Soft delete: the tenant is cancelled, hidden from the console and its users can no longer log in."""
    t = _get_tenant(db, tenant_id)
    before = tenant_out(t)
    t.deleted_at = datetime.now(timezone.utc)
    t.subscription_status = SubscriptionStatus.CANCELLED
    t.next_payment_date = None

    users = db.query(User).filter(User.tenant_id == t.id, User.active.is_(True)).all()
    for u in users:
        u.active = False

    audit(db, me.user_id, "TENANT", t.id, AuditAction.DELETE, before=before)
    db.commit()
    logger.info("Tenant %s deleted, %d user(s) deactivated", t.slug, len(users))
    return {"id": t.id, "deleted": True, "deactivated_users": len(users)}

# ── tenant users ────────────────────────────────────────────────────────────

@router.get("/{tenant_id}/users")
def list_tenant_users(tenant_id: str, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    t = _get_tenant(db, tenant_id)
    users = (db.query(User)
               .filter(User.tenant_id == t.id, User.deleted_at.is_(None))
               .order_by(User.created_at.desc()).all())
    return [user_out(u) for u in users]

@router.post("/{tenant_id}/users", status_code=201)
def create_tenant_user(tenant_id: str, body: TenantUserIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    t = _get_tenant(db, tenant_id)
    for field in ("email", "first_name", "password"):
        if not getattr(body, field).strip():
            raise HTTPException(400, detail=f"missing field: {field}")
    role = parse_enum(TenantRole, body.role)
    u = create_user_record(db, me.user_id, email=body.email, first_name=body.first_name,
                           last_name=body.last_name, password=body.password,
                           role=role.user_role, tenant_id=t.id)
    return user_out(u)
