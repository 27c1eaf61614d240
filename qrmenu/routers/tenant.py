# qrmenu/routers/tenant.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from qrmenu.db import get_db
from qrmenu.deps import require_tenant
from qrmenu.models.core import PaymentRecord, Tenant
from qrmenu.routers.financials import payment_out

router = APIRouter(prefix="/tenant", tags=["tenant"])

@router.get("/billing")
def my_billing(db: Session = Depends(get_db), tenant_id: str = Depends(require_tenant)):
    t = db.get(Tenant, tenant_id)
    if not t or t.deleted_at is not None:
        raise HTTPException(404, detail="tenant not found")
    payments = (db.query(PaymentRecord)
                  .filter(PaymentRecord.tenant_id == tenant_id, PaymentRecord.deleted_at.is_(None))
                  .order_by(PaymentRecord.due_date.desc()).all())
    return {
        "tenant_id": t.id,
        "business_name": t.business_name,
        "subscription_plan": t.subscription_plan.value,
        "subscription_status": t.subscription_status.value,
        "monthly_fee": float(t.monthly_fee),
        "currency": t.currency,
        "next_payment_date": t.next_payment_date.isoformat() if t.next_payment_date else None,
        "payments": [payment_out(p) for p in payments],
    }
