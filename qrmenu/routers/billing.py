from fastapi import APIRouter, Depends

from qrmenu.deps import Principal, require_super_admin
from qrmenu.schemas.billing import BillingPreviewIn, TenantBilling
from qrmenu.services.billing import calculate_tenant_billing

router = APIRouter(prefix="/super-admin/billing", tags=["super-admin"])

@router.post("/preview", response_model=TenantBilling)
def preview_billing(body: BillingPreviewIn, me: Principal = Depends(require_super_admin)):
    # nothing is stored; the create-tenant form shows this before submitting
    return calculate_tenant_billing(body.monthly_fee, body.join_date)
