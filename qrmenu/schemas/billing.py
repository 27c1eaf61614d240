from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from qrmenu.schemas.common import Money

class TenantBilling(BaseModel):
    first_payment_amount: Money
    first_payment_prorated: bool
    next_payment_amount: Money
    next_payment_date: date
    first_payment_period: str
    # only set for prorated first payments
    days_in_first_period: Optional[int] = None
    total_days_in_month: Optional[int] = None

class BillingPreviewIn(BaseModel):
    monthly_fee: Money
    join_date: date

class RegisterPaymentIn(BaseModel):
    tenant_ids: list[str]
    month: str                       # YYYY-MM
    method: str
    amount: Optional[Money] = None   # defaults to each tenant's monthly fee
    notes: Optional[str] = None

class BulkStatusIn(BaseModel):
    payment_ids: list[str]
    status: str

class PaymentCreateIn(BaseModel):
    tenant_id: str
    amount: Money
    method: str
    due_date: date
    invoice_number: Optional[str] = None   # issued automatically when empty
    currency: Optional[str] = None         # tenant currency when empty
    description: Optional[str] = None
    notes: Optional[str] = None

class PaymentUpdateIn(BaseModel):
    amount: Optional[Money] = None
    method: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[date] = None
    paid_at: Optional[datetime] = None     # explicit null clears it
    notes: Optional[str] = None
