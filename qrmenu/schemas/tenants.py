from datetime import date
from typing import Optional

from pydantic import BaseModel

from qrmenu.schemas.common import Money

class TenantCreateIn(BaseModel):
    business_name: str
    business_name_ar: Optional[str] = None
    owner_name: str
    owner_email: str
    owner_phone: Optional[str] = None
    address: Optional[str] = None
    subdomain: Optional[str] = None          # slug source; business_name when empty
    subscription_plan: str = "BASIC"
    monthly_fee: Optional[Money] = None      # settings.DEFAULT_MONTHLY_FEE when empty
    currency: Optional[str] = None
    default_language: str = "en"
    join_date: Optional[date] = None         # today (settings.TZ) when empty

class TenantUpdateIn(BaseModel):
    business_name: Optional[str] = None
    business_name_ar: Optional[str] = None
    owner_phone: Optional[str] = None
    address: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_status: Optional[str] = None
    monthly_fee: Optional[Money] = None
