from typing import Optional

from pydantic import BaseModel

class SystemUserIn(BaseModel):
    email: str
    first_name: str
    last_name: str = ""
    password: str
    role: str                          # any spelling, e.g. "super-admin"
    tenant_id: Optional[str] = None    # required for tenant roles

class TenantUserIn(BaseModel):
    email: str
    first_name: str
    last_name: str = ""
    password: str
    role: str = "admin"                # ADMIN | MANAGER | STAFF
