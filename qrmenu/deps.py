from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt

from qrmenu.errors import InvalidArgument
from qrmenu.util.security import decode_token
from qrmenu.util.validation import UserRole, parse_user_role

auth_scheme = HTTPBearer(auto_error=False)

@dataclass(frozen=True)
class Principal:
    user_id: str
    role: UserRole
    tenant_id: str | None

def require_auth(creds: HTTPAuthorizationCredentials | None = Depends(auth_scheme)) -> Principal:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        data = decode_token(creds.credentials)
        return Principal(user_id=data["sub"], role=parse_user_role(data.get("role")),
                         tenant_id=data.get("tenant_id"))
    except (jwt.PyJWTError, KeyError, InvalidArgument):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def require_super_admin(me: Principal = Depends(require_auth)) -> Principal:
    if me.role is not UserRole.SUPER_ADMIN:
        raise HTTPException(status_code=403, detail="Super admin access required")
    return me

def require_tenant(me: Principal = Depends(require_auth)) -> str:
    """Tenant id of the caller, taken from the token claim and nowhere else."""
    if not me.role.is_tenant_role or not me.tenant_id:
        raise HTTPException(status_code=403, detail="Tenant access required")
    return me.tenant_id
