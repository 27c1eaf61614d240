# qrmenu/routers/users.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from qrmenu.db import get_db
from qrmenu.deps import Principal, require_super_admin
from qrmenu.models.core import Tenant, User
from qrmenu.schemas.users import SystemUserIn
from qrmenu.util.audit import audit
from qrmenu.util.security import hash_pw
from qrmenu.util.validation import AuditAction, UserRole, parse_user_role

router = APIRouter(prefix="/super-admin/system-users", tags=["super-admin"])

def user_out(u: User) -> dict:
    return {
        "id": u.id, "email": u.email,
        "first_name": u.first_name, "last_name": u.last_name,
        "role": u.role.value, "tenant_id": u.tenant_id, "active": u.active,
    }

def create_user_record(db: Session, actor_id: str, *, email: str, first_name: str, last_name: str,
                       password: str, role: UserRole, tenant_id: str | None) -> User:
    email = email.strip().lower()

    # 1) Tenant binding follows the role
    tid = (tenant_id or "").strip() or None
    if role is UserRole.SUPER_ADMIN and tid:
        raise HTTPException(400, detail="super admins are not bound to a tenant")
    if role.is_tenant_role:
        if not tid:
            raise HTTPException(400, detail="tenant_id is required for tenant roles")
        t = db.get(Tenant, tid)
        if not t or t.deleted_at is not None:
            raise HTTPException(400, detail=f"Invalid tenant_id: {tid}")

    # 2) Email is global
    if db.query(User.id).filter(User.email == email).first():
        raise HTTPException(409, detail="Email already exists")

    u = User(
        tenant_id=tid,
        email=email,
        first_name=first_name,
        last_name=last_name,
        pass_hash=hash_pw(password),
        role=role,
    )
    db.add(u); db.flush()
    audit(db, actor_id, "USER", u.id, AuditAction.CREATE, after={"email": email, "role": role.value, "tenant_id": tid})
    db.commit()
    return u

@router.post("", status_code=201)
def create_user(body: SystemUserIn, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    u = create_user_record(db, me.user_id, email=body.email, first_name=body.first_name,
                           last_name=body.last_name, password=body.password,
                           role=parse_user_role(body.role), tenant_id=body.tenant_id)
    return user_out(u)

@router.get("", summary="List platform and tenant users")
def list_users(role: str | None = None, tenant_id: str | None = None,
               db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    q = db.query(User).filter(User.deleted_at.is_(None))
    if role:
        q = q.filter(User.role == parse_user_role(role))
    if tenant_id:
        q = q.filter(User.tenant_id == tenant_id)
    return [user_out(u) for u in q.order_by(User.created_at.desc()).limit(500).all()]
