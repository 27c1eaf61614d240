from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from qrmenu.db import get_db
from qrmenu.config import settings
from qrmenu.util.security import hash_pw
from qrmenu.util.validation import UserRole
from qrmenu.models.core import User, SystemSettings

router = APIRouter(prefix="/admin", tags=["admin"])

DEV_ADMIN_EMAIL = "admin@example.com"
DEV_ADMIN_PASSWORD = "admin"

@router.post("/dev-bootstrap")
def dev_bootstrap(db: Session = Depends(get_db)):
    if settings.APP_ENV != "dev":
        raise HTTPException(403, detail="Not allowed")

    # Super admin
    u = db.query(User).filter(User.email == DEV_ADMIN_EMAIL).first()
    if not u:
        u = User(
            email=DEV_ADMIN_EMAIL,
            first_name="Super",
            last_name="Admin",
            pass_hash=hash_pw(DEV_ADMIN_PASSWORD),
            role=UserRole.SUPER_ADMIN,
            active=True,
        )
        db.add(u); db.flush()

    # Empty settings row; reads fall back to defaults
    if not db.query(SystemSettings).first():
        db.add(SystemSettings(data=None, updated_by_id=u.id))

    db.commit()
    return {
        "admin_id": u.id,
        "admin_email": u.email,
        "admin_password": DEV_ADMIN_PASSWORD,
    }
