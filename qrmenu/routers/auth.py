import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from qrmenu.schemas.common import Token
from qrmenu.util.audit import audit
from qrmenu.util.security import create_token, verify_pw
from qrmenu.util.validation import AuditAction
from qrmenu.models.core import User
from qrmenu.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=Token)
def login(email: str, password: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == email.strip().lower(), User.deleted_at.is_(None)).first()
    if not user or not user.active or not verify_pw(user.pass_hash, password):
        logger.info("Failed login for %s", email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    audit(db, user.id, "USER", user.id, AuditAction.LOGIN)
    db.commit()
    return Token(access_token=create_token(user.id, user.role, user.tenant_id))
