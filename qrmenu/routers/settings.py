# qrmenu/routers/settings.py
import logging
from fastapi import APIRouter, Depends
from pydantic import ValidationError
from sqlalchemy.orm import Session
from qrmenu.config import PlatformSettings
from qrmenu.db import get_db
from qrmenu.deps import Principal, require_super_admin
from qrmenu.errors import InvalidArgument
from qrmenu.models.core import SystemSettings
from qrmenu.util.audit import audit
from qrmenu.util.validation import AuditAction, json_to_object, object_to_json

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/super-admin/settings", tags=["super-admin"])

def _merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for section, values in override.items():
        if isinstance(values, dict) and isinstance(out.get(section), dict):
            out[section] = {**out[section], **values}
        elif section in out:
            out[section] = values
    return out

def load_platform_settings(db: Session) -> PlatformSettings:
    row = db.query(SystemSettings).first()
    stored = json_to_object(row.data if row else None, {})
    try:
        return PlatformSettings.model_validate(_merge(PlatformSettings().model_dump(), stored))
    except ValidationError:
        logger.warning("Stored platform settings are invalid, using defaults")
        return PlatformSettings()

@router.get("", response_model=PlatformSettings)
def get_settings(db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    return load_platform_settings(db)

@router.put("", response_model=PlatformSettings)
def update_settings(body: dict, db: Session = Depends(get_db), me: Principal = Depends(require_super_admin)):
    """Partial update: only the sections/fields present in the body change."""
    current = load_platform_settings(db)
    try:
        updated = PlatformSettings.model_validate(_merge(current.model_dump(), body))
    except ValidationError as e:
        raise InvalidArgument(f"invalid settings: {e.error_count()} error(s): "
                              + "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()))

    row = db.query(SystemSettings).first()
    if not row:
        row = SystemSettings()
        db.add(row); db.flush()
    row.data = object_to_json(updated.model_dump())
    row.updated_by_id = me.user_id
    audit(db, me.user_id, "SETTINGS", row.id, AuditAction.UPDATE,
          before=current.model_dump(), after=updated.model_dump())
    db.commit()
    return updated
