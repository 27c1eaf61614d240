from sqlalchemy.orm import Session
from qrmenu.models.core import AuditLog
from qrmenu.util.validation import AuditAction, object_to_json

def audit(db: Session, actor_user_id: str, entity: str, entity_id: str,
          action: AuditAction, before: dict | None = None, after: dict | None = None, reason: str | None = None):
    entry = AuditLog(
        actor_user_id=actor_user_id,
        entity=entity, entity_id=entity_id,
        action=action.value,
        reason=reason,
        before=object_to_json(before) if before else None,
        after=object_to_json(after) if after else None,
    )
    db.add(entry)
