from sqlalchemy.orm import Session
from models.audit_log import AuditLog
from datetime import datetime
from typing import Optional, Dict, Any, List


class AuditService:
    def __init__(self, db: Session):
        self.db = db

    def log_action(
        self,
        action: str,
        actor: str = "admin",
        target_type: Optional[str] = None,
        target_id: Optional[int] = None,
        description: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        """
        Stage an audit entry in the current session; it is committed together
        with the change it describes.
        """
        entry = AuditLog(
            actor=actor,
            action=action,
            target_type=target_type,
            target_id=target_id,
            description=description,
            details=details or {},
            created_at=datetime.utcnow(),
        )
        self.db.add(entry)
        return entry

    def list_actions(
        self,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        target_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[AuditLog]:
        q = self.db.query(AuditLog)
        if action is not None:
            q = q.filter(AuditLog.action == action)
        if target_type is not None:
            q = q.filter(AuditLog.target_type == target_type)
        if target_id is not None:
            q = q.filter(AuditLog.target_id == target_id)
        return q.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(offset).limit(limit).all()


# Convenience function for use in other modules
def log_action_to_db(
    db: Session,
    action: str,
    actor: str = "admin",
    **kwargs
) -> AuditLog:
    return AuditService(db).log_action(action=action, actor=actor, **kwargs)
