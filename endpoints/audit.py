from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from database import get_db
from admin_security import require_admin
from audit_service import AuditService

router = APIRouter(prefix="/admin/audit", tags=["audit"], dependencies=[Depends(require_admin)])

@router.get("")
def list_audit_logs(
    action: Optional[str] = Query(None),
    target_type: Optional[str] = Query(None),
    target_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    """Query administrative actions (payment status changes, review moderation), newest first."""
    rows = AuditService(db).list_actions(action=action, target_type=target_type, target_id=target_id, limit=limit, offset=offset)
    return [
        {
            "id": r.id,
            "actor": r.actor,
            "action": r.action,
            "target_type": r.target_type,
            "target_id": r.target_id,
            "description": r.description,
            "details": r.details,
            "created_at": r.created_at.isoformat() if r.created_at else None,
        }
        for r in rows
    ]
