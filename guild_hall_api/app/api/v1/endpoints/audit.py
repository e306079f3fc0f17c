"""
Audit log endpoints.

Admins can query the audit trail with filters for user, object type
and action, and paginate via ``limit`` and ``offset``.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from guild_hall_api.app.core.security import require_admin
from guild_hall_api.app.services.audit_service import AuditService


router = APIRouter()


@router.get("/", response_model=List[Dict[str, Any]])
async def list_audit_logs(
    user_id: Optional[str] = Query(None),
    object_type: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(require_admin),
) -> List[Dict[str, Any]]:
    """Return audit log entries, newest first."""
    return await AuditService.list_logs(
        user_id=user_id,
        object_type=object_type,
        action=action,
        limit=limit,
        offset=offset,
    )
