from typing import List, Optional

from fastapi import APIRouter, Depends, Query

import schemas
from dependencies import get_activity_logger
from repositories.activity import ActivityLogger

router = APIRouter()


@router.get("", summary="Consulter le journal d'activité", response_model=List[schemas.ActivityLog])
def list_activity(
    activity: ActivityLogger = Depends(get_activity_logger),
    entity_type: Optional[schemas.EntityType] = Query(None, alias="entityType"),
    entity_id: Optional[str] = Query(None, alias="entityId"),
):
    """Entrées du journal, les plus récentes d'abord. Les filtres omis correspondent à tout."""
    return activity.query(entity_type.value if entity_type else None, entity_id)
