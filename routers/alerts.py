from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

import schemas
from dependencies import get_actor_id, get_reminder_service
from services.alerts import ReminderService

router = APIRouter()


@router.get("", summary="Rappels de réunion actifs", response_model=List[schemas.Reminder])
def list_alerts(
    reminders: ReminderService = Depends(get_reminder_service),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    return reminders.board_for(actor_id).active()


@router.post("/{alert_id}/dismiss", summary="Écarter un rappel", response_model=schemas.MessageResponse)
def dismiss_alert(
    alert_id: str,
    reminders: ReminderService = Depends(get_reminder_service),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    # Non persistant: le rappel revient au prochain recalcul si la réunion est toujours proche
    if not reminders.board_for(actor_id).dismiss(alert_id):
        raise HTTPException(status_code=404, detail="Alert not found")
    return {"message": "Alert dismissed"}
