from typing import List, Optional

from fastapi import APIRouter, Depends, Query

import schemas
from database import utcnow
from dependencies import get_client_store, get_user_store
from repositories.clients import ClientStore
from repositories.users import UserStore
from services.stats import calendar_month, dashboard_stats, upcoming_meetings

router = APIRouter()


@router.get("/stats", summary="Statistiques du tableau de bord", response_model=schemas.DashboardStats)
def get_stats(
    clients: ClientStore = Depends(get_client_store),
    users: UserStore = Depends(get_user_store),
):
    """Répartition des clients par étape, plateforme et statut, et valeur par étape."""
    return dashboard_stats(clients.list(), users.count())


@router.get("/upcoming-meetings", summary="Réunions à venir", response_model=List[schemas.Client])
def get_upcoming_meetings(
    clients: ClientStore = Depends(get_client_store),
    days: int = Query(7, ge=1, le=365),
    limit: int = Query(5, ge=1, le=100),
):
    return upcoming_meetings(clients.list_with_meetings(), utcnow(), days=days, limit=limit)


@router.get("/calendar", summary="Réunions du mois par jour", response_model=List[schemas.CalendarDay])
def get_calendar(
    clients: ClientStore = Depends(get_client_store),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    month: Optional[int] = Query(None, ge=1, le=12),
):
    # Mois courant par défaut
    now = utcnow()
    return calendar_month(clients.list_with_meetings(), year or now.year, month or now.month)
