"""Agrégats du tableau de bord et du calendrier."""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List

UNKNOWN = "Unknown"


def dashboard_stats(clients: List[dict], total_users: int) -> dict:
    value_by_stage: Dict[str, float] = defaultdict(float)
    for client in clients:
        value_by_stage[client.get("project_stage") or UNKNOWN] += client.get("project_value") or 0

    return {
        "total_clients": len(clients),
        "total_value": sum(client.get("project_value") or 0 for client in clients),
        "total_users": total_users,
        "clients_by_stage": dict(Counter(client.get("project_stage") or UNKNOWN for client in clients)),
        "clients_by_platform": dict(Counter(client.get("platform") or UNKNOWN for client in clients)),
        "clients_by_status": dict(Counter(client.get("status") or UNKNOWN for client in clients)),
        "value_by_stage": dict(value_by_stage),
    }


def upcoming_meetings(clients: Iterable[dict], now: datetime, days: int = 7, limit: int = 5) -> List[dict]:
    """Réunions entre maintenant et maintenant + `days`, les plus proches d'abord."""
    horizon = now + timedelta(days=days)
    meetings = [
        client for client in clients
        if client.get("meeting_date") is not None and now <= client["meeting_date"] <= horizon
    ]
    meetings.sort(key=lambda client: client["meeting_date"])
    return meetings[:limit]


def calendar_month(clients: Iterable[dict], year: int, month: int) -> List[dict]:
    # Réunions du mois regroupées par jour, jours sans réunion omis
    days: Dict[int, List[dict]] = defaultdict(list)
    for client in clients:
        meeting = client.get("meeting_date")
        if meeting is not None and meeting.year == year and meeting.month == month:
            days[meeting.day].append(client)

    return [
        {"day": day, "meetings": sorted(meetings, key=lambda client: client["meeting_date"])}
        for day, meetings in sorted(days.items())
    ]
