"""Filtres des listes de clients et de notes.

Chaque filtre est un prédicat indépendant; le résultat est la conjonction des
filtres actifs. Une valeur `None`, vide ou "all" désactive le filtre.
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional

from database import utcnow

ALL = "all"

# Périodes acceptées par meeting_bucket()
MEETING_BUCKETS = ("today", "week", "month", "upcoming")


def _inactive(value: Optional[str]) -> bool:
    return value is None or value == "" or value == ALL


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


def equals(field: str, value: Optional[str]) -> Callable[[dict], bool]:
    if _inactive(value):
        return lambda item: True
    return lambda item: item.get(field) == value


def search_clients(term: Optional[str]) -> Callable[[dict], bool]:
    # Recherche insensible à la casse sur le nom, l'organisation et l'email
    if not term:
        return lambda client: True
    needle = term.lower()
    return lambda client: any(_contains(client.get(field), needle) for field in ("name", "organization", "email"))


def search_notes(term: Optional[str]) -> Callable[[dict], bool]:
    if not term:
        return lambda note: True
    needle = term.lower()

    def predicate(note: dict) -> bool:
        if _contains(note.get("title"), needle) or _contains(note.get("content"), needle):
            return True
        return any(_contains(tag, needle) for tag in note.get("tags") or [])

    return predicate


def meeting_bucket(bucket: Optional[str], now: Optional[datetime] = None) -> Callable[[dict], bool]:
    """
    Période de réunion calculée sur d = (now - meeting_date) en jours:
    today = [0, 1), week = [0, 7], month = [0, 30], upcoming = d < 0.
    """
    if _inactive(bucket):
        return lambda client: True
    if bucket not in MEETING_BUCKETS:
        raise ValueError(f"Unknown meeting filter: {bucket}")
    now = now or utcnow()

    def predicate(client: dict) -> bool:
        meeting = client.get("meeting_date")
        if meeting is None:
            return False
        days = (now - meeting) / timedelta(days=1)
        if bucket == "today":
            return 0 <= days < 1
        if bucket == "week":
            return 0 <= days <= 7
        if bucket == "month":
            return 0 <= days <= 30
        return days < 0

    return predicate


def apply(items: Iterable[dict], predicates: Iterable[Callable[[dict], bool]]) -> List[dict]:
    predicates = list(predicates)
    return [item for item in items if all(predicate(item) for predicate in predicates)]


def filter_clients(
    clients: Iterable[dict],
    search: Optional[str] = None,
    status: Optional[str] = None,
    stage: Optional[str] = None,
    platform: Optional[str] = None,
    created_by: Optional[str] = None,
    meeting: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[dict]:
    return apply(
        clients,
        [
            search_clients(search),
            equals("status", status),
            equals("project_stage", stage),
            equals("platform", platform),
            equals("created_by", created_by),
            meeting_bucket(meeting, now),
        ],
    )


def filter_notes(
    notes: Iterable[dict],
    search: Optional[str] = None,
    client_id: Optional[str] = None,
    created_by: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
) -> List[dict]:
    return apply(
        notes,
        [
            search_notes(search),
            equals("client_id", client_id),
            equals("created_by", created_by),
            equals("category", category),
            equals("priority", priority),
        ],
    )
