"""Rappels de réunion.

Les rappels sont éphémères: ils sont recalculés à partir des clients à chaque
passage du planificateur. Un rappel écarté disparaît du tableau de la session
jusqu'au recalcul suivant, qui le remet en place si la condition tient toujours.
"""

import asyncio
import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from database import utcnow

logger = logging.getLogger(__name__)

ANONYMOUS_SESSION = "anonymous"


def evaluate_reminders(clients: Iterable[dict], now: datetime) -> List[dict]:
    """
    Rappel urgent si la réunion a lieu dans l'heure (0 < heures <= 1),
    rappel normal si elle a lieu dans la journée mais à plus d'une heure.
    Les réunions passées ou sans date ne produisent rien.
    """
    reminders = []
    for client in clients:
        meeting = client.get("meeting_date")
        if meeting is None:
            continue
        delta = meeting - now
        hours_diff = delta / timedelta(hours=1)
        days_diff = delta / timedelta(days=1)

        if 0 < hours_diff <= 1:
            urgent, key, title = True, "1h", "Meeting in 1 hour"
        elif 0 < days_diff <= 1 and hours_diff > 1:
            urgent, key, title = False, "1d", "Meeting tomorrow"
        else:
            continue

        reminders.append({
            "id": f"meeting-{key}-{client['id']}",
            "type": "meeting",
            "title": title,
            "message": f"Meeting with {client.get('name', '')} from {client.get('organization', '')}",
            "client_id": client["id"],
            "meeting_date": meeting,
            "urgent": urgent,
        })
    return reminders


class ReminderBoard:
    """Rappels actifs d'une session. Protégé par un verrou: les routes synchrones
    tournent dans le pool de threads de FastAPI, le planificateur dans la boucle asyncio."""

    def __init__(self):
        self._lock = threading.Lock()
        self._reminders: Dict[str, dict] = {}

    def refresh(self, clients: Iterable[dict], now: datetime) -> List[dict]:
        # Remplace tout le tableau: les rappels écartés réapparaissent s'ils sont toujours dus
        reminders = evaluate_reminders(clients, now)
        with self._lock:
            self._reminders = {reminder["id"]: reminder for reminder in reminders}
        return reminders

    def dismiss(self, reminder_id: str) -> bool:
        with self._lock:
            return self._reminders.pop(reminder_id, None) is not None

    def active(self) -> List[dict]:
        with self._lock:
            reminders = list(self._reminders.values())
        # Urgents d'abord, puis par date de réunion
        return sorted(reminders, key=lambda reminder: (not reminder["urgent"], reminder["meeting_date"]))


class ReminderService:
    """
    Un tableau de rappels par session (utilisateur authentifié ou anonyme).
    Un tableau non consulté depuis `idle_timeout` est abandonné au recalcul
    suivant; il sera recréé à la prochaine consultation.
    """

    def __init__(
        self,
        load_clients: Callable[[], List[dict]],
        clock: Callable[[], datetime] = utcnow,
        idle_timeout: Optional[timedelta] = None,
    ):
        self._load_clients = load_clients
        self._clock = clock
        self._idle_timeout = idle_timeout
        self._lock = threading.Lock()
        self._boards: Dict[str, ReminderBoard] = {}
        self._last_seen: Dict[str, datetime] = {}

    def board_for(self, session_key: Optional[str]) -> ReminderBoard:
        key = session_key or ANONYMOUS_SESSION
        now = self._clock()
        with self._lock:
            board = self._boards.get(key)
            created = board is None
            if created:
                board = self._boards[key] = ReminderBoard()
            self._last_seen[key] = now
        # Première consultation: calcul immédiat sans attendre le planificateur
        if created:
            board.refresh(self._load_clients(), now)
        return board

    def forget(self, session_key: str) -> bool:
        """Abandonne le tableau d'une session (ex: utilisateur supprimé)."""
        with self._lock:
            self._last_seen.pop(session_key, None)
            return self._boards.pop(session_key, None) is not None

    def sessions(self) -> List[str]:
        with self._lock:
            return list(self._boards)

    def _evict_idle(self, now: datetime) -> int:
        if self._idle_timeout is None:
            return 0
        with self._lock:
            idle = [key for key, seen in self._last_seen.items() if now - seen > self._idle_timeout]
            for key in idle:
                del self._last_seen[key]
                self._boards.pop(key, None)
        if idle:
            logger.debug("%d tableau(x) de rappels inactif(s) abandonné(s)", len(idle))
        return len(idle)

    def refresh_all(self) -> int:
        self._evict_idle(self._clock())
        with self._lock:
            boards = list(self._boards.values())
        if not boards:
            return 0
        clients = self._load_clients()
        now = self._clock()
        for board in boards:
            board.refresh(clients, now)
        return len(boards)


class ReminderScheduler:
    """Recalcule périodiquement les rappels de toutes les sessions (asyncio pur)."""

    def __init__(self, service: ReminderService, interval: int):
        self._service = service
        self._interval = interval

    async def start(self, shutdown_event: asyncio.Event) -> None:
        logger.info("Planificateur des rappels démarré (intervalle=%ds)", self._interval)
        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self._interval)
                break  # arrêt demandé
            except asyncio.TimeoutError:
                pass  # intervalle écoulé

            try:
                # PyMongo est bloquant: le recalcul part dans un thread
                refreshed = await asyncio.to_thread(self._service.refresh_all)
                logger.debug("Rappels recalculés pour %d session(s)", refreshed)
            except Exception as e:
                logger.error("Erreur lors du recalcul des rappels: %s", e)
        logger.info("Planificateur des rappels arrêté.")
