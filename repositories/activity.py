"""Journal d'activité: trace immuable des créations, mises à jour et suppressions.

Chaque entrée référence l'entité concernée (type + identifiant) sans la posséder.
Aucune méthode de modification ou de suppression n'est exposée: le journal est
en ajout seul.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.database import Database

from database import ACTIVITY_LOGS, document_helper, utcnow

logger = logging.getLogger(__name__)


def compute_changes(before: dict, update: dict, fields: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """
    Compare les champs suivis entre le document avant mise à jour et les
    valeurs proposées. Seuls les champs présents dans `update` et dont la
    valeur diffère donnent une entrée {"from": ancien, "to": nouveau}.
    """
    changes = {}
    for field in fields:
        if field not in update:
            continue
        previous = before.get(field)
        if update[field] != previous:
            changes[field] = {"from": previous, "to": update[field]}
    return changes


class ActivityLogger:
    def __init__(self, db: Database):
        self.collection = db[ACTIVITY_LOGS]

    def record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        performed_by: str,
        changes: Optional[dict] = None,
        metadata: Optional[dict] = None,
    ) -> dict:
        object_id = ObjectId()
        entry = {
            "_id": object_id,
            "id": str(object_id),
            "entity_type": entity_type,
            "entity_id": entity_id,
            "action": action,
            "performed_by": performed_by,
            "timestamp": utcnow(),
        }
        if changes:
            entry["changes"] = changes
        if metadata:
            entry["metadata"] = metadata

        self.collection.insert_one(entry)
        logger.info("Activité enregistrée: %s %s %s par %s", entity_type, entity_id, action, performed_by)
        return document_helper(entry)

    def query(self, entity_type: Optional[str] = None, entity_id: Optional[str] = None) -> List[dict]:
        """Entrées correspondant aux filtres fournis, de la plus récente à la plus ancienne."""
        query = {}
        if entity_type:
            query["entity_type"] = entity_type
        if entity_id:
            query["entity_id"] = entity_id

        cursor = self.collection.find(query).sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
        return [document_helper(entry) for entry in cursor]
