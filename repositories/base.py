"""Accès aux documents MongoDB, commun aux utilisateurs, clients et notes.

Toutes les mutations passent par `EntityStore`, qui écrit l'entrée du journal
d'activité après une persistance réussie. L'écriture du journal est isolée:
son échec est consigné dans les logs sans annuler la mutation.
"""

import logging
from typing import Iterable, List, Optional

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from database import document_helper, id_query, utcnow
from repositories.activity import ActivityLogger, compute_changes

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


class EntityStore:
    collection_name: str = ""
    entity_type: str = ""
    # Champs comparés lors d'une mise à jour pour le journal d'activité
    tracked_fields: Iterable[str] = ()
    # Champs recopiés dans `metadata` de chaque entrée du journal
    metadata_fields: Iterable[str] = ()

    def __init__(self, db: Database, activity: Optional[ActivityLogger] = None):
        self.collection = db[self.collection_name]
        self.activity = activity if activity is not None else ActivityLogger(db)

    # --- Lecture ---

    def list(self, query: Optional[dict] = None) -> List[dict]:
        cursor = self.collection.find(query or {}).sort(NEWEST_FIRST)
        return [self._serialize(document) for document in cursor]

    def list_by_creator(self, user_id: str) -> List[dict]:
        return self.list({"created_by": user_id})

    def get_by_id(self, identifier: str) -> Optional[dict]:
        document = self._find(identifier)
        return self._serialize(document) if document else None

    def count(self) -> int:
        return self.collection.count_documents({})

    # --- Écriture ---

    def create(self, data: dict, performed_by: Optional[str] = None) -> dict:
        object_id = ObjectId()
        document = dict(data)
        document.update({"_id": object_id, "id": str(object_id), "created_at": utcnow()})
        self.collection.insert_one(document)

        created = self._serialize(self.collection.find_one({"_id": object_id}))
        logger.info("%s créé: %s", self.entity_type, created["id"])
        self._audit(created["id"], "created", self._performer(created, performed_by), snapshot=created)
        return created

    def update(self, identifier: str, data: dict, performed_by: Optional[str] = None) -> Optional[dict]:
        before = self._find(identifier)
        if not before:
            return None

        update_data = dict(data)
        update_data["updated_at"] = utcnow()
        after = self.collection.find_one_and_update(
            {"_id": before["_id"]},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER,
        )
        # Document supprimé entre la lecture et l'écriture
        if not after:
            return None

        updated = self._serialize(after)
        changes = compute_changes(before, data, self.tracked_fields)
        # Une mise à jour sans changement sur les champs suivis n'est pas journalisée
        if changes:
            performer = performed_by or data.get("updated_by") or self._performer(before, None)
            self._audit(updated["id"], "updated", performer, snapshot=updated, changes=changes)
        return updated

    def delete(self, identifier: str, performed_by: Optional[str] = None) -> bool:
        document = self._find(identifier)
        if not document:
            return False

        result = self.collection.delete_one({"_id": document["_id"]})
        if result.deleted_count == 0:
            return False

        deleted = self._serialize(document)
        logger.info("%s supprimé: %s", self.entity_type, deleted["id"])
        self._audit(deleted["id"], "deleted", self._performer(document, performed_by), snapshot=deleted)
        return True

    # --- Utilitaires ---

    def _find(self, identifier: str) -> Optional[dict]:
        return self.collection.find_one(id_query(identifier))

    def _serialize(self, document: dict) -> dict:
        return document_helper(document)

    @staticmethod
    def _performer(document: dict, performed_by: Optional[str]) -> str:
        # Auteur explicite, sinon créateur du document, sinon le système
        return performed_by or document.get("created_by") or "system"

    def _audit(self, entity_id: str, action: str, performed_by: str, snapshot: dict, changes: Optional[dict] = None):
        metadata = {field: snapshot.get(field) for field in self.metadata_fields}
        try:
            self.activity.record(
                entity_type=self.entity_type,
                entity_id=entity_id,
                action=action,
                performed_by=performed_by,
                changes=changes,
                metadata=metadata,
            )
        except Exception:
            # Le journal est "best effort": la mutation déjà persistée reste valide
            logger.exception("Échec de l'écriture du journal d'activité pour %s %s (%s)", self.entity_type, entity_id, action)
