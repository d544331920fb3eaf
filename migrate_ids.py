"""
Migration ponctuelle des données héritées vers le schéma actuel.

Les documents hérités sont en camelCase (`clientName`, `createdBy`...), leurs
dates sont des chaînes ISO et leur `id` public diffère de leur ObjectId
(ex: "1", "2"...). Ce script:
  1. renomme les champs camelCase en snake_case;
  2. convertit les dates ISO en datetime UTC naïf;
  3. aligne `id` sur `str(_id)` pour les utilisateurs, clients et notes;
  4. réécrit les références (`created_by`, `updated_by`, `client_id`, et
     `entity_id` / `performed_by` du journal d'activité);
  5. hashe les mots de passe encore stockés en clair.

Il est idempotent: une seconde exécution ne modifie rien.

    python migrate_ids.py
"""
import logging
from datetime import datetime
from typing import Dict, Optional

from pymongo.database import Database

from database import ACTIVITY_LOGS, CLIENTS, NOTES, USERS, mongo_datetime
from utils.security import hash_password, is_password_hash

logger = logging.getLogger(__name__)

ENTITY_COLLECTIONS = {"user": USERS, "client": CLIENTS, "note": NOTES}

_TIMESTAMPS = {"createdAt": "created_at", "updatedAt": "updated_at"}

# Ancien nom -> nouveau nom, par collection
LEGACY_FIELDS = {
    USERS: dict(_TIMESTAMPS),
    CLIENTS: {
        "clientName": "name",
        "jobTitle": "job_title",
        "phoneNumber": "phone",
        "freelancePlatform": "platform",
        "projectStage": "project_stage",
        "projectValue": "project_value",
        "meetingDate": "meeting_date",
        "nextAction": "next_action",
        "createdBy": "created_by",
        "updatedBy": "updated_by",
        **_TIMESTAMPS,
    },
    NOTES: {
        "clientId": "client_id",
        "meetingDate": "meeting_date",
        "createdBy": "created_by",
        "updatedBy": "updated_by",
        **_TIMESTAMPS,
    },
    ACTIVITY_LOGS: {
        "entityType": "entity_type",
        "entityId": "entity_id",
        "performedBy": "performed_by",
    },
}

DATE_FIELDS = {
    USERS: ("created_at", "updated_at"),
    CLIENTS: ("meeting_date", "created_at", "updated_at"),
    NOTES: ("meeting_date", "created_at", "updated_at"),
    ACTIVITY_LOGS: ("timestamp",),
}


def _rename_legacy_fields(db: Database) -> int:
    renamed = 0
    for collection_name, fields in LEGACY_FIELDS.items():
        for legacy, current in fields.items():
            result = db[collection_name].update_many({legacy: {"$exists": True}}, {"$rename": {legacy: current}})
            renamed += result.modified_count
    logger.info("%d champ(s) camelCase renommé(s)", renamed)
    return renamed


def _parse_date(value: str) -> Optional[datetime]:
    # Les dates héritées sont produites par Date.toISOString() ("...Z")
    if not value.strip():
        return None
    try:
        return mongo_datetime(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        logger.warning("Date illisible ignorée: %r", value)
        return None


def _convert_dates(db: Database) -> int:
    converted = 0
    for collection_name, fields in DATE_FIELDS.items():
        for field in fields:
            for document in db[collection_name].find({field: {"$exists": True}}, {"_id": 1, field: 1}):
                value = document.get(field)
                if not isinstance(value, str):
                    continue
                db[collection_name].update_one({"_id": document["_id"]}, {"$set": {field: _parse_date(value)}})
                converted += 1
    logger.info("%d date(s) texte convertie(s)", converted)
    return converted


def _canonicalize(db: Database, collection_name: str) -> Dict[str, str]:
    """Aligne `id` sur `str(_id)` et retourne la table ancien id -> nouvel id."""
    mapping = {}
    for document in db[collection_name].find({}, {"_id": 1, "id": 1}):
        canonical = str(document["_id"])
        legacy = document.get("id")
        if legacy == canonical:
            continue
        if legacy:
            mapping[legacy] = canonical
        db[collection_name].update_one({"_id": document["_id"]}, {"$set": {"id": canonical}})
    logger.info("%s: %d identifiant(s) hérité(s) remappé(s)", collection_name, len(mapping))
    return mapping


def _rewrite_references(db: Database, collection_name: str, field: str, mapping: Dict[str, str]) -> int:
    rewritten = 0
    for legacy, canonical in mapping.items():
        result = db[collection_name].update_many({field: legacy}, {"$set": {field: canonical}})
        rewritten += result.modified_count
    return rewritten


def _hash_plaintext_passwords(db: Database) -> int:
    hashed = 0
    for user in db[USERS].find({}, {"_id": 1, "password": 1}):
        password = user.get("password")
        if password and not is_password_hash(password):
            db[USERS].update_one({"_id": user["_id"]}, {"$set": {"password": hash_password(password)}})
            hashed += 1
    logger.info("%d mot(s) de passe en clair hashé(s)", hashed)
    return hashed


def migrate_ids(db: Database) -> dict:
    # Les noms de champs d'abord: la réécriture des références porte sur les noms snake_case
    renamed = _rename_legacy_fields(db)
    dates = _convert_dates(db)

    mappings = {entity_type: _canonicalize(db, name) for entity_type, name in ENTITY_COLLECTIONS.items()}
    users, clients = mappings["user"], mappings["client"]

    references = 0
    for name in (CLIENTS, NOTES):
        references += _rewrite_references(db, name, "created_by", users)
        references += _rewrite_references(db, name, "updated_by", users)
    references += _rewrite_references(db, NOTES, "client_id", clients)
    references += _rewrite_references(db, ACTIVITY_LOGS, "performed_by", users)

    # entity_id dépend du type d'entité: "1" peut être un client comme un utilisateur
    for entity_type, mapping in mappings.items():
        for legacy, canonical in mapping.items():
            result = db[ACTIVITY_LOGS].update_many(
                {"entity_type": entity_type, "entity_id": legacy},
                {"$set": {"entity_id": canonical}},
            )
            references += result.modified_count

    return {
        "renamed": renamed,
        "dates": dates,
        "remapped": {entity_type: len(mapping) for entity_type, mapping in mappings.items()},
        "references": references,
        "passwords": _hash_plaintext_passwords(db),
    }


if __name__ == "__main__":
    from config import LOG_FORMAT, LOG_LEVEL
    from database import get_mongo_db

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    summary = migrate_ids(get_mongo_db())
    logger.info("Migration terminée: %s", summary)
