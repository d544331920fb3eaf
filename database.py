# Base de données: configuration et initialisation de la connexion MongoDB.

import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database

from config import MONGO_URI, DB_NAME

logger = logging.getLogger(__name__)

# Noms des collections utilisées par l'application
USERS = "users"
CLIENTS = "clients"
NOTES = "notes"
ACTIVITY_LOGS = "activity_logs"

# Créer le client une seule fois pour être réutilisé à travers l'application.
# La connexion réelle n'est établie qu'à la première requête.
mongo_client = MongoClient(MONGO_URI)


def get_mongo_db() -> Database:
    """
    Retourne une instance de la base de données MongoDB.
    Utilisée comme dépendance FastAPI (remplacée par mongomock dans les tests).
    """
    return mongo_client[DB_NAME]


def create_indexes(db: Database):
    # create_index est idempotent : aucun effet si l'index existe déjà
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    for name in (USERS, CLIENTS, NOTES):
        db[name].create_index([("id", ASCENDING)])
        db[name].create_index([("created_at", DESCENDING)])
    db[CLIENTS].create_index([("created_by", ASCENDING)])
    db[NOTES].create_index([("created_by", ASCENDING)])
    db[ACTIVITY_LOGS].create_index([("entity_type", ASCENDING), ("entity_id", ASCENDING)])
    db[ACTIVITY_LOGS].create_index([("timestamp", DESCENDING)])
    logger.info("Index MongoDB vérifiés sur la base '%s'", db.name)


def utcnow() -> datetime:
    """Horodatage UTC naïf, le format que PyMongo renvoie à la lecture."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def mongo_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """
    Ramène une date à ce que MongoDB conserve: UTC naïf, précision à la
    milliseconde. La valeur comparée avant écriture est alors celle relue.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def id_query(identifier: str) -> dict:
    """
    Filtre de résolution d'identifiant: accepte l'identifiant public (`id`)
    ou l'ObjectId natif (`_id`). Un identifiant qui n'est pas un ObjectId
    valide n'est comparé qu'au champ `id`.
    """
    clauses = [{"id": identifier}]
    if ObjectId.is_valid(identifier):
        clauses.append({"_id": ObjectId(identifier)})
    return {"$or": clauses}


def document_helper(document: dict) -> dict:
    # Convertir un document MongoDB en dict JSON-compatible: `_id` devient `id`
    data = dict(document)
    object_id = data.pop("_id", None)
    data["id"] = str(object_id) if object_id is not None else data.get("id")
    return data
