import logging
from typing import Optional

from config import DEFAULT_USER_PASSWORD
from database import USERS
from errors import EmailAlreadyUsed, SelfDeletionForbidden
from repositories.base import EntityStore
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserStore(EntityStore):
    collection_name = USERS
    entity_type = "user"
    # Le mot de passe n'est jamais comparé ni recopié dans le journal
    tracked_fields = ("name", "email", "role", "avatar")
    metadata_fields = ("name", "email", "role")

    def _serialize(self, document: dict) -> dict:
        user = super()._serialize(document)
        user.pop("password", None)
        return user

    def get_by_email(self, email: str) -> Optional[dict]:
        document = self.collection.find_one({"email": email})
        return self._serialize(document) if document else None

    def create(self, data: dict, performed_by: Optional[str] = None) -> dict:
        if self.collection.find_one({"email": data["email"]}):
            raise EmailAlreadyUsed(data["email"])

        user_data = dict(data)
        user_data["password"] = hash_password(user_data.get("password") or DEFAULT_USER_PASSWORD)
        return super().create(user_data, performed_by=performed_by)

    def update(self, identifier: str, data: dict, performed_by: Optional[str] = None) -> Optional[dict]:
        update_data = dict(data)

        # Si un nouveau mot de passe est fourni, le hasher; sinon ne pas effacer l'existant
        if update_data.get("password"):
            update_data["password"] = hash_password(update_data["password"])
        else:
            update_data.pop("password", None)

        email = update_data.get("email")
        if email:
            existing = self.collection.find_one({"email": email})
            current = self._find(identifier)
            if existing and (current is None or existing["_id"] != current["_id"]):
                raise EmailAlreadyUsed(email)

        return super().update(identifier, update_data, performed_by=performed_by)

    def delete(self, identifier: str, performed_by: Optional[str] = None) -> bool:
        document = self._find(identifier)
        if document and performed_by and performed_by in (document.get("id"), str(document["_id"])):
            raise SelfDeletionForbidden()
        return super().delete(identifier, performed_by=performed_by)

    def authenticate(self, email: str, password: str) -> Optional[dict]:
        """
        Vérifie les identifiants. Retourne l'utilisateur (sans mot de passe) ou None,
        sans distinguer un email inconnu d'un mot de passe erroné.
        """
        document = self.collection.find_one({"email": email})
        if not document or not document.get("password") or not verify_password(password, document["password"]):
            logger.warning("Échec de connexion pour %s", email)
            return None
        return self._serialize(document)
