from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from pymongo.database import Database

import schemas
from database import get_mongo_db
from repositories.activity import ActivityLogger
from repositories.clients import ClientStore
from repositories.notes import NoteStore
from repositories.users import UserStore
from services.alerts import ReminderService
from utils.security import decode_access_token

# Le token est facultatif: les routes restent ouvertes, il sert à identifier l'auteur d'une action
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# --- DÉPENDANCES D'ACCÈS AUX DONNÉES ---

def get_activity_logger(db: Database = Depends(get_mongo_db)) -> ActivityLogger:
    return ActivityLogger(db)


def get_user_store(db: Database = Depends(get_mongo_db), activity: ActivityLogger = Depends(get_activity_logger)) -> UserStore:
    return UserStore(db, activity)


def get_client_store(db: Database = Depends(get_mongo_db), activity: ActivityLogger = Depends(get_activity_logger)) -> ClientStore:
    return ClientStore(db, activity)


def get_note_store(db: Database = Depends(get_mongo_db), activity: ActivityLogger = Depends(get_activity_logger)) -> NoteStore:
    return NoteStore(db, activity)


def get_reminder_service(request: Request) -> ReminderService:
    return request.app.state.reminders


# --- DÉPENDANCES D'IDENTIFICATION ---

def get_optional_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserStore = Depends(get_user_store),
) -> Optional[dict]:
    """Utilisateur porté par le token Bearer, ou None si absent ou invalide."""
    if not token:
        return None
    user_id = decode_access_token(token)
    if not user_id:
        return None
    return users.get_by_id(user_id)


def get_current_user(current_user: Optional[dict] = Depends(get_optional_current_user)) -> schemas.User:
    """Exige un token valide."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.User(**current_user)


def get_actor_id(current_user: Optional[dict] = Depends(get_optional_current_user)) -> Optional[str]:
    return current_user["id"] if current_user else None
