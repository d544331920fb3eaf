from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

import schemas
from dependencies import get_actor_id, get_reminder_service, get_user_store
from repositories.users import UserStore
from services.alerts import ReminderService

router = APIRouter()


@router.get("", summary="Lister tous les utilisateurs", response_model=List[schemas.User])
def list_users(users: UserStore = Depends(get_user_store)):
    return users.list()


@router.post("", summary="Créer un nouvel utilisateur", response_model=schemas.User, status_code=201)
def create_user(
    user: schemas.UserCreate,
    users: UserStore = Depends(get_user_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    # EmailAlreadyUsed est converti en 400 par le gestionnaire d'erreurs
    return users.create(user.model_dump(), performed_by=actor_id)


@router.get("/{user_id}", summary="Obtenir un utilisateur par son ID", response_model=schemas.User)
def get_user(user_id: str, users: UserStore = Depends(get_user_store)):
    db_user = users.get_by_id(user_id)
    if not db_user:
        raise HTTPException(status_code=404, detail="User not found")
    return db_user


@router.put("/{user_id}", summary="Mettre à jour un utilisateur", response_model=schemas.User)
def update_user(
    user_id: str,
    user_update: schemas.UserUpdate,
    users: UserStore = Depends(get_user_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    update_data = user_update.model_dump(exclude_unset=True)
    updated_user = users.update(user_id, update_data, performed_by=actor_id)
    if not updated_user:
        raise HTTPException(status_code=404, detail="User not found")
    return updated_user


@router.delete("/{user_id}", summary="Supprimer un utilisateur", response_model=schemas.MessageResponse)
def delete_user(
    user_id: str,
    users: UserStore = Depends(get_user_store),
    actor_id: Optional[str] = Depends(get_actor_id),
    reminders: ReminderService = Depends(get_reminder_service),
):
    # Un utilisateur authentifié ne peut pas supprimer son propre compte (SelfDeletionForbidden -> 400)
    if not users.delete(user_id, performed_by=actor_id):
        raise HTTPException(status_code=404, detail="User not found")
    # Ses rappels de session n'ont plus de destinataire
    reminders.forget(user_id)
    return {"message": "User deleted successfully"}
