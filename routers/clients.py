from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

import schemas
from dependencies import get_actor_id, get_client_store
from repositories.clients import ClientStore
from services.filters import filter_clients

router = APIRouter()

MeetingFilter = Literal["all", "today", "week", "month", "upcoming"]


@router.get("", summary="Lister et filtrer les clients", response_model=List[schemas.Client])
def list_clients(
    clients: ClientStore = Depends(get_client_store),
    search: Optional[str] = Query(None, description="Recherche dans le nom, l'organisation ou l'email"),
    status: Optional[str] = Query(None, description="Filtrer par statut"),
    stage: Optional[str] = Query(None, description="Filtrer par étape du projet"),
    platform: Optional[str] = Query(None, description="Filtrer par plateforme d'origine"),
    created_by: Optional[str] = Query(None, description="Filtrer par créateur"),
    meeting: Optional[MeetingFilter] = Query(None, description="Période de la réunion"),
):
    return filter_clients(
        clients.list(),
        search=search,
        status=status,
        stage=stage,
        platform=platform,
        created_by=created_by,
        meeting=meeting,
    )


@router.post("", summary="Créer un client", response_model=schemas.Client, status_code=201)
def create_client(
    client: schemas.ClientCreate,
    clients: ClientStore = Depends(get_client_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    client_data = client.model_dump()
    if not client_data["created_by"] and actor_id:
        client_data["created_by"] = actor_id
    return clients.create(client_data, performed_by=actor_id)


@router.get("/{client_id}", summary="Obtenir un client par son ID", response_model=schemas.Client)
def get_client(client_id: str, clients: ClientStore = Depends(get_client_store)):
    db_client = clients.get_by_id(client_id)
    if not db_client:
        raise HTTPException(status_code=404, detail="Client not found")
    return db_client


@router.put("/{client_id}", summary="Mettre à jour un client", response_model=schemas.Client)
def update_client(
    client_id: str,
    client_update: schemas.ClientUpdate,
    clients: ClientStore = Depends(get_client_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    update_data = client_update.model_dump(exclude_unset=True)
    if actor_id and not update_data.get("updated_by"):
        update_data["updated_by"] = actor_id
    updated_client = clients.update(client_id, update_data)
    if not updated_client:
        raise HTTPException(status_code=404, detail="Client not found")
    return updated_client


@router.delete("/{client_id}", summary="Supprimer un client", response_model=schemas.MessageResponse)
def delete_client(
    client_id: str,
    clients: ClientStore = Depends(get_client_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    if not clients.delete(client_id, performed_by=actor_id):
        raise HTTPException(status_code=404, detail="Client not found")
    return {"message": "Client deleted successfully"}
