from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

import schemas
from dependencies import get_actor_id, get_note_store
from repositories.notes import NoteStore
from services.filters import filter_notes

router = APIRouter()


@router.get("", summary="Lister et filtrer les notes", response_model=List[schemas.Note])
def list_notes(
    notes: NoteStore = Depends(get_note_store),
    search: Optional[str] = Query(None, description="Recherche dans le titre, le contenu ou les tags"),
    client_id: Optional[str] = Query(None, description="Filtrer par client"),
    created_by: Optional[str] = Query(None, description="Filtrer par auteur"),
    category: Optional[schemas.NoteCategory] = Query(None),
    priority: Optional[schemas.NotePriority] = Query(None),
):
    return filter_notes(
        notes.list(),
        search=search,
        client_id=client_id,
        created_by=created_by,
        category=category.value if category else None,
        priority=priority.value if priority else None,
    )


@router.post("", summary="Créer une note", response_model=schemas.Note, status_code=201)
def create_note(
    note: schemas.NoteCreate,
    notes: NoteStore = Depends(get_note_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    note_data = note.model_dump()
    if not note_data["created_by"] and actor_id:
        note_data["created_by"] = actor_id
    return notes.create(note_data, performed_by=actor_id)


@router.get("/{note_id}", summary="Obtenir une note par son ID", response_model=schemas.Note)
def get_note(note_id: str, notes: NoteStore = Depends(get_note_store)):
    db_note = notes.get_by_id(note_id)
    if not db_note:
        raise HTTPException(status_code=404, detail="Note not found")
    return db_note


@router.put("/{note_id}", summary="Mettre à jour une note", response_model=schemas.Note)
def update_note(
    note_id: str,
    note_update: schemas.NoteUpdate,
    notes: NoteStore = Depends(get_note_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    update_data = note_update.model_dump(exclude_unset=True)
    # Sans auteur explicite, le journal attribue la modification au créateur de la note
    if actor_id and not update_data.get("updated_by"):
        update_data["updated_by"] = actor_id
    updated_note = notes.update(note_id, update_data)
    if not updated_note:
        raise HTTPException(status_code=404, detail="Note not found")
    return updated_note


@router.delete("/{note_id}", summary="Supprimer une note", response_model=schemas.MessageResponse)
def delete_note(
    note_id: str,
    notes: NoteStore = Depends(get_note_store),
    actor_id: Optional[str] = Depends(get_actor_id),
):
    if not notes.delete(note_id, performed_by=actor_id):
        raise HTTPException(status_code=404, detail="Note not found")
    return {"message": "Note deleted successfully"}
