from database import NOTES
from repositories.base import EntityStore


class NoteStore(EntityStore):
    collection_name = NOTES
    entity_type = "note"
    # Seuls ces champs produisent une entrée "updated" dans le journal
    tracked_fields = ("title", "content", "category", "priority")
    metadata_fields = ("title", "category", "priority")

    def list_for_client(self, client_id: str):
        return self.list({"client_id": client_id})
