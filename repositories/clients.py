from database import CLIENTS
from repositories.base import EntityStore


class ClientStore(EntityStore):
    collection_name = CLIENTS
    entity_type = "client"
    tracked_fields = (
        "name",
        "email",
        "organization",
        "platform",
        "project_stage",
        "status",
        "project_value",
        "meeting_date",
        "next_action",
    )
    metadata_fields = ("name", "organization", "status")

    def list_with_meetings(self):
        """Clients ayant une date de réunion, pour les rappels et le calendrier."""
        return self.list({"meeting_date": {"$ne": None}})
