from fastapi import APIRouter, Depends
from pymongo.database import Database

from database import get_mongo_db
from seed import seed_database

router = APIRouter()


@router.post("", summary="Insérer les données de démonstration")
def seed(db: Database = Depends(get_mongo_db)):
    """N'agit que sur les collections vides: sans effet si des données existent déjà."""
    inserted = seed_database(db)
    return {"message": "Database seeded successfully", **inserted}
