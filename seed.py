"""
Données de démonstration: utilisateurs et clients insérés seulement si les
collections correspondantes sont vides. Utilisable via POST /seed ou en script:

    python seed.py
"""
import logging
from datetime import timedelta

from pymongo.database import Database

from database import utcnow
from repositories.activity import ActivityLogger
from repositories.clients import ClientStore
from repositories.users import UserStore

logger = logging.getLogger(__name__)

SEED_PASSWORD = "password123"

SEED_USERS = [
    {
        "name": "John Doe",
        "email": "john@company.com",
        "role": "admin",
        "avatar": "https://images.unsplash.com/photo-1472099645785-5658abf4ff4e?w=150&h=150&fit=crop&crop=face",
    },
    {
        "name": "Sarah Smith",
        "email": "sarah@company.com",
        "role": "user",
        "avatar": "https://images.unsplash.com/photo-1494790108755-2616b612b786?w=150&h=150&fit=crop&crop=face",
    },
    {
        "name": "Mike Johnson",
        "email": "mike@company.com",
        "role": "user",
        "avatar": "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=150&h=150&fit=crop&crop=face",
    },
]

# `creator` est l'index dans SEED_USERS, `meeting_in` le décalage par rapport à maintenant
SEED_CLIENTS = [
    {
        "name": "Sarah Johnson",
        "job_title": "Marketing Director",
        "email": "sarah.johnson@techcorp.com",
        "organization": "TechCorp Solutions",
        "phone": "+1 (555) 123-4567",
        "platform": "LinkedIn",
        "project_stage": "In Progress",
        "project_value": 15000,
        "status": "Meeting",
        "meeting_in": timedelta(days=2),
        "next_action": "Send revised proposal with updated timeline and discuss budget adjustments",
        "link": "https://linkedin.com/in/sarahjohnson",
        "creator": 0,
    },
    {
        "name": "Michael Chen",
        "job_title": "CEO",
        "email": "michael@startupventure.io",
        "organization": "StartupVenture",
        "phone": "+1 (555) 987-6543",
        "platform": "Upwork",
        "project_stage": "Proposal Sent",
        "project_value": 8500,
        "status": "Follow-up",
        "meeting_in": timedelta(hours=20),
        "next_action": "Follow up on proposal status and answer technical questions about implementation",
        "link": "https://upwork.com/freelancers/~michaelchen",
        "creator": 1,
    },
    {
        "name": "Emily Rodriguez",
        "job_title": "Product Manager",
        "email": "emily.r@innovatetech.com",
        "organization": "InnovateTech",
        "phone": "+1 (555) 456-7890",
        "platform": "Direct Contact",
        "project_stage": "Completed",
        "project_value": 12000,
        "status": "Closed",
        "meeting_in": timedelta(days=-2),
        "next_action": "Schedule project review and discuss future opportunities for ongoing maintenance",
        "link": "https://innovatetech.com/team/emily",
        "creator": 0,
    },
    {
        "name": "David Thompson",
        "job_title": "Operations Manager",
        "email": "david.thompson@logistics.com",
        "organization": "Global Logistics Inc",
        "phone": "+1 (555) 321-0987",
        "platform": "Fiverr",
        "project_stage": "Initial Talk",
        "project_value": 5500,
        "status": "New",
        "meeting_in": timedelta(minutes=30),
        "next_action": "Prepare initial project scope and cost estimate for logistics optimization system",
        "link": "https://fiverr.com/davidthompson",
        "creator": 2,
    },
    {
        "name": "Lisa Wang",
        "job_title": "CTO",
        "email": "lisa.wang@fintech.co",
        "organization": "FinTech Solutions",
        "phone": "+1 (555) 654-3210",
        "platform": "Referral",
        "project_stage": "In Progress",
        "project_value": 22000,
        "status": "Negotiating",
        "meeting_in": timedelta(days=7),
        "next_action": "Present technical architecture and discuss implementation phases for payment gateway integration",
        "link": "https://fintech.co/team/lisa-wang",
        "creator": 1,
    },
    {
        "name": "Robert Kim",
        "job_title": "Founder",
        "email": "robert@ecommerce.shop",
        "organization": "E-Commerce Plus",
        "phone": "+1 (555) 789-0123",
        "platform": "LinkedIn",
        "project_stage": "Proposal Sent",
        "project_value": 18500,
        "status": "Follow-up",
        "meeting_in": timedelta(hours=4),
        "next_action": "Address concerns about project timeline and deliverables for e-commerce platform redesign",
        "link": "https://linkedin.com/in/robertkim",
        "creator": 0,
    },
]


def seed_database(db: Database) -> dict:
    """Insère les données de démonstration dans les collections vides. Retourne le nombre d'insertions."""
    activity = ActivityLogger(db)
    users = UserStore(db, activity)
    clients = ClientStore(db, activity)
    inserted = {"users": 0, "clients": 0}

    if users.count() == 0:
        logger.info("Insertion des utilisateurs de démonstration...")
        for user in SEED_USERS:
            users.create({**user, "password": SEED_PASSWORD})
        inserted["users"] = len(SEED_USERS)

    if clients.count() == 0:
        logger.info("Insertion des clients de démonstration...")
        # Les créateurs sont les utilisateurs de démonstration s'ils existent, sinon le premier utilisateur
        creators = [users.get_by_email(user["email"]) for user in SEED_USERS]
        fallback = next(iter(users.list()), None)
        now = utcnow()
        for seed in SEED_CLIENTS:
            client = {key: value for key, value in seed.items() if key not in ("meeting_in", "creator")}
            creator = creators[seed["creator"]] or fallback
            client["created_by"] = creator["id"] if creator else ""
            client["meeting_date"] = now + seed["meeting_in"]
            clients.create(client)
        inserted["clients"] = len(SEED_CLIENTS)

    logger.info("Initialisation de la base terminée: %s", inserted)
    return inserted


if __name__ == "__main__":
    from config import LOG_FORMAT, LOG_LEVEL
    from database import get_mongo_db

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    seed_database(get_mongo_db())
