# config.py
"""
Fichier de configuration centralisée pour le backend CRM.
Les valeurs sont lues depuis l'environnement (ou le fichier .env),
avec des valeurs par défaut adaptées au développement local.
"""
import os

from dotenv import load_dotenv

# Charger les variables d'environnement (.env) avant de lire la configuration
load_dotenv()

# --- MongoDB ---
MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/")
DB_NAME = os.getenv("DB_NAME", "crm_backend")

# Configuration de la sécurité JWT (JSON Web Token)
SECRET_KEY = os.getenv("SECRET_KEY", "change_me_crm_secret_key_for_local_development_only")  # IMPORTANT: à remplacer en production
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Coût bcrypt (4 minimum, 12 par défaut dans passlib)
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Mot de passe attribué aux utilisateurs créés sans mot de passe
DEFAULT_USER_PASSWORD = os.getenv("DEFAULT_USER_PASSWORD", "password123")

# Cadence de recalcul des rappels de réunion (en secondes)
ALERT_INTERVAL_SECONDS = int(os.getenv("ALERT_INTERVAL_SECONDS", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Un tableau de rappels non consulté depuis ce délai est abandonné (en minutes)
REMINDER_IDLE_MINUTES = int(os.getenv("REMINDER_IDLE_MINUTES", "30"))
