# main.py: Point d'entrée pour le serveur uvicorn.
# Ce fichier configure les logs puis importe l'application créée par l'app factory.
#   uvicorn main:app --reload

import logging

from config import LOG_FORMAT, LOG_LEVEL

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

from app_factory import create_app  # qui se trouve dans app_factory.py

app = create_app()
