# Erreurs métier converties en réponses JSON {"error": ...} par app_factory.py


class ValidationFailure(Exception):
    """Requête invalide au regard des règles métier (HTTP 400)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmailAlreadyUsed(ValidationFailure):
    def __init__(self, email: str):
        super().__init__(f"Email already in use: {email}")
        self.email = email


class SelfDeletionForbidden(ValidationFailure):
    def __init__(self):
        super().__init__("You cannot delete your own account")
