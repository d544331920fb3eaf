from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from database import mongo_datetime

# Enums miroirs des valeurs stockées dans MongoDB
class UserRole(str, Enum):
    admin = "admin"
    user = "user"

class NoteCategory(str, Enum):
    general = "general"
    client = "client"
    project = "project"
    meeting = "meeting"
    idea = "idea"

class NotePriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"

class EntityType(str, Enum):
    note = "note"
    client = "client"
    user = "user"

class ActivityAction(str, Enum):
    created = "created"
    updated = "updated"
    deleted = "deleted"

# Étapes du projet et statuts connus. Ce ne sont pas des contraintes:
# n'importe quelle valeur peut être enregistrée.
PROJECT_STAGES = ["Initial Talk", "Proposal Sent", "In Progress", "Completed"]
CLIENT_STATUSES = ["New", "Follow-up", "Meeting", "Negotiating", "Closed"]

def _reject_null(value: Any, info: ValidationInfo) -> Any:
    # Un `null` explicite dans une mise à jour effacerait un champ obligatoire
    if value is None:
        raise ValueError(f"{info.field_name} cannot be null")
    return value

def _unique_tags(tags: List[str]) -> List[str]:
    # Les tags forment un ensemble: on retire les doublons et les vides en gardant l'ordre
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen

# MongoDB stocke en UTC naïf à la milliseconde: on normalise dès la validation
MeetingDate = Annotated[Optional[datetime], AfterValidator(mongo_datetime)]
TagList = Annotated[List[str], AfterValidator(_unique_tags)]

# --- Schémas pour les Utilisateurs ---

class UserBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole = UserRole.user
    avatar: Optional[str] = None

class UserCreate(UserBase):
    # Si absent, le mot de passe par défaut de la configuration est utilisé
    password: Optional[str] = None

class UserUpdate(BaseModel):
    # Pas de validate_default: seuls les champs envoyés sont contrôlés
    model_config = ConfigDict(use_enum_values=True)

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    avatar: Optional[str] = None
    password: Optional[str] = None

    @field_validator("name", "email", "role")
    @classmethod
    def not_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

# Schéma pour la lecture d'un utilisateur (réponse API, sans mot de passe)
class User(UserBase):
    # Les données héritées peuvent contenir des emails non conformes
    email: str
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# --- Schémas pour les Clients ---

class ClientBase(BaseModel):
    name: str = Field(..., min_length=1)
    job_title: str = ""
    email: str = ""
    organization: str = ""
    phone: str = ""
    platform: str = ""
    project_stage: str = PROJECT_STAGES[0]
    status: str = CLIENT_STATUSES[0]
    project_value: float = 0
    meeting_date: MeetingDate = None
    next_action: str = ""
    link: Optional[str] = None

class ClientCreate(ClientBase):
    created_by: str = ""

class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    job_title: Optional[str] = None
    email: Optional[str] = None
    organization: Optional[str] = None
    phone: Optional[str] = None
    platform: Optional[str] = None
    project_stage: Optional[str] = None
    status: Optional[str] = None
    project_value: Optional[float] = None
    meeting_date: MeetingDate = None
    next_action: Optional[str] = None
    link: Optional[str] = None
    updated_by: Optional[str] = None

    # meeting_date et link peuvent être effacés, pas les autres champs
    @field_validator(
        "name",
        "job_title",
        "email",
        "organization",
        "phone",
        "platform",
        "project_stage",
        "status",
        "project_value",
        "next_action",
    )
    @classmethod
    def not_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

class Client(ClientBase):
    id: str
    created_by: str = ""
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# --- Schémas pour les Notes ---

class NoteBase(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    title: str = Field(..., min_length=1)
    content: str = ""
    category: NoteCategory = NoteCategory.general
    priority: NotePriority = NotePriority.medium
    client_id: Optional[str] = None
    meeting_date: MeetingDate = None
    tags: TagList = []

class NoteCreate(NoteBase):
    created_by: str = ""

class NoteUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    category: Optional[NoteCategory] = None
    priority: Optional[NotePriority] = None
    client_id: Optional[str] = None
    meeting_date: MeetingDate = None
    tags: Optional[TagList] = None
    updated_by: Optional[str] = None

    @field_validator("title", "content", "category", "priority", "tags")
    @classmethod
    def not_null(cls, value, info: ValidationInfo):
        return _reject_null(value, info)

class Note(NoteBase):
    id: str
    created_by: str = ""
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# --- Schémas pour le journal d'activité ---

class ActivityLog(BaseModel):
    id: str
    entity_type: EntityType
    entity_id: str
    action: ActivityAction
    # {champ: {"from": ancienne valeur, "to": nouvelle valeur}}
    changes: Optional[Dict[str, Dict[str, Any]]] = None
    performed_by: str
    timestamp: datetime
    metadata: Optional[Dict[str, Any]] = None

# --- Schémas pour l'Authentification ---

class LoginRequest(BaseModel):
    email: str
    password: str

class LoginResponse(User):
    access_token: str
    token_type: str = "bearer"

# --- Schémas pour les rappels et le tableau de bord ---

class Reminder(BaseModel):
    id: str
    type: str = "meeting"
    title: str
    message: str
    client_id: str
    meeting_date: datetime
    urgent: bool

class MessageResponse(BaseModel):
    message: str

class DashboardStats(BaseModel):
    total_clients: int
    total_value: float
    total_users: int
    clients_by_stage: Dict[str, int]
    clients_by_platform: Dict[str, int]
    clients_by_status: Dict[str, int]
    value_by_stage: Dict[str, float]

class CalendarDay(BaseModel):
    day: int
    meetings: List[Client]
