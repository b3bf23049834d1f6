"""Worker ("travailleur") records stored in the Supabase table."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Department(str, Enum):
    RESSOURCES_HUMAINES = "Ressources Humaines"
    INFORMATIQUE = "Informatique"
    FINANCE = "Finance"
    MARKETING = "Marketing"
    PROTOCOLE = "Protocole"
    LOGISTIQUE = "Logistique"
    GESTION_DE_STOCK = "Gestion de stock"
    RESTAURATION = "Restauration"
    FORMATEUR = "Formateur"
    SECRETAIRE = "Secretaire"
    JURIDIQUE = "Juridique"
    ASSISTANT = "Assistant(e)"
    NETTOYAGE = "Nettoyage"


class EducationLevel(str, Enum):
    SECONDAIRE = "Secondaire"
    D6 = "D6"
    G3 = "G3"
    L2 = "L2"
    MASTER = "Master"
    DOCTORAT = "Doctorat"
    AUTRE = "Autre"


class Gender(str, Enum):
    MASCULIN = "Masculin"
    FEMININ = "Féminin"
    AUTRE = "Autre"


class WorkerFormData(BaseModel):
    """Fields a user fills in to create or edit a worker."""

    model_config = ConfigDict(str_strip_whitespace=True)

    nom: str = Field(min_length=1)
    postnom: str = Field(min_length=1)
    prenom: str = Field(min_length=1)
    telephone: str = Field(min_length=1)
    departement: Department
    sexe: Gender
    niveau_etudes: EducationLevel
    date_adhesion: date


class WorkerUpdate(BaseModel):
    """Mutable worker fields; unset fields are left untouched by an update."""

    nom: str | None = Field(default=None, min_length=1)
    postnom: str | None = Field(default=None, min_length=1)
    prenom: str | None = Field(default=None, min_length=1)
    telephone: str | None = Field(default=None, min_length=1)
    departement: Department | None = None
    sexe: Gender | None = None
    niveau_etudes: EducationLevel | None = None
    date_adhesion: date | None = None


class Worker(WorkerFormData):
    """A stored worker. ``id``, ``created_by`` and ``created_at`` never change after insert."""

    id: str
    created_by: str
    created_at: datetime


DEFAULT_BADGE_COLOR = "#6b7280"

DEPARTMENT_COLORS: dict[Department, str] = {
    Department.RESSOURCES_HUMAINES: "#3b82f6",
    Department.INFORMATIQUE: "#8b5cf6",
    Department.FINANCE: "#10b981",
    Department.MARKETING: "#f59e0b",
    Department.PROTOCOLE: "#ef4444",
    Department.LOGISTIQUE: "#06b6d4",
    Department.GESTION_DE_STOCK: "#8b5cf6",
    Department.RESTAURATION: "#f59e0b",
    Department.FORMATEUR: "#10b981",
    Department.SECRETAIRE: "#3b82f6",
    Department.JURIDIQUE: "#ef4444",
    Department.ASSISTANT: "#06b6d4",
    Department.NETTOYAGE: "#6b7280",
}

EDUCATION_COLORS: dict[EducationLevel, str] = {
    EducationLevel.SECONDAIRE: "#6b7280",
    EducationLevel.D6: "#3b82f6",
    EducationLevel.G3: "#10b981",
    EducationLevel.L2: "#8b5cf6",
    EducationLevel.MASTER: "#f59e0b",
    EducationLevel.DOCTORAT: "#ef4444",
    EducationLevel.AUTRE: "#06b6d4",
}

GENDER_COLORS: dict[Gender, str] = {
    Gender.MASCULIN: "#3b82f6",
    Gender.FEMININ: "#ec4899",
    Gender.AUTRE: "#6b7280",
}
