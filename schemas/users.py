from enum import Enum
from typing import Optional

from pydantic import field_validator

from schemas.common import CamelModel
from services.forms import DNI, EMAIL, LETTERS, MOBILE, USERNAME, blank, digits_only


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    PADRE = "PADRE"
    MADRE = "MADRE"
    DIRECTOR = "DIRECTOR"
    AUXILIAR = "AUXILIAR"
    TUTOR = "TUTOR"


ROLE_LABELS = {
    "ADMIN": "Administrador",
    "DIRECTOR": "Director",
    "AUXILIAR": "Auxiliar",
    "PROFESOR": "Profesor",
    "TUTOR": "Tutor",
    "PADRE": "Padre",
    "MADRE": "Madre",
}

DOCUMENT_TYPES = ["DNI", "CARNET_EXTRANJERIA", "PASAPORTE"]


class User(CamelModel):
    user_id: Optional[str] = None
    institution_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    user_name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


# =========================================================
# person field rules (users form, director / auxiliaries in institutions)
# =========================================================

def check_name(v: Optional[str], label: str) -> str:
    if blank(v):
        raise ValueError(f"{label} is required")
    v = v.strip()
    if not 2 <= len(v) <= 50:
        raise ValueError(f"{label} must be between 2 and 50 characters")
    if not LETTERS.match(v):
        raise ValueError(f"{label} may only contain letters and spaces")
    return v


def check_document_type(v: str) -> str:
    if v not in DOCUMENT_TYPES:
        raise ValueError(f"Document type must be one of: {', '.join(DOCUMENT_TYPES)}")
    return v


def check_document(v: Optional[str]) -> str:
    v = digits_only(v)
    if not DNI.match(v):
        raise ValueError("Document number must have exactly 8 digits")
    return v


def check_phone(v: Optional[str]) -> str:
    v = digits_only(v)
    if not MOBILE.match(v):
        raise ValueError("Phone must have 9 digits and start with 9")
    return v


def check_email(v: Optional[str]) -> str:
    if blank(v) or not EMAIL.match(v.strip()):
        raise ValueError("Invalid email address")
    return v.strip()


def check_username(v: Optional[str]) -> str:
    if blank(v):
        raise ValueError("Username is required")
    v = v.strip()
    if not 3 <= len(v) <= 20:
        raise ValueError("Username must be between 3 and 20 characters")
    if not USERNAME.match(v):
        raise ValueError("Username may only contain letters, digits, dots, dashes and underscores")
    return v


class PersonIn(CamelModel):
    """Fields every user-like form shares"""
    first_name: str
    last_name: str
    document_type: str = "DNI"
    document_number: str
    phone: str
    address: Optional[str] = None
    email: str

    @field_validator("first_name")
    @classmethod
    def _first(cls, v):
        return check_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def _last(cls, v):
        return check_name(v, "Last name")

    @field_validator("document_type")
    @classmethod
    def _doc_type(cls, v):
        return check_document_type(v)

    @field_validator("document_number", mode="before")
    @classmethod
    def _doc(cls, v):
        return check_document(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, v):
        return check_phone(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        return check_email(v)


class UserCreate(PersonIn):
    institution_id: str
    user_name: str
    role: UserRole
    status: str = "ACTIVE"

    @field_validator("institution_id")
    @classmethod
    def _institution(cls, v):
        if blank(v):
            raise ValueError("Institution is required")
        return v

    @field_validator("user_name")
    @classmethod
    def _user_name(cls, v):
        return check_username(v)


class UserUpdate(CamelModel):
    """Partial update: only provided fields are validated and sent"""
    institution_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    user_name: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("institution_id")
    @classmethod
    def _institution(cls, v):
        if v is not None and blank(v):
            raise ValueError("Institution is required")
        return v

    @field_validator("first_name")
    @classmethod
    def _first(cls, v):
        return None if v is None else check_name(v, "First name")

    @field_validator("last_name")
    @classmethod
    def _last(cls, v):
        return None if v is None else check_name(v, "Last name")

    @field_validator("document_type")
    @classmethod
    def _doc_type(cls, v):
        return None if v is None else check_document_type(v)

    @field_validator("document_number", mode="before")
    @classmethod
    def _doc(cls, v):
        return None if v is None else check_document(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _phone(cls, v):
        return None if v is None else check_phone(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v):
        return None if v is None else check_email(v)

    @field_validator("user_name")
    @classmethod
    def _user_name(cls, v):
        return None if v is None else check_username(v)
