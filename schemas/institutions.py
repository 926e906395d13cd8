"""
schemas/institutions.py

Institutions with their address, contact methods, shifts, classrooms and staff.
Creation sends the director and auxiliaries along with the institution
(POST /with-users); incomplete optional rows are dropped before validation.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import CamelModel
from schemas.users import PersonIn, User
from services.forms import (
    DIGITS, EMAIL, LETTERS, LOGO_URL, MOBILE, STREET, WEBSITE, blank, parse_time,
)


class InstitutionType(str, Enum):
    PUBLICA = "PUBLICA"
    PRIVADA = "PRIVADA"
    PARROQUIAL = "PARROQUIAL"


class InstitutionLevel(str, Enum):
    INICIAL = "INICIAL"
    INICIAL_PRIMARIA = "INICIAL_PRIMARIA"
    INICIAL_PRIMARIA_SECUNDARIA = "INICIAL_PRIMARIA_SECUNDARIA"


class Gender(str, Enum):
    MASCULINO = "MASCULINO"
    FEMENINO = "FEMENINO"
    MIXTO = "MIXTO"


GRADING_TYPES = ["NUMERICO", "ALFABETICO"]
CLASSROOM_TYPES = ["POR_EDAD", "POR_GRADO", "MIXTO"]
CONTACT_TYPES = ["TELEFONO", "CELULAR", "WHATSAPP", "EMAIL", "WEBSITE"]
PHONE_CONTACTS = {"TELEFONO", "CELULAR", "WHATSAPP"}

# shift -> (earliest entry, latest exit) in minutes after midnight
SHIFTS = {
    "MAÑANA": (7 * 60, 13 * 60),
    "TARDE": (13 * 60, 18 * 60),
}


# =========================================================
# read side
# =========================================================

class Classroom(CamelModel):
    classroom_id: Optional[str] = None
    classroom_name: Optional[str] = None
    classroom_age: Optional[str] = None
    capacity: Optional[int] = None
    color: Optional[str] = None
    grade_level: Optional[str] = None
    section: Optional[str] = None
    institution_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None


class InstitutionInformation(CamelModel):
    institution_name: Optional[str] = None
    code_institution: Optional[str] = None
    modular_code: Optional[str] = None
    institution_type: Optional[str] = None
    institution_level: Optional[str] = None
    gender: Optional[str] = None
    slogan: Optional[str] = None
    logo_url: Optional[str] = None


class Address(CamelModel):
    department: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None


class ContactMethod(CamelModel):
    type: Optional[str] = None
    value: Optional[str] = None


class Schedule(CamelModel):
    type: Optional[str] = None
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None


class Institution(CamelModel):
    institution_id: Optional[str] = None
    status: Optional[str] = None
    institution_information: InstitutionInformation = InstitutionInformation()
    address: Address = Address()
    contact_methods: List[ContactMethod] = []
    grading_type: Optional[str] = None
    classroom_type: Optional[str] = None
    schedules: List[Schedule] = []
    classrooms: List[Classroom] = []
    classroom_ids: List[str] = []
    director_id: Optional[str] = None
    director: Optional[User] = None
    auxiliary_ids: List[str] = []
    auxiliaries: List[User] = []
    ugel: Optional[str] = None
    dre: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None

    @field_validator("institution_information", "address", mode="before")
    @classmethod
    def _null_obj(cls, v):
        return v or {}

    @field_validator("contact_methods", "schedules", "classrooms", "classroom_ids",
                     "auxiliary_ids", "auxiliaries", mode="before")
    @classmethod
    def _null_list(cls, v):
        return v or []

    @property
    def name(self) -> Optional[str]:
        return self.institution_information.institution_name


# =========================================================
# write side
# =========================================================

class InstitutionInformationIn(CamelModel):
    institution_name: str
    code_institution: str
    modular_code: str
    institution_type: InstitutionType
    institution_level: InstitutionLevel
    gender: Gender
    slogan: Optional[str] = None
    logo_url: str

    @field_validator("institution_name")
    @classmethod
    def _name(cls, v):
        if blank(v) or len(v.strip()) < 5:
            raise ValueError("Institution name must be at least 5 characters")
        return v.strip()

    @field_validator("code_institution")
    @classmethod
    def _code(cls, v):
        if not DIGITS.match(v or "") or len(v) != 8:
            raise ValueError("Institution code must have exactly 8 digits")
        return v

    @field_validator("modular_code")
    @classmethod
    def _modular(cls, v):
        if not DIGITS.match(v or "") or len(v) != 7:
            raise ValueError("Modular code must have exactly 7 digits")
        return v

    @field_validator("slogan")
    @classmethod
    def _slogan(cls, v):
        if blank(v):
            return None
        if len(v.strip()) < 5:
            raise ValueError("Slogan must be at least 5 characters")
        return v.strip()

    @field_validator("logo_url")
    @classmethod
    def _logo(cls, v):
        if blank(v):
            raise ValueError("Logo URL is required")
        v = v.strip()
        if not LOGO_URL.match(v) or " " in v:
            raise ValueError("Logo must be a valid URL")
        return v


class AddressIn(CamelModel):
    department: str
    province: str
    district: str
    street: str
    postal_code: Optional[str] = None

    @field_validator("department", "province", "district")
    @classmethod
    def _place(cls, v, info):
        label = info.field_name.capitalize()
        if blank(v):
            raise ValueError(f"{label} is required")
        if not LETTERS.match(v.strip()):
            raise ValueError(f"{label} may only contain letters and spaces")
        return v.strip()

    @field_validator("street")
    @classmethod
    def _street(cls, v):
        if blank(v):
            raise ValueError("Street is required")
        if not STREET.match(v.strip()):
            raise ValueError("Street contains invalid characters")
        return v.strip()

    @field_validator("postal_code")
    @classmethod
    def _postal(cls, v):
        if blank(v):
            return None
        if not DIGITS.match(v.strip()):
            raise ValueError("Postal code may only contain digits")
        return v.strip()


class ContactMethodIn(CamelModel):
    type: str
    value: str

    @model_validator(mode="after")
    def _value_for_type(self):
        kind = self.type.upper()
        if kind not in CONTACT_TYPES:
            raise ValueError(f"Contact type must be one of: {', '.join(CONTACT_TYPES)}")
        value = self.value.strip()
        if kind in PHONE_CONTACTS:
            phone = value.replace(" ", "").replace("-", "")
            if not MOBILE.match(phone):
                raise ValueError("Phone numbers must have 9 digits and start with 9")
            value = phone
        elif kind == "EMAIL" and not EMAIL.match(value):
            raise ValueError("Invalid email address")
        elif kind == "WEBSITE" and not WEBSITE.match(value):
            raise ValueError("Invalid website URL")
        self.type, self.value = kind, value
        return self


class ScheduleIn(CamelModel):
    type: str
    entry_time: str
    exit_time: str

    @model_validator(mode="after")
    def _within_shift(self):
        if self.type not in SHIFTS:
            raise ValueError(f"Shift must be one of: {', '.join(SHIFTS)}")
        eh, em = parse_time(self.entry_time)
        xh, xm = parse_time(self.exit_time)
        entry, exit_ = eh * 60 + em, xh * 60 + xm
        if entry >= exit_:
            raise ValueError("Entry time must be before exit time")
        lo, hi = SHIFTS[self.type]
        if entry < lo or exit_ > hi:
            raise ValueError(
                f"{self.type} shift runs from {lo // 60:02d}:00 to {hi // 60:02d}:00"
            )
        return self


class ClassroomIn(CamelModel):
    classroom_name: str
    classroom_age: str
    capacity: int = Field(gt=0)
    color: Optional[str] = None

    @field_validator("classroom_name", "classroom_age")
    @classmethod
    def _required(cls, v, info):
        if blank(v):
            raise ValueError(f"{info.field_name} is required")
        return v.strip()


class ClassroomCreate(ClassroomIn):
    institution_id: Optional[str] = None


class StaffIn(PersonIn):
    role: str = "DIRECTOR"


def _complete_rows(rows: Any, keys) -> Any:
    """Drop rows the form left half-filled; they are not sent upstream"""
    if not isinstance(rows, list):
        return rows
    kept = []
    for row in rows:
        if not isinstance(row, dict):
            kept.append(row)
            continue
        values = [row.get(k) if k in row else row.get(_snake(k)) for k in keys]
        if all(v not in (None, "", 0) and str(v).strip() for v in values):
            kept.append(row)
    return kept


def _snake(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)


class InstitutionSections(CamelModel):
    """Editable sections, shared by create and update"""
    institution_information: InstitutionInformationIn
    address: AddressIn
    contact_methods: List[ContactMethodIn]
    grading_type: str
    classroom_type: str
    schedules: List[ScheduleIn]
    ugel: Optional[str] = None
    dre: Optional[str] = None

    @field_validator("contact_methods", mode="before")
    @classmethod
    def _contacts_rows(cls, v):
        return _complete_rows(v, ("type", "value"))

    @field_validator("schedules", mode="before")
    @classmethod
    def _schedule_rows(cls, v):
        return _complete_rows(v, ("type", "entryTime", "exitTime"))

    @field_validator("contact_methods")
    @classmethod
    def _contacts(cls, v):
        if not v:
            raise ValueError("At least one contact method is required")
        return v

    @field_validator("schedules")
    @classmethod
    def _schedules(cls, v):
        if not 1 <= len(v) <= 2:
            raise ValueError("One or two shifts are required")
        types = [s.type for s in v]
        if len(set(types)) != len(types):
            raise ValueError("Each shift can only be configured once")
        return v

    @field_validator("grading_type")
    @classmethod
    def _grading(cls, v):
        if v not in GRADING_TYPES:
            raise ValueError(f"Grading type must be one of: {', '.join(GRADING_TYPES)}")
        return v

    @field_validator("classroom_type")
    @classmethod
    def _classroom_type(cls, v):
        if v not in CLASSROOM_TYPES:
            raise ValueError(f"Classroom type must be one of: {', '.join(CLASSROOM_TYPES)}")
        return v


class InstitutionCreate(InstitutionSections):
    """POST /with-users: staff travels as full user objects"""
    classrooms: List[ClassroomIn] = []
    director: StaffIn
    auxiliaries: List[StaffIn] = []

    @field_validator("classrooms", mode="before")
    @classmethod
    def _classroom_rows(cls, v):
        return _complete_rows(v, ("classroomName", "classroomAge", "capacity"))


class InstitutionUpdate(InstitutionSections):
    """PUT: staff is referenced by user id only"""
    director_id: str
    auxiliary_ids: List[str] = []

    @field_validator("director_id")
    @classmethod
    def _director(cls, v):
        if blank(v):
            raise ValueError("Director is required")
        return v.strip()

    @field_validator("auxiliary_ids")
    @classmethod
    def _auxiliaries(cls, v):
        return [i for i in dict.fromkeys(v) if not blank(i)]


class DirectorChange(CamelModel):
    director_id: str = Field(min_length=1)
