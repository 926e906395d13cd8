"""
schemas/academic.py

Catalog registration = course + competency + capacity + performance, always
registered and updated together.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator

from schemas.common import CamelModel
from services.forms import CODE, LETTERS, blank, require_match, require_text

AGE_LEVELS = ["3 años", "4 años", "5 años"]
PERFORMANCE_LEVELS = ["Fácil", "Intermedio", "Difícil"]
AREA_PLACEHOLDER = "Seleccionar..."


def _code(v: Optional[str], max_len: Optional[int] = None) -> str:
    v = require_text(v, "Code")
    require_match(v, CODE, "Code may only contain uppercase letters, digits and dashes")
    if max_len is not None and len(v) > max_len:
        raise ValueError(f"Code cannot exceed {max_len} characters")
    return v


def _letters_name(v: Optional[str], min_len: int) -> str:
    v = require_text(v, "Name", min_len=min_len)
    return require_match(v, LETTERS, "Name may only contain letters and spaces")


# =========================================================
# read side (upstream -> console)
# =========================================================

class _Part(CamelModel):
    id: Optional[str] = None
    code: Optional[str] = None
    status: Optional[str] = None
    active: bool = False

    @model_validator(mode="after")
    def _status_to_active(self):
        if self.status is not None:
            self.active = self.status == "ACTIVE"
        return self


class CourseOut(_Part):
    name: Optional[str] = None
    area_curricular: Optional[str] = None
    age_level: Optional[str] = None
    description: Optional[str] = None


class CompetencyOut(_Part):
    name: Optional[str] = None
    description: Optional[str] = None
    order_index: Optional[int] = None


class CapacityOut(CompetencyOut):
    pass


class PerformanceOut(_Part):
    description: Optional[str] = None
    age_level: Optional[str] = None
    order_index: Optional[int] = None


class CatalogEntry(CamelModel):
    institution_id: Optional[str] = None
    course: CourseOut = Field(default_factory=CourseOut)
    competency: CompetencyOut = Field(default_factory=CompetencyOut)
    capacity: CapacityOut = Field(default_factory=CapacityOut)
    performance: PerformanceOut = Field(default_factory=PerformanceOut)


# =========================================================
# write side (form -> upstream)
# =========================================================

class CourseIn(CamelModel):
    id: Optional[str] = None
    code: str
    name: str
    area_curricular: str
    age_level: str
    description: str
    active: Optional[bool] = None

    @field_validator("code")
    @classmethod
    def _check_code(cls, v):
        return _code(v, max_len=15)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v):
        return _letters_name(v, 3)

    @field_validator("area_curricular")
    @classmethod
    def _check_area(cls, v):
        if blank(v) or v.strip() == AREA_PLACEHOLDER:
            raise ValueError("Curricular area is required")
        return v.strip()

    @field_validator("age_level")
    @classmethod
    def _check_age(cls, v):
        if v not in AGE_LEVELS:
            raise ValueError(f"Age level must be one of: {', '.join(AGE_LEVELS)}")
        return v

    @field_validator("description")
    @classmethod
    def _check_description(cls, v):
        return require_text(v, "Description", min_len=20, max_len=500)


class CompetencyIn(CamelModel):
    id: Optional[str] = None
    code: str
    name: str
    description: str
    order_index: int = Field(ge=0)

    @field_validator("code")
    @classmethod
    def _check_code(cls, v):
        return _code(v)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v):
        return _letters_name(v, 5)

    @field_validator("description")
    @classmethod
    def _check_description(cls, v):
        return require_text(v, "Description", min_len=15)


class CapacityIn(CompetencyIn):
    pass


class PerformanceIn(CamelModel):
    id: Optional[str] = None
    code: str
    description: str
    age_level: str
    order_index: int = Field(ge=0)

    @field_validator("code")
    @classmethod
    def _check_code(cls, v):
        return _code(v)

    @field_validator("description")
    @classmethod
    def _check_description(cls, v):
        return require_text(v, "Description", min_len=20)

    @field_validator("age_level")
    @classmethod
    def _check_level(cls, v):
        if v not in PERFORMANCE_LEVELS:
            raise ValueError(f"Level must be one of: {', '.join(PERFORMANCE_LEVELS)}")
        return v


class CatalogRegistrationIn(CamelModel):
    institution_id: Optional[str] = None
    course: CourseIn
    competency: CompetencyIn
    capacity: CapacityIn
    performance: PerformanceIn


StatusFilter = Literal["all", "active", "inactive"]
