"""
services/forms.py

Validation rules shared by the console forms.

Field-level rules live in the pydantic request schemas (field_validator /
model_validator). Rules that need upstream data or wizard state raise
FormValidationError from the routers; both end up as the same 422 payload.
"""

import re
from datetime import date, datetime
from typing import Dict, Optional

# =========================================================
# patterns
# =========================================================
LETTERS = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑüÜ\s]+$")
PLAIN_LETTERS = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑ\s]+$")
CODE = re.compile(r"^[A-Z0-9\-]+$")
DNI = re.compile(r"^[0-9]{8}$")
MOBILE = re.compile(r"^9[0-9]{8}$")
EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME = re.compile(r"^[a-zA-Z0-9._-]+$")
BASIC_TEXT = re.compile(r"^[a-zA-Z0-9áéíóúÁÉÍÓÚñÑ\s.,;:()\-]+$")
STREET = re.compile(r"^[a-zA-Z0-9áéíóúÁÉÍÓÚñÑ\s.,#-]+$")
DIGITS = re.compile(r"^[0-9]+$")
WEBSITE = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)*/?$", re.IGNORECASE)
LOGO_URL = re.compile(r"^(https?://|www\.|[a-zA-Z0-9])")
TIME = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$")
ACADEMIC_RANGE = re.compile(r"^[0-9]{4}-[0-9]{4}$")


class FormValidationError(Exception):
    """Field errors found outside pydantic (uniqueness, wizard steps, ...)"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


class ErrorCollector:
    """Accumulates field -> message pairs, first message per field wins"""

    def __init__(self):
        self.errors: Dict[str, str] = {}

    def add(self, field: str, message: str):
        self.errors.setdefault(field, message)

    def check(self, condition: bool, field: str, message: str):
        if not condition:
            self.add(field, message)

    def raise_if_any(self):
        if self.errors:
            raise FormValidationError(self.errors)


# =========================================================
# helpers used inside validators
# =========================================================

def blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", "" if value is None else str(value))


def require_text(value: Optional[str], label: str, min_len: int = 0, max_len: Optional[int] = None) -> str:
    """Trim, then enforce presence and length; returns the trimmed value"""
    if blank(value):
        raise ValueError(f"{label} is required")
    text = value.strip()
    if len(text) < min_len:
        raise ValueError(f"{label} must be at least {min_len} characters")
    if max_len is not None and len(text) > max_len:
        raise ValueError(f"{label} cannot exceed {max_len} characters")
    return text


def require_match(value: str, pattern: re.Pattern, message: str) -> str:
    if not pattern.match(value):
        raise ValueError(message)
    return value


def parse_time(value: str) -> tuple:
    """'HH:MM' or 'HH:MM:SS' -> (h, m)"""
    if not TIME.match(value or ""):
        raise ValueError("time must be HH:MM")
    h, m = value.split(":")[:2]
    return int(h), int(m)


def first_of_month(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today.replace(day=1)


def now_hhmm() -> str:
    return datetime.now().strftime("%H:%M")
