"""
schemas/common.py

- Schemas reused across the whole console API
- Pydantic v2
- Contents:
  1) error response: ErrorDetail, ErrorResponse
  2) pagination meta: MetaInfo, make_meta()
  3) success wrapper: ok()
  4) CamelModel base for upstream DTOs, Status flag
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from math import ceil
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =========================================================
# 0) camelCase base
# =========================================================

class CamelModel(BaseModel):
    """
    Upstream services speak camelCase JSON.
    - accepts both studentId and student_id on input
    - model_dump(by_alias=True) produces the upstream shape
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_upstream(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class Status(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# =========================================================
# 1) error response
# =========================================================

class ErrorDetail(BaseModel):
    """Smallest unit carrying an error code and message"""
    code: str = Field(..., description="error code (VALIDATION_ERROR, UPSTREAM_ERROR, ...)")
    message: str = Field(..., description="human readable message")
    fields: Optional[Dict[str, str]] = Field(
        default=None, description="field path -> message, validation errors only"
    )
    service: Optional[str] = None


class ErrorResponse(BaseModel):
    """Shape returned by every global error handler"""
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(extra="ignore")


# =========================================================
# 2) pagination
# =========================================================

class MetaInfo(BaseModel):
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)
    pages: int = Field(..., ge=1)
    sort: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


def make_meta(total: int, page: int, size: int, sort: Optional[str] = None) -> MetaInfo:
    """pages is at least 1 even for an empty list"""
    pages = max(1, ceil(total / max(1, size)))
    return MetaInfo(total=total, page=page, size=size, pages=pages, sort=sort)


# =========================================================
# 3) success wrapper
# =========================================================

def ok(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body
