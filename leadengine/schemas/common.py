"""Common schema module."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    limit: int = Field(default=50, ge=1, le=500)
    offset: int = Field(default=0, ge=0)
    total: int = 0
    has_more: bool = False
