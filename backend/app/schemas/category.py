"""Pydantic schemas for Categories."""
from __future__ import annotations
from pydantic import BaseModel, Field


class CategoryIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CategoryOut(BaseModel):
    id: int
    name: str

    model_config = {"from_attributes": True}


class CategoryWithCount(CategoryOut):
    event_count: int
