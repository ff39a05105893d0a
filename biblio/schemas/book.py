#!/usr/bin/env python
"""
    Book Schemas for Biblio,
    the request bodies accepted for books and the shapes returned.

    `available_copies` is never accepted from a client: it starts at
    `total_copies` and afterwards only the inventory coordinator moves it.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from datetime import date, datetime
from pydantic import BaseModel, Field
from typing import List, Optional
from .category import Category

class BookSummary(BaseModel):
    id: int
    title: str
    author: str
    total_copies: int
    available_copies: int

    class Config:
        from_attributes = True

class Book(BookSummary):
    publication_date: date
    created_at: Optional[datetime] = None
    category_ids: List[int] = []
    categories: List[Category] = []

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 1,
                "title": "The Hobbit",
                "author": "J.R.R. Tolkien",
                "publication_date": "1937-09-21",
                "total_copies": 14,
                "available_copies": 7,
                "created_at": "2025-01-01T12:00:00Z",
                "category_ids": [2],
                "categories": [{"id": 2, "name": "Fantasy", "description": None}]
            }
        }

class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    publication_date: date
    total_copies: int = Field(1, ge=1)
    category_ids: List[int] = []

class BookUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    publication_date: Optional[date] = None
    total_copies: Optional[int] = Field(None, ge=1)
    category_ids: Optional[List[int]] = None
