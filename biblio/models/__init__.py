#!/usr/bin/env python
"""
    Models for Biblio,
    the declarative base and the tables of the catalog and circulation.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here to ensure they are registered with Base
from . import books, members, loans  # noqa: E402
from .books import Book, Category, book_categories  # noqa: E402
from .members import Member, MemberStatus  # noqa: E402
from .loans import Loan, LoanStatus  # noqa: E402

__all__ = [
    "Base", "Book", "Category", "book_categories",
    "Member", "MemberStatus", "Loan", "LoanStatus",
]
