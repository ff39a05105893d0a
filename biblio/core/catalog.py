#!/usr/bin/env python

"""
    Catalog store for Biblio: books, their copy counts and category tags.

    Functions here run inside the caller's transaction and never commit.
    `adjust_available_copies` and `resize_stock` are the only places that
    write `Book.available_copies`; both are reached exclusively through
    the InventoryCoordinator.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from biblio.models import Book, Category, Loan
from biblio.core.exceptions import (
    BookNotFoundError,
    CategoryNotFoundError,
    CategoryExistsError,
    ConflictError,
    InUseError,
)

logger = logging.getLogger(__name__)

BOOK_FIELDS = ('title', 'author', 'publication_date')


class Catalog:

    @classmethod
    def get_book(cls, session, book_id, lock=False):
        """Returns the Book or raises BookNotFoundError. With `lock`, the
        row is re-read with FOR UPDATE and held until the transaction ends.
        """
        book = session.get(
            Book, book_id,
            with_for_update=True if lock else None,
            populate_existing=lock,
        )
        if book is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        return book

    @classmethod
    def list_books(cls, session, offset=None, limit=None):
        return session.scalars(
            select(Book).order_by(Book.id).offset(offset).limit(limit)).all()

    @classmethod
    def create_book(cls, session, title, author, publication_date,
                    total_copies=1, category_ids=None):
        if total_copies < 1:
            raise ConflictError("A book must own at least one copy")
        book = Book(
            title=title,
            author=author,
            publication_date=publication_date,
            total_copies=total_copies,
            available_copies=total_copies,
        )
        session.add(book)
        if category_ids:
            cls.set_book_categories(session, book, category_ids)
        session.flush()
        session.refresh(book)
        return book

    @classmethod
    def update_book(cls, session, book_id, **fields):
        """Updates descriptive fields. Stock columns are rejected here."""
        if 'available_copies' in fields or 'total_copies' in fields:
            raise ConflictError("Copy counts change only through the inventory coordinator")
        book = cls.get_book(session, book_id)
        category_ids = fields.pop('category_ids', None)
        for name, value in fields.items():
            if name not in BOOK_FIELDS:
                raise TypeError(f"Unknown book field: {name}")
            setattr(book, name, value)
        if category_ids is not None:
            cls.set_book_categories(session, book, category_ids)
        session.flush()
        return book

    @classmethod
    def adjust_available_copies(cls, session, book_id, delta, floor=0):
        """Locks the book row and moves `available_copies` by `delta`.

        Raises ConflictError when the result would drop below `floor`
        (never below 0) or rise above `total_copies`.
        """
        book = cls.get_book(session, book_id, lock=True)
        updated = book.available_copies + delta
        if updated < max(floor, 0) or updated > book.total_copies:
            raise ConflictError(
                f"Cannot move available copies of book {book_id} from "
                f"{book.available_copies} by {delta:+d} "
                f"(total {book.total_copies})")
        book.available_copies = updated
        session.flush()
        return book

    @classmethod
    def resize_stock(cls, session, book_id, total_copies, held):
        """Sets `total_copies` and recomputes availability from `held`
        unreturned loans.
        """
        book = cls.get_book(session, book_id, lock=True)
        if total_copies < 1:
            raise ConflictError("A book must own at least one copy")
        if total_copies < held:
            raise ConflictError(
                f"Book {book_id} has {held} copies on loan; "
                f"total cannot drop to {total_copies}")
        book.total_copies = total_copies
        book.available_copies = total_copies - held
        session.flush()
        return book

    @classmethod
    def has_loans(cls, session, book_id):
        return session.scalar(
            select(func.count(Loan.id)).where(Loan.book_id == book_id)) > 0

    @classmethod
    def delete_book(cls, session, book_id):
        """Deletes a book that no loan, past or present, references."""
        book = cls.get_book(session, book_id, lock=True)
        if cls.has_loans(session, book_id):
            raise InUseError("Book has loan history and cannot be deleted")
        session.delete(book)
        session.flush()
        return True

    # categories

    @classmethod
    def get_category(cls, session, category_id):
        category = session.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")
        return category

    @classmethod
    def list_categories(cls, session):
        return session.scalars(select(Category).order_by(Category.id.desc())).all()

    @classmethod
    def create_category(cls, session, name, description=None):
        if session.scalar(select(Category).where(Category.name == name)):
            raise CategoryExistsError(f"Category '{name}' already exists")
        category = Category(name=name, description=description)
        session.add(category)
        try:
            session.flush()
        except IntegrityError as e:
            raise CategoryExistsError(f"Category '{name}' already exists") from e
        return category

    @classmethod
    def update_category(cls, session, category_id, **fields):
        category = cls.get_category(session, category_id)
        name = fields.get('name')
        if name and name != category.name and session.scalar(
                select(Category).where(Category.name == name)):
            raise CategoryExistsError(f"Category '{name}' already exists")
        for field in ('name', 'description'):
            if field in fields and (field != 'name' or fields[field]):
                setattr(category, field, fields[field])
        session.flush()
        return category

    @classmethod
    def delete_category(cls, session, category_id):
        session.delete(cls.get_category(session, category_id))
        session.flush()
        return True

    @classmethod
    def set_book_categories(cls, session, book, category_ids):
        """Replaces the tag set of `book`."""
        wanted = list(dict.fromkeys(category_ids))
        categories = session.scalars(
            select(Category).where(Category.id.in_(wanted))).all() if wanted else []
        missing = set(wanted) - {c.id for c in categories}
        if missing:
            raise CategoryNotFoundError(
                f"Category {sorted(missing)[0]} not found")
        book.categories = sorted(categories, key=lambda c: c.id)
        return book
