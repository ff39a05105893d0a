#!/usr/bin/env python

"""
    LibraryAPI, the entry point the HTTP routes call.

    It takes already-validated request schemas, sends every
    stock-affecting call through the InventoryCoordinator, runs the
    plain CRUD of members and categories in their own transactions, and
    answers with read-side projections.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from biblio import schemas
from biblio.configs import DB_URI
from biblio.core import db
from biblio.core.catalog import Catalog
from biblio.core.members import Members
from biblio.core.inventory import InventoryCoordinator
from biblio.core.queries import Queries

logger = logging.getLogger(__name__)

LIBRARY = None  # Will be initialized lazily


class LibraryAPI:

    def __init__(self, session_factory):
        self.Session = session_factory
        self.inventory = InventoryCoordinator(session_factory)
        self.queries = Queries(session_factory)

    @classmethod
    def from_uri(cls, uri=DB_URI):
        return cls(db.init(db.make_engine(uri)))

    def _transaction(self, operation, *args, **kwargs):
        return db.run_in_transaction(
            self.Session, operation, *args,
            retries=self.inventory.retries, **kwargs)

    # books

    def create_book(self, data: schemas.BookCreate) -> schemas.Book:
        book = self.inventory.create_book(**data.model_dump())
        logger.info(f"Book {book.id} created with {book.total_copies} copies")
        return self.queries.get_book_detail(book.id)

    def update_book(self, book_id: int, data: schemas.BookUpdate) -> schemas.Book:
        self.inventory.update_book(
            book_id, **data.model_dump(exclude_unset=True, exclude_none=True))
        return self.queries.get_book_detail(book_id)

    def delete_book(self, book_id: int) -> bool:
        return self.inventory.delete_book_guarded(book_id)

    # members

    def create_member(self, data: schemas.MemberCreate) -> schemas.Member:
        member = self._transaction(Members.create_member, **data.model_dump())
        return schemas.Member.model_validate(member)

    def update_member(self, member_id: int, data: schemas.MemberUpdate) -> schemas.Member:
        member = self._transaction(
            Members.update_member, member_id,
            **data.model_dump(exclude_unset=True, exclude_none=True))
        return schemas.Member.model_validate(member)

    def delete_member(self, member_id: int) -> bool:
        return self.inventory.delete_member_guarded(member_id)

    # loans

    def checkout(self, data: schemas.CheckoutRequest) -> schemas.Loan:
        return schemas.Loan.model_validate(self.inventory.checkout(
            data.member_id, data.book_id,
            loan_date=data.loan_date, due_date=data.due_date))

    def return_book(self, loan_id: int) -> schemas.Loan:
        return schemas.Loan.model_validate(self.inventory.return_book(loan_id))

    def edit_loan(self, loan_id: int, data: schemas.LoanUpdate) -> schemas.Loan:
        # an explicit null return_date clears it; other nulls mean "unchanged"
        fields = {
            name: value for name, value in data.model_dump(exclude_unset=True).items()
            if value is not None or name == 'return_date'
        }
        return schemas.Loan.model_validate(self.inventory.edit_loan(loan_id, **fields))

    def delete_loan(self, loan_id: int) -> bool:
        return self.inventory.delete_loan_guarded(loan_id)

    # categories

    def create_category(self, data: schemas.CategoryCreate) -> schemas.Category:
        return schemas.Category.model_validate(
            self._transaction(Catalog.create_category, **data.model_dump()))

    def update_category(self, category_id: int, data: schemas.CategoryUpdate) -> schemas.Category:
        return schemas.Category.model_validate(self._transaction(
            Catalog.update_category, category_id, **data.model_dump(exclude_unset=True)))

    def delete_category(self, category_id: int) -> bool:
        return self._transaction(Catalog.delete_category, category_id)

    def audit_stock(self):
        return self.inventory.audit_stock()


def get_library() -> LibraryAPI:
    """Get or initialize the process-wide LibraryAPI lazily."""
    global LIBRARY
    if LIBRARY is None:
        LIBRARY = LibraryAPI.from_uri(DB_URI)
    return LIBRARY
