#!/usr/bin/env python

"""
    Read-side projections for Biblio.

    These joins feed listings and detail pages only. They take no locks,
    so nothing read here may be used to decide a write; stock-changing
    code re-reads under lock in the InventoryCoordinator. Each projection
    still runs through `run_in_transaction`, so a busy or failing
    database surfaces as StorageError like any write would.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
from sqlalchemy import select, or_, and_
from sqlalchemy.orm import selectinload
from biblio import schemas
from biblio.configs import DEFAULT_LIMIT, LOCK_RETRIES
from biblio.models import Book, Loan, LoanStatus
from biblio.core.db import run_in_transaction
from biblio.core.catalog import Catalog
from biblio.core.ledger import Ledger
from biblio.core.members import Members


def _loan_query():
    return select(Loan).options(
        selectinload(Loan.member), selectinload(Loan.book)
    ).order_by(Loan.id.desc())


class Queries:

    DEFAULT_LIMIT = DEFAULT_LIMIT

    def __init__(self, session_factory, retries=LOCK_RETRIES):
        self.Session = session_factory
        self.retries = retries

    def _read(self, projection, *args):
        return run_in_transaction(self.Session, projection, *args, retries=self.retries)

    def list_books(self, offset=None, limit=None, query=None):
        stmt = select(Book).options(selectinload(Book.categories)).order_by(Book.id)
        if query:
            pattern = f"%{query}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        return self._read(self._books, stmt.offset(offset).limit(limit or self.DEFAULT_LIMIT))

    @staticmethod
    def _books(session, stmt):
        return [schemas.Book.model_validate(b) for b in session.scalars(stmt)]

    def get_book_detail(self, book_id):
        return self._read(self._book_detail, book_id)

    @staticmethod
    def _book_detail(session, book_id):
        return schemas.Book.model_validate(Catalog.get_book(session, book_id))

    def list_loans(self, offset=None, limit=None, status=None, today=None):
        """Loans joined with member and book, newest first. `status`
        filters on the observed status, so `overdue` includes held loans
        past their due date.
        """
        today = today or datetime.date.today()
        stmt = _loan_query()
        if status is not None:
            status = LoanStatus(status)
            late = and_(Loan.return_date.is_(None), Loan.due_date < today)
            if status == LoanStatus.RETURNED:
                stmt = stmt.where(Loan.status == LoanStatus.RETURNED)
            elif status == LoanStatus.OVERDUE:
                stmt = stmt.where(
                    Loan.status != LoanStatus.RETURNED,
                    or_(Loan.status == LoanStatus.OVERDUE, late))
            else:
                stmt = stmt.where(Loan.status == LoanStatus.BORROWED, ~late)
        return self._read(self._loans, stmt.offset(offset).limit(limit or self.DEFAULT_LIMIT))

    @staticmethod
    def _loans(session, stmt):
        return [schemas.LoanDetail.model_validate(l) for l in session.scalars(stmt)]

    def get_loan_detail(self, loan_id):
        return self._read(self._loan_detail, loan_id)

    @staticmethod
    def _loan_detail(session, loan_id):
        return schemas.LoanDetail.model_validate(Ledger.get_loan(session, loan_id))

    def overdue_loans(self, today=None):
        return self._read(self._overdue_loans, today)

    @staticmethod
    def _overdue_loans(session, today):
        return [schemas.LoanDetail.model_validate(l)
                for l in Ledger.overdue_loans(session, today)]

    def list_members(self, offset=None, limit=None):
        return self._read(self._members, offset, limit or self.DEFAULT_LIMIT)

    @staticmethod
    def _members(session, offset, limit):
        return [schemas.Member.model_validate(m)
                for m in Members.list_members(session, offset=offset, limit=limit)]

    def get_member(self, member_id):
        return self._read(self._member, member_id)

    @staticmethod
    def _member(session, member_id):
        return schemas.Member.model_validate(Members.get_member(session, member_id))

    def list_categories(self):
        return self._read(self._categories)

    @staticmethod
    def _categories(session):
        return [schemas.Category.model_validate(c) for c in Catalog.list_categories(session)]
