#!/usr/bin/env python

"""
    Inventory coordinator for Biblio.

    Every operation that changes how many copies of a book are on the
    shelf goes through here. Each one is a single transaction that
    re-reads the rows it is about to change with a locking read, so a
    reader never sees a held loan whose copy is still counted as
    available, or the other way around. Locks are always taken in the
    order member, loan, book (books by ascending id).

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from biblio.configs import LOAN_DAYS, LOCK_RETRIES
from biblio.models import LoanStatus
from biblio.core.db import run_in_transaction
from biblio.core.catalog import Catalog
from biblio.core.members import Members
from biblio.core.ledger import Ledger
from biblio.core.exceptions import (
    AlreadyReturnedError,
    ConflictError,
    InvalidDatesError,
    OutOfStockError,
)

logger = logging.getLogger(__name__)


class InventoryCoordinator:

    def __init__(self, session_factory, retries=LOCK_RETRIES, loan_days=LOAN_DAYS):
        self.Session = session_factory
        self.retries = retries
        self.loan_days = loan_days

    def _run(self, operation, *args, **kwargs):
        try:
            return run_in_transaction(
                self.Session, operation, *args, retries=self.retries, **kwargs)
        except ConflictError as e:
            logger.error(f"Stock invariant rejected {operation.__name__.lstrip('_')}: {e}")
            raise

    # reads

    def get_book(self, book_id):
        return self._run(Catalog.get_book, book_id)

    def get_member(self, member_id):
        return self._run(Members.get_member, member_id)

    def get_loan(self, loan_id):
        return self._run(Ledger.get_loan, loan_id)

    # checkout

    def checkout(self, member_id, book_id, loan_date=None, due_date=None):
        """Lends one copy of `book_id` to `member_id`.

        Raises MemberNotFoundError, BookNotFoundError or OutOfStockError.
        """
        loan_date = loan_date or datetime.date.today()
        due_date = due_date or loan_date + datetime.timedelta(days=self.loan_days)
        return self._run(self._checkout, member_id, book_id, loan_date, due_date)

    def _checkout(self, session, member_id, book_id, loan_date, due_date):
        Members.get_member(session, member_id, lock=Members.SHARE)
        book = Catalog.get_book(session, book_id, lock=True)
        if book.available_copies <= 0:
            raise OutOfStockError(f"'{book.title}' has no copies available to lend")
        Catalog.adjust_available_copies(session, book_id, -1)
        loan = Ledger.create_loan(session, member_id, book_id, loan_date, due_date)
        logger.info(
            f"Loan {loan.id}: book {book_id} to member {member_id}, "
            f"{book.available_copies}/{book.total_copies} left")
        return loan

    # return

    def return_book(self, loan_id, return_date=None):
        """Closes a held loan and puts its copy back on the shelf.

        Raises LoanNotFoundError or AlreadyReturnedError.
        """
        return self._run(self._return_book, loan_id, return_date)

    def _return_book(self, session, loan_id, return_date):
        loan = Ledger.get_loan(session, loan_id, lock=True)
        if not loan.is_held:
            raise AlreadyReturnedError("Book has already been returned")
        book = Catalog.adjust_available_copies(session, loan.book_id, +1)
        loan = Ledger.mark_returned(session, loan_id, return_date)
        logger.info(
            f"Loan {loan.id} returned; book {book.id} at "
            f"{book.available_copies}/{book.total_copies}")
        return loan

    # deletes

    def delete_loan_guarded(self, loan_id):
        """Deletes a loan, reclaiming its copy if it was never returned.

        The loan row lock is the serialization point: a second concurrent
        call waits, then finds the row gone and raises LoanNotFoundError.
        """
        return self._run(self._delete_loan_guarded, loan_id)

    def _delete_loan_guarded(self, session, loan_id):
        loan = Ledger.get_loan(session, loan_id, lock=True)
        if loan.is_held:
            Catalog.adjust_available_copies(session, loan.book_id, +1)
            logger.info(f"Reclaimed copy of book {loan.book_id} from deleted loan {loan_id}")
        Ledger.delete_loan(session, loan_id)
        return True

    def delete_book_guarded(self, book_id):
        """Raises InUseError if any loan, past or present, names the book."""
        return self._run(Catalog.delete_book, book_id)

    def delete_member_guarded(self, member_id):
        """Raises InUseError if any loan, past or present, names the member."""
        return self._run(Members.delete_member, member_id)

    # catalog writes that touch stock

    def create_book(self, title, author, publication_date, total_copies=1,
                    category_ids=None):
        return self._run(
            Catalog.create_book, title, author, publication_date,
            total_copies=total_copies, category_ids=category_ids)

    def update_book(self, book_id, total_copies=None, **fields):
        """Edits a book. A new `total_copies` is applied under the book
        lock, with availability recomputed from the loans still held;
        shrinking below that count raises ConflictError.
        """
        return self._run(self._update_book, book_id, total_copies, fields)

    def _update_book(self, session, book_id, total_copies, fields):
        book = Catalog.get_book(session, book_id, lock=True)
        if total_copies is not None and total_copies != book.total_copies:
            held = Ledger.count_held(session, book_id)
            Catalog.resize_stock(session, book_id, total_copies, held)
        if fields:
            Catalog.update_book(session, book_id, **fields)
        return book

    def edit_loan(self, loan_id, **fields):
        """Administrative correction of a loan.

        The row is rewritten as given; if the edit moves the loan to
        another book, or between held and returned, one copy moves with
        it so stock stays in line with the ledger.
        """
        return self._run(self._edit_loan, loan_id, fields)

    def _edit_loan(self, session, loan_id, fields):
        fields = dict(fields)
        loan = Ledger.get_loan(session, loan_id, lock=True)
        if 'member_id' in fields:
            Members.get_member(session, fields['member_id'], lock=Members.SHARE)
        if 'book_id' in fields:
            Catalog.get_book(session, fields['book_id'])
        was = (loan.book_id, loan.is_held)
        book_id = fields.get('book_id', loan.book_id)
        held = (LoanStatus(fields['status']) != LoanStatus.RETURNED
                if fields.get('status') is not None else loan.is_held)

        loan_date = fields.get('loan_date') or loan.loan_date
        due_date = fields.get('due_date') or loan.due_date
        if due_date < loan_date:
            raise InvalidDatesError(
                f"Due date {due_date} is before loan date {loan_date}")
        if held and not loan.is_held and 'return_date' not in fields:
            # reopened; a stale return date would hide it from overdue
            fields['return_date'] = None

        moves = {}
        if was[1]:
            moves[was[0]] = moves.get(was[0], 0) + 1
        if held:
            moves[book_id] = moves.get(book_id, 0) - 1
        for target in sorted(moves):
            book = Catalog.get_book(session, target, lock=True)
            delta = moves[target]
            if delta < 0 and book.available_copies + delta < 0:
                raise OutOfStockError(f"'{book.title}' has no copies available to lend")
            if delta:
                Catalog.adjust_available_copies(session, target, delta)

        loan = Ledger.update_loan_fields(session, loan_id, **fields)
        if any(moves.values()):
            logger.info(f"Loan {loan_id} edit moved stock: {moves}")
        return loan

    # consistency

    def audit_stock(self):
        """Lists books whose stored availability disagrees with the ledger."""
        return self._run(self._audit_stock)

    def _audit_stock(self, session):
        held = Ledger.held_counts(session)
        mismatches = []
        for book in Catalog.list_books(session):
            expected = book.total_copies - held.get(book.id, 0)
            if book.available_copies != expected:
                mismatches.append({
                    "book_id": book.id,
                    "title": book.title,
                    "total_copies": book.total_copies,
                    "available_copies": book.available_copies,
                    "expected_available": expected,
                })
        if mismatches:
            logger.warning(f"Stock audit found {len(mismatches)} mismatched books")
        return mismatches
