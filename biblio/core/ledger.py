#!/usr/bin/env python

"""
    Loan ledger for Biblio.

    Owns the loan rows and their lifecycle:

        borrowed --(return)--> returned
        overdue  --(return)--> returned

    `overdue` is observed, not scheduled: a held loan whose due date has
    passed reads as overdue. Returning is one-way and happens once. The
    ledger never touches book stock; the InventoryCoordinator pairs every
    ledger change with the matching catalog change in one transaction.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
from decimal import Decimal
from sqlalchemy import select, func
from biblio.configs import FINE_PER_DAY
from biblio.models import Loan, LoanStatus
from biblio.core.exceptions import (
    LoanNotFoundError,
    AlreadyReturnedError,
)

LOAN_FIELDS = (
    'member_id', 'book_id', 'loan_date', 'due_date',
    'return_date', 'status', 'fine',
)
CENTS = Decimal('0.01')


class Ledger:

    fine_per_day = FINE_PER_DAY

    @classmethod
    def get_loan(cls, session, loan_id, lock=False):
        loan = session.get(
            Loan, loan_id,
            with_for_update=True if lock else None,
            populate_existing=lock,
        )
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return loan

    @classmethod
    def create_loan(cls, session, member_id, book_id, loan_date, due_date):
        loan = Loan(
            member_id=member_id,
            book_id=book_id,
            loan_date=loan_date,
            due_date=due_date,
            status=LoanStatus.BORROWED,
            fine=Decimal('0'),
        )
        session.add(loan)
        session.flush()
        session.refresh(loan)
        return loan

    @classmethod
    def assess_fine(cls, loan, return_date):
        days_late = (return_date - loan.due_date).days
        if days_late <= 0 or cls.fine_per_day <= 0:
            return loan.fine
        return (cls.fine_per_day * days_late).quantize(CENTS)

    @classmethod
    def mark_returned(cls, session, loan_id, return_date=None):
        """Moves a held loan to `returned`. Raises AlreadyReturnedError if
        it was returned before.
        """
        loan = cls.get_loan(session, loan_id, lock=True)
        if not loan.is_held:
            raise AlreadyReturnedError("Book has already been returned")
        return_date = return_date or datetime.date.today()
        loan.return_date = return_date
        loan.status = LoanStatus.RETURNED
        loan.fine = cls.assess_fine(loan, return_date)
        session.flush()
        return loan

    @classmethod
    def update_loan_fields(cls, session, loan_id, **fields):
        """Free-form administrative correction; not gated by the lifecycle."""
        loan = cls.get_loan(session, loan_id, lock=True)
        for name, value in fields.items():
            if name not in LOAN_FIELDS:
                raise TypeError(f"Unknown loan field: {name}")
            if name == 'status':
                value = LoanStatus(value)
            elif name == 'fine':
                value = Decimal(value if value is not None else 0)
            setattr(loan, name, value)
        session.flush()
        return loan

    @classmethod
    def delete_loan(cls, session, loan_id):
        session.delete(cls.get_loan(session, loan_id, lock=True))
        session.flush()
        return True

    @staticmethod
    def effective_status(loan, today=None):
        return loan.status_on(today)

    @classmethod
    def count_held(cls, session, book_id):
        """Number of loans on `book_id` still occupying a copy."""
        return session.scalar(
            select(func.count(Loan.id)).where(
                Loan.book_id == book_id,
                Loan.status != LoanStatus.RETURNED,
            ))

    @classmethod
    def held_counts(cls, session):
        return dict(session.execute(
            select(Loan.book_id, func.count(Loan.id))
            .where(Loan.status != LoanStatus.RETURNED)
            .group_by(Loan.book_id)).all())

    @classmethod
    def overdue_loans(cls, session, today=None):
        today = today or datetime.date.today()
        return session.scalars(
            select(Loan).where(
                Loan.status != LoanStatus.RETURNED,
                Loan.return_date.is_(None),
                Loan.due_date < today,
            ).order_by(Loan.due_date, Loan.id)).all()
