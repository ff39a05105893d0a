#!/usr/bin/env python

"""
    Loan Model for Biblio.

    A loan holds one copy of its book until it is returned. The stored
    status is either `borrowed` or `returned`; `overdue` is observed on
    read by comparing `due_date` with today (it may also be stored by an
    administrative edit, in which case it behaves like `borrowed`).

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import enum
from sqlalchemy import (
    Column, Integer, Date, DateTime, Numeric, ForeignKey, CheckConstraint,
    Enum as SQLAlchemyEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from . import Base


class LoanStatus(str, enum.Enum):
    BORROWED = 'borrowed'
    RETURNED = 'returned'
    OVERDUE = 'overdue'


class Loan(Base):
    __tablename__ = 'loans'
    __table_args__ = (
        CheckConstraint('fine >= 0', name='ck_loans_fine'),
    )

    id = Column(Integer, primary_key=True)
    member_id = Column(Integer, ForeignKey('members.id'), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey('books.id'), nullable=False, index=True)
    loan_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    return_date = Column(Date, nullable=True)
    status = Column(
        SQLAlchemyEnum(LoanStatus, values_callable=lambda e: [s.value for s in e]),
        default=LoanStatus.BORROWED, nullable=False)
    fine = Column(Numeric(10, 2), default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    member = relationship('Member')
    book = relationship('Book')

    @property
    def is_held(self):
        """True while the loan occupies a copy of its book."""
        return self.status != LoanStatus.RETURNED

    @property
    def current_status(self):
        return self.status_on()

    def status_on(self, today=None):
        """The status as observed on `today`, deriving `overdue`."""
        if not self.is_held:
            return LoanStatus.RETURNED
        today = today or datetime.date.today()
        if self.return_date is None and self.due_date < today:
            return LoanStatus.OVERDUE
        return self.status

    def __repr__(self):
        return f"<Loan {self.id} book={self.book_id} member={self.member_id} {self.status.value}>"
