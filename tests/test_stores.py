#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_stores
    ~~~~~~~~~~~~~~~~~

    The catalog, member and ledger stores used inside a transaction.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql
from biblio.models import LoanStatus, Member, MemberStatus
from biblio.core.catalog import Catalog
from biblio.core.ledger import Ledger
from biblio.core.members import Members
from biblio.core.exceptions import (
    AlreadyReturnedError,
    CategoryExistsError,
    CategoryNotFoundError,
    ConflictError,
    InvalidTransitionError,
    MemberExistsError,
)
from conftest import TODAY


@pytest.fixture
def session(session_factory):
    with session_factory.begin() as session:
        yield session


@pytest.fixture
def book(session):
    return Catalog.create_book(session, "Dune", "Frank Herbert", datetime.date(1965, 8, 1), total_copies=2)


@pytest.fixture
def member(session):
    return Members.create_member(session, "Paul Atreides", "paul@arrakis.org", "5550111", "Sietch Tabr")


def test_create_book_starts_fully_available(book):
    assert book.id is not None
    assert (book.total_copies, book.available_copies) == (2, 2)
    assert book.created_at is not None


def test_create_book_needs_a_copy(session):
    with pytest.raises(ConflictError):
        Catalog.create_book(session, "Ghost", "Nobody", TODAY, total_copies=0)


def test_adjust_available_copies_bounds(session, book):
    assert Catalog.adjust_available_copies(session, book.id, -2).available_copies == 0
    with pytest.raises(ConflictError):
        Catalog.adjust_available_copies(session, book.id, -1)
    assert Catalog.adjust_available_copies(session, book.id, +2).available_copies == 2
    with pytest.raises(ConflictError):
        Catalog.adjust_available_copies(session, book.id, +1)


def test_adjust_available_copies_floor(session, book):
    with pytest.raises(ConflictError):
        Catalog.adjust_available_copies(session, book.id, -2, floor=1)
    assert Catalog.adjust_available_copies(session, book.id, -1, floor=1).available_copies == 1


def test_update_book_rejects_stock_fields(session, book):
    with pytest.raises(ConflictError):
        Catalog.update_book(session, book.id, available_copies=0)
    with pytest.raises(ConflictError):
        Catalog.update_book(session, book.id, total_copies=9)
    updated = Catalog.update_book(session, book.id, title="Dune Messiah")
    assert updated.title == "Dune Messiah"


def test_categories(session, book):
    scifi = Catalog.create_category(session, "Science Fiction", "Spaceships")
    classic = Catalog.create_category(session, "Classic")
    with pytest.raises(CategoryExistsError):
        Catalog.create_category(session, "Classic")

    Catalog.update_book(session, book.id, category_ids=[classic.id, scifi.id, scifi.id])
    assert book.category_ids == sorted([scifi.id, classic.id])

    with pytest.raises(CategoryNotFoundError):
        Catalog.set_book_categories(session, book, [999])

    renamed = Catalog.update_category(session, classic.id, name="Classics", description=None)
    assert renamed.name == "Classics"
    Catalog.delete_category(session, scifi.id)
    session.refresh(book)
    assert book.category_ids == [classic.id]
    assert [c.name for c in Catalog.list_categories(session)] == ["Classics"]


def test_member_email_is_unique(session, member):
    with pytest.raises(MemberExistsError):
        Members.create_member(session, "Impostor", "paul@arrakis.org", "0", "Nowhere")
    other = Members.create_member(session, "Chani", "chani@arrakis.org", "5550112", "Sietch Tabr")
    with pytest.raises(MemberExistsError):
        Members.update_member(session, other.id, email="paul@arrakis.org")


def test_member_update_status(session, member):
    assert member.status == MemberStatus.ACTIVE
    updated = Members.update_member(session, member.id, status="inactive", phone="5550199")
    assert updated.status == MemberStatus.INACTIVE
    assert updated.phone == "5550199"


def test_ledger_lifecycle(session, book, member):
    loan = Ledger.create_loan(session, member.id, book.id, TODAY, TODAY + datetime.timedelta(days=7))
    assert loan.status == LoanStatus.BORROWED
    assert loan.fine == Decimal("0")
    assert Ledger.count_held(session, book.id) == 1

    Ledger.mark_returned(session, loan.id, TODAY)
    assert loan.status == LoanStatus.RETURNED
    assert loan.return_date == TODAY
    assert Ledger.count_held(session, book.id) == 0

    with pytest.raises(AlreadyReturnedError):
        Ledger.mark_returned(session, loan.id, TODAY)
    assert issubclass(AlreadyReturnedError, InvalidTransitionError)


def test_overdue_is_derived(session, book, member):
    loan = Ledger.create_loan(session, member.id, book.id, TODAY, TODAY + datetime.timedelta(days=7))
    assert loan.status_on(TODAY + datetime.timedelta(days=7)) == LoanStatus.BORROWED
    assert loan.status_on(TODAY + datetime.timedelta(days=8)) == LoanStatus.OVERDUE
    assert loan.status == LoanStatus.BORROWED
    assert Ledger.effective_status(loan, TODAY + datetime.timedelta(days=8)) == LoanStatus.OVERDUE

    later = TODAY + datetime.timedelta(days=30)
    assert [l.id for l in Ledger.overdue_loans(session, later)] == [loan.id]
    assert Ledger.overdue_loans(session, TODAY) == []

    Ledger.mark_returned(session, loan.id, later)
    assert loan.status_on(later) == LoanStatus.RETURNED
    assert Ledger.overdue_loans(session, later) == []


def test_late_return_assesses_fine(session, book, member):
    loan = Ledger.create_loan(session, member.id, book.id, TODAY, TODAY + datetime.timedelta(days=7))
    with patch.object(Ledger, "fine_per_day", Decimal("0.50")):
        Ledger.mark_returned(session, loan.id, TODAY + datetime.timedelta(days=10))
    assert loan.fine == Decimal("1.50")


def test_on_time_return_keeps_fine(session, book, member):
    loan = Ledger.create_loan(session, member.id, book.id, TODAY, TODAY + datetime.timedelta(days=7))
    with patch.object(Ledger, "fine_per_day", Decimal("0.50")):
        Ledger.mark_returned(session, loan.id, TODAY + datetime.timedelta(days=7))
    assert loan.fine == Decimal("0")


def test_update_loan_fields_is_free_form(session, book, member):
    loan = Ledger.create_loan(session, member.id, book.id, TODAY, TODAY)
    Ledger.update_loan_fields(session, loan.id, status="returned", return_date=TODAY, fine="3.25")
    assert loan.status == LoanStatus.RETURNED
    assert loan.fine == Decimal("3.25")
    with pytest.raises(TypeError):
        Ledger.update_loan_fields(session, loan.id, colour="red")


def test_member_share_lock(session, member):
    assert Members.get_member(session, member.id, lock=Members.SHARE) is member
    stmt = select(Member).with_for_update(**Members.SHARE)
    assert "FOR KEY SHARE" in str(stmt.compile(dialect=postgresql.dialect()))
