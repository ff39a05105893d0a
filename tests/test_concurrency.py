"""
Concurrent checkouts, returns and deletes against the same book. Each
worker thread calls the coordinator, which opens its own session, so the
database lock is the only thing keeping them apart.
"""

import datetime
from concurrent.futures import ThreadPoolExecutor

import pytest
from biblio.core.exceptions import (
    AlreadyReturnedError,
    LoanNotFoundError,
    OutOfStockError,
)
from conftest import TODAY

DUE = TODAY + datetime.timedelta(days=14)


def _attempt(call, *args):
    try:
        return call(*args)
    except (OutOfStockError, AlreadyReturnedError, LoanNotFoundError) as e:
        return e


@pytest.mark.parametrize("copies,workers", [(1, 2), (3, 10), (5, 8)])
def test_concurrent_checkouts_never_oversell(inventory, make_book, make_member, copies, workers):
    book = make_book(copies=copies)
    members = [make_member() for _ in range(workers)]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(
            lambda m: _attempt(inventory.checkout, m.id, book.id, TODAY, DUE), members))

    loans = [r for r in results if not isinstance(r, Exception)]
    refused = [r for r in results if isinstance(r, OutOfStockError)]
    assert len(loans) == copies
    assert len(refused) == workers - copies
    assert inventory.get_book(book.id).available_copies == 0
    assert inventory.audit_stock() == []


def test_concurrent_returns_count_once(inventory, make_book, make_member):
    book = make_book(copies=2)
    loan = inventory.checkout(make_member().id, book.id, TODAY, DUE)

    with ThreadPoolExecutor(max_workers=6) as executor:
        results = list(executor.map(
            lambda _: _attempt(inventory.return_book, loan.id), range(6)))

    assert sum(not isinstance(r, Exception) for r in results) == 1
    assert sum(isinstance(r, AlreadyReturnedError) for r in results) == 5
    assert inventory.get_book(book.id).available_copies == 2


def test_concurrent_loan_deletes_reclaim_once(inventory, make_book, make_member):
    book = make_book(copies=3)
    loan = inventory.checkout(make_member().id, book.id, TODAY, DUE)

    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(
            lambda _: _attempt(inventory.delete_loan_guarded, loan.id), range(4)))

    assert results.count(True) == 1
    assert sum(isinstance(r, LoanNotFoundError) for r in results) == 3
    assert inventory.get_book(book.id).available_copies == 3


def test_mixed_traffic_keeps_stock_consistent(inventory, make_book, make_member):
    book = make_book(copies=4)
    members = [make_member() for _ in range(6)]
    held = [inventory.checkout(m.id, book.id, TODAY, DUE) for m in members[:3]]

    jobs = [(inventory.return_book, loan.id) for loan in held]
    jobs += [(inventory.checkout, m.id, book.id, TODAY, DUE) for m in members[3:]]

    with ThreadPoolExecutor(max_workers=len(jobs)) as executor:
        list(executor.map(lambda job: _attempt(*job), jobs))

    assert inventory.audit_stock() == []


def test_one_member_borrows_several_books_at_once(inventory, make_book, make_member):
    member = make_member()
    books = [make_book(f"Volume {i}") for i in range(5)]

    with ThreadPoolExecutor(max_workers=len(books)) as executor:
        loans = list(executor.map(
            lambda b: inventory.checkout(member.id, b.id, TODAY, DUE), books))

    assert sorted(loan.book_id for loan in loans) == sorted(b.id for b in books)
    assert inventory.audit_stock() == []
