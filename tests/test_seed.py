"""Demo data goes in once, through the coordinator, and leaves stock consistent."""

from biblio.core.queries import Queries
from biblio.core.seed import BOOKS, MEMBERS, LOANS, seed_demo_data
from conftest import TODAY


def test_seed_once(session_factory, inventory):
    assert seed_demo_data(session_factory, today=TODAY) is True
    assert seed_demo_data(session_factory, today=TODAY) is False

    queries = Queries(session_factory)
    books = queries.list_books()
    assert len(books) == len(BOOKS)
    assert len(queries.list_members()) == len(MEMBERS)
    assert len(queries.list_loans()) == len(LOANS)

    orwell = next(b for b in books if b.title == "1984")
    assert (orwell.total_copies, orwell.available_copies) == (4, 3)
    assert inventory.audit_stock() == []


def test_seeded_overdue_loan(session_factory):
    seed_demo_data(session_factory, today=TODAY)
    overdue = Queries(session_factory).overdue_loans(TODAY)
    assert [loan.book.title for loan in overdue] == ["1984"]
