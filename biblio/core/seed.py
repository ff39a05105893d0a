#!/usr/bin/env python

"""
    Demo data for a fresh Biblio database.

    Stock is never written directly: books start fully on the shelf and
    the loans below go through the coordinator, so the seeded database
    already satisfies the stock invariant.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from sqlalchemy import select, func
from biblio.models import Book
from biblio.core.members import Members
from biblio.core.inventory import InventoryCoordinator
from biblio.core.db import run_in_transaction

logger = logging.getLogger(__name__)

BOOKS = [
    ("The Great Gatsby", "F. Scott Fitzgerald", datetime.date(1925, 4, 10), 10),
    ("To Kill a Mockingbird", "Harper Lee", datetime.date(1960, 7, 11), 7),
    ("1984", "George Orwell", datetime.date(1949, 6, 8), 4),
    ("Pride and Prejudice", "Jane Austen", datetime.date(1813, 1, 28), 8),
    ("The Catcher in the Rye", "J.D. Salinger", datetime.date(1951, 7, 16), 12),
    ("The Hobbit", "J.R.R. Tolkien", datetime.date(1937, 9, 21), 14),
]

MEMBERS = [
    ("John Doe", "john.doe@example.com", "1234567890", "123 Main St", "active"),
    ("Jane Smith", "jane.smith@example.com", "9876543210", "456 Elm St", "inactive"),
    ("Alice Johnson", "alice.johnson@example.com", "5555555555", "789 Oak St", "active"),
    ("Bob Brown", "bob.brown@example.com", "1111111111", "321 Pine St", "active"),
]

# (member index, book index, days ago)
LOANS = [(0, 0, 3), (2, 2, 20), (3, 5, 1)]


def _count_books(session):
    return session.scalar(select(func.count(Book.id)))


def seed_demo_data(session_factory, today=None):
    """Seeds books, members and a few loans. Returns False if the
    catalog already holds books.
    """
    if run_in_transaction(session_factory, _count_books):
        logger.info("Catalog not empty; skipping demo data")
        return False
    today = today or datetime.date.today()
    inventory = InventoryCoordinator(session_factory)
    books = [inventory.create_book(title, author, published, total_copies=copies)
             for title, author, published, copies in BOOKS]
    members = [run_in_transaction(session_factory, Members.create_member,
                                  name, email, phone, address, status)
               for name, email, phone, address, status in MEMBERS]
    for member, book, days_ago in LOANS:
        loan_date = today - datetime.timedelta(days=days_ago)
        inventory.checkout(members[member].id, books[book].id, loan_date=loan_date)
    logger.info(f"Seeded {len(books)} books, {len(members)} members, {len(LOANS)} loans")
    return True
