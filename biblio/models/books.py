#!/usr/bin/env python

"""
    Book Model for Biblio,
    including the definition of the Book table, its stock columns
    and the category tags attached to it.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text, Table, ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from . import Base

book_categories = Table(
    'book_categories',
    Base.metadata,
    Column('book_id', Integer, ForeignKey('books.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', Integer, ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
)


class Book(Base):
    __tablename__ = 'books'
    __table_args__ = (
        CheckConstraint('total_copies >= 1', name='ck_books_total_copies'),
        CheckConstraint(
            'available_copies >= 0 AND available_copies <= total_copies',
            name='ck_books_available_copies'),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    publication_date = Column(Date, nullable=False)
    total_copies = Column(Integer, default=1, nullable=False)
    available_copies = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    categories = relationship(
        'Category', secondary=book_categories, back_populates='books',
        order_by='Category.id')

    @property
    def category_ids(self):
        return [c.id for c in self.categories]

    def __repr__(self):
        return (f"<Book {self.id} {self.title!r} "
                f"{self.available_copies}/{self.total_copies}>")


class Category(Base):
    __tablename__ = 'categories'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text)

    books = relationship('Book', secondary=book_categories, back_populates='categories')
