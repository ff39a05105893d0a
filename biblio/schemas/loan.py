#!/usr/bin/env python
"""
    Loan Schemas for Biblio.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from datetime import date, datetime
from decimal import Decimal
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from biblio.models import LoanStatus
from .book import BookSummary
from .member import Member

class Loan(BaseModel):
    id: int
    member_id: int
    book_id: int
    loan_date: date
    due_date: date
    return_date: Optional[date] = None
    status: LoanStatus
    current_status: LoanStatus
    fine: Decimal = Decimal('0')
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LoanDetail(Loan):
    member: Member
    book: BookSummary

    class Config:
        from_attributes = True

class CheckoutRequest(BaseModel):
    member_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)
    loan_date: Optional[date] = None
    due_date: Optional[date] = None

    @model_validator(mode='after')
    def check_dates(self):
        if self.loan_date and self.due_date and self.due_date < self.loan_date:
            raise ValueError("due_date must not be before loan_date")
        return self

class LoanUpdate(BaseModel):
    member_id: Optional[int] = Field(None, gt=0)
    book_id: Optional[int] = Field(None, gt=0)
    loan_date: Optional[date] = None
    due_date: Optional[date] = None
    return_date: Optional[date] = None
    status: Optional[LoanStatus] = None
    fine: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode='after')
    def check_dates(self):
        if self.loan_date and self.due_date and self.due_date < self.loan_date:
            raise ValueError("due_date must not be before loan_date")
        return self
