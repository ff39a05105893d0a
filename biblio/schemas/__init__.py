from .category import Category, CategoryCreate, CategoryUpdate
from .book import Book, BookCreate, BookUpdate, BookSummary
from .member import Member, MemberCreate, MemberUpdate
from .loan import Loan, LoanDetail, CheckoutRequest, LoanUpdate

__all__ = [
    "Category", "CategoryCreate", "CategoryUpdate",
    "Book", "BookCreate", "BookUpdate", "BookSummary",
    "Member", "MemberCreate", "MemberUpdate",
    "Loan", "LoanDetail", "CheckoutRequest", "LoanUpdate",
]
