#!/usr/bin/env python

"""
    API routes for Biblio,
    the catalog, member and circulation endpoints.

    Request bodies are parsed into typed schemas before anything reaches
    the core. Business errors come back with their message verbatim in
    `detail`, so the admin UI can show it and keep its local state as is.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
from functools import wraps
from typing import Optional
from fastapi import (
    APIRouter,
    Cookie,
    Depends,
    HTTPException,
    Query,
    Request,
    status,
)
from biblio import schemas
from biblio.core import auth
from biblio.core.api import LibraryAPI, get_library
from biblio.models import LoanStatus
from biblio.core.exceptions import (
    BiblioError,
    NotFoundError,
    OutOfStockError,
    InvalidTransitionError,
    InvalidDatesError,
    InUseError,
    MemberExistsError,
    CategoryExistsError,
    ConflictError,
    StorageError,
)

router = APIRouter()

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    OutOfStockError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InvalidDatesError: 422,
    InUseError: status.HTTP_409_CONFLICT,
    MemberExistsError: status.HTTP_409_CONFLICT,
    CategoryExistsError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def http_error(error: BiblioError) -> HTTPException:
    for cls in type(error).__mro__:
        if cls in ERROR_STATUS:
            return HTTPException(status_code=ERROR_STATUS[cls], detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def translates_errors(func):
    """Turns business errors raised by the core into HTTP errors."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except BiblioError as e:
            raise http_error(e) from e
    return wrapper


def current_user(request: Request, session: Optional[str] = Cookie(None)):
    """The caller's identity from the `session` cookie or a Bearer token."""
    if not session:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            session = auth_header.split(" ")[1]
    return auth.verify_session_cookie(session)


def requires_admin(user: Optional[dict] = Depends(current_user)):
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    if not auth.is_admin(user):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def ok(data=None, message=None):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


# books

@router.get("/books")
@translates_errors
def list_books(q: Optional[str] = None, offset: Optional[int] = None,
               limit: Optional[int] = None, library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.list_books(offset=offset, limit=limit, query=q))


@router.get("/books/{book_id}")
@translates_errors
def get_book(book_id: int, library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.get_book_detail(book_id))


@router.post("/books", status_code=status.HTTP_201_CREATED)
@translates_errors
def create_book(data: schemas.BookCreate, user=Depends(requires_admin),
                library: LibraryAPI = Depends(get_library)):
    return ok(library.create_book(data), "Book added")


@router.put("/books/{book_id}")
@translates_errors
def update_book(book_id: int, data: schemas.BookUpdate, user=Depends(requires_admin),
                library: LibraryAPI = Depends(get_library)):
    return ok(library.update_book(book_id, data), "Book updated")


@router.delete("/books/{book_id}")
@translates_errors
def delete_book(book_id: int, user=Depends(requires_admin),
                library: LibraryAPI = Depends(get_library)):
    library.delete_book(book_id)
    return ok(message="Book deleted")


# members

@router.get("/members")
@translates_errors
def list_members(offset: Optional[int] = None, limit: Optional[int] = None,
                 user=Depends(requires_admin), library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.list_members(offset=offset, limit=limit))


@router.get("/members/{member_id}")
@translates_errors
def get_member(member_id: int, user=Depends(requires_admin),
               library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.get_member(member_id))


@router.post("/members", status_code=status.HTTP_201_CREATED)
@translates_errors
def create_member(data: schemas.MemberCreate, user=Depends(requires_admin),
                  library: LibraryAPI = Depends(get_library)):
    return ok(library.create_member(data), "Member added")


@router.put("/members/{member_id}")
@translates_errors
def update_member(member_id: int, data: schemas.MemberUpdate, user=Depends(requires_admin),
                  library: LibraryAPI = Depends(get_library)):
    return ok(library.update_member(member_id, data), "Member updated")


@router.delete("/members/{member_id}")
@translates_errors
def delete_member(member_id: int, user=Depends(requires_admin),
                  library: LibraryAPI = Depends(get_library)):
    library.delete_member(member_id)
    return ok(message="Member deleted")


# loans

@router.get("/loans")
@translates_errors
def list_loans(loan_status: Optional[LoanStatus] = Query(None, alias="status"),
               offset: Optional[int] = None, limit: Optional[int] = None, user=Depends(requires_admin),
               library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.list_loans(offset=offset, limit=limit, status=loan_status))


@router.get("/loans/overdue")
@translates_errors
def overdue_loans(today: Optional[datetime.date] = None, user=Depends(requires_admin),
                  library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.overdue_loans(today))


@router.get("/loans/{loan_id}")
@translates_errors
def get_loan(loan_id: int, user=Depends(requires_admin),
             library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.get_loan_detail(loan_id))


@router.post("/loans", status_code=status.HTTP_201_CREATED)
@translates_errors
def checkout(data: schemas.CheckoutRequest, user=Depends(requires_admin),
             library: LibraryAPI = Depends(get_library)):
    return ok(library.checkout(data), "Loan recorded")


@router.put("/loans/{loan_id}")
@translates_errors
def edit_loan(loan_id: int, data: schemas.LoanUpdate, user=Depends(requires_admin),
              library: LibraryAPI = Depends(get_library)):
    return ok(library.edit_loan(loan_id, data), "Loan updated")


@router.post("/loans/{loan_id}/return")
@translates_errors
def return_loan(loan_id: int, user=Depends(requires_admin),
                library: LibraryAPI = Depends(get_library)):
    return ok(library.return_book(loan_id), "Book returned")


@router.delete("/loans/{loan_id}")
@translates_errors
def delete_loan(loan_id: int, user=Depends(requires_admin),
                library: LibraryAPI = Depends(get_library)):
    library.delete_loan(loan_id)
    return ok(message="Loan deleted")


# categories

@router.get("/categories")
@translates_errors
def list_categories(library: LibraryAPI = Depends(get_library)):
    return ok(library.queries.list_categories())


@router.post("/categories", status_code=status.HTTP_201_CREATED)
@translates_errors
def create_category(data: schemas.CategoryCreate, user=Depends(requires_admin),
                    library: LibraryAPI = Depends(get_library)):
    return ok(library.create_category(data), "Category added")


@router.put("/categories/{category_id}")
@translates_errors
def update_category(category_id: int, data: schemas.CategoryUpdate,
                    user=Depends(requires_admin), library: LibraryAPI = Depends(get_library)):
    return ok(library.update_category(category_id, data), "Category updated")


@router.delete("/categories/{category_id}")
@translates_errors
def delete_category(category_id: int, user=Depends(requires_admin),
                    library: LibraryAPI = Depends(get_library)):
    library.delete_category(category_id)
    return ok(message="Category deleted")


# stock

@router.get("/stock/audit")
@translates_errors
def audit_stock(user=Depends(requires_admin), library: LibraryAPI = Depends(get_library)):
    mismatches = library.audit_stock()
    return ok({"consistent": not mismatches, "mismatches": mismatches})
