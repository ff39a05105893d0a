
class BiblioError(Exception): pass

class NotFoundError(BiblioError): pass

class BookNotFoundError(NotFoundError): pass

class MemberNotFoundError(NotFoundError): pass

class LoanNotFoundError(NotFoundError): pass

class CategoryNotFoundError(NotFoundError): pass

class OutOfStockError(BiblioError): pass

class InvalidTransitionError(BiblioError): pass

class AlreadyReturnedError(InvalidTransitionError): pass

class InUseError(BiblioError): pass

class MemberExistsError(BiblioError): pass

class CategoryExistsError(BiblioError): pass

class ConflictError(BiblioError):
    """A raw stock adjustment would break the copy bounds."""

class StorageError(BiblioError):
    """The database failed or stayed locked after all retries."""

class InvalidDatesError(BiblioError):
    """A loan would fall due before it was lent."""
