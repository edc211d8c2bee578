from typing import Dict, Optional


class CatalogError(Exception):
    """Base class for every error raised by the catalog package"""


class NetworkError(CatalogError):
    """Backend unreachable, timed out, or answered with an unexpected status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFound(CatalogError):
    """Operation on an identifier the backend does not know"""

    def __init__(self, book_id: str):
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class ValidationError(CatalogError):
    """Form input violates the book schema; raised before any network call"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = dict(errors)


class SubmitInProgress(CatalogError):
    """A form instance was submitted again while its previous submit is pending"""
