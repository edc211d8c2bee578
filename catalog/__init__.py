# Core package for the book catalogue
from .domain import Book, BookPayload, GENRES, STATUSES, ALL_GENRES, ALL_STATUS
from .errors import CatalogError, NetworkError, NotFound, ValidationError, SubmitInProgress
from .filters import filter_books, paginate, page_window, Page
from .repository import BookRepository, HttpBookRepository, InMemoryBookRepository, build_repository
from .services import BookService, QueryCache
from .controller import PageState, ModalState, PageView, FormSession, derive_view
