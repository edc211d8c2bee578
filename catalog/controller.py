"""
Page controller state.

``PageState`` holds what the catalogue page owns between renders: the
filter triple, the current page and which modal is open. ``derive_view``
recomputes the visible slice from the full list on every render, and
``FormSession`` drives one create/edit modal submit at a time.
"""

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .domain import Book, ALL_GENRES, ALL_STATUS, AVAILABLE
from .errors import SubmitInProgress
from .filters import Page, PAGE_SIZE, filter_books, paginate, page_window
from .services import BookService
from .validators import require_valid

MODAL_CLOSED = "closed"
MODAL_CREATE = "create"
MODAL_EDIT = "edit"


@dataclass(frozen=True)
class ModalState:
    mode: str = MODAL_CLOSED
    book: Optional[Book] = None

    @property
    def is_open(self) -> bool:
        return self.mode != MODAL_CLOSED


@dataclass
class PageState:
    search_term: str = ""
    genre_filter: str = ALL_GENRES
    status_filter: str = ALL_STATUS
    current_page: int = 1
    modal: ModalState = field(default_factory=ModalState)

    # Any filter change sends the user back to the first page

    def set_search(self, value: str) -> None:
        self.search_term = value or ""
        self.current_page = 1

    def set_genre(self, value: str) -> None:
        self.genre_filter = value or ALL_GENRES
        self.current_page = 1

    def set_status(self, value: str) -> None:
        self.status_filter = value or ALL_STATUS
        self.current_page = 1

    def go_to_page(self, page: int, total_pages: int) -> None:
        if 1 <= page <= total_pages:
            self.current_page = page

    def open_create(self) -> None:
        self.modal = ModalState(MODAL_CREATE)

    def open_edit(self, book: Book) -> None:
        self.modal = ModalState(MODAL_EDIT, book)

    def close_modal(self) -> None:
        self.modal = ModalState()


@dataclass(frozen=True)
class PageView:
    filtered: List[Book]
    page: Page
    window: List[int]

    @property
    def show_pagination(self) -> bool:
        return self.page.total_pages > 1


def derive_view(books: List[Book], state: PageState, page_size: int = PAGE_SIZE) -> PageView:
    """Visible slice for the current state.

    When deletions leave the current page past the end, the state is
    moved back to the last remaining page.
    """
    filtered = filter_books(books, state.search_term, state.genre_filter, state.status_filter)
    page = paginate(filtered, state.current_page, page_size)
    if page.total_pages and state.current_page > page.total_pages:
        state.current_page = page.total_pages
        page = paginate(filtered, state.current_page, page_size)
    return PageView(
        filtered=filtered,
        page=page,
        window=page_window(page.current_page, page.total_pages),
    )


class FormSession:
    """One open create/edit modal.

    A second submit while the first is still pending is rejected with
    ``SubmitInProgress`` instead of reaching the backend twice.
    """

    def __init__(self, service: BookService, book: Optional[Book] = None):
        self.service = service
        self.book = book
        self._pending = False

    @property
    def is_edit(self) -> bool:
        return self.book is not None

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def title(self) -> str:
        return "Edit Book" if self.is_edit else "Add New Book"

    @property
    def submit_label(self) -> str:
        if self._pending:
            return "Saving..."
        return "Update Book" if self.is_edit else "Add Book"

    def defaults(self, today: Optional[datetime.date] = None) -> Dict[str, Any]:
        if self.book is not None:
            return {
                "title": self.book.title,
                "author": self.book.author,
                "genre": self.book.genre,
                "published_year": self.book.published_year,
                "status": self.book.status,
            }
        return {
            "title": "",
            "author": "",
            "genre": "",
            "published_year": (today or datetime.date.today()).year,
            "status": AVAILABLE,
        }

    async def submit(self, data: Mapping[str, Any], today: Optional[datetime.date] = None) -> Book:
        """Validate and save; ValidationError and backend errors propagate"""
        if self._pending:
            raise SubmitInProgress("This form is already being saved")
        payload = require_valid(data, today)

        self._pending = True
        try:
            if self.book is not None:
                return await self.service.update_book(self.book.id, payload)
            return await self.service.create_book(payload)
        finally:
            self._pending = False
