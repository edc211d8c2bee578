from dataclasses import dataclass
from typing import Callable, Sequence, Tuple, List

from .domain import Book, ALL_GENRES, ALL_STATUS

PAGE_SIZE = 10
MAX_VISIBLE_PAGES = 5


  # Closures for each filter criterion

def create_search_filter(search_term: str) -> Callable[[Book], bool]:
    """Title or author contains the term, ignoring case"""
    term = (search_term or "").lower()

    def search_filter(book: Book) -> bool:
        return term in book.title.lower() or term in book.author.lower()

    return search_filter


def create_genre_filter(genre: str) -> Callable[[Book], bool]:
    if not genre or genre == ALL_GENRES:
        return lambda book: True
    return lambda book: book.genre == genre


def create_status_filter(status: str) -> Callable[[Book], bool]:
    if not status or status == ALL_STATUS:
        return lambda book: True
    return lambda book: book.status == status


def combine_filters(*filters: Callable[[Book], bool]) -> Callable[[Book], bool]:
    def combined_filter(book: Book) -> bool:
        return all(filter_func(book) for filter_func in filters)

    return combined_filter


def filter_books(books: Sequence[Book],
                 search_term: str = "",
                 genre_filter: str = ALL_GENRES,
                 status_filter: str = ALL_STATUS) -> List[Book]:
    """Books matching the filter triple, in their original order"""
    matches = combine_filters(
        create_search_filter(search_term),
        create_genre_filter(genre_filter),
        create_status_filter(status_filter),
    )
    return list(filter(matches, books))


@dataclass(frozen=True)
class Page:
    items: Tuple[Book, ...]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int

    @property
    def start_item(self) -> int:
        """1-based position of the first visible book, 0 when the page is empty"""
        if not self.items:
            return 0
        return (self.current_page - 1) * self.page_size + 1

    @property
    def end_item(self) -> int:
        return min(self.current_page * self.page_size, self.total_items) if self.items else 0

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages


def total_pages_for(count: int, page_size: int = PAGE_SIZE) -> int:
    return (count + page_size - 1) // page_size


def paginate(books: Sequence[Book], current_page: int, page_size: int = PAGE_SIZE) -> Page:
    """Slice [(page-1)*size, page*size) of books; out-of-range pages are empty"""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")
    start = (current_page - 1) * page_size
    items = tuple(books[start:start + page_size]) if current_page >= 1 else ()
    return Page(
        items=items,
        current_page=current_page,
        total_pages=total_pages_for(len(books), page_size),
        total_items=len(books),
        page_size=page_size,
    )


def page_window(current_page: int, total_pages: int, max_visible: int = MAX_VISIBLE_PAGES) -> List[int]:
    """
    Page numbers to show around the current page.

    The window is centred on current_page, clamped to [1, total_pages],
    and slid back to the left when it would run past the last page.
    """
    if total_pages < 1:
        return []
    start = max(1, current_page - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)
    return list(range(start, end + 1))
