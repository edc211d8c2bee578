import logging
import time
from typing import Any, Callable, List, Optional

from cachetools import LRUCache, TTLCache

from .domain import Book, BookPayload
from .events import EventBus, Notification
from .repository import BookRepository

logger = logging.getLogger(__name__)

BOOKS_KEY = "books"
DEFAULT_LIST_TTL = 5 * 60
MAX_CACHED_BOOKS = 256


def book_key(book_id: str) -> str:
    return f"book:{book_id}"


class QueryCache:
    """
    Key-based cache for query results.

    The list lives in a ``TTLCache`` and expires ``list_ttl`` seconds after
    it was fetched. Single records live in an ``LRUCache`` until a mutation
    drops them. Entries are replaced wholesale, never patched in place.
    """

    def __init__(self,
                 list_ttl: float = DEFAULT_LIST_TTL,
                 clock: Callable[[], float] = time.monotonic,
                 max_records: int = MAX_CACHED_BOOKS):
        self._lists = TTLCache(maxsize=1, ttl=list_ttl, timer=clock)
        self._records = LRUCache(maxsize=max_records)

    def _store(self, key: str):
        return self._lists if key == BOOKS_KEY else self._records

    def get(self, key: str) -> Optional[Any]:
        return self._store(key).get(key)

    def put(self, key: str, value: Any) -> None:
        self._store(key)[key] = value

    def invalidate(self, key: str) -> None:
        self._store(key).pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._store(key)


class BookService:
    """
    Query and mutation layer over a BookRepository.

    Reads go through the cache. Every mutation invalidates the cached
    list on success and publishes a notification either way; failures
    are re-raised so the caller can keep its form open.
    """

    def __init__(self,
                 repository: BookRepository,
                 events: Optional[EventBus] = None,
                 cache: Optional[QueryCache] = None,
                 list_ttl: float = DEFAULT_LIST_TTL):
        self.repository = repository
        self.events = events or EventBus()
        self.cache = cache or QueryCache(list_ttl=list_ttl)

    # Queries

    async def list_books(self) -> List[Book]:
        cached = self.cache.get(BOOKS_KEY)
        if cached is not None:
            return list(cached)
        books = await self.repository.list()
        self.cache.put(BOOKS_KEY, tuple(books))
        logger.debug(f"Fetched {len(books)} books")
        return list(books)

    async def get_book(self, book_id: Optional[str]) -> Optional[Book]:
        if not book_id:
            return None
        key = book_key(book_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        book = await self.repository.get(book_id)
        self.cache.put(key, book)
        return book

    # Mutations

    async def create_book(self, payload: BookPayload) -> Book:
        try:
            book = await self.repository.create(payload)
        except Exception as e:
            self._failed("create", e)
            raise
        self._succeeded("create")
        logger.info(f"Created book {book.id}: {book.title}")
        return book

    async def update_book(self, book_id: str, payload: BookPayload) -> Book:
        try:
            book = await self.repository.update(book_id, payload)
        except Exception as e:
            self._failed("update", e)
            raise
        self._succeeded("update", book_id)
        logger.info(f"Updated book {book_id}")
        return book

    async def delete_book(self, book_id: str) -> None:
        try:
            await self.repository.remove(book_id)
        except Exception as e:
            self._failed("delete", e)
            raise
        self._succeeded("delete", book_id)
        logger.info(f"Deleted book {book_id}")

    def _succeeded(self, action: str, book_id: Optional[str] = None) -> None:
        self.cache.invalidate(BOOKS_KEY)
        if book_id:
            self.cache.invalidate(book_key(book_id))
        self.events.notify(Notification(success=True, action=action))

    def _failed(self, action: str, error: Exception) -> None:
        logger.error(f"{action.capitalize()} book error: {error!r}")
        self.events.notify(Notification(success=False, action=action))
