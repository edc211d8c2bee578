"""
Book repository clients.

``BookRepository`` is the interface the rest of the package talks to.
Two implementations exist:

* ``HttpBookRepository`` talks to a REST backend (``/books`` and
  ``/books/{id}``) through ``httpx``. Records keyed by ``_id`` (CRUD
  sandbox) and by ``id`` (numeric backends) are both accepted.
* ``InMemoryBookRepository`` is the mock backend: a seeded in-process
  store with an artificial delay on every call.

All operations are coroutines and may fail with ``NetworkError`` or
``NotFound``.
"""

import abc
import asyncio
import itertools
import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .config import Settings
from .domain import Book, BookPayload, GENRES, STATUSES
from .errors import NetworkError, NotFound
from .ftypes import Maybe, maybe
from .seed import create_sample_books

logger = logging.getLogger(__name__)


class BookRepository(abc.ABC):

    @abc.abstractmethod
    async def list(self) -> List[Book]:
        """Full collection, in backend order"""

    @abc.abstractmethod
    async def get(self, book_id: str) -> Book:
        """Single record; raises NotFound when absent"""

    @abc.abstractmethod
    async def create(self, payload: BookPayload) -> Book:
        """Store a new record; the backend assigns the identifier"""

    @abc.abstractmethod
    async def update(self, book_id: str, payload: BookPayload) -> Book:
        """Replace every field but the identifier and return the stored record"""

    @abc.abstractmethod
    async def remove(self, book_id: str) -> None:
        """Delete a record; raises NotFound when absent"""


class HttpBookRepository(BookRepository):
    """REST client; one short-lived ``httpx.AsyncClient`` per call."""

    def __init__(self,
                 base_url: str,
                 timeout: float = 15.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(self,
                       method: str,
                       path: str,
                       book_id: Optional[str] = None,
                       body: Optional[Dict[str, Any]] = None) -> httpx.Response:
        logger.debug(f"{method} {self.base_url}{path}")
        try:
            async with self._client() as client:
                response = await client.request(method, path, json=body)
        except httpx.TimeoutException as e:
            raise NetworkError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404 and book_id is not None:
            raise NotFound(book_id)
        if response.is_error:
            raise NetworkError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content or not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Backend sent a non-JSON body: {response.text[:80]!r}") from e

    def _to_book(self, data: Any) -> Book:
        if not isinstance(data, dict):
            raise NetworkError(f"Expected a book object, got {type(data).__name__}")
        try:
            book = Book.from_wire(data)
        except (TypeError, ValueError) as e:
            raise NetworkError(f"Malformed book record: {e}") from e
        if book.genre not in GENRES or book.status not in STATUSES:
            # Shown as stored; the edit form falls back to known options
            logger.warning(f"Book {book.id} has unknown genre {book.genre!r} or status {book.status!r}")
        return book

    async def list(self) -> List[Book]:
        data = self._json(await self._request("GET", "/books"))
        if data is None:
            return []
        if not isinstance(data, list):
            raise NetworkError(f"Expected a list of books, got {type(data).__name__}")
        return [self._to_book(item) for item in data]

    async def get(self, book_id: str) -> Book:
        response = await self._request("GET", f"/books/{book_id}", book_id=book_id)
        return self._to_book(self._json(response))

    async def create(self, payload: BookPayload) -> Book:
        response = await self._request("POST", "/books", body=payload.to_wire())
        return self._to_book(self._json(response))

    async def update(self, book_id: str, payload: BookPayload) -> Book:
        response = await self._request("PUT", f"/books/{book_id}", book_id=book_id, body=payload.to_wire())
        data = self._json(response)
        if isinstance(data, dict) and ("_id" in data or "id" in data):
            return self._to_book(data)
        # Backend did not echo the record; read it back
        return await self.get(book_id)

    async def remove(self, book_id: str) -> None:
        await self._request("DELETE", f"/books/{book_id}", book_id=book_id)


class InMemoryBookRepository(BookRepository):
    """
    Mock backend kept in process memory.

    Identifiers come from a single counter owned by the instance and are
    never reused. One instance is shared by every session thread; ids come
    from ``itertools.count`` and removal is a single ``dict.pop``.
    """

    def __init__(self, books: Iterable[BookPayload] = (), delay: float = 0.3):
        self.delay = delay
        self._ids = itertools.count(1)
        self._books: Dict[str, Book] = {}
        for payload in books:
            book = Book.from_payload(self._next_id(), payload)
            self._books[book.id] = book

    @classmethod
    def seeded(cls, delay: float = 0.3) -> "InMemoryBookRepository":
        return cls(create_sample_books(), delay=delay)

    def _next_id(self) -> str:
        return str(next(self._ids))

    def _find(self, book_id: str) -> Maybe[Book]:
        return maybe(self._books.get(str(book_id)))

    async def _latency(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    async def list(self) -> List[Book]:
        await self._latency()
        return list(self._books.values())

    async def get(self, book_id: str) -> Book:
        await self._latency()
        return self._find(book_id).or_raise(lambda: NotFound(book_id))

    async def create(self, payload: BookPayload) -> Book:
        await self._latency()
        book = Book.from_payload(self._next_id(), payload)
        self._books[book.id] = book
        logger.debug(f"Mock backend stored book {book.id}: {book.title}")
        return book

    async def update(self, book_id: str, payload: BookPayload) -> Book:
        await self._latency()
        current = self._find(book_id).or_raise(lambda: NotFound(book_id))
        book = Book.from_payload(current.id, payload)
        self._books[book.id] = book
        return book

    async def remove(self, book_id: str) -> None:
        await self._latency()
        if self._books.pop(str(book_id), None) is None:
            raise NotFound(book_id)


def build_repository(settings: Settings) -> BookRepository:
    """Pick the backend variant from configuration"""
    if settings.uses_mock_backend:
        logger.info("No API base URL configured, using the in-memory mock backend")
        return InMemoryBookRepository.seeded(delay=settings.mock_delay)
    logger.info(f"Using REST backend at {settings.api_base_url}")
    return HttpBookRepository(settings.api_base_url, timeout=settings.request_timeout)
