import pytest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from catalog.domain import BookPayload
from catalog.errors import NetworkError, NotFound
from catalog.events import EventBus, NOTIFICATION, Notification
from catalog.repository import InMemoryBookRepository
from catalog.seed import create_sample_books
from catalog.services import BookService, QueryCache, BOOKS_KEY, book_key

DUNE = BookPayload("Dune", "Frank Herbert", "Science Fiction", 1965, "Available")


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class CountingRepository(InMemoryBookRepository):
    """Mock backend that counts calls and can be told to fail"""

    def __init__(self):
        super().__init__(create_sample_books(), delay=0)
        self.calls = []
        self.fail_with = None

    async def _latency(self):
        if self.fail_with is not None:
            raise self.fail_with

    async def list(self):
        self.calls.append("list")
        return await super().list()

    async def get(self, book_id):
        self.calls.append(f"get:{book_id}")
        return await super().get(book_id)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return CountingRepository()


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def service(repo, clock, notifications):
    events = EventBus()
    events.subscribe(NOTIFICATION, lambda event: notifications.append(event.payload["notification"]))
    return BookService(repo, events=events, cache=QueryCache(list_ttl=300, clock=clock))


# ==================== Queries ====================

@pytest.mark.asyncio
async def test_list_is_cached_for_five_minutes(service, repo, clock):
    await service.list_books()
    clock.now += 299
    await service.list_books()

    assert repo.calls == ["list"]

    clock.now += 1
    await service.list_books()

    assert repo.calls == ["list", "list"]


@pytest.mark.asyncio
async def test_get_book_skips_falsy_ids(service, repo):
    assert await service.get_book("") is None
    assert await service.get_book(None) is None
    assert repo.calls == []


@pytest.mark.asyncio
async def test_get_book_caches_per_id(service, repo):
    first = await service.get_book("2")
    second = await service.get_book("2")

    assert first.title == "1984"
    assert second == first
    assert repo.calls == ["get:2"]


@pytest.mark.asyncio
async def test_list_failure_leaves_cache_empty(service, repo):
    repo.fail_with = NetworkError("down")

    with pytest.raises(NetworkError):
        await service.list_books()

    assert BOOKS_KEY not in service.cache


# ==================== Mutations ====================

@pytest.mark.asyncio
async def test_create_invalidates_list_and_notifies(service, repo, notifications):
    before = await service.list_books()

    created = await service.create_book(DUNE)
    after = await service.list_books()

    assert repo.calls == ["list", "list"]
    assert len(after) == len(before) + 1
    assert after[-1] == created
    assert notifications == [Notification(success=True, action="create")]
    assert notifications[0].message == "Book created successfully!"


@pytest.mark.asyncio
async def test_update_invalidates_list_and_single_record(service, repo, notifications):
    await service.list_books()
    original = await service.get_book("1")

    await service.update_book("1", DUNE)

    assert BOOKS_KEY not in service.cache
    assert book_key("1") not in service.cache
    refreshed = await service.get_book("1")
    assert refreshed.id == original.id
    assert refreshed.title == "Dune"
    assert notifications[-1].message == "Book updated successfully!"


@pytest.mark.asyncio
async def test_delete_then_get_fails(service, notifications):
    await service.delete_book("3")

    with pytest.raises(NotFound):
        await service.get_book("3")
    assert notifications[-1].message == "Book deleted successfully!"


@pytest.mark.asyncio
@pytest.mark.parametrize("action, call", [
    ("create", lambda service: service.create_book(DUNE)),
    ("update", lambda service: service.update_book("1", DUNE)),
    ("delete", lambda service: service.delete_book("1")),
])
async def test_failed_mutation_notifies_keeps_cache_and_reraises(service, repo, notifications, action, call):
    cached = await service.list_books()
    repo.fail_with = NetworkError("timeout")

    with pytest.raises(NetworkError):
        await call(service)

    assert notifications == [Notification(success=False, action=action)]
    assert notifications[0].message == f"Failed to {action} book. Please try again."
    repo.fail_with = None
    assert await service.list_books() == cached
    assert repo.calls == ["list"]


@pytest.mark.asyncio
async def test_mutation_on_missing_id_reports_not_found(service, notifications):
    with pytest.raises(NotFound):
        await service.delete_book("999")

    assert notifications == [Notification(success=False, action="delete")]


def test_event_bus_isolates_handler_failures():
    bus = EventBus()
    received = []

    def broken(event):
        raise RuntimeError("toast failed")

    bus.subscribe(NOTIFICATION, broken)
    bus.subscribe(NOTIFICATION, received.append)
    event = bus.notify(Notification(success=True, action="create"))

    assert received == [event]
    assert event.payload["notification"].message == "Book created successfully!"


def test_query_cache_expires_list_but_keeps_records(clock):
    cache = QueryCache(list_ttl=300, clock=clock)
    cache.put(BOOKS_KEY, ())
    cache.put(book_key("1"), "record")

    clock.now += 300

    assert BOOKS_KEY not in cache
    assert cache.get(book_key("1")) == "record"
    cache.invalidate(book_key("1"))
    assert book_key("1") not in cache
