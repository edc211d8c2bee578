from dataclasses import dataclass, asdict
from typing import Any, Dict, Tuple

AVAILABLE = "Available"
ISSUED = "Issued"
STATUSES: Tuple[str, ...] = (AVAILABLE, ISSUED)

GENRES: Tuple[str, ...] = (
    "Fiction",
    "Non-Fiction",
    "Fantasy",
    "Romance",
    "Mystery",
    "Thriller",
    "Science Fiction",
    "Historical Fiction",
    "Biography",
    "Adventure",
    "Dystopian",
    "Other",
)

# Filter sentinels
ALL_GENRES = "all-genres"
ALL_STATUS = "all-status"


@dataclass(frozen=True)
class BookPayload:
    """Book fields without an identifier, as submitted by the form"""
    title: str
    author: str
    genre: str
    published_year: int
    status: str = AVAILABLE

    def to_wire(self) -> Dict[str, Any]:
        """JSON body for POST/PUT; the backend owns the identifier"""
        return {
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "publishedYear": self.published_year,
            "status": self.status,
        }


@dataclass(frozen=True)
class Book:
    id: str
    title: str
    author: str
    genre: str
    published_year: int
    status: str = AVAILABLE

    @classmethod
    def from_payload(cls, book_id: str, payload: BookPayload) -> "Book":
        return cls(id=str(book_id), **asdict(payload))

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> "Book":
        """Normalize a backend record keyed by either ``_id`` or ``id``."""
        raw_id = data.get("_id", data.get("id"))
        if raw_id is None or raw_id == "":
            raise ValueError(f"Backend record has no identifier: {data!r}")
        return cls(
            id=str(raw_id),
            title=str(data.get("title") or ""),
            author=str(data.get("author") or ""),
            genre=str(data.get("genre") or ""),
            published_year=int(data.get("publishedYear", data.get("published_year")) or 0),
            status=str(data.get("status") or AVAILABLE),
        )

    def payload(self) -> BookPayload:
        return BookPayload(
            title=self.title,
            author=self.author,
            genre=self.genre,
            published_year=self.published_year,
            status=self.status,
        )
