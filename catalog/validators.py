import datetime
from typing import Any, Dict, Mapping, Optional

from .domain import BookPayload, GENRES, STATUSES
from .errors import ValidationError
from .ftypes import Either, Left, Right

TITLE_MAX = 100
AUTHOR_MAX = 50
YEAR_MIN = 1000

FormErrors = Dict[str, str]


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _check_title(title: str) -> Optional[str]:
    if not title:
        return "Title is required"
    if len(title) > TITLE_MAX:
        return f"Title must be at most {TITLE_MAX} characters"
    return None


def _check_author(author: str) -> Optional[str]:
    if not author:
        return "Author is required"
    if len(author) > AUTHOR_MAX:
        return f"Author must be at most {AUTHOR_MAX} characters"
    return None


def _check_genre(genre: str) -> Optional[str]:
    if not genre:
        return "Genre is required"
    if genre not in GENRES:
        return f"Unknown genre: {genre}"
    return None


def _parse_year(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def _check_year(year: Optional[int], current_year: int) -> Optional[str]:
    if year is None or year < YEAR_MIN:
        return "Invalid year"
    if year > current_year:
        return "Year cannot be in the future"
    return None


def _check_status(status: str) -> Optional[str]:
    if status not in STATUSES:
        return f"Status must be one of: {', '.join(STATUSES)}"
    return None


def validate_book_form(data: Mapping[str, Any],
                       today: Optional[datetime.date] = None) -> Either[FormErrors, BookPayload]:
    """Check raw form input against the book schema.

    Every field is checked so the form can show all messages at once.

    Args:
        data: Raw values keyed by ``title``, ``author``, ``genre``,
            ``published_year`` and ``status``
        today: Reference date for the "not in the future" rule

    Returns:
        Right(BookPayload) when valid, otherwise Left({field: message})
    """
    current_year = (today or datetime.date.today()).year

    title = _text(data.get("title"))
    author = _text(data.get("author"))
    genre = _text(data.get("genre"))
    year = _parse_year(data.get("published_year"))
    status = _text(data.get("status")) or STATUSES[0]

    checks = {
        "title": _check_title(title),
        "author": _check_author(author),
        "genre": _check_genre(genre),
        "published_year": _check_year(year, current_year),
        "status": _check_status(status),
    }
    errors = {field: message for field, message in checks.items() if message}
    if errors:
        return Left(errors)

    return Right(BookPayload(
        title=title,
        author=author,
        genre=genre,
        published_year=year,
        status=status,
    ))


def require_valid(data: Mapping[str, Any],
                  today: Optional[datetime.date] = None) -> BookPayload:
    """Same as ``validate_book_form`` but raises ``ValidationError`` on failure"""
    result = validate_book_form(data, today)
    if result.is_left():
        raise ValidationError(result.error)
    return result.value
