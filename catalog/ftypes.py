from typing import Generic, TypeVar, Callable, Optional
from dataclasses import dataclass

T = TypeVar('T')
E = TypeVar('E')


# Maybe: a lookup that may come back empty
class Maybe(Generic[T]):
    """Value that may or may not be present"""

    def or_raise(self, error: Callable[[], Exception]) -> T:
        """Unwrap the value, raising ``error()`` when there is none"""
        raise NotImplementedError


@dataclass(frozen=True)
class Just(Maybe[T]):
    value: T

    def or_raise(self, error: Callable[[], Exception]) -> T:
        return self.value


class Nothing(Maybe[T]):

    def or_raise(self, error: Callable[[], Exception]) -> T:
        raise error()

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)

    def __repr__(self) -> str:
        return "Nothing()"


def maybe(value: Optional[T]) -> Maybe[T]:
    if value is None:
        return Nothing()
    return Just(value)


# Either: Right carries a result, Left carries the reason it failed
class Either(Generic[E, T]):

    def is_right(self) -> bool:
        raise NotImplementedError

    def is_left(self) -> bool:
        return not self.is_right()


@dataclass(frozen=True)
class Right(Either[E, T]):
    value: T

    def is_right(self) -> bool:
        return True


@dataclass(frozen=True)
class Left(Either[E, T]):
    error: E

    def is_right(self) -> bool:
        return False
