from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self.value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self.value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self.value)

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self.value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self.value == other.value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self.error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self.error

    def __repr__(self) -> str:
        return f"Left({self.error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self.error == other.error


def find_by_id(items: Iterable[T], item_id: str) -> Maybe[T]:
    for item in items:
        if getattr(item, "id", None) == item_id:
            return Some(item)
    return Nothing()


def compose(*funcs: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """compose(f, g, h)(x) == f(g(h(x)))"""
    def _composed(x):
        res = x
        for f in reversed(funcs):
            res = f(res)
        return res
    return _composed


def pipe(x, *funcs):
    """pipe(x, f, g, h) == h(g(f(x)))"""
    res = x
    for f in funcs:
        res = f(res)
    return res
