import math
from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any, Callable, Generic, TypeVar

from finsights.domain import Category

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def filter(self, pred: Callable[[T], bool]) -> 'Maybe[T]':
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

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def filter(self, pred: Callable[[T], bool]) -> 'Maybe[T]':
        return self if pred(self._value) else Nothing()

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

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def filter(self, pred: Callable[[T], bool]) -> 'Maybe[T]':
        return self

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
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


# --- Reading loosely-typed records (dataclasses or plain dicts)

def field_of(record: Any, name: str) -> Maybe[Any]:
    if record is None:
        return Nothing()
    if isinstance(record, dict):
        value = record.get(name)
    else:
        value = getattr(record, name, None)
    return Nothing() if value is None else Some(value)


def to_finite(value: Any) -> Maybe[float]:
    """Coerce numbers and numeric strings; NaN, Infinity and bools are rejected."""
    if isinstance(value, bool):
        return Nothing()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return Nothing()
    return Some(number) if math.isfinite(number) else Nothing()


def parse_date(value: Any) -> Maybe[date]:
    """Calendar date from a date, a datetime or a "YYYY-MM-DD[T...]" string.

    Strings are never run through timezone conversion: the Y/M/D prefix is the date.
    """
    if isinstance(value, datetime):
        return Some(value.date())
    if isinstance(value, date):
        return Some(value)
    if not isinstance(value, str):
        return Nothing()
    try:
        return Some(date.fromisoformat(value.strip().split('T')[0].split(' ')[0]))
    except ValueError:
        return Nothing()


def parse_timestamp(value: Any) -> Maybe[datetime]:
    """Timezone-aware instant; naive values are read as UTC."""
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return Nothing()
    else:
        return Nothing()
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return Some(ts)


def safe_amount(record: Any) -> Maybe[float]:
    return field_of(record, "amount").bind(to_finite)


def safe_date(record: Any) -> Maybe[date]:
    return field_of(record, "date").bind(parse_date)


def safe_category(record: Any) -> Category:
    return Category.from_tag(field_of(record, "category").get_or_else(None))


def safe_limit(budget: Any) -> Maybe[float]:
    limit = field_of(budget, "limit_amount")
    if limit.is_none():
        limit = field_of(budget, "limit")
    return limit.bind(to_finite)


def validate_budget(budget: Any) -> Either[dict, tuple[Category, float]]:
    if budget is None:
        return Left({"error": "missing_budget", "message": "Budget record is empty"})

    limit = safe_limit(budget)
    if limit.is_none():
        return Left({
            "error": "invalid_limit",
            "message": "Budget limit is missing or not a finite number",
        })

    limit_amount = limit.get_or_else(0.0)
    if limit_amount <= 0:
        return Left({
            "error": "non_positive_limit",
            "message": f"Budget limit must be positive, got {limit_amount}",
            "limit": limit_amount,
        })

    return Right((safe_category(budget), limit_amount))
