import math
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from piggybank.domain import Goal, HangoutTemplate, Number, WishItem

# Integers above this lose precision as floats
MAX_SAFE_INTEGER = 2 ** 53

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def to_either(self, error: E) -> 'Either[E, T]':
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default):
        return self._value

    def to_either(self, error):
        return Right(self._value)

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default):
        return default

    def to_either(self, error):
        return Left(error)

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Result of a ledger operation: Right carries the value, Left the rejection."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f):
        return Right(f(self._value))

    def bind(self, f):
        return f(self._value)

    def get_or_else(self, default):
        return self._value

    def get_error(self):
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f):
        return self

    def bind(self, f):
        return self

    def get_or_else(self, default):
        return default

    def get_error(self):
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def clamp_number(value: Any) -> Number:
    """Return ``max(0, value)`` for finite numbers and 0 for anything else.

    Booleans are not numbers here, and strings are not parsed; use
    :func:`parse_amount` for raw form input.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    # ints beyond the float range count as infinite
    if isinstance(value, int) and abs(value) > sys.float_info.max:
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, value)


def parse_amount(value: Any) -> Number:
    """Convert raw input (text from a form field, a number or None) to a clamped amount."""
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return 0
        if math.isfinite(number) and number.is_integer() and abs(number) <= MAX_SAFE_INTEGER:
            return clamp_number(int(number))
        return clamp_number(number)
    return clamp_number(value)


def require_amount(value: Any, field: str = "amount") -> Either[dict, Number]:
    amount = parse_amount(value)
    if not amount:
        return Left({
            "error": "zero_amount",
            "message": f"{field} must be a positive number",
            "field": field,
            "value": value,
        })
    return Right(amount)


def require_name(value: Optional[str], field: str = "name") -> Either[dict, str]:
    name = (value or "").strip()
    if not name:
        return Left({
            "error": "blank_name",
            "message": f"{field} must not be empty",
            "field": field,
        })
    return Right(name)


def _find(items: Iterable, item_id: str) -> Maybe:
    for item in items:
        if item.id == item_id:
            return Some(item)
    return Nothing()


def find_goal(goals: tuple[Goal, ...], goal_id: str) -> Maybe[Goal]:
    return _find(goals, goal_id)


def find_wish(wishlist: tuple[WishItem, ...], wish_id: str) -> Maybe[WishItem]:
    return _find(wishlist, wish_id)


def find_template(templates: tuple[HangoutTemplate, ...], template_id: str) -> Maybe[HangoutTemplate]:
    return _find(templates, template_id)


def not_found(kind: str, item_id: str) -> dict:
    return {
        "error": f"{kind}_not_found",
        "message": f"{kind.capitalize()} with ID {item_id} does not exist",
        "id": item_id,
    }
