"""Typed cell values.

Each property type has its own value class. Validation produces one of these;
``to_storage()`` gives the JSON-compatible form written to an entry's data.
A value of ``None`` means the field is cleared.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class TitleValue:
    value: str

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class TextValue:
    value: str | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class NumberValue:
    value: int | float | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class EmailValue:
    value: str | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class UrlValue:
    value: str | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class DateValue:
    """An absolute instant, stored as an ISO 8601 UTC string ending in ``Z``."""

    value: str | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class CheckboxValue:
    value: bool = False

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class SelectValue:
    value: str | None

    def to_storage(self) -> Any:
        return self.value


@dataclass(frozen=True)
class MultiSelectValue:
    value: tuple[str, ...] = ()

    def to_storage(self) -> Any:
        return list(self.value)


TypedValue = Union[
    TitleValue,
    TextValue,
    NumberValue,
    EmailValue,
    UrlValue,
    DateValue,
    CheckboxValue,
    SelectValue,
    MultiSelectValue,
]


def is_cleared(value: TypedValue) -> bool:
    """Whether the value represents an emptied field."""
    if isinstance(value, MultiSelectValue):
        return not value.value
    if isinstance(value, CheckboxValue):
        return False
    return value.value is None
