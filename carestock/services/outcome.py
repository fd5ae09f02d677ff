"""Explicit accept/reject results returned by every mutator."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class InventoryError(Exception):
    """Raised by ``Outcome.unwrap`` when the operation was rejected."""

    def __init__(self, rejection: "Rejection"):
        super().__init__(rejection.value)
        self.rejection = rejection


class Rejection(str, enum.Enum):
    EMPTY_INPUT = "empty_input"
    POPULATION_LIMIT_REACHED = "population_limit_reached"
    LAST_RESIDENT_PROTECTED = "last_resident_protected"
    NO_RESIDENT_SELECTED = "no_resident_selected"
    NON_POSITIVE_QUANTITY = "non_positive_quantity"
    INVALID_PRICE = "invalid_price"
    QUANTITY_OUT_OF_RANGE = "quantity_out_of_range"
    INVALID_SOURCE = "invalid_source"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    rejection: Optional[Rejection] = None

    @classmethod
    def accept(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def reject(cls, rejection: Rejection) -> "Outcome[T]":
        return cls(rejection=rejection)

    @property
    def ok(self) -> bool:
        return self.rejection is None

    def __bool__(self) -> bool:
        return self.ok

    def map(self, fn: Callable[[T], U]) -> "Outcome[U]":
        if not self.ok:
            return Outcome(rejection=self.rejection)
        return Outcome(value=fn(self.value))

    def unwrap(self) -> T:
        if not self.ok:
            raise InventoryError(self.rejection)
        return self.value
