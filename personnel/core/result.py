"""Tagged success/failure values shared by the repository and catalog layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")

GENERIC_ERROR_MESSAGE = "Ein Fehler ist aufgetreten."


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    error: str
    status: int | None = None

    @property
    def is_ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]
