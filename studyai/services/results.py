"""
Tagged result variants returned by generation and extraction services
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    # True when the local heuristics produced the value instead of the remote model
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    error: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Success[T], Failure]
