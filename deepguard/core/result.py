"""
Minimal Ok/Err result type.

Used at the provider stage of the pipeline so that the "demote to fallback"
branch is an explicit `isinstance` check rather than a broad `except`.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E", bound=BaseException)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]
