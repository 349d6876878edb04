from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class Reason(str, Enum):
    """Why a repository or image store operation did not complete."""

    NOT_FOUND = "not_found"
    ENCODE_FAILED = "encode_failed"
    DECODE_FAILED = "decode_failed"
    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    REMOVE_FAILED = "remove_failed"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of an operation that never raises to its caller.

    ``ok`` tells whether the operation completed. On success ``value`` holds
    the produced value (if any); on failure ``reason`` and ``detail`` say
    what went wrong so the calling layer can decide whether to surface it.
    """

    ok: bool
    value: Optional[T] = None
    reason: Optional[Reason] = None
    detail: str = ""

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Outcome[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: Reason, detail: str = "") -> "Outcome[T]":
        return cls(ok=False, reason=reason, detail=detail)

    def __bool__(self) -> bool:
        return self.ok


__all__ = ["Outcome", "Reason"]
