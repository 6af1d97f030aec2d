"""Outcome types for write operations."""

from dataclasses import dataclass
from enum import Enum


class ResultStatus(Enum):
    """Why a write operation succeeded or failed."""

    OK = "ok"
    NOT_FOUND = "not_found"
    AMBIGUOUS = "ambiguous"
    DUPLICATE = "duplicate"
    STORAGE_FAILURE = "storage_failure"


@dataclass(frozen=True)
class FacadeResult:
    """Result of a facade write.

    Truthy only for ``ResultStatus.OK`` so it can stand in for a plain
    success flag. ``value`` carries the id of the created or affected row.
    """

    status: ResultStatus
    value: int | None = None

    def __bool__(self) -> bool:
        return self.status is ResultStatus.OK

    @classmethod
    def ok(cls, value: int | None = None) -> "FacadeResult":
        return cls(ResultStatus.OK, value)

    @classmethod
    def failure(cls, status: ResultStatus) -> "FacadeResult":
        return cls(status)
