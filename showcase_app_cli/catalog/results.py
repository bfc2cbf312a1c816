"""Explicit stage results for catalog resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..utils.error_format import exception_detail
from .models import ModelCatalog


class ErrorKind(str, Enum):
    """Kind of stage failure.

    Types:
    - READ_FAILURE: local file could not be read or parsed
    - NETWORK_FAILURE: remote query or fetch failed
    - WRITE_FAILURE: fallback persistence failed
    """

    READ_FAILURE = "read_failure"
    NETWORK_FAILURE = "network_failure"
    WRITE_FAILURE = "write_failure"

    @property
    def fallback_detail(self) -> str:
        """Detail used when the exception has no text."""
        return {
            ErrorKind.READ_FAILURE: "the file could not be read",
            ErrorKind.NETWORK_FAILURE: "the service did not respond",
            ErrorKind.WRITE_FAILURE: "the file could not be written",
        }[self]


@dataclass(frozen=True)
class Ok:
    """Stage completed; catalog may still be empty."""

    catalog: ModelCatalog | None = None


@dataclass(frozen=True)
class Err:
    """Stage failed and is treated as empty."""

    kind: ErrorKind
    message: str
    error: BaseException | None = None
    stage: str = ""

    def describe(self) -> str:
        """User-facing message: the failed action followed by the exception detail."""
        if self.error is None:
            return self.message
        return f"{self.message} {exception_detail(self.error, self.kind.fallback_detail)}"


StageResult = Ok | Err
