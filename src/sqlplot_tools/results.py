"""
results.py — Explicit success/failure values for directive processing.

Processors never let exceptions escape into the scanner. Every directive
invocation yields a Result:
- Ok(value) when the directive was processed
- Err(ProcessError) carrying the directive keyword, source line and cause

The scanner stops at the first Err and hands it up to the driver, which is
the only place that logs the failure and chooses an exit status.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class Result(ABC, Generic[T, E]):
    """
    Tagged union for success or failure with an error value.
    - Ok(value)
    - Err(error)

    ::: This is-in-layer Utility-Layer.
    ::: This is a monad.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Get the value or raise if Err."""
        if isinstance(self, Ok):
            return self.value
        raise ValueError(f"Cannot unwrap Err: {self}")

    def unwrap_or(self, default: T) -> T:
        """Get the value or return default if Err."""
        if isinstance(self, Ok):
            return self.value
        return default

    def map_err(self, f: Callable[[E], E]) -> "Result[T, E]":
        """Map a function over the error value."""
        if isinstance(self, Err):
            return Err(f(self.error))
        return self

    @abstractmethod
    def bind(self, f: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        """Chain a computation that itself returns a Result."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> "Result[U, E]":
        """Apply f to the value of an Ok."""


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """Represents a successful result."""
    value: T

    def bind(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return Ok(f(self.value))

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Result[Any, E]):
    """Represents a failed result with error information."""
    error: E

    def bind(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        return self  # type: ignore[return-value]

    def map(self, f: Callable[[Any], U]) -> Result[U, E]:
        return self  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# ---------------------------------------------------------------------------
# Process Error Type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProcessError:
    """Error that occurred while processing one directive or document.

    ::: This is-in-layer Utility-Layer.
    ::: This is a value-object.
    """
    keyword: str
    message: str
    line: Optional[int] = None
    cause: Optional[Exception] = None

    def __str__(self) -> str:
        where = f" (line {self.line + 1})" if self.line is not None else ""
        if self.cause:
            return f"[{self.keyword}] {self.message}{where}: {self.cause}"
        return f"[{self.keyword}] {self.message}{where}"


# Type alias for processing results
ProcessResult = Result[T, ProcessError]


def process_ok(value: T) -> ProcessResult[T]:
    """Create a successful processing result."""
    return Ok(value)


def process_err(keyword: str, message: str, line: Optional[int] = None,
                cause: Optional[Exception] = None) -> ProcessResult[Any]:
    """Create a failed processing result."""
    return Err(ProcessError(keyword, message, line, cause))
