"""Result type for recoverable failures.

Modelled on Rust's ``Result``: callers ``match`` on ``Ok``/``Error`` instead of
catching exceptions for outcomes that are part of the normal flow
(e.g. an ambiguous approver name, a backend that answered 500).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar


_T = TypeVar("_T")
_E = TypeVar("_E")


@dataclass(frozen=True)
class Ok(Generic[_T]):  # noqa: UP046
    value: _T

    def __repr__(self):
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Error(Generic[_E]):  # noqa: UP046
    """Failure carrying a human-readable reason."""

    value: _E

    def __repr__(self):
        return f"Error({self.value!r})"


Result = Ok[_T] | Error[_E]
